"""Audio helpers for the speech functions."""

import base64
import io
import math
import struct
import wave

DEMO_SAMPLE_RATE = 22050
DEMO_MAX_SECONDS = 30

LANGUAGE_FREQUENCIES = {
    'vi-VN': 220.0,
    'en-US': 261.63,
    'en-GB': 246.94,
    'ja-JP': 293.66,
    'ko-KR': 329.63,
}


def format_file_size(num_bytes: float) -> str:
    """
    Format a byte count with 1024-based units.

    Examples:
        >>> format_file_size(0)
        '0 B'
        >>> format_file_size(1536)
        '1.5 KB'
    """
    if num_bytes <= 0:
        return '0 B'
    units = ['B', 'KB', 'MB', 'GB']
    index = 0
    value = float(num_bytes)
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    value = round(value, 1)
    if value == int(value):
        value = int(value)
    return f'{value} {units[index]}'


def estimate_audio_duration(text: str, speed: float = 1.0) -> str:
    """Estimate spoken duration at ~150 words per minute, scaled by speed."""
    words = len(text.split())
    seconds = round(words / (150 * speed) * 60)
    if seconds < 60:
        return f'{seconds}s'
    return f'{seconds // 60}m {seconds % 60}s'


def voice_frequency_offset(voice: str) -> float:
    if not voice:
        return 0
    if '-A' in voice:
        return 0
    if '-B' in voice:
        return 20
    if '-C' in voice:
        return -10
    if '-D' in voice:
        return 15
    if 'Wavenet' in voice:
        return 5
    return 0


def generate_demo_wav(text: str, language: str, voice: str = None) -> bytes:
    """Generate a quiet sine tone WAV, 0.1s per character up to 30s."""
    duration = min(len(text) * 0.1, DEMO_MAX_SECONDS)
    samples = int(duration * DEMO_SAMPLE_RATE)
    frequency = LANGUAGE_FREQUENCIES.get(language, 220.0) + voice_frequency_offset(voice)

    frames = bytearray()
    for i in range(samples):
        sample = math.sin(2 * math.pi * frequency * i / DEMO_SAMPLE_RATE) * 0.1
        frames += struct.pack('<h', int(sample * 32767))

    buffer = io.BytesIO()
    with wave.open(buffer, 'wb') as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(DEMO_SAMPLE_RATE)
        wav.writeframes(bytes(frames))
    return buffer.getvalue()


def to_data_url(audio: bytes, mime_type: str) -> str:
    return f"data:{mime_type};base64,{base64.b64encode(audio).decode('ascii')}"


def strip_data_url(data: str) -> str:
    """Drop a ``data:...;base64,`` prefix if present."""
    if ',' in data:
        return data.split(',', 1)[1]
    return data
