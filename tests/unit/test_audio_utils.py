"""
Unit tests for audio helpers used by the speech functions.
"""

import base64
import io
import pytest
import wave

from shared.audio_utils import (
    DEMO_MAX_SECONDS,
    DEMO_SAMPLE_RATE,
    estimate_audio_duration,
    format_file_size,
    generate_demo_wav,
    strip_data_url,
    to_data_url,
    voice_frequency_offset,
)


class TestFormatFileSize:
    """Tests for format_file_size()"""

    @pytest.mark.parametrize("num_bytes,expected", [
        (0, '0 B'),
        (512, '512 B'),
        (1024, '1 KB'),
        (1536, '1.5 KB'),
        (1024 * 1024, '1 MB'),
        (int(2.4 * 1024 * 1024), '2.4 MB'),
    ])
    def test_units(self, num_bytes, expected):
        assert format_file_size(num_bytes) == expected

    def test_fractional_bytes(self):
        # Demo sizes are estimated from text length * 0.8
        assert format_file_size(8.8) == '8.8 B'

    def test_negative_is_zero(self):
        assert format_file_size(-5) == '0 B'


class TestEstimateAudioDuration:
    """Tests for estimate_audio_duration()"""

    def test_short_text_in_seconds(self):
        # 75 words at 150 wpm = 30s
        assert estimate_audio_duration(' '.join(['từ'] * 75)) == '30s'

    def test_minutes_and_seconds(self):
        # 225 words = 90s
        assert estimate_audio_duration(' '.join(['word'] * 225)) == '1m 30s'

    def test_speed_scales_duration(self):
        text = ' '.join(['word'] * 150)
        assert estimate_audio_duration(text, 1.0) == '1m 0s'
        assert estimate_audio_duration(text, 2.0) == '30s'


class TestVoiceFrequencyOffset:
    """Tests for voice_frequency_offset()"""

    def test_no_voice(self):
        assert voice_frequency_offset(None) == 0

    def test_variant_offsets(self):
        assert voice_frequency_offset('vi-VN-Standard-B') == 20
        assert voice_frequency_offset('vi-VN-Standard-C') == -10
        assert voice_frequency_offset('vi-VN-Standard-D') == 15

    def test_wavenet_without_known_variant(self):
        assert voice_frequency_offset('vi-VN-Wavenet') == 5


class TestGenerateDemoWav:
    """Tests for generate_demo_wav()"""

    def _read(self, data):
        with wave.open(io.BytesIO(data), 'rb') as wav:
            return wav.getnchannels(), wav.getsampwidth(), wav.getframerate(), wav.getnframes()

    def test_mono_16bit_at_demo_rate(self):
        channels, width, rate, _ = self._read(generate_demo_wav('Xin chào', 'vi-VN'))
        assert (channels, width, rate) == (1, 2, DEMO_SAMPLE_RATE)

    def test_duration_is_tenth_second_per_char(self):
        _, _, rate, frames = self._read(generate_demo_wav('a' * 10, 'en-US'))
        assert frames == rate

    def test_duration_capped(self):
        _, _, rate, frames = self._read(generate_demo_wav('a' * 1000, 'en-US'))
        assert frames == DEMO_MAX_SECONDS * rate

    def test_starts_with_riff_header(self):
        assert generate_demo_wav('abc', 'ja-JP')[:4] == b'RIFF'


class TestDataUrls:
    """Tests for to_data_url() and strip_data_url()"""

    def test_to_data_url(self):
        url = to_data_url(b'\x00\x01', 'audio/mp3')
        assert url == 'data:audio/mp3;base64,' + base64.b64encode(b'\x00\x01').decode()

    def test_strip_prefix(self):
        assert strip_data_url('data:audio/webm;base64,QUJD') == 'QUJD'

    def test_plain_base64_unchanged(self):
        assert strip_data_url('QUJD') == 'QUJD'
