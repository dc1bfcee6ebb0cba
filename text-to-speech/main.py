"""
Text-to-Speech Cloud Function

Synthesizes MP3 audio with Google Cloud Text-to-Speech. When no service
account credentials are configured the function switches to demo mode and
returns a quiet sine tone WAV so the front end still has something to play.

Audio is returned inline as a data URL and cached in memory for 30 minutes.
"""

import functions_framework
import hashlib
import os
import sys
import time
from datetime import datetime

from google.api_core import exceptions as google_exceptions
from google.cloud import texttospeech

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from shared.http_utils import (
    preflight_response, json_response, error_response, method_not_allowed, get_query_param,
    get_json_body, invalid_body_response,
)
from shared.credentials import (
    load_google_credentials, build_service_account_credentials, describe_credential_sources,
    google_error_code,
)
from shared.audio_utils import (
    format_file_size, estimate_audio_duration, generate_demo_wav, to_data_url,
)
from shared.ttl_cache import TTLCache

# Configuration
VERSION = '1.0.0'
MAX_TEXT_LENGTH = 5000
MIN_SPEED = 0.25
MAX_SPEED = 4.0
DEFAULT_LANGUAGE = 'vi-VN'

DEFAULT_VOICES = {
    'vi-VN': 'vi-VN-Standard-A',
    'en-US': 'en-US-Standard-A',
    'en-GB': 'en-GB-Standard-A',
    'ja-JP': 'ja-JP-Standard-A',
    'ko-KR': 'ko-KR-Standard-A',
}

SUPPORTED_LANGUAGES = {
    'vi-VN': 'Vietnamese',
    'en-US': 'English (US)',
    'en-GB': 'English (UK)',
    'ja-JP': 'Japanese',
    'ko-KR': 'Korean',
}

GOOGLE_ERROR_MESSAGES = [
    (google_exceptions.InvalidArgument, 'Invalid TTS parameters. Please check voice and language settings.'),
    (google_exceptions.PermissionDenied, 'Google Cloud TTS permission denied. Please check API credentials.'),
    (google_exceptions.ResourceExhausted, 'TTS quota exceeded. Please try again later.'),
    (google_exceptions.ServiceUnavailable, 'Google Cloud TTS service temporarily unavailable.'),
]

DEMO_NOTE = 'This is demo audio. For real TTS, set up Google Cloud credentials.'

# Per-instance state
audio_cache = TTLCache()
demo_cache = TTLCache()
_tts_client = None
_client_initialized = False
_credential_source = None


def get_tts_client():
    """Create the TTS client on first use; None means demo mode."""
    global _tts_client, _client_initialized, _credential_source
    if _client_initialized:
        return _tts_client

    _client_initialized = True
    credentials, source = load_google_credentials()
    if not credentials:
        print("No Google Cloud credentials, TTS running in demo mode")
        return None

    try:
        _tts_client = texttospeech.TextToSpeechClient(
            credentials=build_service_account_credentials(credentials)
        )
        _credential_source = source
        print(f"Google Cloud TTS initialized from {source}")
    except Exception as e:
        print(f"Failed to initialize Google Cloud TTS, using demo mode: {e}")
        _tts_client = None
    return _tts_client


def get_default_voice(language: str) -> str:
    return DEFAULT_VOICES.get(language, DEFAULT_VOICES[DEFAULT_LANGUAGE])


def is_valid_voice_for_language(voice: str, language: str) -> bool:
    return voice.startswith(language)


def clamp_speed(speed: float) -> float:
    return max(MIN_SPEED, min(MAX_SPEED, speed))


def voice_quality(voice: str) -> str:
    return 'High (WaveNet)' if 'Wavenet' in voice else 'Standard'


def build_cache_key(prefix: str, text: str, language: str, voice: str, speed: float) -> str:
    digest = hashlib.sha256(text.encode('utf-8')).hexdigest()
    return f"{prefix}_{language}_{voice}_{speed}_{digest}"


def describe_google_error(exc: Exception) -> str:
    for error_type, message in GOOGLE_ERROR_MESSAGES:
        if isinstance(exc, error_type):
            return message
    return str(exc) or 'Internal server error during TTS processing'


def synthesize(client, text: str, language: str, voice: str, speed: float) -> bytes:
    response = client.synthesize_speech(
        input=texttospeech.SynthesisInput(text=text),
        voice=texttospeech.VoiceSelectionParams(language_code=language, name=voice),
        audio_config=texttospeech.AudioConfig(
            audio_encoding=texttospeech.AudioEncoding.MP3,
            speaking_rate=speed,
            pitch=0,
            volume_gain_db=0,
        ),
    )
    return response.audio_content


def cached_response(cache: TTLCache, key: str):
    entry = cache.get(key)
    if not entry:
        return None
    print("Serving audio from cache")
    result = dict(entry['data'])
    result['fromCache'] = True
    result['cacheAge'] = f"{cache.age_minutes(entry)} minutes"
    return json_response(result)


def synthesize_demo(text: str, language: str, voice: str, speed: float):
    """Demo mode: a sine tone standing in for real speech."""
    selected_voice = voice or get_default_voice(language)
    cache_key = build_cache_key('demo', text, language, selected_voice, speed)
    cached = cached_response(demo_cache, cache_key)
    if cached:
        return cached

    print(f"Demo TTS request: {len(text)} chars, {language}, {selected_voice}")
    start = time.time()
    audio = generate_demo_wav(text, language, voice)
    processing_ms = round((time.time() - start) * 1000)

    result = {
        'success': True,
        'audioUrl': to_data_url(audio, 'audio/wav'),
        'duration': estimate_audio_duration(text, speed),
        'size': format_file_size(len(text) * 0.8),
        'voiceUsed': selected_voice,
        'quality': f"{voice_quality(selected_voice)} - Demo",
        'processingTime': f"{processing_ms}ms",
        'fromCache': False,
        'demoMode': True,
        'note': DEMO_NOTE,
    }
    demo_cache.set(cache_key, result)
    return json_response(result)


def health_check(request):
    audio_cache.purge_expired()
    demo_cache.purge_expired()
    client = get_tts_client()

    if client:
        response = {
            'success': True,
            'message': 'Google Cloud Text-to-Speech API is working',
            'version': VERSION,
            'mode': 'Production Mode',
            'supportedLanguages': SUPPORTED_LANGUAGES,
            'features': ['Multiple voices', 'Speed control', 'High quality audio', 'MP3 output'],
            'status': 'Connected',
        }
    else:
        response = {
            'success': True,
            'message': 'Demo Text-to-Speech API is working',
            'version': f'{VERSION}-demo',
            'mode': 'Demo/Fallback Mode',
            'note': 'This is a demo endpoint. Real TTS requires Google Cloud credentials.',
            'supportedLanguages': {code: f'{name} (Demo)' for code, name in SUPPORTED_LANGUAGES.items()},
            'features': ['Demo audio generation', 'Speed simulation', 'Voice options'],
        }
    response['timestamp'] = datetime.utcnow().isoformat() + 'Z'

    if get_query_param(request, 'debug') == 'true':
        response['debug'] = {
            'credentialSource': _credential_source,
            'credentialVariables': describe_credential_sources(),
            'cacheSize': len(audio_cache),
            'demoCacheSize': len(demo_cache),
        }
    return json_response(response)


@functions_framework.http
def text_to_speech(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "text": "Xin chào",
        "language": "vi-VN",
        "voice": "vi-VN-Wavenet-A",
        "speed": 1.0
    }
    """
    if request.method == 'OPTIONS':
        return preflight_response()
    if request.method == 'GET':
        return health_check(request)
    if request.method != 'POST':
        return method_not_allowed()

    body = get_json_body(request)
    if body is None:
        return invalid_body_response(success=False)
    text = body.get('text') or ''
    language = body.get('language') or DEFAULT_LANGUAGE
    voice = body.get('voice')

    if not isinstance(text, str):
        return error_response('Text must be a string', 400, success=False)
    if not isinstance(language, str) or not isinstance(voice, (str, type(None))):
        return error_response('Language and voice must be strings', 400, success=False)
    if not text.strip():
        return error_response('Text is required', 400, success=False)
    if len(text) > MAX_TEXT_LENGTH:
        return error_response(
            f'Text too long. Maximum {MAX_TEXT_LENGTH} characters allowed.', 400, success=False
        )

    try:
        speed = clamp_speed(float(body.get('speed', 1.0)))
    except (TypeError, ValueError):
        return error_response('Speed must be a number', 400, success=False)

    audio_cache.purge_expired()
    client = get_tts_client()
    if client is None:
        return synthesize_demo(text, language, voice, speed)

    selected_voice = voice or get_default_voice(language)
    if not is_valid_voice_for_language(selected_voice, language):
        return error_response(
            f'Invalid voice "{selected_voice}" for language "{language}"', 400, success=False
        )

    cache_key = build_cache_key('tts', text, language, selected_voice, speed)
    cached = cached_response(audio_cache, cache_key)
    if cached:
        return cached

    try:
        print(f"Processing TTS request: {len(text)} chars, {language}, {selected_voice}")
        start = time.time()
        audio = synthesize(client, text.strip(), language, selected_voice, speed)
        processing_ms = round((time.time() - start) * 1000)
        print(f"TTS completed in {processing_ms}ms")

        result = {
            'success': True,
            'audioUrl': to_data_url(audio, 'audio/mp3'),
            'duration': estimate_audio_duration(text, speed),
            'size': format_file_size(len(audio)),
            'voiceUsed': selected_voice,
            'quality': voice_quality(selected_voice),
            'processingTime': f"{processing_ms}ms",
            'fromCache': False,
        }
        audio_cache.set(cache_key, result)
        print(f"Audio generated: {result['size']}, {result['duration']}, {result['quality']}")
        return json_response(result)

    except google_exceptions.GoogleAPICallError as e:
        print(f"TTS error: {e}")
        return error_response(
            describe_google_error(e), 500,
            success=False,
            errorCode=google_error_code(e),
            timestamp=datetime.utcnow().isoformat() + 'Z',
        )
    except Exception as e:
        print(f"TTS error: {e}")
        return error_response(
            str(e) or 'Internal server error during TTS processing', 500,
            success=False,
            timestamp=datetime.utcnow().isoformat() + 'Z',
        )
