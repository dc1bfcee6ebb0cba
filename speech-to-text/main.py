"""
Speech-to-Text Cloud Function

Transcribes Base64 audio recorded in the browser with Google Cloud
Speech-to-Text. Falls back to a canned demo transcription when no service
account credentials are configured.
"""

import functions_framework
import base64
import binascii
import os
import sys
import time
from datetime import datetime

from google.api_core import exceptions as google_exceptions
from google.cloud import speech

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from shared.http_utils import (
    preflight_response, json_response, error_response, method_not_allowed, get_query_param,
    get_json_body, invalid_body_response,
)
from shared.credentials import (
    load_google_credentials, build_service_account_credentials, describe_credential_sources,
    google_error_code,
)
from shared.audio_utils import format_file_size, strip_data_url

# Configuration
VERSION = '1.0.0'
DEFAULT_LANGUAGE = 'vi-VN'
DEFAULT_ENCODING = 'WEBM_OPUS'
DEFAULT_SAMPLE_RATE = 48000
RECOGNITION_MODEL = 'latest_long'
DEMO_CONFIDENCE = 0.9
NOTHING_RECOGNIZED = '(Không nhận diện được âm thanh)'

SUPPORTED_LANGUAGES = {
    'vi-VN': 'Vietnamese',
    'en-US': 'English (US)',
    'en-GB': 'English (UK)',
    'ja-JP': 'Japanese',
    'ko-KR': 'Korean',
}

DEMO_TRANSCRIPTIONS = {
    'vi-VN': 'Đây là kết quả demo cho Speech-to-Text tiếng Việt. Nội dung thực tế sẽ được chuyển đổi khi có Google Cloud credentials.',
    'en-US': 'This is a demo result for English Speech-to-Text. Real content will be transcribed when Google Cloud credentials are configured.',
    'en-GB': 'This is a demo result for British English Speech-to-Text.',
    'ja-JP': 'これは日本語音声テキスト変換のデモ結果です。',
    'ko-KR': '이것은 한국어 음성-텍스트 변환의 데모 결과입니다.',
}

GOOGLE_ERROR_MESSAGES = [
    (google_exceptions.InvalidArgument, 'Định dạng audio không hợp lệ hoặc file bị lỗi'),
    (google_exceptions.PermissionDenied, 'Không có quyền truy cập Speech-to-Text API'),
    (google_exceptions.ResourceExhausted, 'Đã vượt quá giới hạn API quota'),
    (google_exceptions.ServiceUnavailable, 'Dịch vụ Google Cloud STT tạm thời không khả dụng'),
]
AUDIO_ERROR = 'Lỗi xử lý file audio. Vui lòng thử định dạng khác.'
UNKNOWN_ERROR = 'Lỗi không xác định khi xử lý audio'

_speech_client = None
_client_initialized = False
_credential_source = None


def get_speech_client():
    """Create the Speech client on first use; None means demo mode."""
    global _speech_client, _client_initialized, _credential_source
    if _client_initialized:
        return _speech_client

    _client_initialized = True
    credentials, source = load_google_credentials()
    if not credentials:
        print("No Google Cloud credentials, STT running in demo mode")
        return None

    try:
        _speech_client = speech.SpeechClient(
            credentials=build_service_account_credentials(credentials)
        )
        _credential_source = source
        print(f"Google Cloud Speech-to-Text initialized from {source}")
    except Exception as e:
        print(f"Failed to initialize Google Cloud Speech-to-Text, using demo mode: {e}")
        _speech_client = None
    return _speech_client


def decode_audio(audio_data: str) -> bytes:
    """Decode Base64 audio, with or without a data URL prefix."""
    return base64.b64decode(strip_data_url(audio_data), validate=True)


def resolve_encoding(name: str):
    """Map an encoding name such as WEBM_OPUS to the API enum. Raises KeyError."""
    return speech.RecognitionConfig.AudioEncoding[name]


def parse_sample_rate(value):
    """Return a positive integer sample rate in Hz, or None if ``value`` is not one."""
    if isinstance(value, bool):
        return None
    try:
        rate = int(value)
    except (TypeError, ValueError):
        return None
    return rate if rate > 0 else None


def build_recognition_config(encoding, sample_rate: int, language: str):
    return speech.RecognitionConfig(
        encoding=encoding,
        sample_rate_hertz=sample_rate,
        language_code=language,
        enable_automatic_punctuation=True,
        model=RECOGNITION_MODEL,
        use_enhanced=True,
    )


def summarize_results(results) -> tuple:
    """Join first-alternative transcripts and average their confidence."""
    transcripts = []
    confidences = []
    for result in results:
        if not result.alternatives:
            continue
        best = result.alternatives[0]
        transcripts.append(best.transcript)
        confidences.append(best.confidence or 0)

    transcription = ' '.join(transcripts)
    confidence = sum(confidences) / len(confidences) if confidences else 0
    return transcription, confidence


def describe_google_error(exc: Exception) -> str:
    for error_type, message in GOOGLE_ERROR_MESSAGES:
        if isinstance(exc, error_type):
            return message
    if 'audio' in str(exc).lower():
        return AUDIO_ERROR
    return UNKNOWN_ERROR


def demo_transcription(language: str) -> dict:
    return {
        'success': True,
        'transcription': DEMO_TRANSCRIPTIONS.get(language, DEMO_TRANSCRIPTIONS[DEFAULT_LANGUAGE]),
        'confidence': DEMO_CONFIDENCE,
        'language': language,
        'mode': 'Demo/Fallback Mode',
        'demoMode': True,
        'note': 'This is a demo transcription. Enable Google Cloud STT for real functionality.',
        'timestamp': datetime.utcnow().isoformat() + 'Z',
    }


def health_check(request):
    client = get_speech_client()
    if client:
        response = {
            'success': True,
            'message': 'Google Cloud Speech-to-Text API is working',
            'version': VERSION,
            'mode': 'Production Mode',
            'supportedLanguages': SUPPORTED_LANGUAGES,
            'features': ['Real-time transcription', 'Multiple audio formats', 'High accuracy', 'Punctuation auto-add'],
            'status': 'Connected',
        }
    else:
        response = {
            'success': True,
            'message': 'Demo Speech-to-Text API is working',
            'version': f'{VERSION}-demo',
            'mode': 'Demo/Fallback Mode',
            'note': 'This is a demo endpoint. Real STT requires Google Cloud credentials.',
            'supportedLanguages': {code: f'{name} (Demo)' for code, name in SUPPORTED_LANGUAGES.items()},
            'features': ['Demo transcription', 'Multiple languages', 'Audio upload support'],
        }
    response['timestamp'] = datetime.utcnow().isoformat() + 'Z'

    if get_query_param(request, 'debug') == 'true':
        response['debug'] = {
            'credentialSource': _credential_source,
            'credentialVariables': describe_credential_sources(),
        }
    return json_response(response)


@functions_framework.http
def speech_to_text(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "audioData": "data:audio/webm;base64,GkXfo...",
        "language": "vi-VN",
        "encoding": "WEBM_OPUS",
        "sampleRate": 48000
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
    audio_data = body.get('audioData')
    language = body.get('language') or DEFAULT_LANGUAGE
    encoding_name = body.get('encoding') or DEFAULT_ENCODING

    if not audio_data:
        return error_response('Audio data is required', 400, success=False)
    if not isinstance(audio_data, str):
        return error_response('Invalid audio data format', 400, success=False)
    if not isinstance(language, str):
        return error_response('Language must be a string', 400, success=False)

    client = get_speech_client()
    if client is None:
        print("Google Cloud STT not configured, returning demo transcription")
        return json_response(demo_transcription(language))

    try:
        audio = decode_audio(audio_data)
    except (binascii.Error, ValueError):
        return error_response('Invalid audio data format', 400, success=False)

    try:
        encoding = resolve_encoding(encoding_name)
    except (KeyError, TypeError):
        return error_response(f'Unsupported audio encoding: {encoding_name}', 400, success=False)

    sample_rate = parse_sample_rate(body.get('sampleRate', DEFAULT_SAMPLE_RATE))
    if sample_rate is None:
        return error_response('Invalid sample rate', 400, success=False)

    try:
        print(f"Processing STT request: {language}, {encoding_name}, {sample_rate}Hz, {len(audio)} bytes")
        start = time.time()
        response = client.recognize(
            config=build_recognition_config(encoding, sample_rate, language),
            audio=speech.RecognitionAudio(content=audio),
        )
        processing_ms = round((time.time() - start) * 1000)
        print(f"STT completed in {processing_ms}ms")

        transcription, confidence = summarize_results(response.results)
        print(f"Transcribed {len(transcription)} chars, confidence {confidence * 100:.1f}%")

        return json_response({
            'success': True,
            'transcription': transcription or NOTHING_RECOGNIZED,
            'confidence': confidence,
            'language': language,
            'audioSize': format_file_size(len(audio)),
            'processingTime': f"{processing_ms}ms",
            'mode': 'Production Mode',
            'timestamp': datetime.utcnow().isoformat() + 'Z',
        })

    except google_exceptions.GoogleAPICallError as e:
        print(f"STT error: {e}")
        return error_response(
            describe_google_error(e), 500,
            success=False,
            details=str(e),
            errorCode=google_error_code(e),
        )
    except Exception as e:
        print(f"STT error: {e}")
        return error_response(describe_google_error(e), 500, success=False, details=str(e))
