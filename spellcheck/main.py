"""
Spellcheck Cloud Function

Fixes spelling and grammar in Vietnamese or English text.
"""

import functions_framework
import os
import sys

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from shared.http_utils import (
    preflight_response, json_response, error_response, method_not_allowed, get_json_body,
    invalid_body_response,
)
from shared.openai_client import chat_completion, build_messages

# Configuration
OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY')
MODEL = 'gpt-3.5-turbo'

LANGUAGE_NAMES = {
    'vi': 'tiếng Việt',
    'en': 'tiếng Anh',
}


def build_spellcheck_prompt(text: str, language: str = 'vi') -> str:
    lang_text = LANGUAGE_NAMES['vi'] if language == 'vi' else LANGUAGE_NAMES['en']
    return f"Kiểm tra và sửa lỗi chính tả, ngữ pháp trong văn bản {lang_text} sau: {text}. Trả về văn bản đã sửa."


@functions_framework.http
def spellcheck(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "text": "Hôm nay trơi đẹp",
        "language": "vi"
    }
    """
    if request.method == 'OPTIONS':
        return preflight_response()
    if request.method != 'POST':
        return method_not_allowed()

    body = get_json_body(request)
    if body is None:
        return invalid_body_response()
    text = body.get('text')
    language = body.get('language') or 'vi'

    if not text:
        return error_response('Text is required', 400)
    if not isinstance(text, str):
        return error_response('Text must be a string', 400)

    if not OPENAI_API_KEY:
        return error_response('API key not configured', 500)

    try:
        corrected = chat_completion(
            OPENAI_API_KEY,
            build_messages(build_spellcheck_prompt(text, language)),
            model=MODEL,
        )
        return json_response({'correctedText': corrected})
    except Exception as e:
        print(f"Spellcheck error: {e}")
        return error_response('Failed to check spelling', 500, details=str(e))
