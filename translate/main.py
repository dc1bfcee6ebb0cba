"""
Translate Cloud Function

Translates text between English and Vietnamese in a news-journalism register.
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
DEFAULT_DIRECTION = 'en-vi'

EN_VI_PROMPT = """Dịch văn bản sau từ tiếng Anh sang tiếng Việt theo chuẩn báo chí Việt Nam chuyên nghiệp. Yêu cầu chi tiết:

PHONG CÁCH VÀ VĂN PHONG:
- Sử dụng văn phong báo chí: khách quan, chính xác, súc tích, trang trọng
- Tránh ngôn ngữ thông tục, lóng, hoặc quá văn học
- Câu văn rõ ràng, logic, dễ hiểu cho đại chúng
- Sử dụng câu chủ động thay vì câu bị động khi có thể

QUY CHUẨN BÁO CHÍ VIỆT NAM:
- Tuân thủ chính tả và ngữ pháp chuẩn tiếng Việt
- Sử dụng thuật ngữ báo chí chính xác (ví dụ: "tuyên bố" thay vì "nói", "khẳng định" thay vì "bảo")
- Danh xưng và chức danh chính xác (Tổng thống, Thủ tướng, Chủ tịch...)
- Đơn vị tiền tệ, thời gian theo chuẩn Việt Nam

THUẬT NGỮ CHUYÊN NGÀNH:
- Kinh tế: GDP, lạm phát, lãi suất, chứng khoán...
- Chính trị: quốc hội, chính phủ, ngoại giao, luật pháp...
- Xã hội: giáo dục, y tế, môi trường, an sinh...
- Công nghệ: AI, blockchain, internet, mạng xã hội...

CẤU TRÚC VÀ LOGIC:
- Giữ nguyên ý nghĩa và tone gốc
- Đảm bảo tính nhất quán trong thuật ngữ
- Cấu trúc câu phù hợp với thói quen đọc của người Việt
- Sử dụng dấu câu đúng chuẩn báo chí

Văn bản gốc: {text}

Chỉ trả về phần dịch, không giải thích thêm."""

VI_EN_PROMPT = """Translate the following Vietnamese text to English following international journalism standards. Detailed requirements:

STYLE AND TONE:
- Use professional journalism style: objective, accurate, concise, formal
- Avoid colloquialisms, slang, or overly literary language
- Clear, logical sentences that are accessible to general readers
- Prefer active voice over passive voice when possible

INTERNATIONAL JOURNALISM STANDARDS:
- Follow AP Style/Reuters guidelines for consistency
- Use standard journalism terminology (e.g., "stated" not "said", "announced" not "told")
- Proper titles and designations (President, Prime Minister, Chairman...)
- Standard international units, time formats, currency

SPECIALIZED TERMINOLOGY:
- Economics: GDP, inflation, interest rates, stock market...
- Politics: parliament, government, diplomacy, legislation...
- Society: education, healthcare, environment, social welfare...
- Technology: AI, blockchain, internet, social media...

STRUCTURE AND LOGIC:
- Maintain original meaning and tone
- Ensure terminology consistency throughout
- Sentence structure suitable for international readers
- Proper punctuation according to journalism standards
- Cultural context adaptation for global audience

Original text: {text}

Return only the translation, no explanations."""

PROMPTS = {
    'en-vi': EN_VI_PROMPT,
    'vi-en': VI_EN_PROMPT,
}


def build_translation_prompt(text: str, direction: str) -> str:
    """Return the prompt for ``direction``, or None if unsupported."""
    template = PROMPTS.get(direction) if isinstance(direction, str) else None
    if template is None:
        return None
    return template.replace('{text}', text)


@functions_framework.http
def translate(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "text": "The central bank cut interest rates.",
        "direction": "en-vi"
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
    direction = body.get('direction') or DEFAULT_DIRECTION

    if not text:
        return error_response('Text is required', 400)
    if not isinstance(text, str):
        return error_response('Text must be a string', 400)

    prompt = build_translation_prompt(text, direction)
    if prompt is None:
        return error_response('Invalid direction', 400)

    if not OPENAI_API_KEY:
        return error_response('API key not configured', 500)

    try:
        translated = chat_completion(OPENAI_API_KEY, build_messages(prompt), model=MODEL)
        return json_response({'translatedText': translated})
    except Exception as e:
        print(f"Translation error: {e}")
        return error_response('Failed to translate text', 500, details=str(e))
