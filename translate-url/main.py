"""
Translate URL Cloud Function

Extracts a news article from a URL and translates its title and body.

Extraction runs the shared waterfall (Readability, headless browser with
site selectors, static selectors). Title and content are translated in two
separate OpenAI calls.
"""

import functions_framework
import os
import sys
from urllib.parse import urlparse

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from shared.http_utils import (
    preflight_response, json_response, error_response, method_not_allowed, status_for_exception,
    get_json_body, invalid_body_response,
)
from shared.openai_client import chat_completion, build_messages
from shared.extraction import extract_article

# Configuration
OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY')
MODEL = 'gpt-4o-mini'
MIN_CONTENT_LENGTH = 100

VI_EN_SYSTEM_PROMPT = """You are a professional translator specializing in Vietnamese to English translation for journalism and financial news. Follow these guidelines:

CRITICAL REQUIREMENTS:
- Translate Vietnamese financial/business news to professional English
- Maintain journalistic tone and accuracy
- Use proper financial terminology
- Keep numbers, dates, and proper nouns accurate
- Follow Reuters/AP style guidelines
- Ensure clarity and readability for international audience

STYLE GUIDELINES:
- Professional, objective tone
- Active voice when possible
- Concise yet comprehensive
- Proper business/financial terminology
- Clear sentence structure
- Maintain original meaning and context

OUTPUT: Provide ONLY the English translation, no explanations or notes."""

EN_VI_SYSTEM_PROMPT = """Bạn là một dịch giả chuyên nghiệp chuyên dịch tin tức tài chính từ tiếng Anh sang tiếng Việt theo phong cách báo VnEconomy.

YÊU CẦU QUAN TRỌNG:
- Dịch tin tức tài chính/kinh doanh từ tiếng Anh sang tiếng Việt chuyên nghiệp
- Sử dụng phong cách báo chí tài chính Việt Nam, đặc biệt là VnEconomy
- Thuật ngữ kinh tế chính xác và nhất quán
- Giữ nguyên số liệu, ngày tháng, tên riêng
- Văn phong trang trọng, khách quan
- Câu văn súc tích, dễ hiểu

PHONG CÁCH VNECONOMY:
- Tiêu đề: Ngắn gọn, có tác động, sử dụng động từ mạnh
- Nội dung: Khách quan, chính xác, sử dụng thuật ngữ kinh tế chuẩn
- Số liệu: Ghi rõ đơn vị (triệu USD, tỷ đồng, %)
- Trích dẫn: Rõ ràng nguồn tin, tên chức danh đầy đủ

KẾT QUẢ: Chỉ cung cấp bản dịch tiếng Việt, không giải thích thêm."""

NOTHING_EXTRACTED = 'Không thể trích xuất nội dung từ URL này. Vui lòng thử URL khác.'
SERVER_ERROR = 'Lỗi server khi xử lý URL'


def system_prompt_for(direction: str) -> str:
    return VI_EN_SYSTEM_PROMPT if direction == 'vi-en' else EN_VI_SYSTEM_PROMPT


def translate_text(text: str, direction: str) -> str:
    """Translate one block of text; empty input stays empty."""
    if not text:
        return ''
    return chat_completion(
        OPENAI_API_KEY,
        build_messages(text, system_prompt_for(direction)),
        model=MODEL,
        temperature=0.3,
        max_tokens=4000,
    )


def is_valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in ('http', 'https') and bool(parsed.netloc)


@functions_framework.http
def translate_url(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "url": "https://vnexpress.net/some-article-123456.html",
        "direction": "vi-en"
    }
    """
    if request.method == 'OPTIONS':
        return preflight_response()
    if request.method != 'POST':
        return method_not_allowed()

    try:
        body = get_json_body(request)
        if body is None:
            return invalid_body_response()
        url = body.get('url')
        direction = body.get('direction')

        if not url or not direction:
            return error_response('URL and direction are required', 400)
        if not isinstance(url, str):
            return error_response('Invalid URL', 400)
        if not is_valid_url(url):
            return error_response('Invalid URL', 400)

        print(f"Processing URL: {url} with direction: {direction}")

        article = extract_article(url, min_length=MIN_CONTENT_LENGTH)
        title = article['title']
        content = article['content']

        if not title and not content:
            return error_response(NOTHING_EXTRACTED, 400)

        print(f"Extracted via {article['method']}, starting translation...")
        translated_title = translate_text(title, direction)
        translated_content = translate_text(content, direction)

        return json_response({
            'original': {'title': title, 'content': content},
            'translated': {'title': translated_title, 'content': translated_content},
            'method': article['method'],
        })

    except Exception as e:
        print(f"Error in translate-url: {e}")
        return error_response(SERVER_ERROR, status_for_exception(e), details=str(e))
