"""
Content Summary Cloud Function

Summarises Vietnamese news with OpenAI.

Modes:
- category: scrape article links from a section page and write a news digest
- article: extract a single article and summarise it

Category digests are cached in memory for 30 minutes per URL and settings.
"""

import functions_framework
import json
import os
import sys
from datetime import datetime, timedelta, timezone

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from shared.http_utils import (
    preflight_response, json_response, error_response, method_not_allowed,
    status_for_exception, get_query_param, get_json_body, invalid_body_response,
)
from shared.openai_client import chat_completion, build_messages
from shared.extraction import extract_article, extract_category_links, fetch_category_page
from shared.ttl_cache import TTLCache

# Configuration
OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY')
MODEL = 'gpt-4o'
VERSION = '2.2'
VIETNAM_TZ = timezone(timedelta(hours=7))
WORDS_PER_MINUTE = 200
DEFAULT_MAX_ARTICLES = 10

SUPPORTED_SITES = ['VnEconomy', 'DanTri', 'VietnamNet', 'VnExpress', 'TuoiTre', 'ThanhNien', 'Zing', '24h']

LENGTH_GUIDES = {
    'brief': '50-100 từ (siêu ngắn gọn)',
    'short': '150-250 từ (ngắn gọn)',
    'medium': '300-400 từ (vừa phải)',
    'long': '600-800 từ (chi tiết)',
    'detailed': '500+ từ (rất chi tiết)',
}
FOCUS_GUIDES = {
    'general': 'Tổng quan toàn bộ nội dung',
    'highlights': 'Tập trung vào những điểm nổi bật nhất',
    'analysis': 'Phân tích sâu và đưa ra nhận định',
}
STYLE_GUIDES = {
    'bullet': 'Dạng danh sách bullet points với các điểm chính',
    'paragraph': 'Dạng đoạn văn liền mạch, dễ đọc',
    'structured': 'Dạng có cấu trúc rõ ràng với tiêu đề phụ',
}
MAX_TOKENS = {
    'brief': 200,
    'short': 400,
    'medium': 600,
    'long': 1000,
    'detailed': 1200,
}

STYLE_TEMPLATES = {
    'bullet': """
- **Điểm chính 1**: [Thông tin quan trọng nhất]
- **Điểm chính 2**: [Thông tin quan trọng thứ hai]
- **Chi tiết**: [Các thông tin bổ sung]
- **Kết luận**: [Ý nghĩa, tác động]
""",
    'structured': """
**Vấn đề chính**: [Nội dung chính của bài]
**Chi tiết quan trọng**: [Thông tin cụ thể]
**Tác động/Ý nghĩa**: [Đánh giá về ảnh hưởng]
**Kết luận**: [Tóm tắt điểm chính]
""",
}
PARAGRAPH_TEMPLATE = """
Viết dưới dạng đoạn văn liền mạch, bắt đầu bằng điểm chính, sau đó đi vào chi tiết và kết thúc bằng kết luận.
"""

NO_ARTICLES_FOUND = (
    'Không tìm thấy bài báo nào trong chuyên mục này. URL: {url}. Có thể do: '
    '1) Trang web chặn bot, 2) Cấu trúc HTML thay đổi, 3) URL không hợp lệ. '
    'Thử với URL bài viết đơn lẻ thay vì chuyên mục.'
)
NO_ARTICLE_CONTENT = 'Không thể trích xuất nội dung từ bài viết này'

# Category digests, per instance
headline_cache = TTLCache()


def get_length_guide(length: str) -> str:
    return LENGTH_GUIDES.get(length, '300-400 từ')


def get_focus_guide(focus: str) -> str:
    return FOCUS_GUIDES.get(focus, FOCUS_GUIDES['general'])


def get_style_guide(style: str) -> str:
    return STYLE_GUIDES.get(style, 'Dạng đoạn văn liền mạch')


def get_max_tokens(length: str) -> int:
    return MAX_TOKENS.get(length, 600)


def build_cache_key(url: str, settings: dict) -> str:
    return f"{url}_{json.dumps(settings or {}, sort_keys=True, ensure_ascii=False)}"


def estimate_read_time(text: str) -> str:
    words = len((text or '').split())
    return f"{max(1, round(words / WORDS_PER_MINUTE))} phút đọc"


def build_headlines(articles: list, now: datetime = None) -> list:
    """Turn scraped category links into headline records."""
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    return [
        {
            'title': article['title'],
            'url': article['url'],
            'timestamp': timestamp,
            'readTime': estimate_read_time(article.get('content') or article.get('description')),
        }
        for article in articles
    ]


def combine_articles(articles: list) -> str:
    return '\n---\n\n'.join(
        f"**{article['title']}**\n{article.get('content') or article.get('description')}\n"
        for article in articles
    )


def build_category_prompts(content: str, length: str, focus: str, article_count: int, source: str):
    system_prompt = f"""Bạn là chuyên gia tóm tắt tin tức với khả năng phân tích và tổng hợp thông tin từ nhiều bài báo.

NHIỆM VỤ: Tóm tắt nội dung của {article_count} bài báo từ một chuyên mục báo.

PHONG CÁCH TÓM TẮT:
- Ngôn ngữ rõ ràng, súc tích
- Tập trung vào thông tin chính
- Tránh lặp lại thông tin
- Sử dụng cấu trúc logic

ĐỘ DÀI: {get_length_guide(length)}
TRỌNG TÂM: {get_focus_guide(focus)}

CẤU TRÚC TÓM TẮT CHUYÊN MỤC:
1. **Tổng quan chung** - Xu hướng chính trong chuyên mục
2. **Các sự kiện nổi bật** - 3-5 sự kiện quan trọng nhất
3. **Phân tích và nhận định** - Đánh giá tác động, ý nghĩa
4. **Kết luận** - Tóm tắt điểm chính cần lưu ý

QUY TẮC:
- Không bịa đặt thông tin không có trong nguồn
- Ưu tiên thông tin có giá trị cao
- Tránh ngôn ngữ cường điệu
- Sử dụng bullet points khi cần thiết"""

    user_prompt = f"""Hãy tóm tắt nội dung của {article_count} bài báo sau từ chuyên mục báo:

{content}

Nguồn: {source}

Tạo tóm tắt {length} theo trọng tâm {focus}."""

    return system_prompt, user_prompt


def build_article_prompts(content: str, title: str, length: str, style: str):
    template = STYLE_TEMPLATES.get(style, PARAGRAPH_TEMPLATE)
    coverage = 'Chỉ nêu những điểm cực kỳ quan trọng' if length == 'brief' else 'Bao gồm đầy đủ thông tin quan trọng'

    system_prompt = f"""Bạn là chuyên gia tóm tắt bài báo với khả năng trích xuất thông tin quan trọng nhất.

NHIỆM VỤ: Tóm tắt một bài báo cụ thể.

PHONG CÁCH: {get_style_guide(style)}
ĐỘ DÀI: {get_length_guide(length)}

CẤU TRÚC TÓM TẮT BÀI BÁO:
{template}
QUY TẮC:
- Giữ nguyên thông tin chính xác
- Không thêm thông tin không có trong bài gốc
- Sử dụng ngôn ngữ dễ hiểu
- {coverage}"""

    user_prompt = f"""Hãy tóm tắt bài báo sau:

**Tiêu đề**: {title}
**Nội dung**: {content}

Tạo tóm tắt {length} theo định dạng {style}."""

    return system_prompt, user_prompt


def generate_ai_summary(system_prompt: str, user_prompt: str, length: str) -> str:
    return chat_completion(
        OPENAI_API_KEY,
        build_messages(user_prompt, system_prompt),
        model=MODEL,
        temperature=0.3,
        max_tokens=get_max_tokens(length),
        top_p=0.9,
    )


def classify_headline(title: str) -> str:
    lowered = title.lower()
    if 'kinh tế' in lowered or 'tài chính' in lowered:
        return 'Kinh tế'
    if 'xã hội' in lowered or 'giáo dục' in lowered:
        return 'Xã hội'
    if 'thể thao' in lowered:
        return 'Thể thao'
    return 'Tổng hợp'


def build_fallback_digest(headlines: list, now: datetime = None) -> str:
    """Template digest used when the AI summary is unavailable."""
    now = (now or datetime.now(timezone.utc)).astimezone(VIETNAM_TZ)
    top = headlines[:5]
    categories = list(dict.fromkeys(classify_headline(h['title']) for h in headlines))

    lines = [f"📰 ĐIỂM TIN NHANH ({len(headlines)} tin)", '', '🔥 NỔI BẬT TRONG NGÀY:']
    lines.extend(f"• {h['title']}" for h in top[:2])
    if top[2:]:
        lines.extend(['', '📊 CÁC TIN QUAN TRỌNG KHÁC:'])
        lines.extend(f"• {h['title']}" for h in top[2:])
    lines.extend([
        '',
        f"📝 NHẬN ĐỊNH: Hôm nay có {len(headlines)} tin tức quan trọng được cập nhật từ nguồn báo chí uy tín, "
        f"phản ánh các diễn biến đáng chú ý trong các lĩnh vực {', '.join(categories)}.",
        '',
        f"⏰ *Cập nhật lúc: {now.strftime('%H:%M %d/%m/%Y')}*",
    ])
    return '\n'.join(lines)


def parse_max_articles(value):
    """Return a positive article count, or None if ``value`` is not one."""
    if isinstance(value, bool):
        return None
    try:
        count = int(value)
    except (TypeError, ValueError):
        return None
    return count if count >= 1 else None


def summarize_category(url: str, settings: dict) -> dict:
    length = settings.get('length', 'medium')
    focus = settings.get('focus', 'general')
    max_articles = parse_max_articles(settings.get('maxArticles', DEFAULT_MAX_ARTICLES)) or DEFAULT_MAX_ARTICLES

    print(f"Summarizing category: {url} with up to {max_articles} articles")

    html = fetch_category_page(url)
    articles = extract_category_links(html, url, max_articles)
    if not articles:
        raise ValueError(NO_ARTICLES_FOUND.format(url=url))

    print(f"Found {len(articles)} articles to summarize")
    headlines = build_headlines(articles)

    system_prompt, user_prompt = build_category_prompts(
        combine_articles(articles), length, focus, len(articles), url
    )
    try:
        summary = generate_ai_summary(system_prompt, user_prompt, length)
        summary_source = 'ai'
    except Exception as e:
        print(f"AI summary failed, using headline digest: {e}")
        summary = build_fallback_digest(headlines)
        summary_source = 'fallback'

    return {
        'summary': summary,
        'summarySource': summary_source,
        'headlines': headlines,
        'articleCount': len(articles),
    }


def summarize_article(url: str, settings: dict) -> dict:
    length = settings.get('length', 'short')
    style = settings.get('style', 'paragraph')

    print(f"Summarizing article: {url}")
    article = extract_article(url)
    if not article['content']:
        raise ValueError(NO_ARTICLE_CONTENT)

    system_prompt, user_prompt = build_article_prompts(
        article['content'], article['title'] or 'Untitled', length, style
    )
    return {
        'summary': generate_ai_summary(system_prompt, user_prompt, length),
        'title': article['title'],
        'method': article['method'],
    }


def health_check(request):
    removed = headline_cache.purge_expired()
    response = {
        'success': True,
        'message': 'Content Summary API is working',
        'version': VERSION,
        'supportedSites': SUPPORTED_SITES,
        'lastUpdated': datetime.now(VIETNAM_TZ).strftime('%H:%M:%S %d/%m/%Y'),
    }
    if get_query_param(request, 'debug') == 'true':
        response['debug'] = {
            'timestamp': datetime.utcnow().isoformat() + 'Z',
            'cacheSize': len(headline_cache),
            'cacheEntriesRemoved': removed,
        }
    return json_response(response)


@functions_framework.http
def content_summary(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "mode": "category",
        "url": "https://vnexpress.net/kinh-doanh",
        "settings": {"length": "medium", "focus": "general", "maxArticles": 10}
    }
    """
    if request.method == 'OPTIONS':
        return preflight_response()
    if request.method == 'GET':
        return health_check(request)
    if request.method != 'POST':
        return method_not_allowed()

    try:
        body = get_json_body(request)
        if body is None:
            return invalid_body_response()
        mode = body.get('mode')
        url = body.get('url')
        settings = body.get('settings') or {}

        if not url:
            return error_response('URL is required', 400)
        if not isinstance(url, str):
            return error_response('URL must be a string', 400)
        if not isinstance(settings, dict):
            return error_response('Settings must be an object', 400)
        if mode not in ('category', 'article'):
            return error_response('Invalid mode', 400)

        print(f"Content Summary: {mode} mode for {url}")
        headline_cache.purge_expired()

        if mode == 'category':
            if parse_max_articles(settings.get('maxArticles', DEFAULT_MAX_ARTICLES)) is None:
                return error_response('maxArticles must be a positive integer', 400)

            cache_key = build_cache_key(url, settings)
            cached = headline_cache.get(cache_key)
            if cached:
                print("Serving category digest from cache")
                response = dict(cached['data'])
                response['fromCache'] = True
                response['cacheAge'] = f"{headline_cache.age_minutes(cached)} phút"
                return json_response(response)

            result = summarize_category(url, settings)
        else:
            result = summarize_article(url, settings)

        response = {
            'success': True,
            'mode': mode,
            'url': url,
            'settings': settings,
            'timestamp': datetime.utcnow().isoformat() + 'Z',
            'fromCache': False,
        }
        response.update(result)

        if mode == 'category':
            headline_cache.set(cache_key, response)

        return json_response(response)

    except Exception as e:
        print(f"Content Summary error: {e}")
        return error_response('Failed to summarize content', status_for_exception(e), details=str(e))
