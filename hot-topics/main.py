"""
Hot Topics Cloud Function

Returns ranked Vietnamese trending topics for article ideas. Curated source
tables are merged with four AI-generated current topics, deduplicated and
ranked by score.
"""

import functions_framework
import json
import os
import re
import sys
from datetime import datetime, timezone

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from shared.http_utils import (
    preflight_response, json_response, error_response, method_not_allowed, get_query_param,
)
from shared.openai_client import chat_completion, build_messages

# Configuration
OPENAI_API_KEY = os.environ.get('OPENAI_API_KEY')
MODEL = 'gpt-4o-mini'
DEFAULT_SOURCES = 'google,baomoi,social,news'
MAX_TOPICS = 15
TOTAL_CATEGORIES = 10
SOURCE_NAMES = ['Google Trends', 'BaoMoi.com', 'Social Media', 'Vietnamese News']

GOOGLE_TOPICS = [
    {
        'title': 'Bitcoin và thị trường Crypto biến động mạnh',
        'description': 'Giá Bitcoin và các đồng tiền số khác dao động mạnh, tác động đến thị trường tài chính toàn cầu và Việt Nam',
        'category': 'Crypto',
        'score': 96,
        'source': 'Google Trends',
    },
    {
        'title': 'VN-Index và thị trường chứng khoán Việt Nam',
        'description': 'Diễn biến thị trường chứng khoán, các cổ phiếu hot và xu hướng đầu tư của nhà đầu tư cá nhân',
        'category': 'Chứng khoán',
        'score': 89,
        'source': 'Google Trends',
    },
    {
        'title': 'Euro 2024 và World Cup 2026 - Bóng đá châu Âu',
        'description': 'Các trận đấu nổi bật, đội tuyển Việt Nam và sự phát triển bóng đá trong nước',
        'category': 'Thể thao',
        'score': 94,
        'source': 'Google Trends',
    },
]

BAOMOI_TOPICS = [
    {
        'title': 'Cải cách giáo dục và chương trình mới 2024',
        'description': 'Những thay đổi trong chương trình giáo dục phổ thông và đại học, tác động đến học sinh và phụ huynh',
        'category': 'Giáo dục',
        'score': 87,
        'source': 'BaoMoi.com',
    },
    {
        'title': 'Y tế công và bảo hiểm xã hội',
        'description': 'Cải cách hệ thống y tế, chi phí khám chữa bệnh và quyền lợi của người dân',
        'category': 'Sức khỏe',
        'score': 85,
        'source': 'BaoMoi.com',
    },
    {
        'title': 'Du lịch nội địa và phục hồi sau Covid',
        'description': 'Sự phục hồi của ngành du lịch Việt Nam và xu hướng du lịch nội địa của người dân',
        'category': 'Du lịch',
        'score': 78,
        'source': 'BaoMoi.com',
    },
]

SOCIAL_TOPICS = [
    {
        'title': 'TikTok và văn hóa Gen Z Việt Nam',
        'description': 'Ảnh hưởng của TikTok đến giới trẻ, xu hướng viral và những thách thức của phụ huynh',
        'category': 'Văn hóa',
        'score': 92,
        'source': 'Social Media',
    },
    {
        'title': 'Livestream bán hàng và thương mại điện tử',
        'description': 'Xu hướng bán hàng qua livestream, influencer marketing và thay đổi thói quen mua sắm',
        'category': 'Kinh tế',
        'score': 90,
        'source': 'Social Media',
    },
    {
        'title': 'Mental health và áp lực xã hội của giới trẻ',
        'description': 'Vấn đề sức khỏe tinh thần, stress học tập và công việc trong thời đại số',
        'category': 'Sức khỏe',
        'score': 86,
        'source': 'Social Media',
    },
]

NEWS_TOPICS = [
    {
        'title': 'Chính sách kinh tế và hỗ trợ doanh nghiệp SME',
        'description': 'Các gói hỗ trợ từ chính phủ cho doanh nghiệp nhỏ và vừa, khởi nghiệp trong bối cảnh phục hồi kinh tế',
        'category': 'Kinh tế',
        'score': 88,
        'source': 'Vietnamese News',
    },
    {
        'title': 'Giao thông đô thị và quy hoạch thành phố thông minh',
        'description': 'Các dự án giao thông, quy hoạch đô thị và giải pháp cho tắc nghẽn tại các thành phố lớn',
        'category': 'Xã hội',
        'score': 83,
        'source': 'Vietnamese News',
    },
    {
        'title': 'Năng lượng tái tạo và phát triển bền vững',
        'description': 'Các dự án năng lượng mặt trời, gió và cam kết Net Zero của Việt Nam đến 2050',
        'category': 'Xã hội',
        'score': 81,
        'source': 'Vietnamese News',
    },
]

# Keyed by month number
SEASONAL_TOPICS = {
    1: [{
        'title': 'Xu hướng du lịch Tết Nguyên đán',
        'description': 'Các điểm đến hot và xu hướng du lịch trong dịp Tết cổ truyền',
        'category': 'Văn hóa',
        'score': 90,
        'source': 'Vietnamese Culture',
    }],
    3: [{
        'title': 'Mùa tuyển sinh đại học và áp lực học đường',
        'description': 'Thực trạng giáo dục và áp lực thi cử trong hệ thống giáo dục Việt Nam',
        'category': 'Xã hội',
        'score': 85,
        'source': 'Vietnamese Society',
    }],
    6: [{
        'title': 'Mùa thi tốt nghiệp THPT và tương lai của thế hệ trẻ',
        'description': 'Kỳ thi quan trọng và định hướng nghề nghiệp của học sinh Việt Nam',
        'category': 'Xã hội',
        'score': 92,
        'source': 'Vietnamese Society',
    }],
    9: [{
        'title': 'Năm học mới và đổi mới giáo dục',
        'description': 'Những thay đổi trong chương trình giáo dục và phương pháp học tập',
        'category': 'Xã hội',
        'score': 80,
        'source': 'Vietnamese Society',
    }],
    12: [{
        'title': 'Thị trường cuối năm và xu hướng tiêu dùng',
        'description': 'Hoạt động mua sắm cuối năm và xu hướng tiêu dùng của người Việt',
        'category': 'Kinh tế',
        'score': 78,
        'source': 'Vietnamese Economy',
    }],
}

EVERGREEN_TOPICS = [
    {
        'title': 'Bất động sản và giá nhà đất tại các thành phố lớn',
        'description': 'Thị trường bất động sản và khả năng mua nhà của người trẻ Việt Nam',
        'category': 'Kinh tế',
        'score': 87,
        'source': 'Vietnamese Economy',
    },
    {
        'title': 'Startup Việt và câu chuyện khởi nghiệp',
        'description': 'Hệ sinh thái khởi nghiệp và những startup unicorn Việt Nam',
        'category': 'Kinh tế',
        'score': 75,
        'source': 'Vietnamese Business',
    },
]

FALLBACK_TOPICS = [
    {
        'title': 'Bitcoin tăng giá mạnh, nhà đầu tư Việt gấp rút mua vào',
        'description': 'Giá Bitcoin vượt mốc $70,000, nhiều nhà đầu tư Việt Nam quan tâm đến thị trường crypto',
        'category': 'Crypto',
        'score': 95,
    },
    {
        'title': 'VN-Index biến động, cổ phiếu ngân hàng dẫn dắt thị trường',
        'description': 'Thị trường chứng khoán Việt Nam có những phiên giao dịch sôi động với thanh khoản cao',
        'category': 'Chứng khoán',
        'score': 92,
    },
    {
        'title': 'Đội tuyển bóng đá Việt Nam chuẩn bị cho vòng loại World Cup',
        'description': 'HLV Troussier công bố danh sách, người hâm mộ kỳ vọng thành tích tốt',
        'category': 'Thể thao',
        'score': 90,
    },
    {
        'title': 'Cải cách giáo dục: Chương trình mới có gì khác biệt?',
        'description': 'Bộ Giáo dục công bố những thay đổi lớn trong chương trình giáo dục phổ thông',
        'category': 'Giáo dục',
        'score': 88,
    },
    {
        'title': 'Trí tuệ nhân tạo thay đổi thị trường lao động Việt Nam',
        'description': 'AI tác động mạnh đến việc làm, nhiều nghề nghiệp cần kỹ năng mới',
        'category': 'Công nghệ',
        'score': 87,
    },
    {
        'title': 'Y tế công: Bệnh viện quá tải, cần giải pháp cấp bách',
        'description': 'Hệ thống y tế công đối mặt nhiều thách thức, đặc biệt tại các thành phố lớn',
        'category': 'Sức khỏe',
        'score': 85,
    },
    {
        'title': 'Kinh tế số và cơ hội cho doanh nghiệp SME',
        'description': 'Chuyển đổi số mở ra nhiều cơ hội mới cho doanh nghiệp nhỏ và vừa',
        'category': 'Kinh tế',
        'score': 83,
    },
    {
        'title': 'Du lịch Việt Nam: Hồi phục sau đại dịch',
        'description': 'Ngành du lịch đang từng bước phục hồi với nhiều chính sách hỗ trợ',
        'category': 'Du lịch',
        'score': 80,
    },
    {
        'title': 'Giao thông đô thị: Tắc nghẽn và giải pháp bền vững',
        'description': 'Các thành phố lớn đang tìm giải pháp cho vấn đề kẹt xe ngày càng nghiêm trọng',
        'category': 'Xã hội',
        'score': 78,
    },
    {
        'title': 'TikTok và xu hướng văn hóa mới của giới trẻ',
        'description': 'Mạng xã hội TikTok tạo ra những xu hướng văn hóa mới, ảnh hưởng mạnh đến GenZ',
        'category': 'Văn hóa',
        'score': 75,
    },
]

CURRENT_TOPICS_PROMPT = """Hãy tạo ra 4 chủ đề đang HOT và trending nhất hiện tại tại Việt Nam (tháng {month}/{year}) để viết báo.

Yêu cầu:
- Chủ đề phải thực tế, có tính thời sự cao
- Phù hợp với người Việt Nam
- Có thể viết thành bài báo hay
- Bao gồm: kinh tế, công nghệ, xã hội, văn hóa

Trả về JSON format:
[
  {{
    "title": "Tiêu đề ngắn gọn",
    "description": "Mô tả chi tiết 1-2 câu",
    "category": "Loại (Kinh tế/Công nghệ/Xã hội/Văn hóa)",
    "score": 95,
    "source": "Current Events"
  }}
]"""


def get_fallback_topics() -> list:
    return [dict(topic, source='Fallback Topics') for topic in FALLBACK_TOPICS]


def get_vietnamese_topics(month: int = None) -> list:
    """Seasonal topics for the month followed by the evergreen ones."""
    month = month or datetime.now().month
    return [dict(t) for t in SEASONAL_TOPICS.get(month, []) + EVERGREEN_TOPICS]


def parse_topics(content: str) -> list:
    """Pull a JSON array of topics out of a model reply."""
    match = re.search(r'\[[\s\S]*\]', content or '')
    if not match:
        return []
    try:
        topics = json.loads(match.group())
    except ValueError as e:
        print(f"Failed to parse AI topics: {e}")
        return []
    if not isinstance(topics, list):
        return []
    return [t for t in topics if isinstance(t, dict) and t.get('title')]


def generate_current_trending_topics(now: datetime = None) -> list:
    if not OPENAI_API_KEY:
        print("No OpenAI API key, using fallback topics")
        return get_fallback_topics()[:4]

    now = now or datetime.now()
    prompt = CURRENT_TOPICS_PROMPT.format(month=now.month, year=now.year)
    try:
        content = chat_completion(
            OPENAI_API_KEY,
            build_messages(prompt),
            model=MODEL,
            temperature=0.8,
            max_tokens=1000,
        )
    except Exception as e:
        print(f"Error generating current topics: {e}")
        return []
    return parse_topics(content)


def remove_duplicate_topics(topics: list) -> list:
    """Keep the first topic for each lowercased three-word title prefix."""
    unique = []
    seen = set()
    for topic in topics:
        key = ' '.join(topic['title'].split(' ')[:3]).lower()
        if key not in seen:
            seen.add(key)
            unique.append(topic)
    return unique


def _score(topic: dict) -> float:
    try:
        return float(topic.get('score', 0))
    except (TypeError, ValueError):
        return 0.0


def rank_topics(topics: list, limit: int = MAX_TOPICS) -> list:
    ordered = sorted(topics, key=_score, reverse=True)[:limit]
    return [dict(topic, rank=index + 1) for index, topic in enumerate(ordered)]


SOURCE_TABLES = {
    'google': lambda: [dict(t) for t in GOOGLE_TOPICS],
    'baomoi': lambda: [dict(t) for t in BAOMOI_TOPICS],
    'social': lambda: [dict(t) for t in SOCIAL_TOPICS],
    'news': lambda: [dict(t) for t in NEWS_TOPICS],
    'vietnam': get_vietnamese_topics,
}


def fetch_hot_topics(selected_sources: list) -> list:
    try:
        all_topics = []
        for source in selected_sources:
            loader = SOURCE_TABLES.get(source)
            if loader:
                all_topics.extend(loader())

        # AI topics are always mixed in for freshness
        all_topics.extend(generate_current_trending_topics())

        return rank_topics(remove_duplicate_topics(all_topics))

    except Exception as e:
        print(f"Error fetching hot topics: {e}")
        return get_fallback_topics()


def generate_category_stats(topics: list) -> dict:
    stats = {
        'total': len(topics),
        'categories': {},
        'sources': {},
        'scoreRanges': {'super_hot': 0, 'hot': 0, 'trending': 0},
    }

    for topic in topics:
        category = topic.get('category')
        source = topic.get('source')
        stats['categories'][category] = stats['categories'].get(category, 0) + 1
        stats['sources'][source] = stats['sources'].get(source, 0) + 1

        score = _score(topic)
        if score >= 90:
            stats['scoreRanges']['super_hot'] += 1
        elif score >= 80:
            stats['scoreRanges']['hot'] += 1
        else:
            stats['scoreRanges']['trending'] += 1

    return stats


@functions_framework.http
def hot_topics(request):
    """
    Main Cloud Function entry point.

    Query parameters:
        sources: comma separated list of google, baomoi, social, news, vietnam
    """
    if request.method == 'OPTIONS':
        return preflight_response()
    if request.method != 'GET':
        return method_not_allowed()

    try:
        sources_param = get_query_param(request, 'sources') or DEFAULT_SOURCES
        selected_sources = [s.strip() for s in sources_param.split(',') if s.strip()]
        print(f"Fetching hot topics from: {selected_sources}")

        topics = fetch_hot_topics(selected_sources)

        return json_response({
            'topics': topics,
            'categoryStats': generate_category_stats(topics),
            'lastUpdated': datetime.now(timezone.utc).isoformat(),
            'sources': SOURCE_NAMES,
            'selectedSources': selected_sources,
            'totalCategories': TOTAL_CATEGORIES,
        })

    except Exception as e:
        print(f"Hot Topics API error: {e}")
        return error_response('Internal server error', 500, details=str(e))
