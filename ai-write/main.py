"""
AI Write Cloud Function

Drafts Vietnamese news articles with OpenAI.

Input methods:
- topic: write from a topic plus optional angle
- hottopics: write about a trending topic
- articles: rewrite and synthesise pasted source articles
- word: turn Word document content into an article

Output types: outline, complete, or both (JSON with outline and article).
"""

import functions_framework
import json
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
MODEL = 'gpt-4o'

ARTICLE_GUIDES = {
    'tin-van': {
        'name': 'Tin vắn',
        'wordCount': '200-400 từ',
        'structure': 'Lead paragraph + 2-3 body paragraphs + Conclusion',
        'characteristics': 'Súc tích, thông tin cốt lõi, trả lời 5W1H',
    },
    'tin-tong-hop': {
        'name': 'Tin tổng hợp',
        'wordCount': '400-800 từ',
        'structure': 'Headline + Lead + Multiple sources/angles + Background + Conclusion',
        'characteristics': 'Tổng hợp nhiều nguồn tin, phân tích đa chiều',
    },
    'phong-su-ngan': {
        'name': 'Phóng sự ngắn',
        'wordCount': '600-1000 từ',
        'structure': 'Hook + Context + Main story + Supporting details + Resolution',
        'characteristics': 'Kể chuyện, có tính nhân văn, chi tiết sinh động',
    },
    'bai-phan-tich': {
        'name': 'Bài phân tích',
        'wordCount': '800-1200 từ',
        'structure': 'Issue setup + Analysis + Evidence + Multiple perspectives + Conclusion',
        'characteristics': 'Phân tích sâu, dẫn chứng, logic rõ ràng',
    },
    'phong-su-dai': {
        'name': 'Phóng sự dài',
        'wordCount': '1000-2000 từ',
        'structure': 'Opening scene + Character development + Plot progression + Climax + Resolution',
        'characteristics': 'Kể chuyện chi tiết, nhân vật sống động, cảm xúc',
    },
    'bai-binh-luan': {
        'name': 'Bài bình luận',
        'wordCount': '600-1000 từ',
        'structure': 'Position statement + Arguments + Counter-arguments + Conclusion',
        'characteristics': 'Quan điểm rõ ràng, lập luận chặt chẽ, phản biện',
    },
    'bao-cao-chuyen-sau': {
        'name': 'Báo cáo chuyên sâu',
        'wordCount': '1200+ từ',
        'structure': 'Executive summary + Detailed analysis + Data/Statistics + Recommendations',
        'characteristics': 'Dữ liệu chi tiết, phân tích chuyên sâu, khuyến nghị',
    },
}
DEFAULT_ARTICLE_TYPE = 'tin-van'

TONE_GUIDES = {
    'objective': 'Khách quan, trung tính, không thiên vị, dựa trên sự thật',
    'engaging': 'Hấp dẫn, thu hút, sử dụng hook, storytelling elements',
    'formal': 'Trang trọng, chính thức, ngôn ngữ học thuật, chuyên nghiệp',
    'casual': 'Gần gũi, dễ hiểu, ngôn ngữ đơn giản, thân thiện',
}
DEFAULT_TONE = 'objective'

AUDIENCE_GUIDES = {
    'general': 'Độc giả đại chúng, ngôn ngữ phổ thông, dễ hiểu',
    'business': 'Cộng đồng doanh nghiệp, thuật ngữ kinh doanh, phân tích thị trường',
    'tech': 'Cộng đồng công nghệ, thuật ngữ kỹ thuật, xu hướng technology',
    'youth': 'Giới trẻ, sinh viên, ngôn ngữ trẻ trung, xu hướng mới',
    'professional': 'Chuyên gia, chuyên ngành, thuật ngữ chuyên môn, phân tích sâu',
}
DEFAULT_AUDIENCE = 'general'


TOPIC_OUTLINE_FORMAT = """
ĐỊNH DẠNG OUTPUT - SƯỜN BÀI:
# Tiêu đề bài viết
## I. Mở bài (Lead)
- Điểm nổi bật
- Hook để thu hút người đọc

## II. Thân bài
### 2.1 Điểm chính 1
- Chi tiết hỗ trợ
- Dẫn chứng/ví dụ

### 2.2 Điểm chính 2
- Chi tiết hỗ trợ
- Dẫn chứng/ví dụ

### 2.3 Điểm chính 3 (nếu cần)
- Chi tiết hỗ trợ
- Dẫn chứng/ví dụ

## III. Kết bài
- Tóm tắt điểm chính
- Kết luận/triển vọng
- Call-to-action (nếu cần)

## IV. Gợi ý bổ sung
- Nguồn tin cần kiểm chứng
- Ảnh/infographic đề xuất
- Keywords SEO
"""

TOPIC_COMPLETE_FORMAT = """
ĐỊNH DẠNG OUTPUT - BÀI HOÀN CHỈNH:
Viết bài báo hoàn chỉnh với:
- Tiêu đề hấp dẫn
- Lead paragraph mạnh mẽ
- Thân bài có cấu trúc logic
- Kết bài tóm tắt và kết luận
- Ngôn ngữ báo chí chuyên nghiệp
"""

TOPIC_BOTH_FORMAT = """
ĐỊNH DẠNG OUTPUT - CẢ HAI:
{
  "outline": "Sườn bài như định dạng trên",
  "article": "Bài báo hoàn chỉnh như định dạng trên"
}
"""

HOT_OUTLINE_FORMAT = """
ĐỊNH DẠNG OUTPUT - SƯỜN BÀI HOT:
# Tiêu đề câu view (trending-friendly)
## I. Hook Opening
- Điểm nóng hiện tại
- Con số/sự kiện gây chú ý
- Kết nối với trending topic

## II. Phân tích chủ đề HOT
### 2.1 Tại sao trending?
- Nguyên nhân hot
- Tác động xã hội

### 2.2 Góc nhìn độc đáo
- Phân tích sâu
- So sánh/đối chiếu

### 2.3 Ý nghĩa rộng hơn
- Xu hướng dài hạn
- Tác động tương lai

## III. Kết luận viral
- Takeaway message mạnh
- Call-to-action/discussion trigger

## IV. Elements cho viral
- Hashtags đề xuất
- Visual content ideas
- Social sharing angles
"""

HOT_COMPLETE_FORMAT = """
ĐỊNH DẠNG OUTPUT - BÀI HOT HOÀN CHỈNH:
Viết bài báo trending với:
- Tiêu đề câu view, SEO-friendly
- Opening hook cực mạnh
- Nội dung phân tích sâu sắc
- Góc độ độc đáo, fresh insight
- Kết bài memorable, shareable
- Ngôn ngữ phù hợp với trend
"""

HOT_BOTH_FORMAT = """
ĐỊNH DẠNG OUTPUT - CẢ HAI:
{
  "outline": "Sườn bài HOT như định dạng trên",
  "article": "Bài HOT hoàn chỉnh như định dạng trên"
}
"""


def get_article_guide(article_type: str) -> dict:
    """Look up an article type, falling back to 'tin-van'."""
    return ARTICLE_GUIDES.get(article_type) or ARTICLE_GUIDES[DEFAULT_ARTICLE_TYPE]


def get_tone_guide(tone: str) -> str:
    return TONE_GUIDES.get(tone) or TONE_GUIDES[DEFAULT_TONE]


def get_audience_guide(audience: str) -> str:
    return AUDIENCE_GUIDES.get(audience) or AUDIENCE_GUIDES[DEFAULT_AUDIENCE]


def _pick(output_type: str, outline, complete, both):
    if output_type == 'outline':
        return outline
    if output_type == 'complete':
        return complete
    return both


def _task_line(output_type: str) -> str:
    return _pick(output_type, 'Tạo sườn bài chi tiết', 'Viết bài hoàn chỉnh',
                 'Tạo cả sườn và bài hoàn chỉnh')


def build_topic_prompts(topic, context, article_guide, tone_guide, audience_guide, output_type):
    """Prompts for writing from a topic. Returns (system_prompt, user_prompt)."""
    output_format = _pick(output_type, TOPIC_OUTLINE_FORMAT, TOPIC_COMPLETE_FORMAT, TOPIC_BOTH_FORMAT)

    system_prompt = f"""Bạn là một nhà báo chuyên nghiệp với 10+ năm kinh nghiệm viết báo tại Việt Nam.

NHIỆM VỤ: Viết {article_guide['name']} ({article_guide['wordCount']}) về chủ đề được cung cấp.

CẤU TRÚC BÀI: {article_guide['structure']}
ĐẶC ĐIỂM: {article_guide['characteristics']}
PHONG CÁCH: {tone_guide}
ĐỐI TƯỢNG: {audience_guide}
{output_format}
QUAN TRỌNG:
- Tuân thủ đạo đức báo chí Việt Nam
- Thông tin chính xác, có thể kiểm chứng
- Ngôn ngữ tiếng Việt chuẩn mực
- Cấu trúc rõ ràng, logic
- Phù hợp với {article_guide['wordCount']}"""

    deliverable = _pick(output_type, 'sườn bài báo', 'bài báo hoàn chỉnh', 'cả sườn và bài hoàn chỉnh')
    context_line = f'Bối cảnh/Góc độ: {context}' if context else ''
    user_prompt = f"""Chủ đề: {topic}

{context_line}

Hãy viết {deliverable} theo yêu cầu trên."""

    return system_prompt, user_prompt


def build_hot_topic_prompts(hot_topic, context, article_guide, tone_guide, audience_guide, output_type):
    """Prompts for writing about a trending topic."""
    output_format = _pick(output_type, HOT_OUTLINE_FORMAT, HOT_COMPLETE_FORMAT, HOT_BOTH_FORMAT)

    system_prompt = f"""Bạn là một nhà báo chuyên nghiệp với 10+ năm kinh nghiệm viết báo tại Việt Nam, đặc biệt giỏi về các chủ đề HOT và TRENDING.

NHIỆM VỤ: Viết {article_guide['name']} ({article_guide['wordCount']}) về chủ đề HOT đang trending.

ƯU ĐIỂM CỦA BẠN:
- Nắm bắt xu hướng xã hội nhạy bén
- Hiểu tâm lý người đọc Việt Nam
- Viết hấp dẫn, viral-worthy content
- Kết hợp thông tin và góc độ mới lạ

CẤU TRÚC BÀI: {article_guide['structure']}
ĐẶC ĐIỂM: {article_guide['characteristics']}
PHONG CÁCH: {tone_guide}
ĐỐI TƯỢNG: {audience_guide}

CHIẾN LƯỢC VIẾT CHỦ ĐỀ HOT:
- Hook mạnh mẽ ngay từ đầu bài
- Kết nối với trending context hiện tại
- Đưa ra góc nhìn độc đáo, fresh perspective
- Sử dụng data/số liệu nếu có thể
- Tạo điểm nhấn thu hút social sharing
{output_format}
QUAN TRỌNG:
- Tuân thủ đạo đức báo chí Việt Nam
- Thông tin chính xác, có thể kiểm chứng
- Tránh clickbait thái quá
- Tạo giá trị thật cho người đọc
- Phù hợp với {article_guide['wordCount']}
- Tối ưu cho social media sharing"""

    deliverable = _pick(output_type, 'sườn bài báo HOT', 'bài báo HOT hoàn chỉnh', 'cả sườn và bài HOT hoàn chỉnh')
    context_line = f'BỐI CẢNH TRENDING: {context}' if context else ''
    user_prompt = f"""CHỦ ĐỀ HOT: {hot_topic}

{context_line}

Hãy viết {deliverable} theo yêu cầu trên.

Đặc biệt chú ý:
- Khai thác tối đa tính HOT/trending của chủ đề
- Tạo content có khả năng viral cao
- Kết nối với bối cảnh xã hội Việt Nam hiện tại
- Đưa ra góc nhìn mới, không trùng lặp với các bài đã có"""

    return system_prompt, user_prompt


def build_articles_prompts(articles, article_guide, tone_guide, audience_guide, output_type):
    """Prompts for synthesising a new article from source articles."""
    system_prompt = f"""Bạn là một editor chuyên nghiệp, chuyên viết lại và tổng hợp nhiều bài báo thành bài mới.

NHIỆM VỤ: Từ các bài báo nguồn, tạo ra {article_guide['name']} ({article_guide['wordCount']}) mới.

YÊU CẦU QUAN TRỌNG:
- KHÔNG copy nguyên văn từ bài gốc
- Tổng hợp, phân tích và viết lại bằng ngôn ngữ mới
- Tạo góc nhìn mới, giá trị gia tăng
- Trích dẫn nguồn khi cần thiết
- Tránh plagiarism hoàn toàn

CẤU TRÚC: {article_guide['structure']}
ĐẶC ĐIỂM: {article_guide['characteristics']}
PHONG CÁCH: {tone_guide}
ĐỐI TƯỢNG: {audience_guide}

{_task_line(output_type)}"""

    user_prompt = f"""CÁC BÀI NGUỒN:
{articles}

Hãy phân tích, tổng hợp và tạo ra bài báo mới từ các nguồn trên. Đảm bảo:
1. Không copy nguyên văn
2. Tạo giá trị mới, góc nhìn mới
3. Cấu trúc logic, mạch lạc
4. Phù hợp {article_guide['wordCount']}"""

    return system_prompt, user_prompt


def build_word_prompts(word_content, article_guide, tone_guide, audience_guide, output_type):
    """Prompts for turning Word document content into an article."""
    system_prompt = f"""Bạn là một editor chuyên nghiệp, chuyên biến các tài liệu thành bài báo.

NHIỆM VỤ: Từ nội dung file Word, viết thành {article_guide['name']} ({article_guide['wordCount']}) chuyên nghiệp.

YÊU CẦU:
- Phân tích và tái cấu trúc nội dung
- Viết theo chuẩn báo chí Việt Nam
- Tạo tiêu đề hấp dẫn
- Bổ sung context và background nếu cần
- Đảm bảo tính chính xác thông tin

CẤU TRÚC: {article_guide['structure']}
ĐẶC ĐIỂM: {article_guide['characteristics']}
PHONG CÁCH: {tone_guide}
ĐỐI TƯỢNG: {audience_guide}

{_task_line(output_type)}"""

    user_prompt = f"""NỘI DUNG FILE WORD:
{word_content}

Hãy biến đổi thành bài báo chuyên nghiệp với:
1. Cấu trúc báo chí chuẩn
2. Ngôn ngữ phù hợp đối tượng
3. Thông tin chính xác, đầy đủ
4. Độ dài {article_guide['wordCount']}"""

    return system_prompt, user_prompt


def build_prompts(input_method, input_content, input_context, article_type,
                  output_type, writing_tone, target_audience):
    """
    Build (system_prompt, user_prompt) for an input method.

    Returns None for an unknown input method.
    """
    article_guide = get_article_guide(article_type)
    tone_guide = get_tone_guide(writing_tone)
    audience_guide = get_audience_guide(target_audience)

    if input_method == 'topic':
        return build_topic_prompts(input_content, input_context, article_guide,
                                   tone_guide, audience_guide, output_type)
    if input_method == 'hottopics':
        return build_hot_topic_prompts(input_content, input_context, article_guide,
                                       tone_guide, audience_guide, output_type)
    if input_method == 'articles':
        return build_articles_prompts(input_content, article_guide, tone_guide,
                                      audience_guide, output_type)
    if input_method == 'word':
        return build_word_prompts(input_content, article_guide, tone_guide,
                                  audience_guide, output_type)
    return None


def parse_writing_result(content: str, output_type: str) -> dict:
    """Split a 'both' reply into outline/article; anything else is plain content."""
    if output_type == 'both':
        try:
            parsed = json.loads(content)
            if isinstance(parsed, dict):
                return {'outline': parsed.get('outline'), 'article': parsed.get('article')}
        except ValueError:
            print("Could not parse 'both' reply as JSON, returning raw content")
    return {'content': content}


def generate_article(system_prompt: str, user_prompt: str, output_type: str) -> dict:
    content = chat_completion(
        OPENAI_API_KEY,
        build_messages(user_prompt, system_prompt),
        model=MODEL,
        temperature=0.7,
        max_tokens=4000 if output_type == 'both' else 2500,
        top_p=0.9,
        frequency_penalty=0.1,
        presence_penalty=0.1,
    )
    return parse_writing_result(content, output_type)


@functions_framework.http
def ai_write(request):
    """
    Main Cloud Function entry point.

    Expected JSON input:
    {
        "inputMethod": "topic",
        "inputContent": "Giá vàng tăng mạnh",
        "inputContext": "Góc nhìn nhà đầu tư cá nhân",
        "articleType": "tin-van",
        "outputType": "complete",
        "writingTone": "objective",
        "targetAudience": "general"
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
        input_method = body.get('inputMethod')
        input_content = body.get('inputContent')
        output_type = body.get('outputType')

        if not input_content:
            return error_response('Input content is required', 400)

        print(f"AI Writing: {input_method} -> {body.get('articleType')} ({output_type})")

        prompts = build_prompts(
            input_method,
            input_content,
            body.get('inputContext'),
            body.get('articleType'),
            output_type,
            body.get('writingTone'),
            body.get('targetAudience'),
        )
        if prompts is None:
            return error_response('Invalid input method', 400)

        system_prompt, user_prompt = prompts
        return json_response(generate_article(system_prompt, user_prompt, output_type))

    except Exception as e:
        print(f"AI Writing error: {e}")
        return error_response('Internal server error', 500, details=str(e))
