"""
Unit tests for content-summary helpers.
"""

import pytest
from datetime import datetime, timezone


class TestSettingsLookups:
    """Tests for the length/focus/style tables."""

    @pytest.mark.parametrize("length,tokens", [
        ('brief', 200),
        ('short', 400),
        ('medium', 600),
        ('long', 1000),
        ('detailed', 1200),
        ('unknown', 600),
    ])
    def test_max_tokens(self, content_summary_module, length, tokens):
        assert content_summary_module.get_max_tokens(length) == tokens

    def test_length_guide_default(self, content_summary_module):
        assert content_summary_module.get_length_guide('huge') == '300-400 từ'

    def test_focus_guide_default(self, content_summary_module):
        assert content_summary_module.get_focus_guide(None) == content_summary_module.FOCUS_GUIDES['general']

    def test_style_guide(self, content_summary_module):
        assert 'bullet' in content_summary_module.get_style_guide('bullet')


class TestCacheKey:
    """Tests for build_cache_key()"""

    def test_settings_order_does_not_matter(self, content_summary_module):
        a = content_summary_module.build_cache_key('https://x.vn', {'length': 'short', 'focus': 'general'})
        b = content_summary_module.build_cache_key('https://x.vn', {'focus': 'general', 'length': 'short'})
        assert a == b

    def test_different_settings_differ(self, content_summary_module):
        a = content_summary_module.build_cache_key('https://x.vn', {'length': 'short'})
        b = content_summary_module.build_cache_key('https://x.vn', {'length': 'long'})
        assert a != b


class TestHeadlines:
    """Tests for headline records and read time."""

    def test_read_time_minimum_one_minute(self, content_summary_module):
        assert content_summary_module.estimate_read_time('vài chữ') == '1 phút đọc'

    def test_read_time_scales(self, content_summary_module):
        assert content_summary_module.estimate_read_time(' '.join(['từ'] * 600)) == '3 phút đọc'

    def test_build_headlines(self, content_summary_module):
        now = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        articles = [{'title': 'Tin một', 'url': 'https://x.vn/1', 'description': 'Tin một'}]
        headlines = content_summary_module.build_headlines(articles, now)
        assert headlines == [{
            'title': 'Tin một',
            'url': 'https://x.vn/1',
            'timestamp': now.isoformat(),
            'readTime': '1 phút đọc',
        }]

    def test_combine_articles(self, content_summary_module):
        combined = content_summary_module.combine_articles([
            {'title': 'A', 'description': 'mô tả A'},
            {'title': 'B', 'description': 'mô tả B'},
        ])
        assert combined == '**A**\nmô tả A\n\n---\n\n**B**\nmô tả B\n'


class TestPrompts:
    """Tests for summary prompt building."""

    def test_category_prompt(self, content_summary_module):
        system_prompt, user_prompt = content_summary_module.build_category_prompts(
            'nội dung', 'long', 'analysis', 7, 'https://vnexpress.net/kinh-doanh'
        )
        assert '7 bài báo' in system_prompt
        assert '600-800 từ (chi tiết)' in system_prompt
        assert 'Phân tích sâu' in system_prompt
        assert 'Nguồn: https://vnexpress.net/kinh-doanh' in user_prompt

    def test_article_prompt_bullet_template(self, content_summary_module):
        system_prompt, user_prompt = content_summary_module.build_article_prompts(
            'nội dung bài', 'Tiêu đề', 'brief', 'bullet'
        )
        assert '**Điểm chính 1**' in system_prompt
        assert 'Chỉ nêu những điểm cực kỳ quan trọng' in system_prompt
        assert '**Tiêu đề**: Tiêu đề' in user_prompt

    def test_article_prompt_defaults_to_paragraph(self, content_summary_module):
        system_prompt, _ = content_summary_module.build_article_prompts('x', 'y', 'short', 'poem')
        assert 'đoạn văn liền mạch' in system_prompt
        assert 'Bao gồm đầy đủ thông tin quan trọng' in system_prompt


class TestFallbackDigest:
    """Tests for build_fallback_digest()"""

    def _headlines(self, titles):
        return [{'title': t, 'url': f'https://x.vn/{i}', 'timestamp': '', 'readTime': ''}
                for i, t in enumerate(titles)]

    def test_digest_structure(self, content_summary_module):
        headlines = self._headlines([
            'Tăng trưởng kinh tế quý ba vượt kỳ vọng',
            'Đội tuyển bóng đá giành chiến thắng',
            'Giáo dục đại học thay đổi cách tuyển sinh',
        ])
        now = datetime(2025, 1, 1, 1, 30, tzinfo=timezone.utc)
        digest = content_summary_module.build_fallback_digest(headlines, now)

        assert digest.startswith('📰 ĐIỂM TIN NHANH (3 tin)')
        assert '• Tăng trưởng kinh tế quý ba vượt kỳ vọng' in digest
        assert '📊 CÁC TIN QUAN TRỌNG KHÁC:' in digest
        assert 'Kinh tế' in digest
        # Vietnam time is UTC+7
        assert '08:30 01/01/2025' in digest

    def test_two_headlines_have_no_secondary_section(self, content_summary_module):
        digest = content_summary_module.build_fallback_digest(self._headlines(['Tin A dài', 'Tin B dài']))
        assert 'CÁC TIN QUAN TRỌNG KHÁC' not in digest

    def test_classify_headline(self, content_summary_module):
        assert content_summary_module.classify_headline('Thể thao hôm nay') == 'Thể thao'
        assert content_summary_module.classify_headline('Thời tiết') == 'Tổng hợp'


class TestParseMaxArticles:
    """Tests for parse_max_articles()"""

    @pytest.mark.parametrize("value,expected", [(1, 1), (10, 10), ('3', 3)])
    def test_valid(self, content_summary_module, value, expected):
        assert content_summary_module.parse_max_articles(value) == expected

    @pytest.mark.parametrize("value", ['abc', 0, -3, None, True, {}])
    def test_invalid(self, content_summary_module, value):
        assert content_summary_module.parse_max_articles(value) is None
