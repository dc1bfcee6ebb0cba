"""
Article content extraction for Vietnamese news sites.

Extraction is a waterfall of strategies, each tried only while the content
found so far is shorter than the requested minimum:

1. Readability over the fetched HTML
2. Headless browser render + site selector tables
3. Static selector tables + generic paragraph scraping over the fetched HTML

Category pages are handled separately by ``extract_category_links``.
"""

import re
from typing import Callable, List, Optional, Sequence, Tuple
from urllib.parse import urljoin, urlparse

import requests
from bs4 import BeautifulSoup
from readability import Document

from .browser import render_page

USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
REQUEST_HEADERS = {
    'User-Agent': USER_AGENT,
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
    'Accept-Language': 'vi-VN,vi;q=0.9,en;q=0.8',
}

MIN_CONTENT_LENGTH = 200
MIN_SITE_PARAGRAPH_LENGTH = 20
MIN_GENERIC_PARAGRAPH_LENGTH = 30
MIN_GENERIC_PARAGRAPHS = 3

# Per-site selectors, tried in order. Content selectors name the container
# whose <p> children hold the article body.
SITE_SELECTORS = {
    'vnexpress': {
        'title': ['h1.title-detail', '.title-detail h1', 'h1.title_news_detail', '.container h1', 'h1'],
        'content': ['.fck_detail', '.sidebar_1 .fck_detail', '.Normal', 'article .fck_detail', '.content_detail .Normal'],
    },
    'vietnamnet': {
        'title': ['.ArticleTitle', '.detail-title h1', '.maincontent h1', '.content-detail h1', 'h1.title', 'h1'],
        'content': ['.ArticleContent', '.maincontent .ArticleContent', '.detail-content-body', '.content-article-detail', '.article-content'],
    },
    'vneconomy': {
        'title': ['h1.detail-title', '.article-title h1', '.detail-content h1', 'h1'],
        'content': ['.detail-content-body', '.article-content', '.detail-content .content-body', '.post-content'],
    },
    'thanhnien': {
        'title': ['.detail-title h1', '.article-title', 'h1.title', 'h1'],
        'content': ['.detail-cmain', '.article-body', '.content-detail', '.post-content'],
    },
    'tuoitre': {
        'title': ['.article-title h1', '.detail-title', 'h1.title', 'h1'],
        'content': ['.detail-content article', '.article-content', '.content-article', '.post-content'],
    },
    'dantri': {
        'title': ['h1.title-page-detail', '.detail-title h1', 'h1.dt-text-title', '.article-title h1', 'h1'],
        'content': ['.singular-content', '.detail-content', '.article-content', '.dt-text-content', '.content-body'],
    },
}

GENERIC_PARAGRAPH_SELECTORS = [
    'article p',
    '.article p',
    '.content p',
    '.post p',
    '.detail p',
    'main p',
    '.container p',
]

BOILERPLATE_MARKERS = ['©', 'Copyright', 'Tags:', 'Từ khóa:', 'Chia sẻ:', 'Share:']
DATE_PREFIX = re.compile(r'^\d+/\d+/\d+')

CATEGORY_LINK_SELECTORS = {
    'dantri.com': [
        '.article-item a[href]', '.news-item a[href]', '.article-title a[href]',
        '.article h3 a[href]', '.story-item a[href]', 'h3.article-title a',
        'h2.article-title a', '.list-news-item a', '.news-list-item a',
        'article h3 a', 'article h2 a', '.content-news a[href*="/"]',
    ],
    'vietnamnet.vn': [
        '.verticalPost a[href]', '.horizontalPost a[href]', '.story-box a[href]',
        '.news-item a[href]', '.article-title a[href]', 'h3 a[href*="vietnamnet"]',
        'h2 a[href*="vietnamnet"]', '.post-title a', '.article-box a', '.story-item a',
    ],
    'vnexpress.net': [
        '.story a[href*="/"]', '.story-item a[href*="/"]', '.item-news a[href*="/"]',
        'h3.title-news a', 'h2.title-news a', 'article.item-news a',
    ],
    'tuoitre.vn': [
        '.list-news-content a[href]', '.news-item a[href]', 'h3 a[href*="tuoitre"]',
        'h2 a[href*="tuoitre"]', '.article-title a',
    ],
}

GENERIC_CATEGORY_LINK_SELECTORS = [
    'article a[href*="/"]', '.story a[href*="/"]', '.story-item a[href*="/"]',
    '.article-item a[href*="/"]', '.news-item a[href*="/"]', '.story-title a',
    '.title-news a', 'h3 a[href*="/"]', 'h2 a[href*="/"]', '.item-news a', '.story a',
]

NAVIGATION_SKIP_PATTERNS = [
    'Đăng nhập', 'Đăng ký', 'Trang chủ', 'Liên hệ', 'Giới thiệu',
    'Thể thao', 'Kinh doanh', 'Góc nhìn', 'Video', 'Podcast',
    'Facebook', 'Twitter', 'Youtube', 'Zalo', 'RSS',
]

BLOCKING_SELECTORS = [
    '.captcha', '[id*="captcha"]', '[class*="captcha"]',
    '.blocked', '[id*="blocked"]', '[class*="blocked"]',
    '.access-denied', '[id*="access"]',
]

ARTICLE_ID_PATTERN = re.compile(r'/\d+')


# ============================================================================
# Fetching
# ============================================================================

def hostname_of(url: str) -> str:
    return (urlparse(url).hostname or '').lower()


def fetch_html(url: str, timeout: int = 30) -> Tuple[Optional[str], Optional[str]]:
    """Fetch a page. Returns (html, error)."""
    try:
        response = requests.get(url, headers=REQUEST_HEADERS, timeout=timeout, allow_redirects=True)
        response.raise_for_status()
        return response.text, None
    except requests.exceptions.Timeout:
        return None, 'Request timed out'
    except requests.exceptions.HTTPError as e:
        return None, f'HTTP error: {e.response.status_code}'
    except requests.exceptions.RequestException as e:
        return None, f'Request failed: {str(e)}'


# ============================================================================
# Selector-based extraction
# ============================================================================

def site_key(hostname: str) -> Optional[str]:
    """Return the SITE_SELECTORS key matching ``hostname``, if any."""
    for key in SITE_SELECTORS:
        if key in hostname:
            return key
    return None


def is_boilerplate(text: str) -> bool:
    """True for paragraphs that are footer, tag, share or dateline noise."""
    if len(text) < MIN_GENERIC_PARAGRAPH_LENGTH:
        return True
    if any(marker in text for marker in BOILERPLATE_MARKERS):
        return True
    return bool(DATE_PREFIX.match(text))


def _first_text(soup: BeautifulSoup, selectors: Sequence[str]) -> str:
    for selector in selectors:
        element = soup.select_one(selector)
        if element:
            text = element.get_text(strip=True)
            if text:
                return text
    return ''


def extract_site_content(soup: BeautifulSoup, hostname: str) -> Tuple[str, str]:
    """Apply the site's selector table. Returns (title, content)."""
    key = site_key(hostname)
    if not key:
        return '', ''

    selectors = SITE_SELECTORS[key]
    title = _first_text(soup, selectors['title'])

    content = ''
    for selector in selectors['content']:
        container = soup.select_one(selector)
        if not container:
            continue
        paragraphs = [p.get_text(strip=True) for p in container.find_all('p')]
        paragraphs = [text for text in paragraphs if len(text) > MIN_SITE_PARAGRAPH_LENGTH]
        if paragraphs:
            content = '\n\n'.join(paragraphs)
            break

    return title, content


def extract_generic_paragraphs(soup: BeautifulSoup) -> str:
    """Scrape paragraphs from common article containers, skipping boilerplate."""
    for selector in GENERIC_PARAGRAPH_SELECTORS:
        paragraphs = [p.get_text(strip=True) for p in soup.select(selector)]
        paragraphs = [text for text in paragraphs if not is_boilerplate(text)]
        if len(paragraphs) >= MIN_GENERIC_PARAGRAPHS:
            return '\n\n'.join(paragraphs)
    return ''


def extract_generic_title(soup: BeautifulSoup) -> str:
    for tag in ('h1', 'title'):
        element = soup.find(tag)
        if element:
            text = element.get_text(strip=True)
            if text:
                return text
    return ''


def extract_from_html(html: str, url: str) -> dict:
    """Site selectors first, then generic paragraphs and title."""
    if not html:
        return {'title': '', 'content': ''}

    soup = BeautifulSoup(html, 'html.parser')
    title, content = extract_site_content(soup, hostname_of(url))

    if not content:
        content = extract_generic_paragraphs(soup)
    if not title:
        title = extract_generic_title(soup)

    return {'title': title, 'content': content}


# ============================================================================
# Waterfall strategies
# ============================================================================

def extract_with_readability(url: str, html: Optional[str]) -> dict:
    """Mozilla Readability port over already-fetched HTML."""
    if not html:
        return {'title': '', 'content': ''}

    document = Document(html, url=url)
    summary_html = document.summary(html_partial=True)
    text = BeautifulSoup(summary_html, 'html.parser').get_text('\n', strip=True)
    text = re.sub(r'\n{3,}', '\n\n', text)
    return {'title': document.short_title() or '', 'content': text.strip()}


def extract_with_browser(url: str, html: Optional[str]) -> dict:
    """Render with a headless browser and apply the selector tables."""
    rendered = render_page(url)
    return extract_from_html(rendered, url)


def extract_with_selectors(url: str, html: Optional[str]) -> dict:
    """Selector tables over the statically fetched HTML."""
    return extract_from_html(html, url)


Strategy = Tuple[str, Callable[[str, Optional[str]], dict]]

DEFAULT_STRATEGIES: List[Strategy] = [
    ('readability', extract_with_readability),
    ('browser', extract_with_browser),
    ('selectors', extract_with_selectors),
]


def extract_article(url: str, min_length: int = MIN_CONTENT_LENGTH,
                    strategies: Sequence[Strategy] = None,
                    fetch: Callable[[str], Tuple[Optional[str], Optional[str]]] = None) -> dict:
    """
    Extract an article's title and body text.

    Args:
        url: Article URL
        min_length: Content length that stops the waterfall
        strategies: (name, callable) pairs, defaults to DEFAULT_STRATEGIES
        fetch: HTML fetcher returning (html, error), defaults to fetch_html

    Returns:
        {'title', 'content', 'method', 'url'}. ``method`` is the stage that
        produced the content, or None when nothing was found.
    """
    if strategies is None:
        strategies = DEFAULT_STRATEGIES
    if fetch is None:
        fetch = fetch_html

    html, fetch_error = fetch(url)
    if fetch_error:
        print(f"Static fetch failed for {url}: {fetch_error}")

    title = ''
    best_content = ''
    best_method = None

    for name, strategy in strategies:
        if len(best_content) >= min_length:
            break
        print(f"Trying {name} extraction for: {url}")
        try:
            result = strategy(url, html)
        except Exception as e:
            print(f"{name} extraction failed: {e}")
            continue

        content = (result.get('content') or '').strip()
        title = title or (result.get('title') or '').strip()
        print(f"{name} extraction: title={len(title)} chars, content={len(content)} chars")

        if len(content) > len(best_content):
            best_content = content
            best_method = name

    return {'title': title, 'content': best_content, 'method': best_method, 'url': url}


# ============================================================================
# Category pages
# ============================================================================

def looks_like_article_url(url: str) -> bool:
    return ('.htm' in url or 'post-' in url or bool(ARTICLE_ID_PATTERN.search(urlparse(url).path)))


def is_navigation_link(title: str) -> bool:
    lowered = title.lower()
    return any(pattern.lower() in lowered for pattern in NAVIGATION_SKIP_PATTERNS)


def category_selectors_for(url: str) -> List[str]:
    for domain, selectors in CATEGORY_LINK_SELECTORS.items():
        if domain in url:
            return selectors
    return GENERIC_CATEGORY_LINK_SELECTORS


def detect_blocking(soup: BeautifulSoup) -> bool:
    """True if the page shows captcha or access-denied markers."""
    return any(soup.select_one(selector) is not None for selector in BLOCKING_SELECTORS)


def extract_category_links(html: str, page_url: str, max_articles: int = 10) -> List[dict]:
    """
    Collect article links from a category page.

    Returns a list of {'title', 'url', 'description'} dicts, deduplicated by
    URL, at most ``max_articles`` long.
    """
    if not html:
        return []

    soup = BeautifulSoup(html, 'html.parser')
    if detect_blocking(soup):
        print(f"Possible blocking mechanism detected on {page_url}")

    articles = []
    seen = set()

    def add(title: str, href: str) -> None:
        full_url = urljoin(page_url, href)
        parsed = urlparse(full_url)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            return
        if full_url in seen:
            return
        seen.add(full_url)
        articles.append({'title': title, 'url': full_url, 'description': title})

    selectors = category_selectors_for(page_url)
    for selector in selectors:
        for link in soup.select(selector):
            title = link.get_text(strip=True)
            href = link.get('href')
            if not title or not href or not (15 < len(title) < 200):
                continue
            if is_navigation_link(title):
                continue
            if looks_like_article_url(urljoin(page_url, href)):
                add(title, href)

    if not articles:
        print("No articles found with specific selectors, trying fallback...")
        for link in soup.find_all('a', href=True):
            title = link.get_text(strip=True)
            href = link['href']
            if not title or not (20 < len(title) < 150):
                continue
            if '#' in href or href.startswith('javascript:'):
                continue
            full_url = urljoin(page_url, href)
            if looks_like_article_url(full_url) or 'bai-viet' in full_url:
                add(title, href)

    print(f"Found {len(articles)} article links using {len(selectors)} selectors")
    return articles[:max_articles]


def fetch_category_page(url: str) -> Optional[str]:
    """Render a category page in the browser, falling back to a plain fetch."""
    try:
        return render_page(url)
    except Exception as e:
        print(f"Browser render failed for {url}, falling back to static fetch: {e}")

    html, error = fetch_html(url)
    if error:
        print(f"Static fetch failed for {url}: {error}")
    return html
