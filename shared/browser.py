"""
Headless Chromium rendering via Playwright.

A browser is launched and closed for every call; serverless instances do not
keep it around between requests.
"""

from playwright.sync_api import sync_playwright

BROWSER_USER_AGENT = 'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
BROWSER_ARGS = [
    '--no-sandbox',
    '--disable-setuid-sandbox',
    '--disable-dev-shm-usage',
    '--disable-gpu',
    '--no-first-run',
    '--no-zygote',
    '--single-process',
    '--disable-extensions',
]
BLOCKED_RESOURCE_TYPES = {'image', 'stylesheet', 'font'}
NAVIGATION_TIMEOUT_MS = 30000
SETTLE_MS = 3000


def _block_heavy_resources(route):
    if route.request.resource_type in BLOCKED_RESOURCE_TYPES:
        route.abort()
    else:
        route.continue_()


def render_page(url: str, settle_ms: int = SETTLE_MS,
                timeout_ms: int = NAVIGATION_TIMEOUT_MS) -> str:
    """
    Load ``url`` in headless Chromium and return the rendered HTML.

    Images, stylesheets and fonts are not downloaded. Waits for
    DOMContentLoaded plus ``settle_ms`` for client-side rendering.
    """
    print(f"Launching headless browser for: {url}")
    with sync_playwright() as p:
        browser = p.chromium.launch(headless=True, args=BROWSER_ARGS)
        try:
            context = browser.new_context(
                user_agent=BROWSER_USER_AGENT,
                viewport={'width': 1366, 'height': 768},
                extra_http_headers={'Accept-Language': 'vi-VN,vi;q=0.9,en;q=0.8'},
            )
            page = context.new_page()
            page.route('**/*', _block_heavy_resources)
            page.goto(url, wait_until='domcontentloaded', timeout=timeout_ms)
            page.wait_for_timeout(settle_ms)
            html = page.content()
            print(f"Rendered {len(html)} chars of HTML")
            return html
        finally:
            browser.close()
