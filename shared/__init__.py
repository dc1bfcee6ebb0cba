"""Shared utilities for the newsroom AI Cloud Functions."""

from .http_utils import (
    CORS_HEADERS,
    preflight_response,
    json_response,
    error_response,
    method_not_allowed,
    status_for_exception,
    get_json_body,
    invalid_body_response,
    get_query_param,
)

from .openai_client import (
    OpenAIError,
    build_messages,
    chat_completion,
)

from .ttl_cache import (
    CACHE_DURATION_SECONDS,
    TTLCache,
)

from .credentials import (
    load_google_credentials,
    build_service_account_credentials,
    describe_credential_sources,
)

from .audio_utils import (
    format_file_size,
    estimate_audio_duration,
    generate_demo_wav,
    to_data_url,
    strip_data_url,
)

from .extraction import (
    extract_article,
    extract_category_links,
    fetch_category_page,
    fetch_html,
)

__all__ = [
    # HTTP helpers
    'CORS_HEADERS',
    'preflight_response',
    'json_response',
    'error_response',
    'method_not_allowed',
    'status_for_exception',
    'get_json_body',
    'invalid_body_response',
    'get_query_param',
    # OpenAI
    'OpenAIError',
    'build_messages',
    'chat_completion',
    # Caching
    'CACHE_DURATION_SECONDS',
    'TTLCache',
    # Google credentials
    'load_google_credentials',
    'build_service_account_credentials',
    'describe_credential_sources',
    # Audio
    'format_file_size',
    'estimate_audio_duration',
    'generate_demo_wav',
    'to_data_url',
    'strip_data_url',
    # Content extraction
    'extract_article',
    'extract_category_links',
    'fetch_category_page',
    'fetch_html',
]
