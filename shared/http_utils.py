"""
HTTP helpers shared by the newsroom Cloud Functions.

Every function answers with a ``(body, status, headers)`` tuple, the shape
``functions_framework`` accepts directly.
"""

import json
from typing import Optional, Tuple

CORS_HEADERS = {'Access-Control-Allow-Origin': '*'}

PREFLIGHT_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, POST, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type',
    'Access-Control-Max-Age': '3600',
}

TIMEOUT_MARKERS = ('timeout', 'timed out')

INVALID_BODY = 'Request body must be a JSON object'


def preflight_response() -> Tuple[str, int, dict]:
    """Answer a CORS preflight request."""
    return ('', 204, PREFLIGHT_HEADERS)


def json_response(data: dict, status: int = 200) -> Tuple[str, int, dict]:
    """Serialize ``data`` as a JSON response with CORS headers."""
    return (json.dumps(data, ensure_ascii=False), status, dict(CORS_HEADERS))


def error_response(message: str, status: int = 400, **extra) -> Tuple[str, int, dict]:
    """Build ``{'error': message, ...}`` with the given status."""
    body = {'error': message}
    body.update(extra)
    return json_response(body, status)


def method_not_allowed() -> Tuple[str, int, dict]:
    return error_response('Method not allowed', 405)


def status_for_exception(exc: Exception, default: int = 500) -> int:
    """Map an exception to an HTTP status.

    Errors whose message mentions a timeout become 408, everything else gets
    ``default``.
    """
    message = str(exc).lower()
    if any(marker in message for marker in TIMEOUT_MARKERS):
        return 408
    return default


def get_json_body(request) -> Optional[dict]:
    """Read the request body as a JSON object.

    A missing or unparsable body reads as ``{}`` so the handler's required
    field checks report it. A JSON value that is not an object gives None.
    """
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        return None
    return body


def invalid_body_response(**extra) -> Tuple[str, int, dict]:
    return error_response(INVALID_BODY, 400, **extra)


def get_query_param(request, name: str, default: str = None) -> str:
    """Read a query string parameter from a Flask-like request."""
    args = getattr(request, 'args', None) or {}
    return args.get(name, default)
