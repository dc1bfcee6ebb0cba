"""
Google Cloud service account loading and error codes for the speech functions.

Some platforms cap the size of a single environment variable, so the key can
be supplied in several shapes. Sources are tried in this order:

1. Multi-part Base64: GOOGLE_CLOUD_KEY_PART1..N concatenated
2. Single Base64: GOOGLE_CLOUD_KEY_BASE64 / GOOGLE_CLOUD_KEY_JSON_BASE64
3. Raw JSON: GOOGLE_CLOUD_KEY_JSON and friends

A source that fails to decode, parse or validate is skipped.
"""

import base64
import binascii
import json
import os
from typing import Dict, List, Mapping, Optional, Tuple

from google.oauth2 import service_account

SCOPES = ['https://www.googleapis.com/auth/cloud-platform']

REQUIRED_FIELDS = ['type', 'project_id', 'private_key', 'client_email']

PART_PREFIX = 'GOOGLE_CLOUD_KEY_PART'
MAX_PARTS = 10

BASE64_KEYS = [
    'GOOGLE_CLOUD_KEY_BASE64',
    'GOOGLE_CLOUD_KEY_JSON_BASE64',
]

JSON_KEYS = [
    'GOOGLE_CLOUD_KEY_JSON',
    'GOOGLE_CLOUD_CREDENTIALS',
    'GCP_SERVICE_ACCOUNT_KEY',
    'GOOGLE_APPLICATION_CREDENTIALS',
]


def missing_fields(credentials: dict) -> List[str]:
    """Return the required service account fields that are absent or empty."""
    return [field for field in REQUIRED_FIELDS if not credentials.get(field)]


def _decode_base64_json(value: str) -> dict:
    decoded = base64.b64decode(value.strip(), validate=False).decode('utf-8')
    return json.loads(decoded)


def _validated(credentials, source: str) -> Optional[dict]:
    if not isinstance(credentials, dict):
        print(f"Credentials from {source} are not a JSON object")
        return None
    missing = missing_fields(credentials)
    if missing:
        print(f"Credentials from {source} missing required fields: {missing}")
        return None
    return credentials


def collect_parts(environ: Mapping[str, str]) -> List[str]:
    """Collect GOOGLE_CLOUD_KEY_PART1..N in order, stopping at the first gap."""
    parts = []
    for index in range(1, MAX_PARTS + 1):
        value = environ.get(f'{PART_PREFIX}{index}')
        if not value:
            break
        parts.append(value.strip())
    return parts


def load_multipart_credentials(environ: Mapping[str, str]) -> Optional[dict]:
    """Reassemble a Base64 key split across numbered environment variables."""
    parts = collect_parts(environ)
    if not parts:
        return None

    combined = ''.join(parts)
    print(f"Combined {len(parts)} credential parts into {len(combined)} chars")
    try:
        credentials = _decode_base64_json(combined)
    except (binascii.Error, UnicodeDecodeError, ValueError) as e:
        print(f"Multi-part credentials failed to decode: {e}")
        return None
    return _validated(credentials, f'{PART_PREFIX}1..{len(parts)}')


def load_single_credentials(environ: Mapping[str, str]) -> Tuple[Optional[dict], Optional[str]]:
    """Try the single-variable sources, Base64 first, then raw JSON."""
    for key in BASE64_KEYS:
        value = environ.get(key)
        if not value:
            continue
        try:
            credentials = _decode_base64_json(value)
        except (binascii.Error, UnicodeDecodeError, ValueError) as e:
            print(f"Failed to decode {key}: {e}")
            continue
        credentials = _validated(credentials, key)
        if credentials:
            return credentials, key

    for key in JSON_KEYS:
        value = environ.get(key)
        if not value:
            continue
        try:
            credentials = json.loads(value)
        except ValueError as e:
            print(f"Failed to parse {key}: {e}")
            continue
        credentials = _validated(credentials, key)
        if credentials:
            return credentials, key

    return None, None


def load_google_credentials(environ: Mapping[str, str] = None) -> Tuple[Optional[dict], Optional[str]]:
    """
    Load service account credentials from the environment.

    Args:
        environ: Mapping to read from (defaults to os.environ)

    Returns:
        Tuple of (credentials_dict, source_name), or (None, None)
    """
    if environ is None:
        environ = os.environ

    credentials = load_multipart_credentials(environ)
    if credentials:
        parts = len(collect_parts(environ))
        source = f'{PART_PREFIX}1..{parts}'
        print(f"Loaded credentials from {source} (project {credentials['project_id']})")
        return credentials, source

    credentials, source = load_single_credentials(environ)
    if credentials:
        print(f"Loaded credentials from {source} (project {credentials['project_id']})")
        return credentials, source

    print("No valid Google Cloud credentials found")
    return None, None


def build_service_account_credentials(credentials: dict):
    """Turn a credentials dict into google-auth service account credentials."""
    return service_account.Credentials.from_service_account_info(credentials, scopes=SCOPES)


def describe_credential_sources(environ: Mapping[str, str] = None) -> Dict[str, int]:
    """Report which credential variables are set, by name and length only."""
    if environ is None:
        environ = os.environ
    names = [f'{PART_PREFIX}{i}' for i in range(1, MAX_PARTS + 1)] + BASE64_KEYS + JSON_KEYS
    return {name: len(environ[name]) for name in names if environ.get(name)}


def google_error_code(exc) -> Optional[int]:
    """Numeric gRPC status of a google.api_core error (3 for INVALID_ARGUMENT).

    Falls back to the HTTP status when the error carries no gRPC status.
    """
    grpc_status = getattr(exc, 'grpc_status_code', None)
    if grpc_status is not None:
        return grpc_status.value[0]
    code = getattr(exc, 'code', None)
    return int(code) if code is not None else None
