"""
Unit tests for Google Cloud credential loading.

The loader reads from a plain dict, so no real environment is touched.
"""

import base64
import json
import pytest
from types import SimpleNamespace
from unittest.mock import patch

from google.api_core import exceptions as google_exceptions

from shared import credentials as creds


def _b64(data: dict) -> str:
    return base64.b64encode(json.dumps(data).encode('utf-8')).decode('ascii')


def _split(value: str, parts: int) -> list:
    size = -(-len(value) // parts)
    return [value[i:i + size] for i in range(0, len(value), size)]


@pytest.fixture
def other_account(service_account_info):
    return dict(service_account_info, project_id='other-project')


class TestMissingFields:
    """Tests for missing_fields()"""

    def test_complete_key(self, service_account_info):
        assert creds.missing_fields(service_account_info) == []

    def test_missing_and_empty_fields(self, service_account_info):
        info = dict(service_account_info, private_key='')
        del info['client_email']
        assert creds.missing_fields(info) == ['private_key', 'client_email']


class TestCollectParts:
    """Tests for collect_parts()"""

    def test_parts_in_order(self):
        environ = {'GOOGLE_CLOUD_KEY_PART1': 'aa', 'GOOGLE_CLOUD_KEY_PART2': 'bb'}
        assert creds.collect_parts(environ) == ['aa', 'bb']

    def test_stops_at_first_gap(self):
        environ = {
            'GOOGLE_CLOUD_KEY_PART1': 'aa',
            'GOOGLE_CLOUD_KEY_PART2': 'bb',
            'GOOGLE_CLOUD_KEY_PART4': 'dd',
        }
        assert creds.collect_parts(environ) == ['aa', 'bb']

    def test_caps_at_ten_parts(self):
        environ = {f'GOOGLE_CLOUD_KEY_PART{i}': str(i) for i in range(1, 13)}
        assert len(creds.collect_parts(environ)) == 10

    def test_no_parts(self):
        assert creds.collect_parts({}) == []


class TestLoadGoogleCredentials:
    """Tests for load_google_credentials() source precedence and validation."""

    def test_nothing_configured(self):
        assert creds.load_google_credentials({}) == (None, None)

    def test_multipart_base64(self, service_account_info):
        chunks = _split(_b64(service_account_info), 3)
        environ = {f'GOOGLE_CLOUD_KEY_PART{i}': chunk for i, chunk in enumerate(chunks, start=1)}

        loaded, source = creds.load_google_credentials(environ)

        assert loaded == service_account_info
        assert source == 'GOOGLE_CLOUD_KEY_PART1..3'

    def test_single_base64(self, service_account_info):
        environ = {'GOOGLE_CLOUD_KEY_BASE64': _b64(service_account_info)}
        loaded, source = creds.load_google_credentials(environ)
        assert loaded == service_account_info
        assert source == 'GOOGLE_CLOUD_KEY_BASE64'

    def test_raw_json(self, service_account_info):
        environ = {'GOOGLE_CLOUD_KEY_JSON': json.dumps(service_account_info)}
        loaded, source = creds.load_google_credentials(environ)
        assert loaded == service_account_info
        assert source == 'GOOGLE_CLOUD_KEY_JSON'

    def test_multipart_preferred_over_single_sources(self, service_account_info, other_account):
        environ = {
            'GOOGLE_CLOUD_KEY_PART1': _b64(service_account_info),
            'GOOGLE_CLOUD_KEY_BASE64': _b64(other_account),
            'GOOGLE_CLOUD_KEY_JSON': json.dumps(other_account),
        }
        loaded, source = creds.load_google_credentials(environ)
        assert loaded['project_id'] == 'newsroom-test'
        assert source.startswith('GOOGLE_CLOUD_KEY_PART1')

    def test_base64_preferred_over_raw_json(self, service_account_info, other_account):
        environ = {
            'GOOGLE_CLOUD_KEY_JSON': json.dumps(other_account),
            'GOOGLE_CLOUD_KEY_BASE64': _b64(service_account_info),
        }
        loaded, source = creds.load_google_credentials(environ)
        assert loaded['project_id'] == 'newsroom-test'
        assert source == 'GOOGLE_CLOUD_KEY_BASE64'

    def test_broken_multipart_falls_through(self, service_account_info):
        environ = {
            'GOOGLE_CLOUD_KEY_PART1': '%%%not-base64%%%',
            'GOOGLE_CLOUD_KEY_JSON': json.dumps(service_account_info),
        }
        loaded, source = creds.load_google_credentials(environ)
        assert loaded == service_account_info
        assert source == 'GOOGLE_CLOUD_KEY_JSON'

    def test_invalid_json_skipped(self, service_account_info):
        environ = {
            'GOOGLE_CLOUD_KEY_JSON': '{"type": "service_account",',
            'GOOGLE_CLOUD_CREDENTIALS': json.dumps(service_account_info),
        }
        loaded, source = creds.load_google_credentials(environ)
        assert source == 'GOOGLE_CLOUD_CREDENTIALS'

    def test_missing_required_field_skipped(self, service_account_info):
        incomplete = dict(service_account_info)
        del incomplete['private_key']
        environ = {
            'GOOGLE_CLOUD_KEY_BASE64': _b64(incomplete),
            'GCP_SERVICE_ACCOUNT_KEY': json.dumps(service_account_info),
        }
        loaded, source = creds.load_google_credentials(environ)
        assert source == 'GCP_SERVICE_ACCOUNT_KEY'

    def test_non_object_json_skipped(self):
        environ = {'GOOGLE_CLOUD_KEY_JSON': '["not", "an", "object"]'}
        assert creds.load_google_credentials(environ) == (None, None)

    def test_reads_os_environ_by_default(self, service_account_info):
        with patch.dict('os.environ', {'GOOGLE_CLOUD_KEY_JSON': json.dumps(service_account_info)}, clear=True):
            loaded, source = creds.load_google_credentials()
        assert source == 'GOOGLE_CLOUD_KEY_JSON'


class TestDescribeCredentialSources:
    """Tests for describe_credential_sources()"""

    def test_reports_names_and_lengths_only(self, service_account_info):
        raw = json.dumps(service_account_info)
        environ = {
            'GOOGLE_CLOUD_KEY_JSON': raw,
            'GOOGLE_CLOUD_KEY_PART1': 'abcd',
            'UNRELATED': 'x',
        }
        report = creds.describe_credential_sources(environ)

        assert report == {'GOOGLE_CLOUD_KEY_PART1': 4, 'GOOGLE_CLOUD_KEY_JSON': len(raw)}
        assert raw not in json.dumps(report)

    def test_empty_environment(self):
        assert creds.describe_credential_sources({}) == {}


class TestBuildServiceAccountCredentials:
    """Tests for build_service_account_credentials()"""

    def test_uses_cloud_platform_scope(self, service_account_info):
        with patch.object(creds.service_account.Credentials, 'from_service_account_info') as factory:
            creds.build_service_account_credentials(service_account_info)
        factory.assert_called_once_with(service_account_info, scopes=creds.SCOPES)


class TestGoogleErrorCode:
    """Tests for google_error_code()"""

    def test_invalid_argument_is_3(self):
        assert creds.google_error_code(google_exceptions.InvalidArgument('bad config')) == 3

    def test_permission_denied_is_7(self):
        assert creds.google_error_code(google_exceptions.PermissionDenied('no access')) == 7

    def test_falls_back_to_http_status(self):
        assert creds.google_error_code(SimpleNamespace(code=404)) == 404

    def test_no_code(self):
        assert creds.google_error_code(ValueError('boom')) is None
