"""
Test suite for HTTPClient component
Following TDD approach with AAA pattern and descriptive naming
"""

import json
import pytest
from unittest.mock import Mock, patch
import requests
from public_apis_adapter.config_loader import ClientConfig
from public_apis_adapter.http_client import HTTPClient
from public_apis_adapter.token_manager import TokenManager
from public_apis_adapter.result import Result
from public_apis_adapter.exceptions import (
    AuthenticationError, MaxAttemptsExceededError, PayloadDecodeError, TransportError
)

ENDPOINT_URL = 'https://api.test.com/api/v1/apis/categories'
AUTH_URL = 'https://api.test.com/api/v1/auth/token'


def make_response(status_code, payload=None):
    """Build a mock requests.Response"""
    response = Mock()
    response.status_code = status_code
    if payload is None:
        response.content = b''
    elif isinstance(payload, bytes):
        response.content = payload
    else:
        response.content = json.dumps(payload).encode('utf-8')
    return response


class TestHTTPClient:
    """Test suite for HTTPClient fetch, backoff and reauthentication"""

    def setup_method(self):
        """Set up test fixtures before each test method"""
        self.config = ClientConfig(scheme='https', host='api.test.com', max_attempts=5)
        self.session = Mock()
        self.token_manager = TokenManager(self.config.min_token_refresh_interval)
        self.http_client = HTTPClient(self.config, token_manager=self.token_manager, session=self.session)

    def test_fetch_with_successful_response_returns_body(self):
        """
        Test that a 200 response returns the raw body as a success
        """
        # Arrange
        self.session.get.return_value = make_response(200, b'{"categories": ["Animals"]}')

        # Act
        result = self.http_client.fetch(ENDPOINT_URL, {'page': 1})

        # Assert
        assert result == Result.ok(b'{"categories": ["Animals"]}')
        call_args = self.session.get.call_args
        assert call_args[0][0] == ENDPOINT_URL
        assert call_args[1]['params'] == {'page': 1}
        assert call_args[1]['timeout'] == self.config.request_timeout

    def test_fetch_sends_bearer_token_header(self):
        """
        Test that requests carry the current token as a bearer header
        """
        # Arrange
        self.token_manager.ensure_token(lambda: Result.ok('abc123'))
        self.session.get.return_value = make_response(200, b'{}')

        # Act
        self.http_client.fetch(ENDPOINT_URL)

        # Assert
        headers = self.session.get.call_args[1]['headers']
        assert headers == {'Authorization': 'Bearer abc123'}

    @patch('time.sleep')
    def test_fetch_with_rate_limiting_retries_with_exponential_backoff(self, mock_sleep):
        """
        Test that 429 responses trigger doubling sleeps before succeeding
        """
        # Arrange
        self.session.get.side_effect = [
            make_response(429),
            make_response(429),
            make_response(429),
            make_response(200, b'ok')
        ]

        # Act
        result = self.http_client.fetch(ENDPOINT_URL)

        # Assert
        assert result == Result.ok(b'ok')
        assert self.session.get.call_count == 4
        sleep_calls = [call[0][0] for call in mock_sleep.call_args_list]
        assert sleep_calls == [1.0, 2.0, 4.0]

    @pytest.mark.parametrize('rate_limited_responses', [0, 1, 2, 4])
    @patch('time.sleep')
    def test_fetch_total_sleep_equals_doubling_sequence_sum(self, mock_sleep, rate_limited_responses):
        """
        Test that k rate-limited responses followed by a 200 sleep for 2^k - 1 units in total
        """
        # Arrange
        self.session.get.side_effect = (
            [make_response(429)] * rate_limited_responses + [make_response(200, b'ok')]
        )

        # Act
        result = self.http_client.fetch(ENDPOINT_URL)

        # Assert
        assert result.is_ok
        total_sleep = sum(call[0][0] for call in mock_sleep.call_args_list)
        assert total_sleep == 2 ** rate_limited_responses - 1
        assert mock_sleep.call_count <= self.config.max_attempts

    @patch('time.sleep')
    def test_fetch_with_custom_backoff_unit_scales_sleeps(self, mock_sleep):
        """
        Test that the backoff unit sets the first sleep
        """
        # Arrange
        config = ClientConfig(scheme='https', host='api.test.com', backoff_unit=0.5)
        http_client = HTTPClient(config, session=self.session)
        self.session.get.side_effect = [make_response(429), make_response(429), make_response(200, b'ok')]

        # Act
        http_client.fetch(ENDPOINT_URL)

        # Assert
        assert [call[0][0] for call in mock_sleep.call_args_list] == [0.5, 1.0]

    @patch('time.sleep')
    def test_fetch_with_max_attempts_exhausted_returns_error_naming_cap(self, mock_sleep):
        """
        Test that permanent rate limiting returns MaxAttemptsExceededError
        """
        # Arrange
        self.session.get.return_value = make_response(429)

        # Act
        result = self.http_client.fetch(ENDPOINT_URL)

        # Assert
        assert isinstance(result.error, MaxAttemptsExceededError)
        assert result.error.max_attempts == 5
        assert "Max attempts: 5 reached!" in str(result.error)
        assert self.session.get.call_count == 5
        assert [call[0][0] for call in mock_sleep.call_args_list] == [1.0, 2.0, 4.0, 8.0, 16.0]

    @patch('time.sleep')
    def test_fetch_with_connection_error_returns_transport_error_without_retry(self, mock_sleep):
        """
        Test that transport failures are returned immediately
        """
        # Arrange
        self.session.get.side_effect = requests.exceptions.ConnectionError("connection refused")

        # Act
        result = self.http_client.fetch(ENDPOINT_URL)

        # Assert
        assert isinstance(result.error, TransportError)
        assert isinstance(result.error.__cause__, requests.exceptions.ConnectionError)
        assert self.session.get.call_count == 1
        mock_sleep.assert_not_called()

    def test_fetch_with_unauthorised_response_reauthenticates_and_retries(self):
        """
        Test that a 401 triggers a token fetch and a retry with the new token
        """
        # Arrange
        self.session.get.side_effect = [
            make_response(401),
            make_response(200, {'token': 'fresh-token'}),
            make_response(200, b'data')
        ]

        # Act
        result = self.http_client.fetch(ENDPOINT_URL)

        # Assert
        assert result == Result.ok(b'data')
        urls = [call[0][0] for call in self.session.get.call_args_list]
        assert urls == [ENDPOINT_URL, AUTH_URL, ENDPOINT_URL]
        final_headers = self.session.get.call_args_list[2][1]['headers']
        assert final_headers['Authorization'] == 'Bearer fresh-token'
        assert self.token_manager.token == 'fresh-token'

    @patch('time.sleep')
    def test_fetch_reauthentication_does_not_consume_attempts_or_backoff(self, mock_sleep):
        """
        Test that reauthentication leaves the attempt counter and backoff untouched
        """
        # Arrange
        self.session.get.side_effect = [
            make_response(429),
            make_response(403),
            make_response(200, {'token': 'fresh-token'}),
            make_response(429),
            make_response(200, b'data')
        ]

        # Act
        result = self.http_client.fetch(ENDPOINT_URL)

        # Assert
        assert result == Result.ok(b'data')
        assert [call[0][0] for call in mock_sleep.call_args_list] == [1.0, 2.0]

    def test_fetch_with_rejected_token_request_returns_authentication_error(self):
        """
        Test that a refused token fetch is fatal and does not recurse
        """
        # Arrange
        self.session.get.side_effect = [
            make_response(401),
            make_response(500)
        ]

        # Act
        result = self.http_client.fetch(ENDPOINT_URL)

        # Assert
        assert isinstance(result.error, AuthenticationError)
        assert result.error.status_code == 500
        assert self.session.get.call_count == 2
        assert self.token_manager.is_stale()

    def test_fetch_with_malformed_token_response_returns_decode_error(self):
        """
        Test that an auth response without a token string is a decode error
        """
        # Arrange
        self.session.get.side_effect = [
            make_response(401),
            make_response(200, {'access': 'wrong-field'})
        ]

        # Act
        result = self.http_client.fetch(ENDPOINT_URL)

        # Assert
        assert isinstance(result.error, PayloadDecodeError)

    def test_fetch_with_endpoint_always_rejecting_stops_after_reauth_limit(self):
        """
        Test that a server rejecting every token cannot loop forever
        """
        # Arrange
        config = ClientConfig(scheme='https', host='api.test.com', max_reauth_attempts=2)
        token_manager = TokenManager(config.min_token_refresh_interval)
        token_manager.ensure_token(lambda: Result.ok('still-fresh'))
        http_client = HTTPClient(config, token_manager=token_manager, session=self.session)
        self.session.get.return_value = make_response(403)

        # Act
        result = http_client.fetch(ENDPOINT_URL)

        # Assert
        assert isinstance(result.error, AuthenticationError)
        assert result.error.status_code == 403
        # Token is fresh, so every reauthentication is throttled: no auth requests
        urls = [call[0][0] for call in self.session.get.call_args_list]
        assert urls == [ENDPOINT_URL] * 3

    def test_fetch_with_zero_reauth_limit_still_fetches_first_token(self):
        """
        Test that the initial token fetch is not counted against the reauthentication limit
        """
        # Arrange
        config = ClientConfig(scheme='https', host='api.test.com', max_reauth_attempts=0)
        token_manager = TokenManager(config.min_token_refresh_interval)
        http_client = HTTPClient(config, token_manager=token_manager, session=self.session)
        self.session.get.side_effect = [
            make_response(401),
            make_response(200, {'token': 't'}),
            make_response(200, b'data')
        ]

        # Act
        result = http_client.fetch(ENDPOINT_URL)

        # Assert
        assert result == Result.ok(b'data')
        urls = [call[0][0] for call in self.session.get.call_args_list]
        assert urls == [ENDPOINT_URL, AUTH_URL, ENDPOINT_URL]

    def test_fetch_with_zero_reauth_limit_rejects_after_first_token(self):
        """
        Test that once a token exists a zero limit allows no further reauthentication
        """
        # Arrange
        config = ClientConfig(scheme='https', host='api.test.com', max_reauth_attempts=0)
        token_manager = TokenManager(config.min_token_refresh_interval)
        http_client = HTTPClient(config, token_manager=token_manager, session=self.session)
        self.session.get.side_effect = [
            make_response(401),
            make_response(200, {'token': 't'}),
            make_response(401)
        ]

        # Act
        result = http_client.fetch(ENDPOINT_URL)

        # Assert
        assert isinstance(result.error, AuthenticationError)
        assert result.error.status_code == 401
        assert self.session.get.call_count == 3

    def test_reauthenticate_within_interval_skips_token_fetch(self):
        """
        Test that reauthentication goes through the staleness throttle
        """
        # Arrange
        self.session.get.return_value = make_response(200, {'token': 'first'})
        self.http_client.reauthenticate()

        # Act
        result = self.http_client.reauthenticate()

        # Assert
        assert result == Result.ok('first')
        assert self.session.get.call_count == 1

    @patch('requests.Session')
    def test_fetch_without_session_creates_one(self, mock_session_class):
        """
        Test that a session is created lazily on first fetch
        """
        # Arrange
        mock_session = Mock()
        mock_session.get.return_value = make_response(200, b'ok')
        mock_session_class.return_value = mock_session
        http_client = HTTPClient(self.config)

        # Act
        result = http_client.fetch(ENDPOINT_URL)

        # Assert
        assert result.is_ok
        mock_session_class.assert_called_once()
        assert http_client.session is mock_session

    def test_close_connection_with_active_session_closes_successfully(self):
        """
        Test that closing connection properly cleans up session
        """
        # Act
        self.http_client.close_connection()

        # Assert
        self.session.close.assert_called_once()
        assert self.http_client.session is None

    def test_close_connection_with_no_session_handles_gracefully(self):
        """
        Test that closing connection when no session exists doesn't raise error
        """
        # Arrange
        http_client = HTTPClient(self.config)

        # Act & Assert - should not raise any exceptions
        http_client.close_connection()

    def test_context_manager_closes_session_on_exit(self):
        """
        Test that leaving the context closes the session
        """
        # Act
        with self.http_client as client:
            assert client is self.http_client

        # Assert
        self.session.close.assert_called_once()
