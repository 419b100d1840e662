"""
HTTPClient module for authenticated GET requests with backoff and reauthentication
"""

import logging
import time
import requests
from typing import Dict, Any, Optional

from .config_loader import ClientConfig
from .exceptions import AuthenticationError, MaxAttemptsExceededError, TransportError
from .payload_converters import PayloadConverter
from .result import Result
from .token_manager import TokenManager


class HTTPClient:
    """HTTP client with bearer authentication, rate-limit backoff and token refresh"""

    STATUS_OK = 200
    STATUS_TOO_MANY_REQUESTS = 429

    def __init__(self, config: ClientConfig, token_manager: Optional[TokenManager] = None,
                 session: Optional[requests.Session] = None):
        self.config = config
        self.token_manager = token_manager or TokenManager(config.min_token_refresh_interval)
        self.session = session
        self.logger = logging.getLogger(__name__)

    def __enter__(self) -> 'HTTPClient':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close_connection()

    @staticmethod
    def bearer_token(token: str) -> str:
        return f"Bearer {token}"

    def fetch(self, url: str, params: Optional[Dict[str, Any]] = None) -> Result[bytes]:
        """
        Fetch a URL, retrying on rate limiting and reauthenticating on rejection

        Args:
            url: Absolute URL to GET
            params: Query parameters appended to the URL

        Returns:
            Result holding the response body, or a TransportError,
            AuthenticationError, MaxAttemptsExceededError or token refresh
            error
        """
        return self._fetch(url, params, reauthenticate=True)

    def reauthenticate(self) -> Result[str]:
        """Refresh the token through the manager's staleness throttle"""
        return self.token_manager.ensure_token(self._fetch_token)

    def _fetch_token(self) -> Result[str]:
        """
        Perform one physical token fetch

        The auth request goes through the same backoff loop as any other
        fetch, but a rejection is reported instead of triggering another
        reauthentication.
        """
        body, error = self._fetch(self.config.auth_url, None, reauthenticate=False).unwrap()
        if error is not None:
            return Result.err(error)
        return PayloadConverter.convert_token(body)

    def _fetch(self, url: str, params: Optional[Dict[str, Any]], reauthenticate: bool) -> Result[bytes]:
        if self.session is None:
            self.session = requests.Session()

        self.logger.debug(f"Get Request: {url} params={params}")

        attempts = 0
        reauth_attempts = 0
        backoff = self.config.backoff_unit

        while attempts < self.config.max_attempts:
            headers = {'Authorization': self.bearer_token(self.token_manager.token)}
            try:
                response = self.session.get(
                    url,
                    params=params,
                    headers=headers,
                    timeout=self.config.request_timeout
                )
            except requests.exceptions.RequestException as e:
                self.logger.error(f"Transport failure for {url}: {e}")
                error = TransportError(f"GET {url} failed: {e}")
                error.__cause__ = e
                return Result.err(error)

            status_code = response.status_code

            if status_code == self.STATUS_TOO_MANY_REQUESTS:
                response.close()
                self.logger.warning(
                    f"Max Request Made! Total attempts: {attempts} made out of {self.config.max_attempts}, "
                    f"sleeping {backoff}s"
                )
                time.sleep(backoff)
                attempts += 1
                backoff *= 2

            elif status_code == self.STATUS_OK:
                self.logger.debug("Status OK, returning response")
                return Result.ok(response.content)

            else:
                response.close()
                if not reauthenticate:
                    return Result.err(AuthenticationError(
                        f"Authentication request to {url} rejected with status {status_code}",
                        status_code=status_code
                    ))

                # The first token fetch of a client is not a reauthentication
                bootstrap = self.token_manager.last_refresh is None
                if not bootstrap and reauth_attempts >= self.config.max_reauth_attempts:
                    return Result.err(AuthenticationError(
                        f"Request to {url} still rejected with status {status_code} after "
                        f"{reauth_attempts} reauthentication attempts",
                        status_code=status_code
                    ))

                self.logger.info(f"Unauthorized or token expired (status {status_code}), reauthenticating...")
                if not bootstrap:
                    reauth_attempts += 1
                _, error = self.reauthenticate().unwrap()
                if error is not None:
                    return Result.err(error)

        return Result.err(MaxAttemptsExceededError(self.config.max_attempts))

    def close_connection(self) -> None:
        """
        Close HTTP session and release resources
        """
        if self.session:
            self.session.close()
            self.session = None
