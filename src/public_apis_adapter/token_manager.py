"""
TokenManager module for holding and refreshing the bearer token
"""

import logging
import threading
import time
from typing import Callable, Optional

from .option import Option
from .result import Result


class TokenManager:
    """
    Holds the current bearer token and throttles refreshes

    A token is Fresh while less than min_refresh_interval seconds have
    passed since the last successful refresh, and Stale otherwise (or if
    it was never refreshed). The refresh decision and the state mutation
    happen under one lock, so concurrent callers trigger at most one
    refresh per staleness window. The refresh callable runs with the
    (reentrant) lock held and may read the current token.
    """

    def __init__(self, min_refresh_interval: float, clock: Callable[[], float] = time.monotonic):
        self.min_refresh_interval = min_refresh_interval
        self._clock = clock
        self._lock = threading.RLock()
        self._token = ""
        self._last_refresh: Optional[float] = None
        self.logger = logging.getLogger(__name__)

    @property
    def token(self) -> str:
        """Current token, empty before the first refresh"""
        with self._lock:
            return self._token

    @property
    def last_refresh(self) -> Optional[float]:
        with self._lock:
            return self._last_refresh

    def current_token(self) -> Option[str]:
        """Current token, or an empty Option if no refresh has succeeded yet"""
        with self._lock:
            if self._last_refresh is None:
                return Option.none()
            return Option.some(self._token)

    def is_stale(self) -> bool:
        with self._lock:
            return self._is_stale()

    def _is_stale(self) -> bool:
        if self._last_refresh is None:
            return True
        return self._clock() - self._last_refresh >= self.min_refresh_interval

    def ensure_token(self, refresh: Callable[[], Result[str]]) -> Result[str]:
        """
        Refresh the token if it is stale

        Args:
            refresh: Performs one physical token fetch. Must not call back
                into ensure_token.

        Returns:
            Result holding the current token, or the refresh error. On error
            the state is left untouched so the next call retries.
        """
        with self._lock:
            if not self._is_stale():
                self.logger.debug("Token already refreshed, skipping re-auth")
                return Result.ok(self._token)

            self.logger.info("Refreshing auth token")
            result = refresh()
            token, error = result.unwrap()
            if error is not None:
                self.logger.error(f"Token refresh failed: {error}")
                return result

            self._token = token
            self._last_refresh = self._clock()
            return Result.ok(token)
