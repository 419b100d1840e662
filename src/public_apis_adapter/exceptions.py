"""
Operational errors carried inside Result values
"""

from typing import Optional


class APIAdapterError(Exception):
    """Base class for operational failures surfaced by the adapter"""
    pass


class TransportError(APIAdapterError):
    """Raised when the request never produced an HTTP response"""
    pass


class AuthenticationError(APIAdapterError):
    """Raised when the API keeps rejecting the request or the token fetch is refused"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class PayloadDecodeError(APIAdapterError):
    """Raised when a response body is not JSON or lacks the expected shape"""
    pass


class PermanentAPIError(APIAdapterError):
    """Raised when API requests fail permanently after all retries"""
    pass


class MaxAttemptsExceededError(PermanentAPIError):
    """Raised when every attempt of a fetch was rate limited"""

    def __init__(self, max_attempts: int):
        super().__init__(f"Max attempts: {max_attempts} reached!")
        self.max_attempts = max_attempts
