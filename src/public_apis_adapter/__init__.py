"""
Resilient client for a paginated, token-authenticated public APIs catalogue
Provides Result/Option containers, an authenticated fetcher with backoff and
token refresh, and page-to-stream orchestration
"""

from .result import Result, map_ok
from .option import Option, EmptyOption, EMPTY_OPTION, map_option
from .exceptions import (
    APIAdapterError,
    TransportError,
    AuthenticationError,
    PayloadDecodeError,
    PermanentAPIError,
    MaxAttemptsExceededError,
)
from .config_loader import ClientConfig, ConfigLoader, ConfigurationError, Endpoint
from .token_manager import TokenManager
from .http_client import HTTPClient
from .pagination_strategy import (
    NoMoreResponse,
    NO_MORE_RESPONSE,
    is_no_more_response,
    PageBasedPagination,
    Paginator,
)
from .payload_converters import CategoryEntry, PayloadConverter
from .api_orchestrator import APIOrchestrator

__all__ = [
    'Result',
    'map_ok',
    'Option',
    'EmptyOption',
    'EMPTY_OPTION',
    'map_option',
    'APIAdapterError',
    'TransportError',
    'AuthenticationError',
    'PayloadDecodeError',
    'PermanentAPIError',
    'MaxAttemptsExceededError',
    'ClientConfig',
    'ConfigLoader',
    'ConfigurationError',
    'Endpoint',
    'TokenManager',
    'HTTPClient',
    'NoMoreResponse',
    'NO_MORE_RESPONSE',
    'is_no_more_response',
    'PageBasedPagination',
    'Paginator',
    'CategoryEntry',
    'PayloadConverter',
    'APIOrchestrator',
]
