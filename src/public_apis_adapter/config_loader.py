"""
ConfigLoader module for building and validating client configuration from TOML files
"""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Any, Optional
from urllib.parse import urlunsplit


class ConfigurationError(Exception):
    """Raised when configuration is invalid or incomplete"""
    pass


DEFAULT_SCHEME = "https"
DEFAULT_HOST = "public-apis-api.herokuapp.com"
DEFAULT_MAX_ATTEMPTS = 10
DEFAULT_MIN_TOKEN_REFRESH_INTERVAL = 60.0
DEFAULT_MAX_REAUTH_ATTEMPTS = 3
DEFAULT_BACKOFF_UNIT = 1.0
DEFAULT_REQUEST_TIMEOUT = 30.0


@dataclass(frozen=True)
class Endpoint:
    """Relative path identifying an API resource"""
    path: str


DEFAULT_AUTH_ENDPOINT = Endpoint(path="/api/v1/auth/token")
DEFAULT_CATEGORIES_ENDPOINT = Endpoint(path="/api/v1/apis/categories")
DEFAULT_ENTRY_ENDPOINT = Endpoint(path="/api/v1/apis/entry")


@dataclass(frozen=True)
class ClientConfig:
    """
    Immutable client configuration

    Attributes:
        scheme: URL scheme, usually https
        host: API host name (optionally with port)
        auth_endpoint: Token endpoint
        categories_endpoint: Paginated category list endpoint
        entry_endpoint: Paginated per-category entry endpoint
        max_attempts: Rate-limited attempts allowed per fetch
        min_token_refresh_interval: Seconds that must pass between token refreshes
        max_reauth_attempts: Reauthentication cycles allowed per fetch
        backoff_unit: Seconds slept after the first 429, doubled on each retry
        request_timeout: Per-request timeout in seconds passed to requests
        log_file: Optional file receiving diagnostic logs
    """
    scheme: str = DEFAULT_SCHEME
    host: str = DEFAULT_HOST
    auth_endpoint: Endpoint = field(default=DEFAULT_AUTH_ENDPOINT)
    categories_endpoint: Endpoint = field(default=DEFAULT_CATEGORIES_ENDPOINT)
    entry_endpoint: Endpoint = field(default=DEFAULT_ENTRY_ENDPOINT)
    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    min_token_refresh_interval: float = DEFAULT_MIN_TOKEN_REFRESH_INTERVAL
    max_reauth_attempts: int = DEFAULT_MAX_REAUTH_ATTEMPTS
    backoff_unit: float = DEFAULT_BACKOFF_UNIT
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    log_file: Optional[Path] = None

    def __post_init__(self):
        if not self.scheme:
            raise ConfigurationError("scheme must not be empty")
        if not self.host:
            raise ConfigurationError("host must not be empty")
        if self.max_attempts < 1:
            raise ConfigurationError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.max_reauth_attempts < 0:
            raise ConfigurationError(
                f"max_reauth_attempts must not be negative, got {self.max_reauth_attempts}"
            )
        if self.min_token_refresh_interval < 0:
            raise ConfigurationError("min_token_refresh_interval must not be negative")
        if self.backoff_unit < 0:
            raise ConfigurationError("backoff_unit must not be negative")
        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be positive")

    def url_for(self, endpoint: Endpoint) -> str:
        """Build the absolute URL for an endpoint"""
        path = endpoint.path if endpoint.path.startswith('/') else f"/{endpoint.path}"
        return urlunsplit((self.scheme, self.host, path, '', ''))

    @property
    def auth_url(self) -> str:
        return self.url_for(self.auth_endpoint)

    @property
    def categories_url(self) -> str:
        return self.url_for(self.categories_endpoint)

    @property
    def entry_url(self) -> str:
        return self.url_for(self.entry_endpoint)


class ConfigLoader:
    """Loads and validates TOML configuration files"""

    # Required configuration sections and their mandatory keys
    REQUIRED_SECTIONS = {
        'api': ['scheme', 'host'],
    }

    # Optional sections mapped to the ClientConfig fields they may set
    OPTIONAL_SECTIONS = {
        'endpoints': ['auth', 'categories', 'entry'],
        'retries': ['max_attempts', 'max_reauth_attempts', 'backoff_unit'],
        'auth': ['min_token_refresh_interval'],
        'http': ['request_timeout'],
        'logging': ['log_file'],
    }

    @staticmethod
    def load_toml_config(config_path: Path) -> ClientConfig:
        """
        Load client configuration from TOML file

        Args:
            config_path: Path to the TOML configuration file

        Returns:
            ClientConfig with defaults applied for every omitted optional key

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If required configuration is missing or invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'rb') as f:
                config_data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {config_path}: {e}") from e

        return ConfigLoader.build_config(config_data)

    @staticmethod
    def build_config(config_data: Dict[str, Any]) -> ClientConfig:
        """
        Build a ClientConfig from already-parsed configuration data

        Raises:
            ConfigurationError: If required sections are missing or values are invalid
        """
        ConfigLoader._validate_required_sections(config_data)
        ConfigLoader._validate_optional_sections(config_data)

        api = config_data['api']
        endpoints = config_data.get('endpoints', {})
        retries = config_data.get('retries', {})
        auth = config_data.get('auth', {})
        http = config_data.get('http', {})
        logging_section = config_data.get('logging', {})

        log_file = ConfigLoader._get_str(logging_section, 'logging', 'log_file', None)

        return ClientConfig(
            scheme=ConfigLoader._get_str(api, 'api', 'scheme', DEFAULT_SCHEME),
            host=ConfigLoader._get_str(api, 'api', 'host', DEFAULT_HOST),
            auth_endpoint=Endpoint(
                ConfigLoader._get_str(endpoints, 'endpoints', 'auth', DEFAULT_AUTH_ENDPOINT.path)
            ),
            categories_endpoint=Endpoint(
                ConfigLoader._get_str(endpoints, 'endpoints', 'categories', DEFAULT_CATEGORIES_ENDPOINT.path)
            ),
            entry_endpoint=Endpoint(
                ConfigLoader._get_str(endpoints, 'endpoints', 'entry', DEFAULT_ENTRY_ENDPOINT.path)
            ),
            max_attempts=ConfigLoader._get_int(retries, 'retries', 'max_attempts', DEFAULT_MAX_ATTEMPTS),
            max_reauth_attempts=ConfigLoader._get_int(
                retries, 'retries', 'max_reauth_attempts', DEFAULT_MAX_REAUTH_ATTEMPTS
            ),
            backoff_unit=ConfigLoader._get_float(retries, 'retries', 'backoff_unit', DEFAULT_BACKOFF_UNIT),
            min_token_refresh_interval=ConfigLoader._get_float(
                auth, 'auth', 'min_token_refresh_interval', DEFAULT_MIN_TOKEN_REFRESH_INTERVAL
            ),
            request_timeout=ConfigLoader._get_float(http, 'http', 'request_timeout', DEFAULT_REQUEST_TIMEOUT),
            log_file=Path(log_file) if log_file else None,
        )

    @staticmethod
    def _get_str(section_data: Dict[str, Any], section_name: str, key: str,
                 default: Optional[str]) -> Optional[str]:
        value = section_data.get(key, default)
        if value is not None and not isinstance(value, str):
            raise ConfigurationError(
                f"Key '{key}' in section [{section_name}] must be a string, got {value!r}"
            )
        return value

    @staticmethod
    def _get_int(section_data: Dict[str, Any], section_name: str, key: str, default: int) -> int:
        value = section_data.get(key, default)
        # bool is an int subclass
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(
                f"Key '{key}' in section [{section_name}] must be an integer, got {value!r}"
            )
        return value

    @staticmethod
    def _get_float(section_data: Dict[str, Any], section_name: str, key: str, default: float) -> float:
        value = section_data.get(key, default)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigurationError(
                f"Key '{key}' in section [{section_name}] must be a number, got {value!r}"
            )
        return float(value)

    @staticmethod
    def _validate_required_sections(config_data: Dict[str, Any]) -> None:
        """
        Validate that all required configuration sections and keys are present

        Raises:
            ConfigurationError: If any required section or key is missing
        """
        missing_items = []

        for section_name, required_keys in ConfigLoader.REQUIRED_SECTIONS.items():
            if section_name not in config_data:
                missing_items.append(f"Section [{section_name}]")
            else:
                section_data = config_data[section_name]
                for key in required_keys:
                    if key not in section_data:
                        missing_items.append(f"Key '{key}' in section [{section_name}]")

        if missing_items:
            raise ConfigurationError(
                f"Missing required configuration items: {', '.join(missing_items)}"
            )

    @staticmethod
    def _validate_optional_sections(config_data: Dict[str, Any]) -> None:
        """
        Reject unknown keys in optional sections

        Raises:
            ConfigurationError: If an optional section holds an unsupported key
        """
        unknown_items = []

        for section_name, allowed_keys in ConfigLoader.OPTIONAL_SECTIONS.items():
            section_data = config_data.get(section_name, {})
            if not isinstance(section_data, dict):
                raise ConfigurationError(f"Section [{section_name}] must be a table")
            for key in section_data:
                if key not in allowed_keys:
                    unknown_items.append(f"Key '{key}' in section [{section_name}]")

        if unknown_items:
            raise ConfigurationError(
                f"Unsupported configuration items: {', '.join(unknown_items)}"
            )
