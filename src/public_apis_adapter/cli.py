"""
Command line entry point for streaming API entries

python -m public_apis_adapter --config configs/public_apis.toml
python -m public_apis_adapter --category Animals --verbose
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterator, List, Optional

from .api_orchestrator import APIOrchestrator
from .config_loader import ClientConfig, ConfigLoader, ConfigurationError
from .http_client import HTTPClient
from .logging_config import setup_logging
from .pagination_strategy import is_no_more_response
from .payload_converters import CategoryEntry
from .result import Result

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Stream API entries from a paginated public APIs catalogue",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Stream every category using the default host
  python -m public_apis_adapter

  # Stream a single category with a custom configuration
  python -m public_apis_adapter --config configs/public_apis.toml --category Animals
        """
    )
    parser.add_argument("--config", help="Path to TOML configuration file")
    parser.add_argument("--category", help="Only stream entries of this category")
    parser.add_argument("--log-file", help="Also write diagnostic logs to this file")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    return parser


def load_config(config_path: Optional[str]) -> ClientConfig:
    if config_path:
        return ConfigLoader.load_toml_config(Path(config_path))
    return ClientConfig()


def print_stream(pages: Iterator[Result[List[CategoryEntry]]]) -> int:
    """
    Print each entry page until the stream ends

    Returns:
        0 on clean exhaustion, 1 if a fatal error was emitted
    """
    for page in pages:
        entries, error = page.unwrap()
        if error is not None:
            if is_no_more_response(error):
                break
            logger.error(f"Retrieval failed: {error}")
            return 1
        for entry in entries:
            print(f"{entry.category}\t{entry.link}")

    print("Safely exited")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except (ConfigurationError, FileNotFoundError) as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    log_file = Path(args.log_file) if args.log_file else config.log_file
    setup_logging(logging.DEBUG if args.verbose else logging.WARNING, log_file)

    with HTTPClient(config) as http_client:
        orchestrator = APIOrchestrator(config, http_client=http_client)
        if args.category:
            return print_stream(orchestrator.get_apis_from_category(args.category))
        return print_stream(orchestrator.get_apis())
