"""
APIOrchestrator module composing category and entry pagination into one stream
"""

import logging
from typing import Iterator, List, Optional

from .config_loader import ClientConfig
from .http_client import HTTPClient
from .pagination_strategy import NO_MORE_RESPONSE, Paginator, is_no_more_response
from .payload_converters import CategoryEntry, PayloadConverter
from .result import Result


class APIOrchestrator:
    """
    High-level coordinator for category and entry retrieval

    Walks the paginated category list and, for every category in order,
    the paginated entries of that category:
    1. An empty page (NO_MORE_RESPONSE) on the category stream ends the
       whole run with a final NO_MORE_RESPONSE marker
    2. An empty page on an entry stream moves on to the next category
    3. Any other error is emitted once and ends the run
    """

    def __init__(self, config: ClientConfig, http_client: Optional[HTTPClient] = None,
                 paginator: Optional[Paginator] = None):
        """
        Initialise APIOrchestrator with dependency injection

        Args:
            config: Client configuration
            http_client: Authenticated fetcher, built from config when omitted
            paginator: Page loop driver, built around http_client when omitted
        """
        self.config = config
        self.http_client = http_client or HTTPClient(config)
        self.paginator = paginator or Paginator(self.http_client)
        self.logger = logging.getLogger(__name__)

    def categories_url(self) -> str:
        return self.config.categories_url

    def entry_url(self) -> str:
        return self.config.entry_url

    def get_categories(self) -> Iterator[Result[List[str]]]:
        """Stream pages of category names"""
        return self.paginator.paginate(
            self.categories_url(),
            PayloadConverter.convert_categories
        )

    def get_apis_from_category(self, category: str) -> Iterator[Result[List[CategoryEntry]]]:
        """Stream pages of entries for one category"""
        return self.paginator.paginate(
            self.entry_url(),
            PayloadConverter.entries_converter(category),
            params={'category': category}
        )

    def get_apis(self) -> Iterator[Result[List[CategoryEntry]]]:
        """
        Stream entry pages for every category

        Single pass, not restartable.

        Yields:
            Result.ok pages of CategoryEntry, then either a final
            Result.err(NO_MORE_RESPONSE) once all categories are exhausted,
            or exactly one fatal error after which the stream closes
        """
        category_pages = self.get_categories()

        for category_page in category_pages:
            categories, error = category_page.unwrap()
            if error is not None:
                if is_no_more_response(error):
                    break
                self.logger.error(f"Category retrieval failed: {error}")
                yield Result.err(error)
                return

            self.logger.info(f"Processing {len(categories)} categories")

            for category in categories:
                pages_processed = 0
                for entry_page in self.get_apis_from_category(category):
                    entries, error = entry_page.unwrap()
                    if error is not None:
                        if is_no_more_response(error):
                            break
                        self.logger.error(f"Entry retrieval failed for category {category}: {error}")
                        yield Result.err(error)
                        return

                    pages_processed += 1
                    yield Result.ok(entries)

                self.logger.info(f"Completed category {category}: {pages_processed} pages")

        self.logger.info("All categories processed")
        yield Result.err(NO_MORE_RESPONSE)

    def collect_apis(self) -> List[CategoryEntry]:
        """
        Drain get_apis into a flat list

        Raises:
            APIAdapterError: The fatal error emitted by the stream, if any
        """
        collected: List[CategoryEntry] = []
        for page in self.get_apis():
            entries, error = page.unwrap()
            if error is not None:
                if is_no_more_response(error):
                    break
                raise error
            collected.extend(entries)
        return collected
