"""
PaginationStrategy module for turning page-numbered endpoints into result streams
"""

import logging
from typing import Any, Callable, Dict, Iterator, Optional, TypeVar

from .result import Result

T = TypeVar('T')


class NoMoreResponse(Exception):
    """
    End-of-sequence marker returned by payload converters for an empty page

    Not an APIAdapterError: it signals exhaustion, not failure.
    """
    pass


NO_MORE_RESPONSE = NoMoreResponse("No More Response!")


def is_no_more_response(error: Optional[BaseException]) -> bool:
    """True if the error is the exhaustion marker rather than a real failure"""
    return isinstance(error, NoMoreResponse)


class PageBasedPagination:
    """Page-number pagination starting at page 1"""

    def __init__(self, page_param: str = 'page', start_page: int = 1):
        self.page_param = page_param
        self.start_page = start_page

    def get_next_page_params(self, current_params: Dict[str, Any], page_num: int) -> Dict[str, Any]:
        """
        Return a copy of the current parameters with the page number set

        Args:
            current_params: Base query parameters, left unmodified
            page_num: Page to request
        """
        params = dict(current_params)
        params[self.page_param] = page_num
        return params


class Paginator:
    """
    Drives a page-by-page fetch loop and converts each page via an injected converter

    The paginator does not decide when data is exhausted: the converter
    returns Result.err(NO_MORE_RESPONSE) for an empty page, so one fetch past
    the last page is always made.
    """

    def __init__(self, http_client, strategy: Optional[PageBasedPagination] = None):
        self.http_client = http_client
        self.strategy = strategy or PageBasedPagination()
        self.logger = logging.getLogger(__name__)

    def paginate(self, url: str, converter: Callable[[bytes], Result[T]],
                 params: Optional[Dict[str, Any]] = None) -> Iterator[Result[T]]:
        """
        Stream converted pages in increasing page order

        Args:
            url: Endpoint URL without the page parameter
            converter: Turns a raw page body into a typed Result
            params: Extra query parameters sent with every page

        Yields:
            One Result per fetched page. The stream ends after the first
            error, whether it came from the fetch or from the converter.
        """
        base_params = dict(params or {})
        page_num = self.strategy.start_page

        while True:
            page_params = self.strategy.get_next_page_params(base_params, page_num)
            body, error = self.http_client.fetch(url, page_params).unwrap()

            if error is not None:
                self.logger.debug(f"Fetching page {page_num} of {url} failed: {error}")
                yield Result.err(error)
                return

            page_result = converter(body)
            yield page_result

            if page_result.is_err:
                if is_no_more_response(page_result.error):
                    self.logger.debug(f"No more pages for {url} after page {page_num - 1}")
                return

            page_num += 1
