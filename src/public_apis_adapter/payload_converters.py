"""
PayloadConverter module for decoding API response bodies into typed Results
"""

import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from .exceptions import PayloadDecodeError
from .pagination_strategy import NO_MORE_RESPONSE
from .result import Result


@dataclass(frozen=True)
class CategoryEntry:
    """An API link listed under a category"""
    category: str
    link: str


class PayloadConverter:
    """Converters for the auth, categories and entry endpoints"""

    @staticmethod
    def decode_json_object(data: bytes) -> Result[Dict[str, Any]]:
        """
        Decode a response body that must be a JSON object

        Args:
            data: Raw response body

        Returns:
            Result holding the decoded dict, or a PayloadDecodeError
        """
        try:
            decoded = json.loads(data)
        except (json.JSONDecodeError, UnicodeDecodeError, TypeError) as e:
            return Result.err(PayloadDecodeError(f"Response is not valid JSON: {e}"))

        if not isinstance(decoded, dict):
            return Result.err(PayloadDecodeError(
                f"Expected a JSON object, got {type(decoded).__name__}"
            ))
        return Result.ok(decoded)

    @staticmethod
    def convert_token(data: bytes) -> Result[str]:
        """Extract the 'token' string from an auth response"""
        decoded, error = PayloadConverter.decode_json_object(data).unwrap()
        if error is not None:
            return Result.err(error)

        token = decoded.get('token')
        if not isinstance(token, str):
            return Result.err(PayloadDecodeError("Auth response has no 'token' string field"))
        return Result.ok(token)

    @staticmethod
    def convert_categories(data: bytes) -> Result[List[str]]:
        """
        Extract one page of category names

        An empty 'categories' array marks the end of pagination and is
        returned as NO_MORE_RESPONSE.
        """
        decoded, error = PayloadConverter.decode_json_object(data).unwrap()
        if error is not None:
            return Result.err(error)

        categories = decoded.get('categories')
        if not isinstance(categories, list):
            return Result.err(PayloadDecodeError("Categories response has no 'categories' array"))
        if not all(isinstance(name, str) for name in categories):
            return Result.err(PayloadDecodeError("Categories response contains non-string names"))

        if not categories:
            return Result.err(NO_MORE_RESPONSE)
        return Result.ok(categories)

    @staticmethod
    def entries_converter(category: str) -> Callable[[bytes], Result[List[CategoryEntry]]]:
        """
        Build a converter for one page of entries belonging to a category

        Entry pages reuse the 'categories' key, holding objects with a 'Link'
        string field.
        """
        def convert(data: bytes) -> Result[List[CategoryEntry]]:
            decoded, error = PayloadConverter.decode_json_object(data).unwrap()
            if error is not None:
                return Result.err(error)

            properties = decoded.get('categories')
            if not isinstance(properties, list):
                return Result.err(PayloadDecodeError(
                    f"Entry response for category '{category}' has no 'categories' array"
                ))
            if not properties:
                return Result.err(NO_MORE_RESPONSE)

            entries = []
            for item in properties:
                link = item.get('Link') if isinstance(item, dict) else None
                if not isinstance(link, str):
                    return Result.err(PayloadDecodeError(
                        f"Entry response for category '{category}' has an item without a 'Link' string"
                    ))
                entries.append(CategoryEntry(category=category, link=link))
            return Result.ok(entries)

        return convert
