"""Request builder for EONET API URLs."""
import logging
from typing import Any, Dict, Optional
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

from client.errors import InvalidParameterError, InvalidURLError

logger = logging.getLogger(__name__)

API = "https://eonet.sci.gsfc.nasa.gov/api/v2.1"


class RequestBuilder:
    """Builds absolute EONET URLs from an endpoint path and query parameters."""

    API = API

    def __init__(self, base_url: str = API):
        """
        Initialize the request builder.

        Args:
            base_url: Base URL every endpoint is appended to
        """
        self.base_url = base_url.rstrip('/')

    def build(self, endpoint: str, query: Optional[Dict[str, Any]] = None) -> str:
        """
        Compose base URL, endpoint and query parameters into an absolute URL.

        Query items already present in the endpoint are kept; the given
        parameters are appended after them and percent-encoded.

        Args:
            endpoint: Relative endpoint path, must start with '/'
            query: Mapping of parameter name to value

        Returns:
            Absolute URL string

        Raises:
            InvalidURLError: If no valid URL can be produced for the endpoint
            InvalidParameterError: If a query value has no string form
        """
        if not self._is_valid_endpoint(endpoint):
            raise InvalidURLError(endpoint)

        try:
            parts = urlsplit(self.base_url + endpoint)
        except ValueError as e:
            raise InvalidURLError(endpoint) from e

        if parts.scheme not in ('http', 'https') or not parts.hostname:
            raise InvalidURLError(endpoint)

        query_items = parse_qsl(parts.query, keep_blank_values=True)
        for name, value in (query or {}).items():
            if not isinstance(name, str):
                raise InvalidParameterError(name, value)
            query_items.append((name, self.stringify(name, value)))

        url = urlunsplit((
            parts.scheme,
            parts.netloc,
            parts.path,
            urlencode(query_items, quote_via=quote),
            ''
        ))
        if not url:
            raise InvalidURLError(endpoint)

        logger.debug(f"Built URL for endpoint {endpoint}: {url}")
        return url

    @staticmethod
    def stringify(name: str, value: Any) -> str:
        """
        Convert a query value to its canonical string form.

        Args:
            name: Parameter name, used in the error
            value: Parameter value

        Returns:
            String form of the value

        Raises:
            InvalidParameterError: If the value is not a str, bool, int or float
        """
        # bool is checked first since it is a subclass of int
        if isinstance(value, bool):
            return 'true' if value else 'false'
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)):
            return str(value)
        raise InvalidParameterError(name, value)

    @staticmethod
    def _is_valid_endpoint(endpoint: Any) -> bool:
        if not isinstance(endpoint, str) or not endpoint.startswith('/'):
            return False
        return not any(ch.isspace() or ord(ch) < 32 for ch in endpoint)
