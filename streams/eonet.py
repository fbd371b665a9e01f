"""EONET streams: cached categories and merged open/closed events."""
import logging
from typing import Any, Dict, List, Optional

from client.errors import EONETError
from client.http_transport import HttpTransport
from client.request_builder import RequestBuilder
from processor.decoder import decode_categories, decode_events, decode_object
from processor.filters import filtered_events
from processor.models import Category, Event
from settings import Settings
from streams.producer import Producer, SharedProducer

logger = logging.getLogger(__name__)


class EONET:
    """
    Entry point for consumers of the EONET service.

    Every stream returned here completes normally: errors are logged and
    replaced with an empty list at the producer boundary.
    """

    API = RequestBuilder.API
    CATEGORIES_ENDPOINT = '/categories'
    EVENTS_ENDPOINT = '/events'
    DEFAULT_DAYS = 360

    filtered_events = staticmethod(filtered_events)

    def __init__(
        self,
        builder: Optional[RequestBuilder] = None,
        transport: Optional[HttpTransport] = None,
        default_days: int = DEFAULT_DAYS
    ):
        """
        Initialize the client and its shared categories stream.

        Args:
            builder: Request builder (default: one for the public API)
            transport: HTTP transport (default: 30 second timeout)
            default_days: Window used by events() when last_days is omitted
        """
        self.builder = builder or RequestBuilder()
        self.transport = transport or HttpTransport()
        self.default_days = default_days
        self.categories: SharedProducer[List[Category]] = self._categories().share_replay()

    @classmethod
    def from_settings(cls, settings: Settings) -> 'EONET':
        """Create a client configured from Settings."""
        return cls(
            builder=RequestBuilder(base_url=settings.api_url),
            transport=HttpTransport(timeout=settings.timeout_seconds),
            default_days=settings.default_days
        )

    def request(self, endpoint: str, query: Optional[Dict[str, Any]] = None) -> Producer[Dict[str, Any]]:
        """
        Create a producer for the JSON object served at endpoint.

        If no URL can be built the returned producer completes without
        emitting.

        Args:
            endpoint: Endpoint path relative to the API base
            query: Query parameters

        Returns:
            Producer emitting the decoded response object once
        """
        try:
            url = self.builder.build(endpoint, query or {})
        except EONETError as e:
            logger.warning(
                f"Could not build request for {endpoint}: {e}",
                extra={'endpoint': endpoint, 'error_type': type(e).__name__}
            )
            return Producer.empty()

        return self.transport.fetch(url).map(lambda payload: decode_object(payload, source=url))

    def _categories(self) -> Producer[List[Category]]:
        endpoint = self.CATEGORIES_ENDPOINT
        return (
            self.request(endpoint)
            .map(lambda obj: sorted(
                decode_categories(obj, source=endpoint, base_url=self.builder.base_url),
                key=lambda category: category.name
            ))
            .catch_and_return([], description='categories')
            .default_if_empty([])
        )

    def events(self, category: Category, last_days: Optional[int] = None) -> Producer[List[Event]]:
        """
        Create a producer of open and closed events for a category.

        Both sub-requests run concurrently; the result is emitted once, after
        both have completed. A failing sub-request contributes no events.

        Args:
            category: Category whose endpoint is queried
            last_days: Number of days to look back (default: default_days, 360)

        Returns:
            Producer emitting a single list of events

        Raises:
            ValueError: If last_days is not a positive integer
        """
        return self._merged_events(category.endpoint, last_days)

    def all_events(self, last_days: Optional[int] = None) -> Producer[List[Event]]:
        """Like events(), but across every category."""
        return self._merged_events(self.EVENTS_ENDPOINT, last_days)

    def _merged_events(self, endpoint: str, last_days: Optional[int]) -> Producer[List[Event]]:
        days = self.default_days if last_days is None else last_days
        if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
            raise ValueError(f"last_days must be a positive integer, got {days!r}")

        open_events = self._events(days, closed=False, endpoint=endpoint)
        closed_events = self._events(days, closed=True, endpoint=endpoint)
        return Producer.merge(open_events, closed_events).reduce([], lambda acc, batch: acc + batch)

    def _events(self, last_days: int, closed: bool, endpoint: str) -> Producer[List[Event]]:
        status = 'closed' if closed else 'open'
        return (
            self.request(endpoint, {'days': last_days, 'status': status})
            .map(lambda obj: decode_events(obj, source=endpoint))
            .catch_and_return([], description=f"{status} events for {endpoint}")
            .default_if_empty([])
        )


_default_client: Optional[EONET] = None


def default_client() -> EONET:
    """
    Return the client shared by the whole process.

    It is created from Settings.from_env() on first use, so its categories
    cache lasts for the lifetime of the process.

    Returns:
        Process-wide EONET client
    """
    global _default_client
    if _default_client is None:
        logger.info("Creating process-wide EONET client")
        _default_client = EONET.from_settings(Settings.from_env())
    return _default_client
