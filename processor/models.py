"""Data models for EONET categories and events."""
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from bs4 import BeautifulSoup

from client.request_builder import API

logger = logging.getLogger(__name__)

# yyyy-MM-dd'T'HH:mm:ssZZZZ; numeric directives only, so the locale never applies
ISO_DATE_FORMAT = '%Y-%m-%dT%H:%M:%S%z'
ISO_DATE_SHAPE = re.compile(r'\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(Z|[+-]\d{2}:?\d{2})', re.ASCII)

CategoryId = Union[int, str]


def parse_date(value: Any) -> Optional[datetime]:
    """
    Parse an EONET timestamp into an aware datetime.

    Only zero-padded fields with a "Z", "+hh:mm" or "+hhmm" offset are
    accepted; strptime alone would also take unpadded fields.

    Args:
        value: Timestamp such as "2021-06-01T12:00:00+00:00" or "2019-03-01T00:00:00Z"

    Returns:
        Aware datetime or None if the value does not have the expected shape
    """
    if not isinstance(value, str) or not ISO_DATE_SHAPE.fullmatch(value):
        return None
    try:
        return datetime.strptime(value, ISO_DATE_FORMAT)
    except ValueError:
        return None


def parse_category_id(value: Any) -> Optional[CategoryId]:
    """Return value if it is a usable category id (int or non-empty string)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def plain_text(text: Any) -> str:
    """Strip HTML markup that some upstream sources put in descriptions."""
    if not isinstance(text, str):
        return ''
    if '<' in text and '>' in text:
        return BeautifulSoup(text, 'html.parser').get_text(' ', strip=True)
    return text.strip()


@dataclass
class Location:
    """Single dated geometry of an event."""
    type: str
    date: datetime
    coordinates: list

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional['Location']:
        """Build a Location from a geometry record, or None if it is malformed."""
        if not isinstance(data, dict):
            return None
        date = parse_date(data.get('date'))
        coordinates = data.get('coordinates')
        if date is None or not isinstance(coordinates, list) or not coordinates:
            return None
        return cls(
            type=data.get('type') if isinstance(data.get('type'), str) else 'Point',
            date=date,
            coordinates=coordinates
        )


@dataclass
class Event:
    """Natural event reported by EONET."""
    id: str
    title: str
    description: str
    date: datetime
    categories: List[CategoryId]
    locations: List[Location] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)
    closed: Optional[datetime] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Optional['Event']:
        """
        Build an Event from an entry of the "events" array.

        The event date is the most recent geometry date. Events without an
        id, without any category, or without a parseable date are rejected.

        Args:
            data: Decoded JSON object for one event

        Returns:
            Event object or None if the entry is malformed
        """
        if not isinstance(data, dict):
            return None

        event_id = data.get('id')
        title = data.get('title')
        if not isinstance(event_id, str) or not event_id.strip():
            return None
        if not isinstance(title, str):
            return None

        raw_categories = data.get('categories')
        if not isinstance(raw_categories, list):
            return None
        categories = []
        for raw in raw_categories:
            category_id = parse_category_id(raw.get('id')) if isinstance(raw, dict) else None
            if category_id is not None:
                categories.append(category_id)
        if not categories:
            return None

        raw_geometries = data.get('geometries')
        if not isinstance(raw_geometries, list):
            return None
        dates = [
            date for date in (
                parse_date(g.get('date')) for g in raw_geometries if isinstance(g, dict)
            )
            if date is not None
        ]
        if not dates:
            return None
        locations = [
            location for location in (Location.from_dict(g) for g in raw_geometries)
            if location is not None
        ]

        raw_sources = data.get('sources')
        sources = []
        if isinstance(raw_sources, list):
            sources = [
                s['url'] for s in raw_sources
                if isinstance(s, dict) and isinstance(s.get('url'), str)
            ]

        return cls(
            id=event_id.strip(),
            title=title.strip(),
            description=plain_text(data.get('description')),
            date=max(dates),
            categories=categories,
            locations=locations,
            sources=sources,
            closed=parse_date(data.get('closed'))
        )


@dataclass
class Category:
    """EONET event category and the events already associated with it."""
    id: CategoryId
    name: str
    endpoint: str
    description: str = ''
    events: List[Event] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_url: str = API) -> Optional['Category']:
        """
        Build a Category from an entry of the "categories" array.

        Links under base_url are stored relative to it so they can be fed
        back to the request builder.

        Args:
            data: Decoded JSON object for one category
            base_url: API base URL stripped from the category link

        Returns:
            Category object or None if the entry is malformed
        """
        if not isinstance(data, dict):
            return None

        category_id = parse_category_id(data.get('id'))
        name = data.get('title')
        link = data.get('link')
        if category_id is None:
            return None
        if not isinstance(name, str) or not name.strip():
            return None
        if not isinstance(link, str) or not link.strip():
            return None

        endpoint = link.strip()
        base = base_url.rstrip('/')
        if endpoint.startswith(base + '/'):
            endpoint = endpoint[len(base):]

        return cls(
            id=category_id,
            name=name.strip(),
            endpoint=endpoint,
            description=plain_text(data.get('description'))
        )
