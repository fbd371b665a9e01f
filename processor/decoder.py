"""Decoding of EONET response payloads into domain entities."""
import json
import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

from client.errors import InvalidJSONError
from client.request_builder import API
from processor.models import Category, Event

logger = logging.getLogger(__name__)

T = TypeVar('T')


def decode_object(payload: bytes, source: str) -> Dict[str, Any]:
    """
    Parse a response body that must contain a JSON object.

    Args:
        payload: Raw response bytes
        source: URL or endpoint the payload came from, used in the error

    Returns:
        Decoded JSON object

    Raises:
        InvalidJSONError: If the payload is not JSON or not an object
    """
    try:
        decoded = json.loads(payload)
    except (ValueError, TypeError) as e:
        raise InvalidJSONError(source) from e

    if not isinstance(decoded, dict):
        raise InvalidJSONError(source)
    return decoded


def decode_list(
    obj: Dict[str, Any],
    key: str,
    constructor: Callable[[Dict[str, Any]], Optional[T]],
    source: str
) -> List[T]:
    """
    Decode obj[key] with constructor, dropping entries it rejects.

    Args:
        obj: Decoded response object
        key: Field holding the array of records
        constructor: Returns an entity or None for a malformed record
        source: URL or endpoint the payload came from

    Returns:
        List of decoded entities

    Raises:
        InvalidJSONError: If obj[key] is missing or not an array
    """
    raw = obj.get(key)
    if not isinstance(raw, list):
        raise InvalidJSONError(source)

    decoded = []
    for entry in raw:
        item = constructor(entry)
        if item is None:
            logger.debug(f"Skipping malformed '{key}' entry from {source}: {entry!r:.200}")
            continue
        decoded.append(item)

    logger.info(f"Decoded {len(decoded)} of {len(raw)} '{key}' entries from {source}")
    return decoded


def decode_categories(obj: Dict[str, Any], source: str, base_url: str = API) -> List[Category]:
    """
    Decode the "categories" array of a categories response.

    Args:
        obj: Decoded response object
        source: URL or endpoint the payload came from
        base_url: API base URL stripped from category links

    Returns:
        Valid categories in response order

    Raises:
        InvalidJSONError: If the "categories" field is missing or not an array
    """
    return decode_list(
        obj, 'categories', lambda entry: Category.from_dict(entry, base_url=base_url), source
    )


def decode_events(obj: Dict[str, Any], source: str) -> List[Event]:
    """
    Decode the "events" array of an events response.

    Args:
        obj: Decoded response object
        source: URL or endpoint the payload came from

    Returns:
        Valid events in response order

    Raises:
        InvalidJSONError: If the "events" field is missing or not an array
    """
    return decode_list(obj, 'events', Event.from_dict, source)
