"""Pure filters over decoded EONET entities."""
from typing import Iterable, List, Tuple

from processor.models import Category, Event


def event_sort_key(event: Event) -> Tuple[float, str]:
    """Newest observation first, ties broken by id."""
    return (-event.date.timestamp(), event.id)


def compare_dates(first: Event, second: Event) -> bool:
    """Return True if first should be listed before second."""
    return event_sort_key(first) < event_sort_key(second)


def filtered_events(events: Iterable[Event], category: Category) -> List[Event]:
    """
    Select events of a category that are not yet associated with it.

    An event listed under several categories matches each of them.

    Args:
        events: Candidate events
        category: Target category; its events are the ones already associated

    Returns:
        Matching events sorted newest first
    """
    known_ids = {event.id for event in category.events}
    return sorted(
        (
            event for event in events
            if category.id in event.categories and event.id not in known_ids
        ),
        key=event_sort_key
    )
