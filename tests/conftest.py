"""Shared fixtures for EONET tests."""
import json

import pytest

from processor.models import Category


@pytest.fixture
def wildfires():
    """Wildfires category pointing at the global events endpoint."""
    return Category(id=8, name='Wildfires', endpoint='/events')


@pytest.fixture
def categories_payload():
    """Categories response body from the EONET service."""
    return json.dumps({
        'categories': [
            {'id': 8, 'title': 'Wildfires', 'link': 'https://.../events?category=8'},
            {'id': 10, 'title': 'Severe Storms', 'link': 'https://.../events?category=10'}
        ]
    })
