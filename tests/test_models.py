"""Unit tests for EONET entity constructors."""
from datetime import datetime, timedelta, timezone

import pytest

from processor.models import Category, Event, Location, parse_date


class TestParseDate:
    """Test cases for the EONET timestamp parser."""

    @pytest.mark.parametrize('value', [
        '2021-06-01T12:00:00+00:00',
        '2021-06-01T12:00:00Z',
        '2021-06-01T12:00:00+0000',
    ])
    def test_parse_utc_forms(self, value):
        """Test the accepted spellings of a UTC offset."""
        assert parse_date(value) == datetime(2021, 6, 1, 12, 0, tzinfo=timezone.utc)

    def test_parse_keeps_offset(self):
        """Test that non-UTC offsets are preserved."""
        parsed = parse_date('2021-06-01T12:00:00-05:00')

        assert parsed.utcoffset() == timedelta(hours=-5)

    @pytest.mark.parametrize('value', [
        '2021-06-01',
        '2021-06-01T12:00:00',
        '01/06/2021 12:00',
        'June 1, 2021',
        '',
        None,
        20210601,
        '2021-6-1T1:2:3+0000',
        '2021-06-01T12:00:00+00:00:00',
        ' 2021-06-01T12:00:00Z',
        '2021-06-01T12:00:00Z\n',
        '2021-06-01T12:00:00.123Z',
        '２０２１-06-01T12:00:00Z',
    ])
    def test_parse_rejects_other_shapes(self, value):
        """Test that anything but the fixed format yields None."""
        assert parse_date(value) is None


class TestCategory:
    """Test cases for Category.from_dict."""

    def test_from_dict_valid(self):
        """Test decoding a complete category record."""
        category = Category.from_dict({
            'id': 8,
            'title': 'Wildfires',
            'link': 'https://eonet.sci.gsfc.nasa.gov/api/v2.1/categories/8',
            'description': 'Wildfires includes all nature of fire.'
        })

        assert category.id == 8
        assert category.name == 'Wildfires'
        assert category.endpoint == '/categories/8'
        assert category.description == 'Wildfires includes all nature of fire.'
        assert category.events == []

    def test_from_dict_foreign_link_kept(self):
        """Test that links outside the API base are kept verbatim."""
        category = Category.from_dict({'id': 'fires', 'title': 'Fires', 'link': 'https://example.com/fires'})

        assert category.id == 'fires'
        assert category.endpoint == 'https://example.com/fires'

    def test_from_dict_custom_base_url(self):
        """Test stripping a non-default base URL."""
        category = Category.from_dict(
            {'id': 8, 'title': 'Wildfires', 'link': 'http://localhost/api/categories/8'},
            base_url='http://localhost/api/'
        )

        assert category.endpoint == '/categories/8'

    @pytest.mark.parametrize('record', [
        {'title': 'Wildfires', 'link': '/categories/8'},
        {'id': True, 'title': 'Wildfires', 'link': '/categories/8'},
        {'id': '', 'title': 'Wildfires', 'link': '/categories/8'},
        {'id': 8, 'link': '/categories/8'},
        {'id': 8, 'title': '   ', 'link': '/categories/8'},
        {'id': 8, 'title': 'Wildfires'},
        {'id': 8, 'title': 'Wildfires', 'link': ''},
        {'id': 8, 'title': 'Wildfires', 'link': 42},
        'not a dict',
    ])
    def test_from_dict_malformed(self, record):
        """Test that malformed records give None instead of raising."""
        assert Category.from_dict(record) is None

    def test_events_list_not_shared(self):
        """Test that each category gets its own events list."""
        first = Category(id=1, name='A', endpoint='/a')
        second = Category(id=2, name='B', endpoint='/b')

        first.events.append('x')

        assert second.events == []


class TestEvent:
    """Test cases for Event.from_dict."""

    def _record(self, **overrides):
        record = {
            'id': 'EONET_1',
            'title': 'Fire A',
            'description': '',
            'link': 'https://eonet.sci.gsfc.nasa.gov/api/v2.1/events/EONET_1',
            'closed': None,
            'categories': [{'id': 8, 'title': 'Wildfires'}],
            'sources': [{'id': 'InciWeb', 'url': 'https://inciweb.nwcg.gov/incident/1/'}],
            'geometries': [
                {'date': '2021-06-01T12:00:00+00:00', 'type': 'Point', 'coordinates': [-120.5, 38.2]},
                {'date': '2021-06-03T08:30:00Z', 'type': 'Point', 'coordinates': [-120.6, 38.3]},
            ]
        }
        record.update(overrides)
        return record

    def test_from_dict_valid(self):
        """Test decoding a complete event record."""
        event = Event.from_dict(self._record())

        assert event.id == 'EONET_1'
        assert event.title == 'Fire A'
        assert event.categories == [8]
        assert event.sources == ['https://inciweb.nwcg.gov/incident/1/']
        assert event.closed is None
        assert len(event.locations) == 2
        assert isinstance(event.locations[0], Location)

    def test_from_dict_uses_latest_observation(self):
        """Test that the event date is the newest geometry date."""
        event = Event.from_dict(self._record())

        assert event.date == datetime(2021, 6, 3, 8, 30, tzinfo=timezone.utc)

    def test_from_dict_geometry_without_coordinates(self):
        """Test that a dated geometry without coordinates still dates the event."""
        event = Event.from_dict(self._record(geometries=[{'date': '2021-06-01T12:00:00+00:00'}]))

        assert event.date == datetime(2021, 6, 1, 12, 0, tzinfo=timezone.utc)
        assert event.locations == []

    def test_from_dict_multiple_categories(self):
        """Test that every valid category id is kept."""
        event = Event.from_dict(self._record(categories=[
            {'id': 8, 'title': 'Wildfires'},
            {'title': 'missing id'},
            {'id': 10, 'title': 'Severe Storms'},
        ]))

        assert event.categories == [8, 10]

    def test_from_dict_closed_date(self):
        """Test decoding the close date of a closed event."""
        event = Event.from_dict(self._record(closed='2021-06-10T00:00:00Z'))

        assert event.closed == datetime(2021, 6, 10, tzinfo=timezone.utc)

    def test_from_dict_strips_html_description(self):
        """Test that markup in descriptions is reduced to text."""
        event = Event.from_dict(self._record(description='<p>Fire near <b>Sacramento</b></p>'))

        assert event.description == 'Fire near Sacramento'

    @pytest.mark.parametrize('overrides', [
        {'id': ''},
        {'id': None},
        {'id': 12},
        {'title': None},
        {'categories': []},
        {'categories': [{'title': 'no id'}]},
        {'categories': None},
        {'geometries': []},
        {'geometries': [{'date': '2021-06-01'}]},
        {'geometries': None},
    ])
    def test_from_dict_malformed(self, overrides):
        """Test that malformed records give None instead of raising."""
        assert Event.from_dict(self._record(**overrides)) is None

    def test_from_dict_not_a_dict(self):
        """Test that non-object entries give None."""
        assert Event.from_dict(['EONET_1']) is None
