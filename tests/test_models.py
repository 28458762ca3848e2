"""Unit tests for EventRecord and the seed dataset."""
import pytest

from processor.models import EventRecord, month_index, ordinal, records_from_dicts
from processor.seed_data import SEED_EVENTS, seed_events


class TestEventRecord:
    """Test cases for EventRecord helpers."""

    def test_derived_fields(self):
        """Test display fields derived from the date range."""
        record = SEED_EVENTS[0]

        assert record.month_abbr == 'NOV'
        assert record.day_start == 18
        assert record.day_end == 24
        assert record.date_range_full == '18th to 24th November, 2025'

    def test_single_day_full_range(self):
        record = EventRecord(
            id='event-1-may-2026',
            date_range='31 May',
            title='Memorial Day Backgammon Jackpot',
            location='Boston Marriott Burlington',
            month='May',
            year='2026'
        )
        assert record.date_range_full == '31st May, 2026'

    def test_dict_round_trip_keeps_all_fields(self):
        record = SEED_EVENTS[4]
        assert EventRecord.from_dict(record.to_dict()) == record
        assert set(record.to_dict()) == {'id', 'dateRange', 'title', 'location', 'month', 'year'}

    def test_from_dict_missing_field(self):
        data = SEED_EVENTS[0].to_dict()
        del data['location']
        with pytest.raises(KeyError):
            EventRecord.from_dict(data)

    def test_from_dict_wrong_type(self):
        data = SEED_EVENTS[0].to_dict()
        data['year'] = 2025
        with pytest.raises(ValueError):
            EventRecord.from_dict(data)

    def test_records_from_dicts_rejects_non_list(self):
        with pytest.raises(ValueError):
            records_from_dicts({'id': 'event-1-nov-2025'})

    @pytest.mark.parametrize('n,expected', [
        (1, '1st'), (2, '2nd'), (3, '3rd'), (4, '4th'),
        (11, '11th'), (12, '12th'), (13, '13th'), (21, '21st'), (22, '22nd'), (30, '30th'),
    ])
    def test_ordinal(self, n, expected):
        assert ordinal(n) == expected

    def test_month_index(self):
        assert month_index('January') == 1
        assert month_index('december') == 12
        assert month_index('Smarch') == 0


class TestSeedData:
    """Test cases for the bundled seed dataset."""

    def test_twelve_events_with_expected_ids(self):
        events = seed_events()

        assert len(events) == 12
        assert events[0].id == 'event-1-nov-2025'
        assert events[-1].id == 'event-12-aug-2026'
        assert len({event.id for event in events}) == 12

    def test_seed_is_chronological(self):
        keys = [event.sort_key() for event in seed_events()]
        assert keys == sorted(keys)

    def test_seed_meets_length_invariants(self):
        for event in seed_events():
            assert len(event.title) > 15
            assert len(event.location) > 5

    def test_returns_fresh_list(self):
        first = seed_events()
        first.clear()
        assert len(seed_events()) == 12
