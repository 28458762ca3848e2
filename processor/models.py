"""Data models for ABT calendar events."""
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

MONTH_NAMES = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December',
]

_DAY_PATTERN = re.compile(r'\d{1,2}')


def month_index(month: str) -> int:
    """Return the 1-based calendar index of a full month name (0 if unknown)."""
    for index, name in enumerate(MONTH_NAMES, start=1):
        if name.lower() == month.strip().lower():
            return index
    return 0


def ordinal(n: int) -> str:
    """Format an integer with its English ordinal suffix (1st, 22nd, 13th)."""
    if 10 <= n % 100 <= 20:
        suffix = 'th'
    else:
        suffix = {1: 'st', 2: 'nd', 3: 'rd'}.get(n % 10, 'th')
    return f"{n}{suffix}"


@dataclass(frozen=True)
class EventRecord:
    """Event extracted from the ABT calendar page."""
    id: str
    date_range: str
    title: str
    location: str
    month: str
    year: str

    @property
    def month_abbr(self) -> str:
        return self.month[:3].upper()

    @property
    def _days(self) -> Tuple[int, int]:
        days = [int(day) for day in _DAY_PATTERN.findall(self.date_range)]
        if not days:
            return 0, 0
        return days[0], days[-1]

    @property
    def day_start(self) -> int:
        return self._days[0]

    @property
    def day_end(self) -> int:
        return self._days[1]

    @property
    def date_range_full(self) -> str:
        """Long display form, e.g. '18th to 24th November, 2025'."""
        start, end = self._days
        if not start:
            return f"{self.date_range} {self.month}, {self.year}".strip()
        if start == end:
            return f"{ordinal(start)} {self.month}, {self.year}"
        return f"{ordinal(start)} to {ordinal(end)} {self.month}, {self.year}"

    def sort_key(self) -> Tuple[int, int]:
        return int(self.year), month_index(self.month)

    def to_dict(self) -> Dict[str, str]:
        return {
            'id': self.id,
            'dateRange': self.date_range,
            'title': self.title,
            'location': self.location,
            'month': self.month,
            'year': self.year,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'EventRecord':
        """
        Build an EventRecord from its persisted dictionary form.

        Raises:
            KeyError: If a field is missing
            ValueError: If a field is not a string
        """
        values = {
            'id': data['id'],
            'date_range': data['dateRange'],
            'title': data['title'],
            'location': data['location'],
            'month': data['month'],
            'year': data['year'],
        }
        for name, value in values.items():
            if not isinstance(value, str):
                raise ValueError(f"Field '{name}' must be a string, got {type(value).__name__}")
        return cls(**values)


def records_to_dicts(records: List[EventRecord]) -> List[Dict[str, str]]:
    return [record.to_dict() for record in records]


def records_from_dicts(items: Any) -> List[EventRecord]:
    """
    Convert a decoded JSON payload back into EventRecords.

    Raises:
        ValueError: If the payload is not a list of event dictionaries
    """
    if not isinstance(items, list):
        raise ValueError(f"Expected a list of events, got {type(items).__name__}")
    records = []
    for item in items:
        if not isinstance(item, dict):
            raise ValueError(f"Expected an event dictionary, got {type(item).__name__}")
        records.append(EventRecord.from_dict(item))
    return records
