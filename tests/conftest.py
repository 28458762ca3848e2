"""Shared fixtures for the ABT calendar tests."""
import asyncio
import json
import re

import pytest

from processor.models import EventRecord
from scraper.page_acquisition import RenderingSurface
from storage.cache_store import CacheStore
from storage.key_value_store import KeyValueStore

CALENDAR_URL = "https://usbgf.org/abt-calendar/"

SCENARIO_HTML = """
<html>
    <head>
        <script>var banner = "December 2025 1 - 2 Dec";</script>
        <style>.event { color: #000; }</style>
    </head>
    <body>
        <h2>November 2025</h2>
        <div class="event">
            <span class="date">18 - 24 Nov</span>
            <div>#### 2025 Miami Open Backgammon Championship (ABT)</div>
            <p>Tuesday, Newport Beachside Hotel &amp; Resort</p>
        </div>
    </body>
</html>
"""

CALENDAR_HTML = """
<html>
    <body>
        <h2>January 2026</h2>
        <div class="event">
            <span class="date">08 - 11 Jan</span>
            <h3 class="title">Florida State Backgammon Championships (ABT)</h3>
            <p>Thursday, Hilton Orlando Lake Buena Vista</p>
        </div>
        <h2>November 2025</h2>
        <div class="event">
            <span class="date">18 - 24 Nov</span>
            <h3 class="title">2025 Miami Open Backgammon Championship (ABT)</h3>
            <p>Tuesday, Newport Beachside Hotel</p>
        </div>
        <div class="event">
            <span class="date">28 Nov</span>
            <h3 class="title">Thanksgiving Backgammon Jackpot Weekend</h3>
            <p>Friday, Embassy Suites Fort Lauderdale</p>
        </div>
    </body>
</html>
"""


class DictStore(KeyValueStore):
    """In-memory KeyValueStore that records every call."""

    def __init__(self, data=None):
        self.data = dict(data or {})
        self.calls = []

    def get(self, key):
        self.calls.append(('get', key))
        return self.data.get(key)

    def set(self, key, value):
        self.calls.append(('set', key))
        self.data[key] = value

    def remove(self, key):
        self.calls.append(('remove', key))
        self.data.pop(key, None)


class FakeSurface(RenderingSurface):
    """Rendering surface that answers the page script without a browser."""

    def __init__(self, html=CALENDAR_HTML, delay=0.01, respond=True,
                 fail_with=None, raw_message=None, load_error=None):
        self.html = html
        self.delay = delay
        self.respond = respond
        self.fail_with = fail_with
        self.raw_message = raw_message
        self.load_error = load_error
        self.loads = []
        self.scripts = []
        self.closed = 0

    async def load(self, url, script, on_message, on_error):
        self.loads.append(url)
        self.scripts.append(script)
        if self.load_error is not None:
            raise self.load_error

        request_id = re.search(r'"requestId": "([0-9a-f]+)"', script).group(1)
        loop = asyncio.get_running_loop()
        if self.fail_with is not None:
            loop.call_later(self.delay, on_error, self.fail_with)
        elif self.raw_message is not None:
            loop.call_later(self.delay, on_message, self.raw_message)
        elif self.respond:
            message = json.dumps({
                'type': 'htmlContent',
                'requestId': request_id,
                'html': self.html
            })
            loop.call_later(self.delay, on_message, message)

    async def close(self):
        self.closed += 1


def make_event(index, title, month='March', year='2026'):
    return EventRecord(
        id=f'event-{index}-{month[:3].lower()}-{year}',
        date_range='12 - 15 Mar',
        title=title,
        location='Hilton Columbus at Easton',
        month=month,
        year=year
    )


@pytest.fixture
def memory_store():
    return DictStore()


@pytest.fixture
def cache(memory_store):
    return CacheStore(memory_store)


@pytest.fixture
def events_a():
    return [make_event(1, 'Ohio State Backgammon Championships (ABT)')]


@pytest.fixture
def events_b():
    return [
        make_event(1, 'Chicago Spring Backgammon Open (ABT)', month='April'),
        make_event(2, 'New England Backgammon Championships (ABT)', month='May'),
    ]
