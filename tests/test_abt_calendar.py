"""Unit tests for the direct ABT calendar fetcher."""
import asyncio
import threading
from unittest.mock import patch

import pytest
import responses
from requests.exceptions import ConnectionError, HTTPError

from processor.event_extractor import extract_events
from processor.seed_data import seed_events
from scraper.abt_calendar import ABTCalendarScraper
from scraper.settings import AcquisitionSettings
from storage.cache_store import CacheStore
from tests.conftest import CALENDAR_HTML, CALENDAR_URL


class TestABTCalendarScraper:
    """Test cases for ABTCalendarScraper.direct_fetch."""

    @responses.activate
    def test_direct_fetch_success(self, cache, memory_store):
        """Test events are extracted and stored in memory and persisted tiers."""
        responses.add(responses.GET, CALENDAR_URL, body=CALENDAR_HTML, status=200)

        scraper = ABTCalendarScraper(cache)
        events = asyncio.run(scraper.direct_fetch())

        assert len(events) == 3
        assert cache.get_memory() == events
        assert CacheStore.EVENTS_KEY in memory_store.data
        assert not cache.fetch_guard.active

    @responses.activate
    def test_sends_browser_headers(self, cache):
        """Test the request looks like a desktop browser."""
        responses.add(responses.GET, CALENDAR_URL, body=CALENDAR_HTML, status=200)

        asyncio.run(ABTCalendarScraper(cache).direct_fetch())

        request_headers = responses.calls[0].request.headers
        assert request_headers['User-Agent'].startswith('Mozilla/5.0')
        assert 'text/html' in request_headers['Accept']
        assert request_headers['Accept-Language'].startswith('en-US')

    @responses.activate
    def test_forbidden_response_raises(self, cache):
        """Test a 403 challenge response raises without retrying."""
        responses.add(responses.GET, CALENDAR_URL, body='Just a moment...', status=403)

        scraper = ABTCalendarScraper(cache)
        with pytest.raises(HTTPError):
            asyncio.run(scraper.direct_fetch())

        assert len(responses.calls) == 1
        assert not cache.fetch_guard.active
        assert cache.get_memory() is None

    @responses.activate
    def test_non_2xx_status_raises(self, cache, memory_store):
        """Test a 3xx response is treated as a failure, not as page content."""
        responses.add(responses.GET, CALENDAR_URL, body=CALENDAR_HTML, status=304)

        with pytest.raises(HTTPError) as exc_info:
            asyncio.run(ABTCalendarScraper(cache).direct_fetch())

        assert exc_info.value.response.status_code == 304
        assert not cache.fetch_guard.active
        assert memory_store.data == {}

    @responses.activate
    def test_extraction_runs_off_event_loop_thread(self, cache):
        responses.add(responses.GET, CALENDAR_URL, body=CALENDAR_HTML, status=200)
        threads = []

        def recording_extract(html_content):
            threads.append(threading.get_ident())
            return extract_events(html_content)

        with patch('scraper.abt_calendar.extract_events', side_effect=recording_extract):
            events = asyncio.run(ABTCalendarScraper(cache).direct_fetch())

        assert len(events) == 3
        assert threads and threads[0] != threading.get_ident()

    @responses.activate
    def test_connection_error_raises(self, cache):
        responses.add(responses.GET, CALENDAR_URL, body=ConnectionError('unreachable'))

        with pytest.raises(ConnectionError):
            asyncio.run(ABTCalendarScraper(cache).direct_fetch())
        assert not cache.fetch_guard.active

    @responses.activate
    def test_no_events_returns_seed_without_caching(self, cache, memory_store):
        """Test a challenge page with no events yields the seed dataset."""
        responses.add(
            responses.GET,
            CALENDAR_URL,
            body='<html><div id="text">Please wait while we check your browser</div></html>',
            status=200
        )

        events = asyncio.run(ABTCalendarScraper(cache).direct_fetch())

        assert events == seed_events()
        assert cache.get_memory() is None
        assert memory_store.data == {}

    @responses.activate
    def test_concurrent_call_returns_empty(self, cache):
        """Test a call made while a fetch is in flight is dropped."""
        cache.fetch_guard.try_acquire()

        events = asyncio.run(ABTCalendarScraper(cache).direct_fetch())

        assert events == []
        assert len(responses.calls) == 0

    @responses.activate
    def test_custom_url_and_timeout(self, cache):
        url = 'https://example.com/calendar'
        responses.add(responses.GET, url, body=CALENDAR_HTML, status=200)
        settings = AcquisitionSettings(url=url, http_timeout=5)

        events = asyncio.run(ABTCalendarScraper(cache, settings).direct_fetch())

        assert len(events) == 3
        assert responses.calls[0].request.url == url
