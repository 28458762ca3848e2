"""Direct HTTP fetcher for the ABT calendar page."""
import asyncio
import logging
from typing import List, Optional

import requests

from processor.event_extractor import extract_events
from processor.models import EventRecord
from scraper.settings import AcquisitionSettings
from storage.cache_store import CacheStore

logger = logging.getLogger(__name__)


class ABTCalendarScraper:
    """Fetches the calendar with a plain GET that looks like a desktop browser."""

    def __init__(self, cache: CacheStore, settings: Optional[AcquisitionSettings] = None):
        """
        Initialize the calendar scraper.

        Args:
            cache: Cache store that receives successfully extracted events
            settings: Target URL, user agent and HTTP timeout
        """
        self.cache = cache
        self.settings = settings or AcquisitionSettings()

    @property
    def headers(self) -> dict:
        return {
            'User-Agent': self.settings.user_agent,
            'Accept': (
                'text/html,application/xhtml+xml,application/xml;q=0.9,'
                'image/avif,image/webp,*/*;q=0.8'
            ),
            'Accept-Language': 'en-US,en;q=0.9',
            'Cache-Control': 'no-cache',
            'Pragma': 'no-cache',
            'Upgrade-Insecure-Requests': '1',
            'Sec-Fetch-Dest': 'document',
            'Sec-Fetch-Mode': 'navigate',
            'Sec-Fetch-Site': 'none',
            'Sec-Fetch-User': '?1',
        }

    async def direct_fetch(self) -> List[EventRecord]:
        """
        Fetch and extract calendar events with a single GET request.

        Returns an empty list straight away when another fetch is already in
        flight. Returns the seed dataset when the page yields no events.

        Returns:
            List of EventRecord objects

        Raises:
            requests.RequestException: On connection failure or non-2xx status
        """
        if not self.cache.fetch_guard.try_acquire():
            logger.info("Direct fetch already in progress, skipping this call")
            return []

        try:
            html_content = await asyncio.to_thread(self._fetch_calendar_html)
            events = await asyncio.to_thread(extract_events, html_content)

            if not events:
                logger.warning(
                    "No events extracted from fetched page, "
                    "challenge page or markup change suspected; using seed dataset"
                )
                return self.cache.get_seed()

            await self.cache.store_events(events)
            logger.info(f"Direct fetch stored {len(events)} events")
            return events
        finally:
            self.cache.fetch_guard.release()

    def _fetch_calendar_html(self) -> str:
        """
        Fetch calendar HTML from the ABT calendar page.

        Returns:
            HTML content as string

        Raises:
            requests.RequestException: If the request fails or returns non-2xx
        """
        logger.info(f"Fetching calendar HTML from {self.settings.url}")
        response = requests.get(
            self.settings.url,
            headers=self.headers,
            timeout=self.settings.http_timeout
        )
        response.raise_for_status()
        if not 200 <= response.status_code < 300:
            raise requests.HTTPError(
                f"Unexpected status {response.status_code} from {self.settings.url}",
                response=response
            )
        return response.text
