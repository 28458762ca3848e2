"""Entry point for reading ABT calendar events with layered fallbacks."""
import asyncio
import logging
from typing import List, Optional

from processor.event_extractor import extract_events
from processor.models import EventRecord
from scraper.abt_calendar import ABTCalendarScraper
from scraper.page_acquisition import PageAcquisitionEngine
from scraper.settings import AcquisitionSettings
from storage.cache_store import CacheStore

logger = logging.getLogger(__name__)


class CalendarService:
    """
    Serves calendar events from memory, then persisted storage, then the
    network, with the seed dataset as the floor.

    get_events never raises and never returns an empty list. The browser
    scrape (scrape) is the one path whose errors reach the caller.
    """

    def __init__(
        self,
        cache: CacheStore,
        scraper: Optional[ABTCalendarScraper] = None,
        engine: Optional[PageAcquisitionEngine] = None,
        settings: Optional[AcquisitionSettings] = None
    ):
        self.settings = settings or AcquisitionSettings()
        self.cache = cache
        self.scraper = scraper or ABTCalendarScraper(cache, self.settings)
        self.engine = engine or PageAcquisitionEngine(settings=self.settings)

    async def get_events(self, force_refresh: bool = False) -> List[EventRecord]:
        """
        Return calendar events, fetching only on refresh or cache miss.

        Args:
            force_refresh: Skip the cache tiers and fetch the page

        Returns:
            Non-empty list of EventRecord objects
        """
        if not force_refresh:
            memory = self.cache.get_memory()
            if memory:
                logger.debug(f"Serving {len(memory)} events from memory")
                return memory

            persisted = await self.cache.get_persisted()
            if persisted:
                return persisted

        return await self._refresh()

    async def _refresh(self) -> List[EventRecord]:
        try:
            events = await self.scraper.direct_fetch()
        except Exception as e:
            logger.error(
                f"Direct fetch failed, serving seed dataset: {e}",
                extra={'error_type': type(e).__name__},
                exc_info=True
            )
            return self.cache.get_seed()

        if not events:
            logger.info("Another fetch is in flight, serving cached events")
            return await self.get_cached_events()
        return events

    async def get_cached_events(self) -> List[EventRecord]:
        """Return memory, else persisted, else seed events without network access."""
        memory = self.cache.get_memory()
        if memory:
            return memory
        return await self.cache.get_persisted()

    async def clear_cache(self) -> None:
        await self.cache.clear_all()

    def set_memory(self, records: List[EventRecord]) -> None:
        self.cache.set_memory(records)

    async def cache_to_disk(self, records: List[EventRecord]) -> None:
        await self.cache.set_persisted(records)

    async def scrape(self) -> List[EventRecord]:
        """
        Run a full browser scrape and adopt its events into the cache.

        Returns:
            Extracted events; empty if the rendered page held none

        Raises:
            AcquisitionError: If the page could not be acquired
        """
        html_content = await self.engine.acquire()
        events = await asyncio.to_thread(extract_events, html_content)
        if events:
            await self.cache.store_events(events)
            logger.info(f"Browser scrape stored {len(events)} events")
        else:
            logger.warning("Browser scrape returned a page with no events")
        return events

    def reset(self) -> None:
        """Drop in-process cache and in-flight state."""
        self.cache.reset()
        self.engine.reset()
