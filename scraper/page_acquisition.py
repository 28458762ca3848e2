"""Browser-driven acquisition of the challenge-protected calendar page."""
import asyncio
import json
import logging
import uuid
from typing import Callable, Dict, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from scraper.settings import AcquisitionSettings

logger = logging.getLogger(__name__)

# Name of the host function the page script calls to hand back messages
HOST_BRIDGE = 'abtHostMessage'

SCRAPER_SCRIPT = """
(function (config) {
  if (window.top !== window || window.__abtScraperStarted) {
    return;
  }
  window.__abtScraperStarted = true;

  var lastHeight = -1;
  var stableChecks = 0;
  var scrollAttempts = 0;

  function post(payload) {
    payload.requestId = config.requestId;
    var bridge = window[config.bridge];
    if (typeof bridge === 'function') {
      bridge(JSON.stringify(payload));
    }
  }

  function challengeActive() {
    var el = document.getElementById(config.challengeElementId);
    return !!el && (el.textContent || '').indexOf(config.challengeText) !== -1;
  }

  function waitForContent() {
    if (challengeActive()) {
      setTimeout(waitForContent, config.challengePollMs);
      return;
    }
    var bodyText = document.body ? (document.body.innerText || '') : '';
    if (bodyText.length < config.minBodyLength) {
      setTimeout(waitForContent, config.contentPollMs);
      return;
    }
    drainLazyContent();
  }

  function drainLazyContent() {
    var height = document.documentElement.scrollHeight;
    if (height === lastHeight) {
      stableChecks += 1;
    } else {
      stableChecks = 0;
      lastHeight = height;
    }
    if (stableChecks >= config.stableChecks || scrollAttempts >= config.maxScrolls) {
      setTimeout(handOff, config.settleMs);
      return;
    }
    scrollAttempts += 1;
    var remaining = height - (window.scrollY + window.innerHeight);
    window.scrollBy(0, Math.max(0, Math.min(config.scrollStep, remaining)));
    setTimeout(drainLazyContent, config.scrollDelayMs);
  }

  function handOff() {
    post({ type: 'htmlContent', html: document.documentElement.outerHTML });
  }

  function start() {
    setTimeout(waitForContent, config.initialDelayMs);
  }

  if (document.readyState === 'loading') {
    document.addEventListener('DOMContentLoaded', start);
  } else {
    start();
  }
})(__CONFIG__);
"""


class AcquisitionError(Exception):
    """Base error for a failed page acquisition."""


class AcquisitionTimeoutError(AcquisitionError):
    """No HTML arrived before the outer deadline."""


class RenderError(AcquisitionError):
    """The rendering surface reported a load failure."""


class MessageParseError(AcquisitionError):
    """A message from the page script could not be decoded."""


def build_scraper_script(settings: AcquisitionSettings, request_id: str) -> str:
    """Render the page script with its timing values and request id."""
    config = {
        'requestId': request_id,
        'bridge': HOST_BRIDGE,
        'challengeElementId': settings.challenge_element_id,
        'challengeText': settings.challenge_text,
        'challengePollMs': int(settings.challenge_poll_seconds * 1000),
        'contentPollMs': int(settings.content_poll_seconds * 1000),
        'minBodyLength': settings.min_body_length,
        'initialDelayMs': int(settings.initial_delay_seconds * 1000),
        'scrollDelayMs': int(settings.scroll_delay_seconds * 1000),
        'scrollStep': settings.scroll_step_pixels,
        'stableChecks': settings.stable_checks,
        'maxScrolls': settings.max_scrolls,
        'settleMs': int(settings.settle_seconds * 1000),
    }
    return SCRAPER_SCRIPT.replace('__CONFIG__', json.dumps(config))


class RenderingSurface:
    """A scriptable page renderer that can post messages back to the host."""

    async def load(
        self,
        url: str,
        script: str,
        on_message: Callable[[str], None],
        on_error: Callable[[str], None]
    ) -> None:
        """
        Start loading url with script injected into every document.

        The script calls on_message with JSON strings; load failures are
        reported through on_error. Returns once loading has started.
        """
        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError


class PlaywrightSurface(RenderingSurface):
    """Headless Chromium surface driven through Playwright."""

    def __init__(self, settings: Optional[AcquisitionSettings] = None):
        self.settings = settings or AcquisitionSettings()
        self._playwright = None
        self._browser = None

    async def load(self, url, script, on_message, on_error) -> None:
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(headless=self.settings.headless)
        context = await self._browser.new_context(user_agent=self.settings.user_agent)
        await context.expose_function(HOST_BRIDGE, on_message)
        # Init scripts re-run after the challenge page navigates to the real one
        await context.add_init_script(script)

        page = await context.new_page()
        page.on('crash', lambda _page: on_error('page crashed'))

        logger.info(f"Loading {url} in headless browser")
        try:
            await page.goto(
                url,
                wait_until='domcontentloaded',
                timeout=self.settings.acquisition_timeout_seconds * 1000
            )
        except PlaywrightError as e:
            on_error(str(e))

    async def close(self) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None


class PageAcquisitionEngine:
    """
    Loads the calendar page in a rendering surface and returns its final HTML.

    Only one load runs at a time: calls made while a load is in flight share
    its result. Requests are tracked in a table keyed by request id, and the
    page script echoes the id back with the HTML. The engine never retries;
    every failure goes to the waiting callers as an AcquisitionError.
    """

    def __init__(
        self,
        surface: Optional[RenderingSurface] = None,
        settings: Optional[AcquisitionSettings] = None
    ):
        self.settings = settings or AcquisitionSettings()
        self.surface = surface or PlaywrightSurface(self.settings)
        self._requests: Dict[str, asyncio.Future] = {}
        self._inflight: Optional[asyncio.Task] = None

    @property
    def in_flight(self) -> bool:
        return self._inflight is not None

    async def acquire(self) -> str:
        """
        Return the fully rendered calendar page HTML.

        Raises:
            AcquisitionTimeoutError: If no HTML arrives within the deadline
            RenderError: If the surface fails to load the page
            MessageParseError: If the page sends an undecodable message
        """
        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._run())
        else:
            logger.info("Page acquisition already in flight, sharing its result")
        return await asyncio.shield(self._inflight)

    async def _run(self) -> str:
        request_id = uuid.uuid4().hex
        future = asyncio.get_running_loop().create_future()
        self._requests[request_id] = future
        timeout = self.settings.acquisition_timeout_seconds

        try:
            return await asyncio.wait_for(self._drive(request_id, future), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error(f"Page acquisition timed out after {timeout} seconds")
            raise AcquisitionTimeoutError(
                f"Scraping timeout - no data received within {timeout} seconds"
            ) from None
        finally:
            self._requests.pop(request_id, None)
            self._inflight = None
            await self._close_surface()

    async def _drive(self, request_id: str, future: asyncio.Future) -> str:
        script = build_scraper_script(self.settings, request_id)
        try:
            await self.surface.load(
                self.settings.url, script, self.handle_message, self.handle_error
            )
        except AcquisitionError:
            raise
        except Exception as e:
            logger.error(f"Rendering surface failed to start: {e}", exc_info=True)
            raise RenderError(f"Failed to load calendar page: {e}") from e

        html_content = await future
        logger.info(f"Received {len(html_content)} characters of rendered HTML")
        return html_content

    async def _close_surface(self) -> None:
        try:
            await self.surface.close()
        except Exception as e:
            logger.warning(f"Failed to close rendering surface: {e}")

    def handle_message(self, raw: str) -> None:
        """Resolve the matching pending request from a page-script message."""
        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError(f"expected an object, got {type(data).__name__}")
        except (TypeError, ValueError) as e:
            logger.error(f"Error processing scraper message: {e}")
            self._fail_pending(MessageParseError(f"Unreadable message from page: {e}"))
            return

        if data.get('type') != 'htmlContent' or not data.get('html'):
            logger.debug(f"Ignoring page message of type {data.get('type')!r}")
            return

        future = self._requests.get(data.get('requestId'))
        if future is None or future.done():
            logger.warning(f"Dropping HTML for unknown request {data.get('requestId')!r}")
            return
        future.set_result(data['html'])

    def handle_error(self, error) -> None:
        logger.error(f"Rendering surface error: {error}")
        self._fail_pending(RenderError(f"Failed to load calendar page: {error}"))

    def _fail_pending(self, error: AcquisitionError) -> None:
        for future in self._requests.values():
            if not future.done():
                future.set_exception(error)

    def reset(self) -> None:
        """Cancel any in-flight load and drop pending requests."""
        if self._inflight is not None and not self._inflight.done():
            self._inflight.cancel()
        self._inflight = None
        self._requests.clear()
