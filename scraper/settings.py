"""Tunable settings for fetching the ABT calendar page."""
import os
from dataclasses import dataclass

ABT_CALENDAR_URL = 'https://usbgf.org/abt-calendar/'

BROWSER_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)


def _env_float(name: str, default: float) -> float:
    return float(os.environ.get(name, default))


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, default))


@dataclass(frozen=True)
class AcquisitionSettings:
    """
    Timing and threshold values for loading the calendar page.

    These encode assumptions about how the source site's challenge page and
    lazy-loaded content behave, so every value can be overridden through
    environment variables (see from_env).
    """
    url: str = ABT_CALENDAR_URL
    user_agent: str = BROWSER_USER_AGENT
    http_timeout: float = 30.0
    challenge_element_id: str = 'text'
    challenge_text: str = 'Please wait'
    challenge_poll_seconds: float = 2.0
    content_poll_seconds: float = 2.0
    min_body_length: int = 500
    initial_delay_seconds: float = 3.0
    scroll_delay_seconds: float = 1.5
    scroll_step_pixels: int = 800
    stable_checks: int = 3
    max_scrolls: int = 20
    settle_seconds: float = 1.5
    acquisition_timeout_seconds: float = 60.0
    headless: bool = True

    @classmethod
    def from_env(cls) -> 'AcquisitionSettings':
        """Build settings from ABT_* environment variables, falling back to defaults."""
        defaults = cls()
        return cls(
            url=os.environ.get('ABT_CALENDAR_URL', defaults.url),
            user_agent=os.environ.get('ABT_USER_AGENT', defaults.user_agent),
            http_timeout=_env_float('TIMEOUT_SECONDS', defaults.http_timeout),
            challenge_poll_seconds=_env_float(
                'ABT_CHALLENGE_POLL_SECONDS', defaults.challenge_poll_seconds),
            content_poll_seconds=_env_float(
                'ABT_CONTENT_POLL_SECONDS', defaults.content_poll_seconds),
            min_body_length=_env_int('ABT_MIN_BODY_LENGTH', defaults.min_body_length),
            initial_delay_seconds=_env_float(
                'ABT_INITIAL_DELAY_SECONDS', defaults.initial_delay_seconds),
            scroll_delay_seconds=_env_float(
                'ABT_SCROLL_DELAY_SECONDS', defaults.scroll_delay_seconds),
            scroll_step_pixels=_env_int('ABT_SCROLL_STEP_PIXELS', defaults.scroll_step_pixels),
            stable_checks=_env_int('ABT_STABLE_CHECKS', defaults.stable_checks),
            max_scrolls=_env_int('ABT_MAX_SCROLLS', defaults.max_scrolls),
            settle_seconds=_env_float('ABT_SETTLE_SECONDS', defaults.settle_seconds),
            acquisition_timeout_seconds=_env_float(
                'ABT_ACQUISITION_TIMEOUT_SECONDS', defaults.acquisition_timeout_seconds),
            headless=os.environ.get('ABT_HEADLESS', 'true').lower() != 'false',
        )
