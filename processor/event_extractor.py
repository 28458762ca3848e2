"""Heuristic event extractor for the ABT calendar page HTML."""
import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from bs4 import BeautifulSoup

from processor.models import EventRecord, MONTH_NAMES

logger = logging.getLogger(__name__)

DAY_NAMES = r'(?:Monday|Tuesday|Wednesday|Thursday|Friday|Saturday|Sunday)'
MONTH_ABBREVIATIONS = r'(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)'

MONTH_YEAR_PATTERN = re.compile(
    r'\b(' + '|'.join(MONTH_NAMES) + r')\s+(\d{4})\b',
    re.IGNORECASE
)
DATE_RANGE_PATTERN = re.compile(
    r'(?<!\d)\d{1,2}(?:\s*[-–—]\s*\d{1,2})?\s+' + MONTH_ABBREVIATIONS + r'\b',
    re.IGNORECASE
)
LOCATION_PATTERN = re.compile(
    r'\b' + DAY_NAMES + r'\b[,\s]*([^<,.\n]+?)\s*(?=,|\.|<|\n|EVENT|$)'
)

# Characters scanned after each date range for its title and location
SCAN_WINDOW = 700
MIN_TITLE_MATCH_LENGTH = 10
MIN_TITLE_LENGTH = 15
MIN_LOCATION_LENGTH = 5
PLACEHOLDER_MARKERS = ('DETAIL', 'ABT CALENDAR')


@dataclass(frozen=True)
class MonthSection:
    """Span of the document headed by a 'Month Year' heading."""
    month: str
    year: str
    start: int
    end: int


@dataclass(frozen=True)
class TitleMatcher:
    """Named title pattern; group 1 holds the candidate title."""
    name: str
    pattern: re.Pattern

    def match(self, window: str) -> Optional[str]:
        found = self.pattern.search(window)
        if not found:
            return None
        title = clean_text(found.group(1))
        if len(title) > MIN_TITLE_MATCH_LENGTH:
            return title
        return None


# Evaluated in order; the first matcher returning a title wins
TITLE_MATCHERS = (
    TitleMatcher(
        name='markdown-heading',
        pattern=re.compile(
            r'####\s*([^\n<#]+?)\s*(?=\n|<|#|\b' + DAY_NAMES + r'\b|$)'
        ),
    ),
    TitleMatcher(
        name='heading-tag',
        pattern=re.compile(r'<h[34][^>]*>(.+?)</h[34]>', re.IGNORECASE | re.DOTALL),
    ),
    TitleMatcher(
        name='text-run',
        pattern=re.compile(
            r'(?:^|>)\s*([A-Z0-9][^<]{10,150}?)\s*(?=<|EVENT DETAIL|\b' + DAY_NAMES + r'\b)'
        ),
    ),
)


def clean_text(fragment: str) -> str:
    """Strip tags and heading markers, decode entities and collapse whitespace."""
    text = BeautifulSoup(fragment, 'html.parser').get_text(' ')
    text = re.sub(r'[<>#]', '', text)
    return ' '.join(text.split())


def strip_non_content(html_content) -> str:
    """Remove <script> and <style> blocks so their text never matches."""
    soup = BeautifulSoup(html_content, 'html.parser')
    for element in soup.find_all(['script', 'style']):
        element.decompose()
    return str(soup)


def find_month_sections(document: str) -> List[MonthSection]:
    """
    Split the document at each 'Month Year' heading.

    Each section runs from its heading to the next heading, or to the end of
    the document for the last one.

    Args:
        document: Cleaned HTML text

    Returns:
        List of MonthSection in document order
    """
    headings = list(MONTH_YEAR_PATTERN.finditer(document))
    sections = []
    for position, heading in enumerate(headings):
        if position + 1 < len(headings):
            end = headings[position + 1].start()
        else:
            end = len(document)
        sections.append(MonthSection(
            month=heading.group(1).capitalize(),
            year=heading.group(2),
            start=heading.start(),
            end=end
        ))
    return sections


def find_date_ranges(document: str, section: MonthSection) -> List[Tuple[str, int]]:
    """
    Find date ranges ('18 - 24 Nov' or '5 Dec') inside a section.

    Returns:
        List of (normalized date range text, absolute end offset) tuples
    """
    section_text = document[section.start:section.end]
    return [
        (' '.join(found.group(0).split()), section.start + found.end())
        for found in DATE_RANGE_PATTERN.finditer(section_text)
    ]


def match_title(window: str, matchers=TITLE_MATCHERS) -> Optional[str]:
    for matcher in matchers:
        title = matcher.match(window)
        if title:
            logger.debug(f"Title matched by '{matcher.name}': {title}")
            return title
    return None


def match_location(window: str) -> Optional[str]:
    found = LOCATION_PATTERN.search(window)
    if not found:
        return None
    location = clean_text(found.group(1))
    return location or None


def is_valid_candidate(title: Optional[str], location: Optional[str]) -> bool:
    """Check the minimum-length and placeholder rules for a title/location pair."""
    if not title or len(title) <= MIN_TITLE_LENGTH:
        return False
    if not location or len(location) <= MIN_LOCATION_LENGTH:
        return False
    upper_title = title.upper()
    return not any(marker in upper_title for marker in PLACEHOLDER_MARKERS)


def extract_events(html_content: str) -> List[EventRecord]:
    """
    Extract calendar events from raw page HTML.

    Never raises: any internal failure is logged and yields an empty list,
    which callers treat as a signal to fall back to another cache tier.

    Args:
        html_content: Raw HTML of the calendar page

    Returns:
        EventRecords sorted by (year, month); ties keep extraction order
    """
    try:
        events = _extract(html_content)
    except Exception as e:
        logger.error(f"Failed to extract events from HTML: {e}", exc_info=True)
        return []

    logger.info(f"Extracted {len(events)} events from calendar HTML")
    return events


def _extract(html_content: str) -> List[EventRecord]:
    document = strip_non_content(html_content)
    events = []

    for section in find_month_sections(document):
        for date_range, offset in find_date_ranges(document, section):
            window = document[offset:offset + SCAN_WINDOW]
            title = match_title(window)
            location = match_location(window)

            if not is_valid_candidate(title, location):
                logger.debug(
                    f"Discarding candidate at '{date_range}' in {section.month} "
                    f"{section.year}: title={title!r}, location={location!r}"
                )
                continue

            events.append(EventRecord(
                id=f"event-{len(events) + 1}-{section.month[:3].lower()}-{section.year}",
                date_range=date_range,
                title=title,
                location=location,
                month=section.month,
                year=section.year
            ))

    # sorted() is stable, so same-month events keep extraction order
    return sorted(events, key=EventRecord.sort_key)
