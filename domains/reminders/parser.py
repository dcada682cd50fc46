"""Parse free-form reminder text into a note and a fire time."""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from dateparser.search import search_dates

from logger import logger


@dataclass
class ParsedReminder:
    """Parsed reminder data."""
    note: str
    date: datetime


UNIT_SECONDS = {
    's': 1, 'sec': 1, 'secs': 1, 'second': 1, 'seconds': 1,
    'm': 60, 'min': 60, 'mins': 60, 'minute': 60, 'minutes': 60,
    'h': 3600, 'hr': 3600, 'hrs': 3600, 'hour': 3600, 'hours': 3600,
    'd': 86400, 'day': 86400, 'days': 86400,
    'w': 604800, 'week': 604800, 'weeks': 604800,
}

# "in 2h", "in 30 minutes", "in 1 day" - only at the very end of the input
_units = '|'.join(sorted(UNIT_SECONDS, key=len, reverse=True))
RELATIVE_PATTERN = re.compile(
    rf'(?:^|\s)in\s+(\d+)\s*({_units})$',
    re.IGNORECASE
)

# Words that make up a bare duration ("2 hours", "a week") with no "in"/"ago"
_DURATION_WORDS = set(UNIT_SECONDS) | {'a', 'an', 'and'}

DATEPARSER_LANGUAGES = ['en']


def parse_reminder(text: str, now: datetime = None) -> Optional[ParsedReminder]:
    """Parse reminder from natural language.

    Examples:
    - "Call mom in 2h"
    - "in 30 minutes"
    - "Buy groceries tomorrow at 9am"
    - "Dentist next Monday at 10am"

    Args:
        text: Free-form reminder text
        now: Current time (defaults to local now)

    Returns:
        ParsedReminder if a time was found, None otherwise
    """
    if text is None:
        return None
    trimmed = text.strip()
    if not trimmed:
        return None

    now = now or datetime.now()

    match = RELATIVE_PATTERN.search(trimmed)
    if match:
        return _parse_relative(trimmed, match, now)

    return _parse_absolute(trimmed, now)


def _parse_relative(text: str, match: re.Match, now: datetime) -> Optional[ParsedReminder]:
    """Trailing "in <number> <unit>" clause; None if the date is out of range."""
    value = int(match.group(1))
    seconds = UNIT_SECONDS[match.group(2).lower()]

    try:
        date = now + timedelta(seconds=value * seconds)
    except (OverflowError, ValueError):
        logger.info(f"Relative time out of range: '{match.group(0).strip()}'")
        return None

    return ParsedReminder(note=text[:match.start()].strip(), date=date)


def _parse_absolute(text: str, now: datetime) -> Optional[ParsedReminder]:
    """Natural-language date anywhere in the text.

    Prefers the last match in the future; falls back to the last match
    even when it is in the past.
    """
    matches = search_dates(
        text,
        languages=DATEPARSER_LANGUAGES,
        settings={
            'RELATIVE_BASE': now,
            'RETURN_AS_TIMEZONE_AWARE': False,
        }
    )
    if not matches:
        return None

    # Locate each fragment left to right so repeated fragments get their own span
    candidates = []
    cursor = 0
    for fragment, date in matches:
        start = text.find(fragment, cursor)
        if start == -1:
            start = text.find(fragment)
            if start == -1:
                continue
        else:
            cursor = start + len(fragment)
        if _is_bare_duration(fragment):
            continue
        candidates.append((start, date))

    if not candidates:
        return None

    future = [c for c in candidates if c[1] > now]
    start, date = future[-1] if future else candidates[-1]

    return ParsedReminder(note=text[:start].strip(), date=date)


def _is_bare_duration(fragment: str) -> bool:
    """True for "5", "2 hours", "a week" - amounts of time, not moments."""
    words = re.findall(r'[a-z]+|\d+', fragment.lower())
    if not words:
        return True
    return all(w.isdigit() or w in _DURATION_WORDS for w in words)
