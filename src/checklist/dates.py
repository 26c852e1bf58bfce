"""
Date helpers

Two kinds of date parsing live here:
1. Strict parsing of the dates written into task lines, against the
   configured date-time and date-only formats
2. Lenient natural-language parsing for query lines (`due before tomorrow`),
   behind the small `DateParser` interface so another implementation can be
   swapped in
"""

import re
import logging
from datetime import datetime, timedelta
from typing import NamedTuple, Optional, Protocol

from dateutil import parser as du_parser
from dateutil.relativedelta import relativedelta, MO, TU, WE, TH, FR, SA, SU

from .settings import Settings


logger = logging.getLogger("ChecklistTasks.Dates")


class ParsedDate(NamedTuple):
    date_time: datetime
    has_time: bool


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(value: datetime) -> datetime:
    return value.replace(hour=23, minute=59, second=59, microsecond=999999)


def truncate_to_minute(value: datetime) -> datetime:
    return value.replace(second=0, microsecond=0)


def _strict_parse(text: str, fmt: str) -> Optional[datetime]:
    """Parse `text` with `fmt`, rejecting anything that does not format back identically"""
    try:
        parsed = datetime.strptime(text, fmt)
    except ValueError:
        return None
    if parsed.strftime(fmt) != text:
        return None
    return parsed


def parse_task_date(text: str, settings: Settings) -> Optional[ParsedDate]:
    """
    Parse a date written after a due/done signifier

    Date-time formats are tried before date-only formats and the first
    matching format wins. A date-only match is pinned to midnight.

    Args:
        text: Date text as found in the task line
        settings: Supplies the accepted formats

    Returns:
        ParsedDate, or None when no configured format matches
    """
    text = text.strip()
    for fmt in settings.date_time_formats:
        parsed = _strict_parse(text, fmt)
        if parsed is not None:
            return ParsedDate(truncate_to_minute(parsed), True)

    for fmt in settings.date_formats:
        parsed = _strict_parse(text, fmt)
        if parsed is not None:
            return ParsedDate(start_of_day(parsed), False)

    return None


class DateParser(Protocol):
    """Resolves free text to a date, telling whether a time of day was given"""
    def parse(self, text: str, now: Optional[datetime] = None) -> Optional[ParsedDate]: ...


_WEEKDAYS = {
    'monday': MO,
    'tuesday': TU,
    'wednesday': WE,
    'thursday': TH,
    'friday': FR,
    'saturday': SA,
    'sunday': SU,
}

_DAY_OFFSETS = {'yesterday': -1, 'today': 0, 'tomorrow': 1}

_RELATIVE_DAY_RE = re.compile(r'^(?P<day>yesterday|today|tomorrow)(?:\s+(?:at\s+)?(?P<time>.+))?$')
_IN_RE = re.compile(r'^in\s+(?P<amount>\d+|an?)\s+(?P<unit>day|week|month|year)s?$')
_AGO_RE = re.compile(r'^(?P<amount>\d+|an?)\s+(?P<unit>day|week|month|year)s?\s+ago$')
_NEXT_LAST_RE = re.compile(
    r'^(?P<direction>next|last)\s+(?P<what>day|week|month|year|' + '|'.join(_WEEKDAYS) + r')$'
)


class NaturalDateParser:
    """
    Natural-language date parser for query lines

    Handles relative phrases (`today`, `tomorrow 10:00`, `in 3 days`,
    `2 weeks ago`, `next friday`, `now`) itself and hands everything else
    to dateutil's parser (`2021-09-12`, `12 Sep 2021 8pm`, `monday`).
    """

    def parse(self, text: str, now: Optional[datetime] = None) -> Optional[ParsedDate]:
        if now is None:
            now = datetime.now()

        phrase = ' '.join(text.strip().lower().split())
        if not phrase:
            return None

        if phrase == 'now':
            return ParsedDate(now, True)

        relative = self._parse_relative(phrase, now)
        if relative is not None:
            return relative

        return self._parse_absolute(text.strip(), start_of_day(now))

    def _parse_relative(self, phrase: str, now: datetime) -> Optional[ParsedDate]:
        today = start_of_day(now)

        match = _RELATIVE_DAY_RE.match(phrase)
        if match:
            day = today + timedelta(days=_DAY_OFFSETS[match.group('day')])
            if match.group('time') is None:
                return ParsedDate(day, False)
            return self._parse_absolute(match.group('time'), day)

        match = _IN_RE.match(phrase) or _AGO_RE.match(phrase)
        if match:
            amount = match.group('amount')
            amount = 1 if amount in ('a', 'an') else int(amount)
            if phrase.endswith(' ago'):
                amount = -amount
            return ParsedDate(today + relativedelta(**{match.group('unit') + 's': amount}), False)

        match = _NEXT_LAST_RE.match(phrase)
        if match:
            step = 1 if match.group('direction') == 'next' else -1
            what = match.group('what')
            if what in _WEEKDAYS:
                weekday = _WEEKDAYS[what]
                return ParsedDate(today + relativedelta(days=step, weekday=weekday(step)), False)
            return ParsedDate(today + relativedelta(**{what + 's': step}), False)

        return None

    def _parse_absolute(self, text: str, default: datetime) -> Optional[ParsedDate]:
        try:
            first = du_parser.parse(text, default=default)
            # a second pass with another default time reveals whether the text named an hour
            second = du_parser.parse(text, default=default.replace(hour=1, minute=1))
        except (ValueError, OverflowError):
            logger.debug(f"Not a date: {text}")
            return None

        if first.tzinfo is not None:
            first = first.astimezone().replace(tzinfo=None)
            second = second.astimezone().replace(tzinfo=None)

        has_time = first.hour == second.hour
        if not has_time:
            first = start_of_day(first)
        return ParsedDate(first, has_time)
