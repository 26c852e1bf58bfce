"""
Recurrence

A recurrence rule written after the recurrence signifier of a task line,
e.g. `every week`, `every 2 months on the 1st`, `every weekday`.

Parsing and rendering of the phrase is done here; the occurrence math is
delegated to dateutil's rrule.
"""

import re
import calendar
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from typing import Callable, List, Optional, Tuple

from dateutil import rrule as du_rrule


class RecurrenceError(ValueError):
    """Raised for recurrence phrases that cannot be understood"""


UNITS = {
    'day': du_rrule.DAILY,
    'week': du_rrule.WEEKLY,
    'month': du_rrule.MONTHLY,
    'year': du_rrule.YEARLY,
}
_UNIT_NAMES = {frequency: unit for unit, frequency in UNITS.items()}

# dateutil numbers weekdays like datetime.weekday(): Monday is 0
WEEKDAY_NAMES = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')
MONTH_NAMES = tuple(calendar.month_name[1:])

_WORKWEEK = (0, 1, 2, 3, 4)

# Longest length of each month, leap years included
_MONTH_LENGTHS = (31, 29, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

_TOKEN_RE = re.compile(r'\s*(?:(?P<word>[a-z]+|\d+(?:st|nd|rd|th)?|,)|(?P<bad>\S))')
_ORDINAL_RE = re.compile(r'^(\d+)(?:st|nd|rd|th)$')


def _ordinal(day: int) -> str:
    if day == -1:
        return 'last'
    if 10 <= day % 100 <= 20:
        suffix = 'th'
    else:
        suffix = {1: 'st', 2: 'nd', 3: 'rd'}.get(day % 10, 'th')
    return f'{day}{suffix}'


def _month_day_order(day: int) -> Tuple[bool, int]:
    return (day < 0, day)


@dataclass(frozen=True)
class Recurrence:
    """
    Recurrence rule

    `start` anchors the rule: occurrences are computed in the phase of the
    start date (a weekly rule started on a Tuesday recurs on Tuesdays).
    Rules read from a task line have no start; the toggle anchors them on
    the task's due date.
    """
    frequency: int
    interval: int = 1
    by_weekday: Tuple[int, ...] = ()
    by_month_day: Tuple[int, ...] = ()
    by_month: Tuple[int, ...] = ()
    count: Optional[int] = None
    until: Optional[date] = None
    start: Optional[datetime] = None

    def __post_init__(self):
        if self.frequency not in _UNIT_NAMES:
            raise RecurrenceError(f"Unsupported frequency: {self.frequency}")
        if self.interval < 1:
            raise RecurrenceError("Interval must be at least 1")
        if self.count is not None and self.count < 1:
            raise RecurrenceError("Count must be at least 1")
        if self.count is not None and self.until is not None:
            raise RecurrenceError("Use either a count or an until date, not both")
        if any(not 0 <= day <= 6 for day in self.by_weekday):
            raise RecurrenceError("Weekdays must be between 0 and 6")
        if any(day == 0 or not -1 <= day <= 31 for day in self.by_month_day):
            raise RecurrenceError("Month days must be between 1 and 31, or -1")
        if any(not 1 <= month <= 12 for month in self.by_month):
            raise RecurrenceError("Months must be between 1 and 12")
        if self.by_month and self.by_month_day and not any(
            day == -1 or day <= _MONTH_LENGTHS[month - 1]
            for day in self.by_month_day
            for month in self.by_month
        ):
            # dateutil would search up to year 9999 for such a rule
            raise RecurrenceError("None of the month days occur in the given months")

        object.__setattr__(self, 'by_weekday', tuple(sorted(set(self.by_weekday))))
        object.__setattr__(self, 'by_month_day', tuple(sorted(set(self.by_month_day), key=_month_day_order)))
        object.__setattr__(self, 'by_month', tuple(sorted(set(self.by_month))))

    @classmethod
    def from_text(cls, text: str) -> 'Recurrence':
        """
        Parse a recurrence phrase

        Args:
            text: Phrase such as `every 2 weeks on Monday, Friday`

        Returns:
            Recurrence without a start anchor

        Raises:
            RecurrenceError: If the phrase is not understood
        """
        return _PhraseParser(text).parse()

    def to_text(self) -> str:
        """Render the rule in the phrase form `from_text` reads"""
        parts = ['every']

        unit = _UNIT_NAMES[self.frequency]
        if self.frequency == du_rrule.WEEKLY and self.interval == 1 and self.by_weekday == _WORKWEEK:
            parts.append('weekday')
        else:
            parts.append(unit if self.interval == 1 else f'{self.interval} {unit}s')
            if self.by_weekday:
                parts.append('on ' + ', '.join(WEEKDAY_NAMES[day] for day in self.by_weekday))

        if self.by_month_day:
            parts.append('on the ' + ', '.join(_ordinal(day) for day in self.by_month_day))
        if self.by_month:
            parts.append('in ' + ', '.join(MONTH_NAMES[month - 1] for month in self.by_month))
        if self.count is not None:
            parts.append(f"for {self.count} {'time' if self.count == 1 else 'times'}")
        if self.until is not None:
            parts.append(f'until {MONTH_NAMES[self.until.month - 1]} {self.until.day}, {self.until.year}')

        return ' '.join(parts)

    def __str__(self) -> str:
        return self.to_text()

    def with_start(self, start: datetime) -> 'Recurrence':
        return replace(self, start=start)

    def to_rrule(self, start: Optional[datetime] = None) -> du_rrule.rrule:
        dtstart = start or self.start
        until = None
        if self.until is not None:
            until = datetime.combine(self.until, time(23, 59, 59), tzinfo=dtstart.tzinfo if dtstart else None)

        return du_rrule.rrule(
            self.frequency,
            dtstart=dtstart,
            interval=self.interval,
            byweekday=self.by_weekday or None,
            bymonthday=self.by_month_day or None,
            bymonth=self.by_month or None,
            count=self.count,
            until=until,
        )

    def next_after(self, reference: datetime) -> Optional[datetime]:
        """
        Earliest occurrence strictly after `reference`

        Unanchored rules are anchored on the reference itself.

        Returns:
            The occurrence, or None once the rule has run out (count/until)
        """
        start = self.start if self.start is not None else reference
        return self.to_rrule(start).after(reference, inc=False)


class _PhraseParser:
    """Recursive-descent parser over the words of a recurrence phrase"""

    def __init__(self, text: str):
        self.text = text
        self.tokens = self._tokenize(text)
        self.position = 0

    def _tokenize(self, text: str) -> List[str]:
        tokens = []
        for match in _TOKEN_RE.finditer(text.lower()):
            if match.group('bad'):
                raise RecurrenceError(f"Unexpected '{match.group('bad')}' in: {text}")
            if match.group('word'):
                tokens.append(match.group('word'))
        return tokens

    def peek(self) -> Optional[str]:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        return None

    def advance(self) -> str:
        token = self.peek()
        if token is None:
            raise RecurrenceError(f"Unexpected end of: {self.text}")
        self.position += 1
        return token

    def accept(self, *words: str) -> bool:
        if self.peek() in words:
            self.position += 1
            return True
        return False

    def expect(self, *words: str) -> None:
        if not self.accept(*words):
            raise RecurrenceError(f"Expected '{words[0]}' in: {self.text}")

    def parse(self) -> Recurrence:
        self.expect('every')

        interval = 1
        by_weekday: Tuple[int, ...] = ()
        if self.accept('weekday', 'weekdays'):
            frequency = du_rrule.WEEKLY
            by_weekday = _WORKWEEK
        elif self._weekday(self.peek()) is not None:
            frequency = du_rrule.WEEKLY
            by_weekday = self._list(self._parse_weekday)
        else:
            if self.accept('other'):
                interval = 2
            elif (self.peek() or '').isdigit():
                interval = int(self.advance())
            frequency = self._parse_unit()

        options = {'frequency': frequency, 'interval': interval, 'by_weekday': by_weekday}
        while self.peek() is not None:
            if self.accept('on'):
                if self.accept('the'):
                    options['by_month_day'] = self._list(self._parse_month_day)
                else:
                    options['by_weekday'] = self._list(self._parse_weekday)
            elif self.accept('in'):
                options['by_month'] = self._list(self._parse_month)
            elif self.accept('for'):
                options['count'] = self._parse_number()
                self.expect('times', 'time')
            elif self.accept('until'):
                options['until'] = self._parse_until()
            else:
                raise RecurrenceError(f"Unexpected '{self.peek()}' in: {self.text}")

        return Recurrence(**options)

    def _list(self, parse_item: Callable[[], int]) -> Tuple[int, ...]:
        items = [parse_item()]
        while self.accept(',', 'and'):
            self.accept('and')
            items.append(parse_item())
        return tuple(items)

    def _parse_unit(self) -> int:
        token = self.advance()
        frequency = UNITS.get(token[:-1] if token.endswith('s') else token)
        if frequency is None:
            raise RecurrenceError(f"Unknown unit '{token}' in: {self.text}")
        return frequency

    @staticmethod
    def _weekday(token: Optional[str]) -> Optional[int]:
        if token is None:
            return None
        names = [name.lower() for name in WEEKDAY_NAMES]
        for candidate in (token, token[:-1]):
            if candidate in names:
                return names.index(candidate)
        return None

    def _parse_weekday(self) -> int:
        token = self.advance()
        weekday = self._weekday(token)
        if weekday is None:
            raise RecurrenceError(f"Unknown weekday '{token}' in: {self.text}")
        return weekday

    def _parse_month_day(self) -> int:
        token = self.advance()
        if token == 'last':
            self.accept('day')
            return -1
        match = _ORDINAL_RE.match(token)
        if match is None:
            raise RecurrenceError(f"Expected a day like '1st' in: {self.text}")
        return int(match.group(1))

    def _parse_month(self) -> int:
        token = self.advance()
        names = [name.lower() for name in MONTH_NAMES]
        if token not in names:
            raise RecurrenceError(f"Unknown month '{token}' in: {self.text}")
        return names.index(token) + 1

    def _parse_number(self) -> int:
        token = self.advance()
        if not token.isdigit():
            raise RecurrenceError(f"Expected a number in: {self.text}")
        return int(token)

    def _parse_until(self) -> date:
        month = self._parse_month()
        day = self._parse_number()
        self.accept(',')
        year = self._parse_number()
        try:
            return date(year, month, day)
        except ValueError as e:
            raise RecurrenceError(f"Invalid until date in: {self.text}") from e
