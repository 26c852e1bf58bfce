"""
Query

Compiles the source of a tasks query block, one instruction per line:

    not done
    due before next monday
    path includes projects/
    sort by due
    limit to 10 tasks
    hide backlink

into filters, sort keys, a limit and layout options. Lines that are not
understood mark the query with an error but do not stop the others.
"""

import re
import logging
from dataclasses import replace
from datetime import datetime
from operator import attrgetter
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .dates import DateParser, NaturalDateParser, end_of_day, start_of_day, truncate_to_minute
from .layout import HIDE_OPTIONS, LayoutOptions
from .sort import SORT_KEYS, Sort
from .task import Status, Task


logger = logging.getLogger("ChecklistTasks.Query")

Filter = Callable[[Task], bool]

QUERY_ERROR = 'do not understand query'


def _includes(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


# Exact instructions, checked before the patterns below
EXACT_FILTERS: Dict[str, Filter] = {
    'done': lambda task: task.status == Status.DONE,
    'not done': lambda task: task.status != Status.DONE,
    'is recurring': lambda task: task.recurrence_rule is not None,
    'is not recurring': lambda task: task.recurrence_rule is None,
    'exclude sub-items': lambda task: task.indentation == '',
    'no due date': lambda task: task.due_date_time is None,
    'no due time': lambda task: not task.has_due_time,
}

_DUE_RE = re.compile(r'^due (before|after|on)? ?(.*)', re.IGNORECASE)
_DONE_RE = re.compile(r'^done (before|after|on)? ?(.*)', re.IGNORECASE)
_PATH_RE = re.compile(r'^path (includes|does not include) (.*)', re.IGNORECASE)
_DESCRIPTION_RE = re.compile(r'^description (includes|does not include) (.*)', re.IGNORECASE)
_HEADING_RE = re.compile(r'^heading (includes|does not include) (.*)', re.IGNORECASE)
_LIMIT_RE = re.compile(r'^limit (?:to )?(\d+)(?: tasks?)?$', re.IGNORECASE)
_SORT_BY_RE = re.compile(r'^sort by (' + '|'.join(SORT_KEYS) + r')$', re.IGNORECASE)
_HIDE_RE = re.compile(r'^hide (' + '|'.join(HIDE_OPTIONS) + r')$', re.IGNORECASE)


class Query:
    """
    Parsed query

    Args:
        source: Query text, one instruction per line
        now: Reference moment for relative dates (default: current time)
        date_parser: Resolves date expressions (default: NaturalDateParser)
    """

    def __init__(self, source: str, now: Optional[datetime] = None, date_parser: Optional[DateParser] = None):
        self._now = now if now is not None else datetime.now()
        self._date_parser = date_parser if date_parser is not None else NaturalDateParser()

        self._limit: Optional[int] = None
        self._layout_options = LayoutOptions()
        self._filters: List[Filter] = []
        self._sorting: List[str] = []
        self._error: Optional[str] = None

        line_parsers = (
            (_DUE_RE, self._parse_due_filter),
            (_DONE_RE, self._parse_done_filter),
            (_PATH_RE, self._parse_path_filter),
            (_DESCRIPTION_RE, self._parse_description_filter),
            (_HEADING_RE, self._parse_heading_filter),
            (_LIMIT_RE, self._parse_limit),
            (_SORT_BY_RE, self._parse_sort_by),
            (_HIDE_RE, self._parse_hide_option),
        )

        for line in source.split('\n'):
            line = line.strip()
            if not line:
                continue

            exact = EXACT_FILTERS.get(line.lower())
            if exact is not None:
                self._filters.append(exact)
                continue

            for pattern, handler in line_parsers:
                match = pattern.match(line)
                if match:
                    handler(match)
                    break
            else:
                logger.debug(f"Unknown query line: {line}")
                self._error = QUERY_ERROR

    @property
    def limit(self) -> Optional[int]:
        return self._limit

    @property
    def layout_options(self) -> LayoutOptions:
        return self._layout_options

    @property
    def filters(self) -> Tuple[Filter, ...]:
        return tuple(self._filters)

    @property
    def sorting(self) -> Tuple[str, ...]:
        return tuple(self._sorting)

    @property
    def error(self) -> Optional[str]:
        return self._error

    def filter(self, tasks: Iterable[Task]) -> List[Task]:
        """Tasks passing every filter, in their original order"""
        return [task for task in tasks if all(f(task) for f in self._filters)]

    def apply(self, tasks: Iterable[Task]) -> List[Task]:
        """Filter, sort and limit the tasks"""
        result = Sort.by(self._sorting, self.filter(tasks))
        if self._limit is not None:
            result = result[:self._limit]
        return result

    def _parse_due_filter(self, match: re.Match) -> None:
        self._add_date_filter('due', attrgetter('due_date_time'), match)

    def _parse_done_filter(self, match: re.Match) -> None:
        self._add_date_filter('done', attrgetter('done_date_time'), match)

    def _add_date_filter(self, field: str, value_of: Callable[[Task], Optional[datetime]], match: re.Match) -> None:
        """
        Compare a task date against a date expression

        Without a time in the expression, `before` means before the start of
        that day, `after` after its end and `on` the same day. With a time,
        `on` compares to the minute so that `due on now` can match.
        """
        operator = (match.group(1) or 'on').lower()
        parsed = self._date_parser.parse(match.group(2), now=self._now)
        if parsed is None:
            logger.debug(f"Unknown {field} date: {match.group(2)}")
            self._error = f'do not understand {field} date'
            return

        filter_date, with_time = parsed

        if operator == 'before':
            boundary = filter_date if with_time else start_of_day(filter_date)

            def date_filter(task: Task) -> bool:
                value = value_of(task)
                return value is not None and value < boundary
        elif operator == 'after':
            boundary = filter_date if with_time else end_of_day(filter_date)

            def date_filter(task: Task) -> bool:
                value = value_of(task)
                return value is not None and value > boundary
        elif with_time:
            minute = truncate_to_minute(filter_date)

            def date_filter(task: Task) -> bool:
                value = value_of(task)
                return value is not None and truncate_to_minute(value) == minute
        else:
            day = filter_date.date()

            def date_filter(task: Task) -> bool:
                value = value_of(task)
                return value is not None and value.date() == day

        self._filters.append(date_filter)

    def _parse_path_filter(self, match: re.Match) -> None:
        self._add_text_filter(attrgetter('path'), match)

    def _parse_description_filter(self, match: re.Match) -> None:
        self._add_text_filter(attrgetter('description'), match)

    def _add_text_filter(self, value_of: Callable[[Task], str], match: re.Match) -> None:
        needle = match.group(2)
        if match.group(1).lower() == 'includes':
            self._filters.append(lambda task: _includes(value_of(task), needle))
        else:
            self._filters.append(lambda task: not _includes(value_of(task), needle))

    def _parse_heading_filter(self, match: re.Match) -> None:
        needle = match.group(2)
        if match.group(1).lower() == 'includes':
            self._filters.append(
                lambda task: task.preceding_header is not None and _includes(task.preceding_header, needle)
            )
        else:
            self._filters.append(
                lambda task: task.preceding_header is None or not _includes(task.preceding_header, needle)
            )

    def _parse_limit(self, match: re.Match) -> None:
        self._limit = int(match.group(1))

    def _parse_sort_by(self, match: re.Match) -> None:
        self._sorting.append(match.group(1).lower())

    def _parse_hide_option(self, match: re.Match) -> None:
        option = HIDE_OPTIONS[' '.join(match.group(1).lower().split())]
        self._layout_options = replace(self._layout_options, **{option: True})
