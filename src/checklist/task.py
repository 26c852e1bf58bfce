"""
Task

One checklist line of a note, parsed into a structured record:

    - [ ] water the plants 🔁 every week 🗓 2021-09-12 ^plants

Records are immutable; toggling or stripping the global filter returns new
records.
"""

import re
import logging
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timezone
from enum import Enum
from functools import lru_cache
from typing import List, NamedTuple, Optional

from .dates import end_of_day, parse_task_date, start_of_day, truncate_to_minute
from .layout import LayoutOptions
from .recurrence import Recurrence, RecurrenceError
from .settings import Settings


logger = logging.getLogger("ChecklistTasks.Task")

# Upper bound on signifier extraction passes; pathological lines stop here
MAX_EXTRACTION_PASSES = 5

TASK_REGEX = re.compile(r'^([\s\t]*)[-*] +\[(.)\] *(.*)')
BLOCK_LINK_REGEX = re.compile(r' \^[a-zA-Z0-9-]+$')


class Status(Enum):
    TODO = 'Todo'
    DONE = 'Done'


class _SignifierPatterns(NamedTuple):
    done: re.Pattern
    due: re.Pattern
    recurrence: re.Pattern


def _alternatives(signifiers) -> str:
    # trailing U+FE0F: emoji written with a presentation selector
    return '(?:' + '|'.join(re.escape(signifier) for signifier in signifiers) + ')\ufe0f?'


@lru_cache(maxsize=32)
def _signifier_patterns(settings: Settings) -> _SignifierPatterns:
    any_signifier = _alternatives(
        settings.due_date_signifiers + settings.done_date_signifiers + settings.recurrence_signifiers
    )
    # A date runs to the end of the line without crossing another signifier,
    # so trailing fields can come in any order.
    date_text = '((?:(?!' + any_signifier + ').)+)$'

    return _SignifierPatterns(
        done=re.compile(_alternatives(settings.done_date_signifiers) + ' ?' + date_text),
        due=re.compile(_alternatives(settings.due_date_signifiers) + ' ?' + date_text),
        recurrence=re.compile(_alternatives(settings.recurrence_signifiers) + '([a-zA-Z0-9, !]+)$'),
    )


@dataclass(frozen=True)
class Task:
    """A single-line task of a markdown note"""
    status: Status
    description: str
    path: str
    indentation: str
    # Line where the heading section containing this task starts
    section_start: int
    # Index of this task among the tasks of its section
    section_index: int
    # Character between the brackets, kept for round trips (`x`, `X`, `-`, ...)
    original_status_character: str
    preceding_header: Optional[str]
    due_date_time: Optional[datetime]
    has_due_time: bool
    done_date_time: Optional[datetime]
    has_done_time: bool
    recurrence_rule: Optional[Recurrence]
    # Verbatim ` ^id` suffix, empty if none
    block_link: str

    @classmethod
    def from_line(
        cls,
        line: str,
        path: str = '',
        section_start: int = 0,
        section_index: int = 0,
        preceding_header: Optional[str] = None,
        settings: Optional[Settings] = None
    ) -> Optional['Task']:
        """
        Parse a raw line into a Task

        Trailing fields are peeled off the end of the body repeatedly, so
        done date, due date and recurrence rule may be written in any order.

        Args:
            line: Raw line of the note
            path: Path of the note containing the line
            section_start: Line where the line's heading section starts
            section_index: Index of the task within its section
            preceding_header: Text of the nearest heading above the line
            settings: Signifiers, formats and global filter to apply

        Returns:
            Task, or None if the line is not a (tracked) checklist item
        """
        if settings is None:
            settings = Settings()

        match = TASK_REGEX.match(line)
        if match is None:
            return None

        indentation = match.group(1)
        status_character = match.group(2)
        status = Status.TODO if status_character == ' ' else Status.DONE

        body = match.group(3).strip()
        if settings.global_filter and settings.global_filter not in body:
            return None

        description = body
        block_link = ''
        block_link_match = BLOCK_LINK_REGEX.search(description)
        if block_link_match:
            block_link = block_link_match.group(0)
            description = description[:block_link_match.start()].strip()

        patterns = _signifier_patterns(settings)
        due_date_time = None
        has_due_time = False
        done_date_time = None
        has_done_time = False
        recurrence_rule = None

        for _ in range(MAX_EXTRACTION_PASSES):
            matched = False

            done_match = patterns.done.search(description)
            if done_match:
                parsed = parse_task_date(done_match.group(1), settings)
                if parsed is None:
                    logger.warning(f"Could not parse done date: {done_match.group(1).strip()}")
                elif done_date_time is None:
                    done_date_time, has_done_time = parsed
                description = description[:done_match.start()].strip()
                matched = True

            due_match = patterns.due.search(description)
            if due_match:
                parsed = parse_task_date(due_match.group(1), settings)
                if parsed is None:
                    logger.warning(f"Could not parse due date: {due_match.group(1).strip()}")
                elif due_date_time is None:
                    due_date_time, has_due_time = parsed
                description = description[:due_match.start()].strip()
                matched = True

            recurrence_match = patterns.recurrence.search(description)
            if recurrence_match:
                try:
                    rule = Recurrence.from_text(recurrence_match.group(1).strip())
                except RecurrenceError:
                    # Most likely still being typed
                    rule = None
                if recurrence_rule is None:
                    recurrence_rule = rule
                description = description[:recurrence_match.start()].strip()
                matched = True

            if not matched:
                break

        return cls(
            status=status,
            description=description,
            path=path,
            indentation=indentation,
            section_start=section_start,
            section_index=section_index,
            original_status_character=status_character,
            preceding_header=preceding_header,
            due_date_time=due_date_time,
            has_due_time=has_due_time,
            done_date_time=done_date_time,
            has_done_time=has_done_time,
            recurrence_rule=recurrence_rule,
            block_link=block_link,
        )

    @property
    def due_date(self) -> Optional[date]:
        return self.due_date_time.date() if self.due_date_time else None

    @property
    def due_time(self) -> Optional[time]:
        return self.due_date_time.time() if self.due_date_time and self.has_due_time else None

    @property
    def done_date(self) -> Optional[date]:
        return self.done_date_time.date() if self.done_date_time else None

    @property
    def done_time(self) -> Optional[time]:
        return self.done_date_time.time() if self.done_date_time and self.has_done_time else None

    def to_string(self, layout_options: Optional[LayoutOptions] = None, settings: Optional[Settings] = None) -> str:
        """
        Serialize the body: description, recurrence, due, done, block link

        Layout options can hide individual fields; with the defaults the
        result parses back into an equal task.
        """
        if layout_options is None:
            layout_options = LayoutOptions()
        if settings is None:
            settings = Settings()

        task_string = self.description

        if not layout_options.hide_recurrence_rule and self.recurrence_rule is not None:
            task_string += f" {settings.recurrence_signifiers[0]} {self.recurrence_rule.to_text()}"

        task_string += self._date_string(
            self.due_date_time,
            self.has_due_time,
            settings.due_date_signifiers[0],
            layout_options.hide_due_date,
            layout_options.hide_due_time,
            settings,
        )
        task_string += self._date_string(
            self.done_date_time,
            self.has_done_time,
            settings.done_date_signifiers[0],
            layout_options.hide_done_date,
            layout_options.hide_done_time,
            settings,
        )

        return task_string + self.block_link

    @staticmethod
    def _date_string(
        value: Optional[datetime],
        has_time: bool,
        signifier: str,
        hide_date: bool,
        hide_time: bool,
        settings: Settings
    ) -> str:
        if value is None:
            return ''
        if not hide_date and not hide_time and has_time:
            return f" {signifier} {value.strftime(settings.date_time_formats[0])}"
        if not hide_date:
            return f" {signifier} {value.strftime(settings.date_formats[0])}"
        if not hide_time and has_time:
            return f" {signifier} {value.strftime(settings.time_format)}"
        return ''

    def to_file_line_string(self, settings: Optional[Settings] = None) -> str:
        return f"{self.indentation}- [{self.original_status_character}] {self.to_string(settings=settings)}"

    def without_global_filter(self, settings: Settings) -> 'Task':
        """Copy of this task with the global filter removed from the description"""
        if not settings.global_filter:
            return self
        description = ' '.join(self.description.replace(settings.global_filter, '').split())
        return replace(self, description=description)

    def to_display_string(self, layout_options: Optional[LayoutOptions] = None, settings: Optional[Settings] = None) -> str:
        if settings is None:
            settings = Settings()
        task = self.without_global_filter(settings) if settings.remove_global_filter else self
        return task.to_string(layout_options, settings)

    def toggle(self, settings: Optional[Settings] = None, now: Optional[datetime] = None) -> List['Task']:
        """
        Flip the status of this task

        Completing a recurring task also spawns its next occurrence. The
        result is `[next, toggled]` in that case and `[toggled]` otherwise.

        Args:
            settings: `done_time` decides whether the completion time is kept
            now: The moment of toggling (default: current time)

        Returns:
            Resulting tasks in file order
        """
        if settings is None:
            settings = Settings()
        if now is None:
            now = datetime.now()

        new_status = Status.DONE if self.status == Status.TODO else Status.TODO
        done_date_time = None
        has_done_time = False
        next_occurrence = None

        if new_status == Status.DONE:
            has_done_time = settings.done_time
            done_date_time = truncate_to_minute(now) if has_done_time else start_of_day(now)
            if self.recurrence_rule is not None:
                next_occurrence = self._next_occurrence(now)

        toggled = replace(
            self,
            status=new_status,
            done_date_time=done_date_time,
            has_done_time=has_done_time,
            original_status_character='x' if new_status == Status.DONE else ' ',
        )

        if next_occurrence is None:
            return [toggled]

        logger.debug(f"Next occurrence of '{self.description}' is due {next_occurrence:%Y-%m-%d}")
        # A new occurrence must not share the block link of its predecessor
        next_task = replace(self, due_date_time=next_occurrence, block_link='')
        return [next_task, toggled]

    def _next_occurrence(self, now: datetime) -> Optional[datetime]:
        # Recurrence is computed on wall-clock dates pinned to UTC so that
        # local offsets and DST shifts cannot move an occurrence to another day.
        start = self.due_date_time if self.due_date_time is not None else now
        start = end_of_day(start).replace(microsecond=0, tzinfo=timezone.utc)
        today = end_of_day(now).replace(microsecond=0, tzinfo=timezone.utc)
        after = max(start, today)

        # Anchoring on the due date keeps the phase of the original schedule
        rule = self.recurrence_rule.with_start(start)
        occurrence = rule.next_after(after)
        if occurrence is None:
            return None

        occurrence = occurrence.replace(tzinfo=None)
        if self.due_date_time is not None and self.has_due_time:
            return datetime.combine(occurrence.date(), self.due_date_time.time())
        return start_of_day(occurrence)
