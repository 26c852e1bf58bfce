"""
Checklist task parsing, recurrence, querying and sorting
"""

from .dates import NaturalDateParser, ParsedDate, parse_task_date
from .layout import LayoutOptions
from .query import Query
from .recurrence import Recurrence, RecurrenceError
from .settings import Settings
from .sort import Sort
from .task import Status, Task
from .vault import MarkdownVault, tasks_from_note

__all__ = [
    'LayoutOptions',
    'MarkdownVault',
    'NaturalDateParser',
    'ParsedDate',
    'Query',
    'Recurrence',
    'RecurrenceError',
    'Settings',
    'Sort',
    'Status',
    'Task',
    'parse_task_date',
    'tasks_from_note',
]
