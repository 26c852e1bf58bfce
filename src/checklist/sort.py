"""
Sort

Orders tasks by a composite comparator built from `sort by` keys and the
default chain (status, due, path).
"""

import locale
from datetime import datetime
from functools import cmp_to_key
from typing import Callable, Iterable, List, Optional, Sequence, TypeVar

from .task import Status, Task


Comparator = Callable[[Task, Task], int]

_T = TypeVar('_T')

SORT_KEYS = ('status', 'due', 'done', 'path', 'description')


def _compare_optional(a: Optional[_T], b: Optional[_T]) -> int:
    """Present values first, then ascending"""
    if a is not None and b is None:
        return -1
    if a is None and b is not None:
        return 1
    if a is None and b is None:
        return 0
    if a > b:
        return 1
    if a < b:
        return -1
    return 0


def compare_by_status(a: Task, b: Task) -> int:
    # Open tasks before done tasks
    a_done = a.status == Status.DONE
    b_done = b.status == Status.DONE
    return int(a_done) - int(b_done)


def _compare_date_time(a: Optional[datetime], b: Optional[datetime]) -> int:
    # Date-only values sit at midnight, ahead of any time on the same day
    return (
        _compare_optional(a.date() if a else None, b.date() if b else None)
        or _compare_optional(a.time() if a else None, b.time() if b else None)
    )


def compare_by_due_date_time(a: Task, b: Task) -> int:
    return _compare_date_time(a.due_date_time, b.due_date_time)


def compare_by_done_date_time(a: Task, b: Task) -> int:
    return _compare_date_time(a.done_date_time, b.done_date_time)


def compare_by_path(a: Task, b: Task) -> int:
    return (a.path > b.path) - (a.path < b.path)


def compare_by_description(a: Task, b: Task) -> int:
    # Case only breaks ties, lowercase first
    a_swapped = a.description.swapcase()
    b_swapped = b.description.swapcase()
    return (
        locale.strcoll(a.description.casefold(), b.description.casefold())
        or (a_swapped > b_swapped) - (a_swapped < b_swapped)
    )


COMPARATORS = {
    'status': compare_by_status,
    'due': compare_by_due_date_time,
    'done': compare_by_done_date_time,
    'path': compare_by_path,
    'description': compare_by_description,
}

DEFAULT_PRIORITIES = ('status', 'due', 'path')


def make_composite_comparator(comparators: Sequence[Comparator]) -> Comparator:
    def compare(a: Task, b: Task) -> int:
        for comparator in comparators:
            result = comparator(a, b)
            if result != 0:
                return result
        return 0
    return compare


def priorities_for(sorting: Sequence[str]) -> List[str]:
    """
    Sort keys in the order they are compared

    Each `sort by` key is put in front of the default chain, last written
    first, which leaves the first written key as the primary one. Keys
    already in the defaults are compared again further down, to no effect.

    Raises:
        ValueError: For a key outside SORT_KEYS
    """
    priorities = list(DEFAULT_PRIORITIES)
    for key in reversed(list(sorting)):
        if key not in COMPARATORS:
            raise ValueError(f"Unknown sort key: {key}")
        priorities.insert(0, key)
    return priorities


class Sort:
    @staticmethod
    def by(sorting: Sequence[str], tasks: Iterable[Task]) -> List[Task]:
        """
        Return the tasks in a new list, sorted by `sorting` then the defaults

        Args:
            sorting: `sort by` keys in the order they were written
            tasks: Tasks to sort (left untouched)

        Returns:
            Sorted copy; ties keep their input order
        """
        comparator = make_composite_comparator([COMPARATORS[key] for key in priorities_for(sorting)])
        return sorted(tasks, key=cmp_to_key(comparator))
