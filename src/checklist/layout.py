"""
Layout options toggled by `hide ...` query lines
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class LayoutOptions:
    hide_task_count: bool = False
    hide_backlinks: bool = False
    hide_done_date: bool = False
    hide_done_time: bool = False
    hide_due_date: bool = False
    hide_due_time: bool = False
    hide_recurrence_rule: bool = False
    hide_edit_button: bool = False


# `hide <option>` -> LayoutOptions field
HIDE_OPTIONS = {
    'task count': 'hide_task_count',
    'backlink': 'hide_backlinks',
    'done date': 'hide_done_date',
    'done time': 'hide_done_time',
    'due date': 'hide_due_date',
    'due time': 'hide_due_time',
    'recurrence rule': 'hide_recurrence_rule',
    'edit button': 'hide_edit_button',
}
