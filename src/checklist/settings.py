"""
Settings

Immutable configuration value passed into every parsing and formatting call.
"""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Iterable, List, Tuple, Union


def split_format_array(value: str) -> List[str]:
    """Split an `a && b` settings string into its trimmed parts"""
    return [part.strip() for part in value.split('&&')]


def join_format_array(values: Iterable[str]) -> str:
    return ' && '.join(values)


def _as_tuple(value: Union[str, Iterable[str]]) -> Tuple[str, ...]:
    if isinstance(value, str):
        parts = split_format_array(value)
    else:
        parts = [str(part).strip() for part in value]
    return tuple(part for part in parts if part)


@dataclass(frozen=True)
class Settings:
    """Configuration snapshot for the task parser, serializer and toggle"""
    global_filter: str = ''
    remove_global_filter: bool = False
    done_time: bool = False
    date_formats: Tuple[str, ...] = ('%Y-%m-%d',)
    time_format: str = '%H:%M'
    date_time_formats: Tuple[str, ...] = ('%Y-%m-%d %H:%M',)
    due_date_signifiers: Tuple[str, ...] = ('🗓',)
    done_date_signifiers: Tuple[str, ...] = ('✅',)
    recurrence_signifiers: Tuple[str, ...] = ('🔁',)

    def __post_init__(self):
        for name in _LIST_SETTINGS:
            value = _as_tuple(getattr(self, name))
            if not value:
                raise ValueError(f"Setting '{name}' needs at least one entry")
            # frozen dataclass: normalize lists and '&&' strings in place
            object.__setattr__(self, name, value)

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> 'Settings':
        """
        Build settings from the `settings` mapping of the YAML config

        Args:
            config: Mapping with any subset of the setting names

        Returns:
            Settings with defaults for missing keys

        Raises:
            ValueError: On unknown keys or empty signifier/format lists
        """
        known = {f.name for f in fields(cls)}
        unknown = set(config or {}) - known
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")
        return cls(**(config or {}))

    def update(self, **changes: Any) -> 'Settings':
        return replace(self, **changes)


_LIST_SETTINGS = (
    'date_formats',
    'date_time_formats',
    'due_date_signifiers',
    'done_date_signifiers',
    'recurrence_signifiers',
)
