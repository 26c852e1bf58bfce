"""
Tests for parser settings

Run with: pytest tests/
"""

import dataclasses

import pytest

from checklist import Settings
from checklist.settings import join_format_array, split_format_array


class TestSettings:
    """Test suite for Settings"""

    def test_defaults(self):
        settings = Settings()

        assert settings.global_filter == ''
        assert settings.remove_global_filter is False
        assert settings.done_time is False
        assert settings.date_formats == ('%Y-%m-%d',)
        assert settings.date_time_formats == ('%Y-%m-%d %H:%M',)
        assert settings.time_format == '%H:%M'
        assert settings.due_date_signifiers == ('🗓',)
        assert settings.done_date_signifiers == ('✅',)
        assert settings.recurrence_signifiers == ('🔁',)

    def test_format_array_strings(self):
        settings = Settings(due_date_signifiers='📅 && 🗓 &&  due: ')

        assert settings.due_date_signifiers == ('📅', '🗓', 'due:')

    def test_lists_become_tuples(self):
        settings = Settings(date_formats=['%d.%m.%Y', '%Y-%m-%d'])

        assert settings.date_formats == ('%d.%m.%Y', '%Y-%m-%d')
        assert hash(settings) == hash(Settings(date_formats=('%d.%m.%Y', '%Y-%m-%d')))

    @pytest.mark.parametrize('name, value', [
        ('date_formats', ()),
        ('due_date_signifiers', ''),
        ('recurrence_signifiers', ' && '),
    ])
    def test_empty_lists_are_rejected(self, name, value):
        with pytest.raises(ValueError):
            Settings(**{name: value})

    def test_from_dict(self):
        settings = Settings.from_dict({'global_filter': '#task', 'done_date_signifiers': ['✔️', '✅']})

        assert settings.global_filter == '#task'
        assert settings.done_date_signifiers == ('✔️', '✅')
        assert Settings.from_dict({}) == Settings()

    def test_from_dict_rejects_unknown_keys(self):
        with pytest.raises(ValueError, match='colour'):
            Settings.from_dict({'colour': 'blue'})

    def test_update_returns_new_settings(self):
        settings = Settings()
        updated = settings.update(global_filter='#task', done_time=True)

        assert updated.global_filter == '#task'
        assert updated.done_time is True
        assert settings.global_filter == ''

    def test_immutable(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            Settings().global_filter = '#task'

    def test_format_array_helpers(self):
        assert split_format_array(' a &&b ') == ['a', 'b']
        assert join_format_array(['a', 'b']) == 'a && b'
