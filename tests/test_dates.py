"""
Tests for task date parsing and the natural-language date parser

Run with: pytest tests/
"""

from datetime import datetime

import pytest

from checklist import NaturalDateParser, ParsedDate, Settings, parse_task_date


class TestParseTaskDate:
    """Test suite for parse_task_date"""

    def test_date_only_is_midnight(self):
        assert parse_task_date('2021-09-12', Settings()) == ParsedDate(datetime(2021, 9, 12), False)

    def test_date_time(self):
        assert parse_task_date('2021-09-12 08:30', Settings()) == ParsedDate(datetime(2021, 9, 12, 8, 30), True)

    def test_surrounding_whitespace_is_ignored(self):
        assert parse_task_date(' 2021-09-12 ', Settings()) == ParsedDate(datetime(2021, 9, 12), False)

    @pytest.mark.parametrize('text', ['2021-9-12', '2021-09-12T08:30', '12.09.2021', '2021-02-30', 'soon', ''])
    def test_strict(self, text):
        assert parse_task_date(text, Settings()) is None

    def test_first_matching_format_wins(self):
        settings = Settings(date_formats=('%d/%m/%Y', '%m/%d/%Y'))

        assert parse_task_date('01/02/2021', settings).date_time == datetime(2021, 2, 1)
        assert parse_task_date('12/31/2021', settings).date_time == datetime(2021, 12, 31)


class TestNaturalDateParser:
    """Test suite for NaturalDateParser"""

    now = datetime(2021, 9, 14, 10, 30)

    def parse(self, text):
        return NaturalDateParser().parse(text, now=self.now)

    @pytest.mark.parametrize('text, expected', [
        ('today', datetime(2021, 9, 14)),
        ('Tomorrow', datetime(2021, 9, 15)),
        ('yesterday', datetime(2021, 9, 13)),
        ('in 3 days', datetime(2021, 9, 17)),
        ('in a week', datetime(2021, 9, 21)),
        ('2 weeks ago', datetime(2021, 8, 31)),
        ('next monday', datetime(2021, 9, 20)),
        ('next tuesday', datetime(2021, 9, 21)),
        ('last friday', datetime(2021, 9, 10)),
        ('next month', datetime(2021, 10, 14)),
        ('last year', datetime(2020, 9, 14)),
        ('2021-09-12', datetime(2021, 9, 12)),
        ('Sep 20', datetime(2021, 9, 20)),
    ])
    def test_dates_without_time(self, text, expected):
        assert self.parse(text) == ParsedDate(expected, False)

    @pytest.mark.parametrize('text, expected', [
        ('tomorrow 10:00', datetime(2021, 9, 15, 10, 0)),
        ('today at 8pm', datetime(2021, 9, 14, 20, 0)),
        ('2021-09-12 08:30', datetime(2021, 9, 12, 8, 30)),
        ('2021-09-12 00:00', datetime(2021, 9, 12, 0, 0)),
    ])
    def test_dates_with_time(self, text, expected):
        assert self.parse(text) == ParsedDate(expected, True)

    def test_now(self):
        assert self.parse('now') == ParsedDate(self.now, True)

    @pytest.mark.parametrize('text', ['', '   ', 'gibberish', 'tomorrow at teatime'])
    def test_not_a_date(self, text):
        assert self.parse(text) is None
