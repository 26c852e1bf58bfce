"""
Tests for sorting tasks

Run with: pytest tests/
"""

import pytest

from checklist import Sort, Task
from checklist.sort import priorities_for


def from_line(line, path=''):
    return Task.from_line(line, path=path, preceding_header='')


class TestSort:
    """Test suite for Sort.by"""

    def test_by_due(self):
        a = from_line('- [x] bring out the trash 🗓 2021-09-12')
        b = from_line('- [ ] pet the cat 🗓 2021-09-15')
        c = from_line('- [ ] pet the cat 🗓 2021-09-18')

        assert Sort.by(['due'], [a, b, c]) == [a, b, c]
        assert Sort.by(['due'], [b, c, a]) == [a, b, c]

    def test_by_due_with_time(self):
        a = from_line('- [x] bring out the trash 🗓 2021-09-29')
        b = from_line('- [ ] pet the dog 🗓 2021-09-29 08:00')
        c = from_line('- [ ] pet the dog 🗓 2021-09-29 08:30')
        d = from_line('- [ ] water the plants 🗓 2021-09-30 07:30')

        assert Sort.by(['due'], [a, b, c, d]) == [a, b, c, d]
        assert Sort.by(['due'], [d, b, c, a]) == [a, b, c, d]

    def test_by_done(self):
        a = from_line('- [ ] bring out the trash 🗓 2021-09-12')
        b = from_line('- [x] pet the cat 🗓 2021-09-16 ✅ 2021-09-16')
        c = from_line('- [x] pet the cat 🗓 2021-09-15 ✅ 2021-09-15')

        assert Sort.by(['done'], [a, b, c]) == [c, b, a]
        assert Sort.by(['done'], [b, c, a]) == [c, b, a]

    def test_by_done_with_time(self):
        a = from_line('- [ ] bring out the trash 🗓 2021-09-29')
        b = from_line('- [x] pet the dog 🗓 2021-09-29 07:30 ✅ 2021-09-29 07:45')
        c = from_line('- [x] pet the dog 🗓 2021-09-29 08:00 ✅ 2021-09-29 08:05')
        d = from_line('- [x] water the plants 🗓 2021-09-30 07:30 ✅ 2021-09-29')

        assert Sort.by(['done'], [a, b, c, d]) == [d, b, c, a]
        assert Sort.by(['done'], [d, b, c, a]) == [d, b, c, a]

    def test_by_due_path_status(self):
        a = from_line('- [ ] a 🗓 1970-01-01', '1')
        b = from_line('- [x] b 🗓 1970-01-02', '2')
        c = from_line('- [ ] c 🗓 1970-01-02', '1')
        d = from_line('- [ ] d 🗓 1970-01-02', '2')

        # a: earliest due, c: lower path, d before b: open before done
        assert Sort.by(['due', 'path', 'status'], [a, b, c, d]) == [a, c, d, b]

    def test_by_status_due(self):
        a = from_line('- [ ] a 🗓 1970-01-01', '1')
        b = from_line('- [x] b 🗓 1970-01-02', '2')
        c = from_line('- [ ] c 🗓 1970-01-02', '1')
        d = from_line('- [ ] d 🗓 1970-01-02', '2')

        assert Sort.by(['status', 'due'], [b, d, c, a]) == [a, c, d, b]

    def test_default_order(self):
        a = from_line('- [x] done early 🗓 2021-09-01', 'a.md')
        b = from_line('- [ ] no due', 'a.md')
        c = from_line('- [ ] due later 🗓 2021-09-20', 'b.md')
        d = from_line('- [ ] due soon 🗓 2021-09-10', 'c.md')

        # open before done, then due (missing last), then path
        assert Sort.by([], [a, b, c, d]) == [d, c, b, a]

    def test_by_description(self):
        tasks = [from_line(f'- [ ] {text}') for text in ('banana', 'apple', 'Cherry', 'Apple')]

        result = Sort.by(['description'], tasks)

        assert [task.description for task in result] == ['apple', 'Apple', 'banana', 'Cherry']

    def test_by_description_lowercase_before_uppercase(self):
        tasks = [from_line(f'- [ ] {text}') for text in ('B', 'A', 'b', 'a')]

        result = Sort.by(['description'], tasks)

        assert [task.description for task in result] == ['a', 'A', 'b', 'B']

    @pytest.mark.parametrize('sorting', [[], ['due'], ['done'], ['path'], ['description'], ['status', 'due']])
    def test_sorted_list_is_stable_under_rotation(self, sorting):
        tasks = [
            from_line('- [ ] a 🗓 2021-09-10 08:00', 'a.md'),
            from_line('- [ ] b 🗓 2021-09-12', 'b.md'),
            from_line('- [ ] c 🗓 2021-09-12 09:00', 'a.md'),
            from_line('- [ ] d', 'c.md'),
            from_line('- [x] e 🗓 2021-09-11 ✅ 2021-09-13', 'b.md'),
            from_line('- [x] f ✅ 2021-09-12 10:00', 'a.md'),
        ]
        expected = Sort.by(sorting, tasks)

        for shift in range(len(expected)):
            rotated = expected[shift:] + expected[:shift]
            assert Sort.by(sorting, rotated) == expected

    def test_ties_keep_input_order(self):
        a = from_line('- [ ] a 🗓 2021-09-12', 'x.md')
        b = from_line('- [ ] b 🗓 2021-09-12', 'x.md')

        assert Sort.by(['due'], [a, b]) == [a, b]
        assert Sort.by(['due'], [b, a]) == [b, a]

    def test_input_is_not_mutated(self):
        a = from_line('- [ ] a 🗓 2021-09-12')
        b = from_line('- [ ] b 🗓 2021-09-11')
        tasks = [a, b]

        result = Sort.by(['due'], tasks)

        assert result == [b, a]
        assert tasks == [a, b]
        assert result is not tasks

    def test_unknown_key(self):
        with pytest.raises(ValueError):
            Sort.by(['urgency'], [])


class TestPriorities:
    """Test suite for priorities_for"""

    def test_defaults(self):
        assert priorities_for([]) == ['status', 'due', 'path']

    def test_first_written_key_is_primary(self):
        assert priorities_for(['due']) == ['due', 'status', 'due', 'path']
        assert priorities_for(['path', 'done']) == ['path', 'done', 'status', 'due', 'path']
