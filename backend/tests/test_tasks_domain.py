"""
Task urgency, "My Tasks", task load, natural-language dates and the
parsed-task value object.
"""

import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from domain.project.date_parser import format_due_date, parse_natural_date
from domain.project.entities import Contribution
from domain.project.insights import ProjectSummary, project_insights
from domain.project.task_parsing import (
    ParsedTask,
    infer_priority,
    match_assignee,
    match_assignees,
)
from domain.project.urgency import (
    MyTasksFilter,
    TaskUrgency,
    my_task_stats,
    my_tasks,
    task_load,
    task_urgency,
)
from domain.shared.exceptions import ValidationException
from domain.shared.value_objects import PriorityLevel, ProjectStatus


# Monday
TODAY = date(2025, 3, 10)
NOW = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)


def task(name='Task', due_in=None, **kwargs):
    due_date = TODAY + timedelta(days=due_in) if due_in is not None else None
    return Contribution(task_name=name, due_date=due_date, **kwargs)


class TestTaskUrgency:

    @pytest.mark.parametrize('due_in,urgency', [
        (-1, TaskUrgency.OVERDUE),
        (0, TaskUrgency.DUE_TODAY),
        (1, TaskUrgency.DUE_TOMORROW),
        (7, TaskUrgency.DUE_THIS_WEEK),
        (8, TaskUrgency.UPCOMING),
        (None, TaskUrgency.NO_DUE_DATE),
    ])
    def test_buckets(self, due_in, urgency):
        assert task_urgency(task(due_in=due_in), TODAY) == urgency

    def test_done_wins(self):
        assert task_urgency(task(due_in=-5, status='completed'), TODAY) == TaskUrgency.DONE


class TestMyTasks:

    def test_sorted_by_due_date_undated_last(self):
        tasks = [
            task('Undated'),
            task('Later', due_in=5),
            task('Done', due_in=1, status='verified'),
            task('Overdue', due_in=-2),
        ]
        assert [t.task_name for t in my_tasks(tasks, TODAY)] == ['Overdue', 'Later', 'Undated']

    def test_filters(self):
        tasks = [task('Overdue', due_in=-1), task('Today', due_in=0), task('Friday', due_in=4), task('Far', due_in=20)]
        assert [t.task_name for t in my_tasks(tasks, TODAY, MyTasksFilter.OVERDUE)] == ['Overdue']
        assert [t.task_name for t in my_tasks(tasks, TODAY, 'today')] == ['Today']
        assert [t.task_name for t in my_tasks(tasks, TODAY, 'week')] == ['Today', 'Friday']

    def test_stats(self):
        tasks = [
            task('Overdue', due_in=-1, estimated_hours=Decimal('2.5')),
            task('Today', due_in=0, estimated_hours=Decimal('1')),
            task('Soon', due_in=3),
            task('Done', due_in=0, status='completed', estimated_hours=Decimal('10')),
        ]
        stats = my_task_stats(tasks, TODAY)
        assert stats.total == 3
        assert stats.overdue == 1
        assert stats.due_today == 1
        assert stats.due_this_week == 2
        assert stats.total_hours == Decimal('3.5')

    def test_task_load(self):
        tasks = [
            task('A', due_in=-1, priority='urgent', estimated_hours=Decimal('4')),
            task('B', priority='high'),
            task('C', priority='low', estimated_hours=Decimal('1.5')),
            task('D', status='verified', priority='urgent'),
        ]
        load = task_load(tasks, TODAY)
        assert load.total_tasks == 3
        assert load.overdue_tasks == 1
        assert load.high_priority_tasks == 2
        assert load.hours_committed == Decimal('5.5')


class TestParseNaturalDate:
    """Tests for parse_natural_date (reference day is Monday 2025-03-10)."""

    @pytest.mark.parametrize('text,expected', [
        ('today', date(2025, 3, 10)),
        ('tomorrow', date(2025, 3, 11)),
        ('Friday', date(2025, 3, 14)),
        ('monday', date(2025, 3, 10)),
        ('next monday', date(2025, 3, 17)),
        ('next friday', date(2025, 3, 14)),
        ('this monday', date(2025, 3, 17)),
        ('in 3 days', date(2025, 3, 13)),
        ('in 2 weeks', date(2025, 3, 24)),
        ('in 1 month', date(2025, 4, 10)),
        ('next week', date(2025, 3, 17)),
        ('end of week', date(2025, 3, 16)),
        ('end of the month', date(2025, 3, 31)),
    ])
    def test_relative_phrases(self, text, expected):
        parsed = parse_natural_date(text, NOW)
        assert parsed.date == expected
        assert parsed.confidence == 'high'

    def test_deadline_is_five_pm_in_callers_zone(self):
        parsed = parse_natural_date('tomorrow', NOW)
        assert parsed.value == datetime(2025, 3, 11, 17, 0, tzinfo=timezone.utc)
        assert parsed.original_input == 'tomorrow'

    def test_full_dates_are_high_confidence(self):
        assert parse_natural_date('04/01/2025', NOW).date == date(2025, 4, 1)
        assert parse_natural_date('2025-04-01', NOW).confidence == 'high'

    def test_date_without_year_is_medium(self):
        parsed = parse_natural_date('Mar 15', NOW)
        assert parsed.date == date(2025, 3, 15)
        assert parsed.confidence == 'medium'

    def test_passed_date_rolls_to_next_year(self):
        assert parse_natural_date('Jan 5', NOW).date == date(2026, 1, 5)

    def test_soon_keywords(self):
        assert parse_natural_date('by midnight', NOW).date == TODAY
        parsed = parse_natural_date('asap please', NOW)
        assert parsed.date == TODAY
        assert parsed.confidence == 'medium'

    @pytest.mark.parametrize('text', ['', None, 'someday maybe', 'in a while'])
    def test_unparseable(self, text):
        assert parse_natural_date(text, NOW) is None

    def test_format_due_date(self):
        assert format_due_date(TODAY, TODAY) == 'Today'
        assert format_due_date(TODAY + timedelta(days=1), TODAY) == 'Tomorrow'
        assert format_due_date(date(2025, 3, 14), TODAY) == 'Friday'
        assert format_due_date(date(2025, 4, 2), TODAY) == 'Apr 2'


class TestTaskParsing:

    @pytest.mark.parametrize('text,priority', [
        ('Fix the form ASAP', PriorityLevel.URGENT),
        ('submit report by midnight', PriorityLevel.URGENT),
        ('important: call sponsor', PriorityLevel.HIGH),
        ('tidy the drive eventually', PriorityLevel.LOW),
        ('book a room', PriorityLevel.MEDIUM),
    ])
    def test_infer_priority(self, text, priority):
        assert infer_priority(text) == priority

    def test_match_assignee_by_first_name(self):
        match = match_assignee('Sarah', ['Tom Lee', 'Sarah Johnson'])
        assert match.matched_name == 'Sarah Johnson'
        assert match.confidence == 'high'

    def test_match_assignee_full_name_request(self):
        assert match_assignee('sarah j', ['Sarah Johnson']).matched_name == 'Sarah Johnson'

    def test_unmatched_assignee(self):
        match = match_assignee('Priya', ['Tom Lee'])
        assert match.matched_name is None
        assert match.to_dict()['confidence'] == 'low'

    def test_match_assignees_skips_blanks(self):
        assert len(match_assignees(['Tom', ' ', ''], ['Tom Lee'])) == 1

    def test_from_arguments(self):
        parsed = ParsedTask.from_arguments({
            'title': ' Design poster ',
            'priority': 'high',
            'due_date': 'next friday',
            'assignee_names': ['Leo'],
            'subtasks': ['Sketch', ' ', 'Print'],
        }, 'Design poster')
        assert parsed.title == 'Design poster'
        assert parsed.priority == PriorityLevel.HIGH
        assert parsed.due_date_text == 'next friday'
        assert parsed.subtasks == ['Sketch', 'Print']

    def test_invalid_priority_falls_back_to_keywords(self):
        parsed = ParsedTask.from_arguments({'title': 'Fix site', 'priority': 'critical'}, 'Fix site asap')
        assert parsed.priority == PriorityLevel.URGENT

    def test_missing_title(self):
        with pytest.raises(ValidationException):
            ParsedTask.from_arguments({'title': '  '}, 'something')


class TestProjectInsights:

    def summary(self, status='active', due_in=None, skill_gaps=0):
        due_date = TODAY + timedelta(days=due_in) if due_in is not None else None
        return ProjectSummary(uuid.uuid4(), 'P', ProjectStatus(status), due_date, skill_gaps)

    def test_empty_is_ready(self):
        insights = project_insights([], TODAY)
        assert [i.id for i in insights] == ['ready']

    def test_all_insights(self):
        projects = [
            self.summary('active', due_in=-1),
            self.summary('active', due_in=3, skill_gaps=2),
            self.summary('completed'),
            self.summary('on_hold'),
        ]
        insights = {i.id: i for i in project_insights(projects, TODAY)}
        assert list(insights) == ['attention', 'deadlines', 'velocity', 'skills', 'active']
        assert insights['attention'].value == 3
        assert insights['attention'].text == "3 projects need attention"
        assert insights['deadlines'].text == "1 deadline this week"
        assert insights['velocity'].value == 25
        assert insights['skills'].text == "2 skill gaps to fill"
        assert insights['active'].value == 2
