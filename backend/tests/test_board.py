"""
Kanban board and contribution entity tests.
"""

import uuid
from datetime import date, timedelta

import pytest

from domain.project.board import KANBAN_COLUMNS, build_board, move_on_board
from domain.project.entities import Contribution, Subtask
from domain.shared.exceptions import (
    ConcurrencyException,
    EntityNotFoundException,
    ValidationException,
)
from domain.shared.value_objects import ContributionStatus, PriorityLevel


TODAY = date(2025, 3, 10)


def task(name='Task', **kwargs):
    return Contribution(task_name=name, **kwargs)


class TestContribution:
    """Tests for the Contribution entity."""

    def test_name_is_required(self):
        with pytest.raises(ValidationException):
            Contribution(task_name='   ')

    def test_strings_are_coerced(self):
        t = task(status='in_progress', priority='urgent')
        assert t.status == ContributionStatus.IN_PROGRESS
        assert t.priority == PriorityLevel.URGENT

    def test_complete_stamps_completed_at(self):
        t = task()
        old = t.move_to(ContributionStatus.COMPLETED)
        assert old == ContributionStatus.PENDING
        assert t.completed_at is not None
        assert t.version == 2

    def test_verify_records_verifier(self):
        verifier = uuid.uuid4()
        t = task(status='completed')
        t.move_to(ContributionStatus.VERIFIED, verifier)
        assert t.verified_by == verifier
        assert t.completed_at is not None

    def test_moving_back_clears_completion(self):
        t = task(status='completed')
        t.move_to(ContributionStatus.VERIFIED, uuid.uuid4())
        t.move_to(ContributionStatus.IN_PROGRESS)
        assert t.completed_at is None
        assert t.verified_by is None

    def test_same_column_is_a_no_op(self):
        t = task()
        assert t.move_to('pending') == ContributionStatus.PENDING
        assert t.version == 1

    def test_assign_starts_pending_task(self):
        user_id = uuid.uuid4()
        t = task()
        assert t.assign(user_id)
        assert t.status == ContributionStatus.IN_PROGRESS
        assert t.primary_assignee_id == user_id
        assert not t.assign(user_id)

    def test_unassign_promotes_next_primary(self):
        first, second = uuid.uuid4(), uuid.uuid4()
        t = task(assignee_ids=[first, second], primary_assignee_id=first)
        assert t.unassign(first)
        assert t.primary_assignee_id == second
        assert not t.unassign(first)

    def test_subtasks(self):
        t = task(subtasks=[Subtask.from_dict('Draft'), Subtask.from_dict({'title': 'Review', 'completed': True})])
        assert t.subtask_progress == (1, 2)
        assert t.progress_percent == 50
        t.toggle_subtask(0)
        assert t.subtasks[0].completed
        assert t.subtask_progress == (2, 2)

    def test_toggle_subtask_out_of_range(self):
        with pytest.raises(ValidationException):
            task().toggle_subtask(0)

    def test_done_task_is_fully_progressed_and_never_overdue(self):
        t = task(status='completed', due_date=TODAY - timedelta(days=3))
        assert t.progress_percent == 100
        assert not t.is_overdue(TODAY)

    def test_subtask_to_dict(self):
        assert Subtask('Draft').to_dict() == {'title': 'Draft', 'completed': False}


class TestBuildBoard:
    """Tests for build_board."""

    def test_four_columns_in_order(self):
        board = build_board([], TODAY)
        assert [c.title for c in board.columns] == ['To Do', 'In Progress', 'Completed', 'Verified']
        assert len(KANBAN_COLUMNS) == 4
        assert board.total == 0

    def test_groups_by_status(self):
        tasks = [task('A'), task('B', status='in_progress'), task('C', status='verified')]
        board = build_board(tasks, TODAY)
        assert [t.task_name for t in board.column('pending').tasks] == ['A']
        assert [t.task_name for t in board.column(ContributionStatus.IN_PROGRESS).tasks] == ['B']
        assert board.column('verified').count == 1
        assert board.total == 3

    def test_overdue_first_then_priority(self):
        tasks = [
            task('Low', priority='low'),
            task('Urgent', priority='urgent'),
            task('Overdue low', priority='low', due_date=TODAY - timedelta(days=1)),
            task('High', priority='high'),
            task('Medium', priority='medium'),
        ]
        board = build_board(tasks, TODAY)
        assert [t.task_name for t in board.column('pending').tasks] == [
            'Overdue low', 'Urgent', 'High', 'Medium', 'Low',
        ]

    def test_filter_by_member_and_priority(self):
        member = uuid.uuid4()
        tasks = [
            task('Mine high', priority='high', assignee_ids=[member]),
            task('Mine low', priority='low', assignee_ids=[member]),
            task('Other high', priority='high'),
        ]
        board = build_board(tasks, TODAY, member_id=member, priority='high')
        assert [t.task_name for t in board.tasks] == ['Mine high']

    def test_visible_columns(self):
        board = build_board([task('A')], TODAY, visible_columns=['in_progress', 'verified'])
        assert [c.status for c in board.columns] == [ContributionStatus.IN_PROGRESS, ContributionStatus.VERIFIED]
        assert board.total == 0

    def test_unknown_column(self):
        with pytest.raises(ValidationException):
            build_board([], TODAY, visible_columns=['blocked'])

    def test_find(self):
        t = task('A')
        board = build_board([t], TODAY)
        assert board.find(t.id) is t
        with pytest.raises(EntityNotFoundException):
            board.find(uuid.uuid4())


class TestMoveOnBoard:

    def test_move(self):
        t = task('A')
        moved, old = move_on_board([t], t.id, 'completed', TODAY, expected_version=1)
        assert moved is t
        assert old == ContributionStatus.PENDING
        assert t.status == ContributionStatus.COMPLETED

    def test_stale_version(self):
        t = task('A', version=3)
        with pytest.raises(ConcurrencyException):
            move_on_board([t], t.id, 'completed', TODAY, expected_version=2)
        assert t.status == ContributionStatus.PENDING

    def test_any_column_to_any_column(self):
        t = task('A', status='verified')
        move_on_board([t], t.id, 'pending', TODAY)
        assert t.status == ContributionStatus.PENDING

    def test_unknown_task(self):
        with pytest.raises(EntityNotFoundException):
            move_on_board([], uuid.uuid4(), 'completed', TODAY)

    def test_unknown_status(self):
        t = task('A')
        with pytest.raises(ValidationException):
            move_on_board([t], t.id, 'blocked', TODAY)
