"""
Discovery feed tests (pure domain).

Covers:
- Deadline countdown labels and urgency levels
- Quick filters, search and trending order
- Offset pagination
- "For you" selection
"""

import uuid
from datetime import date, datetime, timedelta, timezone

import pytest

from domain.discovery import (
    DeadlineUrgency,
    DiscoverProject,
    FeedFilter,
    apply_feed_filter,
    days_until,
    deadline_status,
    is_closing_soon,
    paginate,
    rank_recommendations,
    search_projects,
    select_for_you,
    trending_score,
)
from domain.matching import SkillMatch


NOW = datetime(2025, 3, 1, 15, 30, tzinfo=timezone.utc)
TODAY = NOW.date()


def row(name='Project', score=None, published_days_ago=0, **kwargs):
    match = SkillMatch(score=score) if score is not None else None
    return DiscoverProject(
        id=uuid.uuid4(),
        name=name,
        match=match,
        published_at=NOW - timedelta(days=published_days_ago),
        **kwargs,
    )


class TestDeadlines:
    """Tests for deadline_status labels."""

    def test_rolling(self):
        status = deadline_status(None, NOW)
        assert status.urgency == DeadlineUrgency.ROLLING
        assert status.label == "Rolling basis"
        assert status.days_left is None
        assert not status.is_urgent

    def test_closed(self):
        status = deadline_status(TODAY - timedelta(days=1), NOW)
        assert status.label == "Closed"
        assert status.urgency.level == "expired"
        assert status.is_urgent
        assert not status.is_open

    def test_due_today_and_tomorrow(self):
        assert deadline_status(TODAY, NOW).label == "Due today"
        assert deadline_status(TODAY + timedelta(days=1), NOW).label == "Due tomorrow"

    @pytest.mark.parametrize('days,urgency', [
        (2, DeadlineUrgency.URGENT),
        (3, DeadlineUrgency.URGENT),
        (4, DeadlineUrgency.SOON),
        (7, DeadlineUrgency.SOON),
    ])
    def test_days_left(self, days, urgency):
        status = deadline_status(TODAY + timedelta(days=days), NOW)
        assert status.label == f"{days} days left"
        assert status.urgency == urgency

    def test_dated_label_within_a_month(self):
        status = deadline_status(date(2025, 3, 15), NOW)
        assert status.label == "Mar 15 (14 days)"
        assert status.urgency.level == "low"

    def test_far_deadline_shows_date_only(self):
        assert deadline_status(date(2025, 6, 2), NOW).label == "Jun 2"

    def test_days_until_datetime_rounds_up(self):
        deadline = NOW + timedelta(hours=30)
        assert days_until(deadline, NOW) == 2

    def test_days_until_plain_date(self):
        assert days_until(TODAY, NOW) == 0
        assert days_until(TODAY - timedelta(days=1), NOW) == -1

    def test_is_closing_soon(self):
        assert is_closing_soon(TODAY, NOW)
        assert is_closing_soon(TODAY + timedelta(days=7), NOW)
        assert not is_closing_soon(TODAY + timedelta(days=8), NOW)
        assert not is_closing_soon(TODAY - timedelta(days=1), NOW)
        assert not is_closing_soon(None, NOW)

    def test_to_dict(self):
        data = deadline_status(TODAY + timedelta(days=2), NOW).to_dict()
        assert data == {
            'urgency': 'urgent',
            'level': 'high',
            'days_left': 2,
            'label': '2 days left',
            'is_urgent': True,
        }


class TestFeedFilters:
    """Tests for apply_feed_filter and FeedFilter.parse."""

    def test_parse_accepts_hyphens_and_blank(self):
        assert FeedFilter.parse('closing-soon') == FeedFilter.CLOSING_SOON
        assert FeedFilter.parse('For_You') == FeedFilter.FOR_YOU
        assert FeedFilter.parse('') == FeedFilter.ALL
        assert FeedFilter.parse(None) == FeedFilter.ALL

    def test_parse_rejects_unknown(self):
        with pytest.raises(ValueError):
            FeedFilter.parse('popular')

    def test_all_keeps_order(self):
        rows = [row('A'), row('B')]
        assert apply_feed_filter(rows, FeedFilter.ALL, NOW) == rows

    def test_for_you_threshold(self):
        rows = [row('Strong', score=80), row('Edge', score=50), row('Weak', score=49), row('Unscored')]
        result = apply_feed_filter(rows, FeedFilter.FOR_YOU, NOW)
        assert [r.name for r in result] == ['Strong', 'Edge']

    def test_closing_soon(self):
        rows = [
            row('Today', application_deadline=TODAY),
            row('Week', application_deadline=TODAY + timedelta(days=7)),
            row('Later', application_deadline=TODAY + timedelta(days=8)),
            row('Closed', application_deadline=TODAY - timedelta(days=1)),
            row('Rolling'),
        ]
        result = apply_feed_filter(rows, FeedFilter.CLOSING_SOON, NOW)
        assert [r.name for r in result] == ['Today', 'Week']

    def test_remote(self):
        rows = [row('Remote', is_remote=True), row('Onsite')]
        assert [r.name for r in apply_feed_filter(rows, FeedFilter.REMOTE, NOW)] == ['Remote']

    def test_low_commitment(self):
        rows = [
            row('Light', commitment_hours=5),
            row('Heavy', commitment_hours=10),
            row('Unknown'),
        ]
        result = apply_feed_filter(rows, FeedFilter.LOW_COMMITMENT, NOW)
        assert [r.name for r in result] == ['Light']

    def test_trending_sorts_by_score_stably(self):
        rows = [
            row('Quiet', trending_score=1),
            row('Hot', trending_score=9),
            row('Warm', trending_score=4),
            row('Warm too', trending_score=4),
        ]
        result = apply_feed_filter(rows, FeedFilter.TRENDING, NOW)
        assert [r.name for r in result] == ['Hot', 'Warm', 'Warm too', 'Quiet']

    def test_trending_score_weights(self):
        assert trending_score(10, 2, 1) == 18
        assert trending_score(-1, 0, 0) == 0


class TestSearch:

    def test_blank_query_returns_everything(self):
        rows = [row('A'), row('B')]
        assert search_projects(rows, '  ') == rows

    def test_matches_name_organization_and_skills(self):
        rows = [
            row('Portal Redesign'),
            row('Hackathon', organization_name='Campus Coders'),
            row('Newsletter', required_skills=['Copywriting']),
            row('Garden'),
        ]
        assert [r.name for r in search_projects(rows, 'redesign')] == ['Portal Redesign']
        assert [r.name for r in search_projects(rows, 'CODERS')] == ['Hackathon']
        assert [r.name for r in search_projects(rows, 'copy')] == ['Newsletter']


class TestPaginate:

    def test_first_page(self):
        rows = [row(str(i)) for i in range(25)]
        page = paginate(rows, 0, 10)
        assert len(page.items) == 10
        assert page.total == 25
        assert page.next_offset == 10
        assert page.has_more

    def test_last_page(self):
        rows = [row(str(i)) for i in range(25)]
        page = paginate(rows, 20, 10)
        assert [r.name for r in page.items] == [str(i) for i in range(20, 25)]
        assert page.next_offset is None
        assert not page.has_more

    def test_offset_past_the_end(self):
        page = paginate([row('A')], 5, 10)
        assert page.items == []
        assert not page.has_more

    def test_limit_is_clamped(self):
        rows = [row(str(i)) for i in range(150)]
        assert paginate(rows, 0, 500).limit == 100
        assert paginate(rows, 0, 0).limit == 1
        assert paginate(rows).limit == 20


class TestForYou:

    def test_featured_is_best_match(self):
        rows = [
            row('Good', score=60),
            row('Best', score=95),
            row('Low', score=20),
            row('Strong', score=80),
        ]
        selection = select_for_you(rows)
        assert selection.featured.name == 'Best'
        assert [r.name for r in selection.best_matches] == ['Strong', 'Good']
        assert len(selection.items) == 3

    def test_limit(self):
        rows = [row(str(i), score=60 + i) for i in range(10)]
        selection = select_for_you(rows, limit=4)
        assert len(selection.items) == 4
        assert selection.featured.name == '9'

    def test_nothing_above_threshold(self):
        selection = select_for_you([row('Low', score=10)])
        assert selection.featured is None
        assert selection.items == []

    def test_ties_prefer_newer(self):
        rows = [row('Old', score=70, published_days_ago=5), row('New', score=70, published_days_ago=1)]
        assert [r.name for r in rank_recommendations(rows)] == ['New', 'Old']
