"""
Project and application aggregate tests: lifecycle transitions, publishing,
application rules and review decisions.
"""

import uuid
from datetime import date, timedelta

import pytest

from domain.applications.aggregates import ProjectApplication
from domain.matching import compute_skill_match
from domain.project.aggregates import InternalProject
from domain.shared.events import (
    ApplicationStatusChanged,
    ApplicationSubmitted,
    ProjectPublished,
    ProjectStatusChanged,
)
from domain.shared.exceptions import (
    AuthorizationException,
    BusinessRuleViolationException,
    ConcurrencyException,
    StatusTransitionException,
    ValidationException,
)
from domain.shared.value_objects import (
    ApplicationStatus,
    ProjectStatus,
    ProjectTimeline,
    ProjectVisibility,
)


TODAY = date(2025, 3, 10)


def project(**kwargs):
    kwargs.setdefault('name', 'Portal')
    kwargs.setdefault('public_description', 'Help us rebuild the portal')
    return InternalProject(**kwargs)


def listed_project(**kwargs):
    return project(status='active', visibility='public', **kwargs)


class TestInternalProject:
    """Tests for the InternalProject aggregate."""

    def test_name_required(self):
        with pytest.raises(ValidationException):
            InternalProject(name=' ')

    def test_string_fields_are_coerced(self):
        p = project(status='on_hold', visibility='public', timeline='this_week')
        assert p.status == ProjectStatus.ON_HOLD
        assert p.visibility == ProjectVisibility.PUBLIC
        assert p.timeline == ProjectTimeline.THIS_WEEK
        assert project(timeline='').timeline is None

    def test_invalid_max_applicants(self):
        with pytest.raises(ValidationException):
            project(max_applicants=0)

    @pytest.mark.parametrize('current,target', [
        ('planning', 'active'),
        ('planning', 'on_hold'),
        ('active', 'completed'),
        ('on_hold', 'active'),
        ('completed', 'archived'),
    ])
    def test_allowed_transitions(self, current, target):
        p = project(status=current)
        p.change_status(target)
        assert p.status == ProjectStatus(target)
        event = p.domain_events[-1]
        assert isinstance(event, ProjectStatusChanged)
        assert (event.old_status, event.new_status) == (current, target)

    @pytest.mark.parametrize('current,target', [
        ('planning', 'completed'),
        ('completed', 'active'),
        ('archived', 'planning'),
        ('on_hold', 'completed'),
    ])
    def test_rejected_transitions(self, current, target):
        p = project(status=current)
        with pytest.raises(StatusTransitionException):
            p.change_status(target)
        assert p.status == ProjectStatus(current)

    def test_same_status_is_a_no_op(self):
        p = project(status='active')
        p.change_status('active')
        assert p.domain_events == []
        assert p.version == 1

    def test_publish_activates_planning_project(self):
        p = project()
        p.publish()
        assert p.status == ProjectStatus.ACTIVE
        assert p.visibility == ProjectVisibility.PUBLIC
        assert p.published_at is not None
        assert p.is_listed
        assert any(isinstance(e, ProjectPublished) for e in p.domain_events)

    def test_publish_needs_public_description(self):
        with pytest.raises(ValidationException):
            project(public_description='  ').publish()

    def test_publish_closed_project(self):
        with pytest.raises(BusinessRuleViolationException) as exc:
            project(status='completed').publish()
        assert exc.value.details['rule'] == 'PUBLISH_CLOSED_PROJECT'

    def test_unpublish(self):
        p = listed_project()
        p.unpublish()
        assert not p.is_listed

    def test_version_from_form_data(self):
        p = project()
        p.check_version('1')
        with pytest.raises(ConcurrencyException):
            p.check_version('2')
        with pytest.raises(ValidationException):
            p.check_version('one')

    def test_accepts_applications(self):
        assert listed_project().accepts_applications(TODAY)
        assert not project(status='active').accepts_applications(TODAY)

    def test_deadline_day_still_accepts(self):
        assert listed_project(application_deadline=TODAY).accepts_applications(TODAY)
        p = listed_project(application_deadline=TODAY - timedelta(days=1))
        with pytest.raises(BusinessRuleViolationException) as exc:
            p.check_accepts_applications(TODAY, 0)
        assert exc.value.details['rule'] == 'DEADLINE_PASSED'

    def test_applicant_limit(self):
        p = listed_project(max_applicants=2)
        assert p.accepts_applications(TODAY, 1)
        assert not p.accepts_applications(TODAY, 2)


class TestProjectApplication:
    """Tests for the ProjectApplication aggregate."""

    def submit(self, **details):
        match = compute_skill_match(['Python'], ['Python', 'React'], ['Figma'])
        return ProjectApplication.submit(uuid.uuid4(), uuid.uuid4(), match, **details)

    def test_submit_snapshots_match(self):
        application = self.submit(cover_letter=' Hi! ')
        assert application.status == ApplicationStatus.PENDING
        assert application.skill_match_score == 35
        assert application.matched_skills == ['Python']
        assert application.missing_skills == ['React']
        assert application.cover_letter == 'Hi!'
        event = application.domain_events[0]
        assert isinstance(event, ApplicationSubmitted)
        assert event.match_score == 35

    def test_portfolio_urls_are_cleaned(self):
        application = self.submit(portfolio_urls=['https://a.dev', '', 'https://a.dev', 'http://b.dev/x'])
        assert application.portfolio_urls == ['https://a.dev', 'http://b.dev/x']

    def test_portfolio_url_scheme(self):
        with pytest.raises(ValidationException):
            self.submit(portfolio_urls=['ftp://files.example.com'])

    def test_too_many_portfolio_urls(self):
        with pytest.raises(ValidationException):
            self.submit(portfolio_urls=[f'https://site{i}.dev' for i in range(6)])

    @pytest.mark.parametrize('hours', [0, 61])
    def test_availability_bounds(self, hours):
        with pytest.raises(ValidationException):
            self.submit(availability_hours_per_week=hours)

    def test_cover_letter_length(self):
        with pytest.raises(ValidationException):
            self.submit(cover_letter='x' * 5001)

    def test_review(self):
        application = self.submit()
        reviewer = uuid.uuid4()
        application.review('accepted', reviewer, notes=' Welcome ')
        assert application.status == ApplicationStatus.ACCEPTED
        assert application.reviewed_by == reviewer
        assert application.reviewed_at is not None
        assert application.reviewer_notes == 'Welcome'
        event = application.domain_events[-1]
        assert isinstance(event, ApplicationStatusChanged)
        assert event.new_status == 'accepted'

    def test_reopen_decision(self):
        application = self.submit()
        application.review('rejected', uuid.uuid4())
        application.review('pending', uuid.uuid4())
        assert application.status == ApplicationStatus.PENDING

    def test_reviewer_cannot_withdraw(self):
        with pytest.raises(ValidationException):
            self.submit().review('withdrawn', uuid.uuid4())

    def test_withdraw_by_applicant(self):
        application = self.submit()
        application.withdraw(application.applicant_id)
        assert application.status == ApplicationStatus.WITHDRAWN

    def test_withdraw_by_someone_else(self):
        with pytest.raises(AuthorizationException):
            self.submit().withdraw(uuid.uuid4())

    def test_withdrawn_is_final(self):
        application = self.submit()
        application.withdraw(application.applicant_id)
        with pytest.raises(StatusTransitionException):
            application.review('pending', uuid.uuid4())

    def test_accepted_cannot_jump_to_rejected(self):
        application = self.submit()
        application.review('accepted', uuid.uuid4())
        with pytest.raises(StatusTransitionException):
            application.review('rejected', uuid.uuid4())
