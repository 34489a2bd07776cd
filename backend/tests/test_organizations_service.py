"""
Organization service tests.

Covers:
- Creating organizations with unique slugs
- Member management and the last-admin rule
- Filling and vacating positions
- Org chart, role health, health score and insights
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from application.services.access import is_admin
from application.services.organizations import OrganizationService
from domain.shared.exceptions import (
    AuthorizationException,
    BusinessRuleViolationException,
    EntityAlreadyExistsException,
    ValidationException,
)
from infrastructure.persistence.models import (
    OrganizationAnalytics,
    OrganizationMember,
    UserActivity,
)


@pytest.mark.django_db
class TestCreate:

    def test_creator_becomes_admin(self, user):
        organization = OrganizationService(user).create('Campus Coders', category='technology')
        assert organization.slug == 'campus-coders'
        assert organization.admin == user
        membership = OrganizationMember.objects.get(organization=organization)
        assert (membership.user, membership.role) == (user, 'admin')
        assert UserActivity.objects.filter(user=user, action='joined_organization').exists()

    def test_slug_is_unique(self, user, user_factory):
        OrganizationService(user).create('Campus Coders')
        second = OrganizationService(user_factory()).create('Campus  Coders!')
        third = OrganizationService(user_factory()).create('campus coders')
        assert (second.slug, third.slug) == ('campus-coders-2', 'campus-coders-3')

    def test_unknown_category(self, user):
        with pytest.raises(ValidationException):
            OrganizationService(user).create('Chess Club', category='board-games')


@pytest.mark.django_db
class TestMembers:
    """Tests for add_member, change_role and remove_member."""

    def test_add_member(self, organization, org_admin, user, broadcasts, messages, django_capture_on_commit_callbacks):
        with django_capture_on_commit_callbacks(execute=True):
            member = OrganizationService(org_admin).add_member(organization.id, user.id, 'treasurer')
        assert member.role == 'treasurer'
        [(group, message)] = messages(broadcasts, 'notification')
        assert group == f'notifications_{user.id}'
        assert organization.name in message['message']

    def test_add_twice(self, organization, org_admin, member):
        with pytest.raises(EntityAlreadyExistsException):
            OrganizationService(org_admin).add_member(organization.id, member.id)

    def test_unknown_role(self, organization, org_admin, user):
        with pytest.raises(ValidationException):
            OrganizationService(org_admin).add_member(organization.id, user.id, 'king')

    def test_members_cannot_add(self, organization, member, user):
        with pytest.raises(AuthorizationException):
            OrganizationService(member).add_member(organization.id, user.id)

    def test_promote(self, organization, org_admin, member):
        updated = OrganizationService(org_admin).change_role(organization.id, member.id, 'vice_president')
        assert updated.role == 'vice_president'

    def test_last_admin_keeps_role(self, organization, org_admin):
        with pytest.raises(BusinessRuleViolationException) as exc:
            OrganizationService(org_admin).change_role(organization.id, org_admin.id, 'member')
        assert exc.value.details['rule'] == 'LAST_ADMIN'

    def test_member_can_leave(self, organization, member, position_factory):
        position = position_factory(organization=organization, holder=member)
        OrganizationService(member).remove_member(organization.id, member.id)
        assert not OrganizationMember.objects.filter(organization=organization, user=member).exists()
        position.refresh_from_db()
        assert position.holder is None

    def test_owner_leaving_hands_over(self, organization, org_admin, member_factory):
        president = member_factory(organization=organization, role='president').user
        OrganizationService(org_admin).remove_member(organization.id, org_admin.id)
        organization.refresh_from_db()
        assert organization.admin == president
        assert not is_admin(org_admin, organization)
        assert is_admin(president, organization)

    def test_owner_stepping_down_hands_over(self, organization, org_admin, member_factory):
        president = member_factory(organization=organization, role='president').user
        OrganizationService(org_admin).change_role(organization.id, org_admin.id, 'member')
        organization.refresh_from_db()
        assert organization.admin == president
        assert not is_admin(org_admin, organization)

    def test_member_cannot_remove_others(self, organization, member, member_factory):
        other = member_factory(organization=organization).user
        with pytest.raises(AuthorizationException):
            OrganizationService(member).remove_member(organization.id, other.id)


@pytest.mark.django_db
class TestPositions:

    def test_fill_vacant_position(
        self, organization, org_admin, member, position_factory, broadcasts, messages,
        django_capture_on_commit_callbacks
    ):
        position = position_factory(organization=organization, role='treasurer')
        term_end = timezone.localdate() + timedelta(days=120)
        with django_capture_on_commit_callbacks(execute=True):
            filled = OrganizationService(org_admin).fill_position(position.id, member.id, term_end)
        assert filled.holder == member
        assert filled.term_end_date == term_end
        [(group, _)] = messages(broadcasts, 'position.filled')
        assert group == f'notifications_{member.id}'

    def test_holder_must_be_member(self, organization, org_admin, user, position_factory):
        position = position_factory(organization=organization)
        with pytest.raises(ValidationException):
            OrganizationService(org_admin).fill_position(position.id, user.id)

    def test_vacate(self, organization, org_admin, member, position_factory):
        position = position_factory(organization=organization, holder=member,
                                    term_end_date=timezone.localdate())
        vacated = OrganizationService(org_admin).vacate_position(position.id)
        assert vacated.holder is None
        assert vacated.term_end_date is None


@pytest.mark.django_db
class TestOrgChart:

    def test_chart(self, organization, org_admin, position_factory, team_factory):
        position_factory(organization=organization, role='president', holder=org_admin, order=0)
        position_factory(organization=organization, role='treasurer', reports_to_role='president', order=1)
        team = team_factory(organization=organization, name='Web')
        team.leads.add(org_admin)

        chart = OrganizationService(org_admin).org_chart(organization.id).to_dict()
        assert [n['id'] for n in chart['nodes']] == [str(org_admin.id), 'vacant-treasurer-1']
        assert chart['nodes'][0]['team']['name'] == 'Web'
        assert chart['edges'] == [{
            'id': f'evacant-treasurer-1-{org_admin.id}',
            'source': str(org_admin.id),
            'target': 'vacant-treasurer-1',
        }]
        assert chart['nodes'][1]['position'] == {'x': 0, 'y': 200}

    def test_reports_to_position(self, organization, org_admin, member, position_factory):
        position_factory(organization=organization, role='team_lead', order=0)
        south = position_factory(organization=organization, role='team_lead', holder=org_admin, order=1)
        position_factory(organization=organization, role='analyst', holder=member, reports_to=south, order=2)

        chart = OrganizationService(org_admin).org_chart(organization.id).to_dict()
        assert [(e['source'], e['target']) for e in chart['edges']] == [(str(org_admin.id), str(member.id))]

    def test_bad_direction(self, organization, org_admin):
        with pytest.raises(ValidationException):
            OrganizationService(org_admin).org_chart(organization.id, direction='RL')


@pytest.mark.django_db
class TestRoleHealth:

    def test_summary_roles_and_timeline(self, organization, org_admin, member, skills, position_factory):
        skills(member, 'Python')
        at_risk = position_factory(
            organization=organization, role='president', holder=org_admin, required_skills=['Python'],
            term_end_date=timezone.localdate() + timedelta(days=30),
        )
        vacant = position_factory(organization=organization, role='treasurer', required_skills=['Python'])

        data = OrganizationService(member).role_health(organization.id)
        assert data['summary'] == {'total_roles': 2, 'filled_roles': 1, 'vacant_roles': 1, 'at_risk_roles': 1}

        roles = {r['id']: r for r in data['roles']}
        assert roles[str(at_risk.id)]['status'] == 'at_risk'
        assert roles[str(at_risk.id)]['days_remaining'] == 30
        assert roles[str(vacant.id)]['status'] == 'vacant'
        best = roles[str(vacant.id)]['candidates'][0]
        assert best['user_id'] == str(member.id)
        assert best['match_score'] == 100

        assert len(data['timeline']) == 4
        assert str(vacant.id) in data['timeline'][0]['vacant']

    def test_needs_membership(self, organization, user):
        with pytest.raises(AuthorizationException):
            OrganizationService(user).role_health(organization.id)


@pytest.mark.django_db
class TestHealth:
    """Tests for the health indicators and snapshots."""

    @pytest.fixture
    def busy_org(self, organization, member, skills, project, contribution_factory):
        skills(member, 'Python')
        contribution_factory(project=project, status='completed')
        contribution_factory(project=project, status='in_progress', assigned_to=[member])
        return organization

    def test_indicators(self, busy_org, org_admin):
        health = OrganizationService(org_admin).health(busy_org.id)
        # Python of Python + React
        assert health.skill_sufficiency == 50
        assert health.project_completion == 50
        assert health.member_utilization == 50
        assert health.external_dependency == 0

    def test_accepted_outsiders_count_as_external(self, busy_org, project, application_factory):
        application_factory(project=project, status='accepted')
        health = OrganizationService(busy_org.admin).health(busy_org.id)
        assert health.external_dependency > 0

    def test_snapshot(self, busy_org, org_admin):
        snapshot = OrganizationService(org_admin).snapshot_health(busy_org.id)
        assert OrganizationAnalytics.objects.count() == 1
        assert snapshot.skill_sufficiency_score == 50
        assert snapshot.active_members == 2
        assert snapshot.total_projects == 1
        assert OrganizationService(org_admin).latest_snapshot(busy_org.id) == snapshot

    def test_insights(self, busy_org, member, project):
        insights = {i.id: i for i in OrganizationService(member).insights(busy_org.id)}
        # React is required and nobody has it
        assert insights['skills'].value == 1
        assert insights['active'].value == 1

