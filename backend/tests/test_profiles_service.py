"""
Profile service tests.
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from application.services.profiles import ProfileService
from domain.shared.exceptions import EntityAlreadyExistsException, EntityNotFoundException
from infrastructure.persistence.models import MemberSkill, Skill, UserActivity


@pytest.mark.django_db
class TestProfile:

    def test_update_refreshes_completeness(self, user):
        before = ProfileService(user).recompute_completeness()
        ProfileService(user).update_profile(bio='I like robots', location='Springfield')
        user.refresh_from_db()
        assert user.bio == 'I like robots'
        assert user.profile_completeness > before

    def test_protected_fields_are_ignored(self, user):
        email = user.email
        ProfileService(user).update_profile(email='new@example.edu', is_staff=True)
        user.refresh_from_db()
        assert user.email == email
        assert not user.is_staff


@pytest.mark.django_db
class TestSkills:

    def test_add_skill(self, user):
        member_skill = ProfileService(user).add_skill('  Machine   Learning ', 'technical')
        assert member_skill.skill.name == 'Machine Learning'
        assert member_skill.source == 'self_reported'
        assert Skill.objects.get(pk=member_skill.skill_id).usage_count == 1
        assert UserActivity.objects.filter(user=user, action='skill_added').exists()

    def test_existing_skill_any_case(self, user, skill_factory):
        skill_factory(name='Python')
        member_skill = ProfileService(user).add_skill('python')
        assert member_skill.skill.name == 'Python'
        assert Skill.objects.filter(name__iexact='python').count() == 1

    def test_duplicate(self, user):
        service = ProfileService(user)
        service.add_skill('Figma')
        with pytest.raises(EntityAlreadyExistsException):
            service.add_skill('FIGMA')

    def test_remove_own_skill_only(self, user, user_factory):
        mine = ProfileService(user).add_skill('Go')
        other = user_factory()
        with pytest.raises(EntityNotFoundException):
            ProfileService(other).remove_skill(mine.id)
        ProfileService(user).remove_skill(mine.id)
        assert not MemberSkill.objects.filter(user=user).exists()


@pytest.mark.django_db
def test_heatmap_counts_completed_tasks(member, project_factory, contribution_factory, organization):
    project = project_factory(organization=organization)
    now = timezone.now()
    contribution_factory(project=project, status='completed', completed_at=now, assigned_to=[member])
    contribution_factory(project=project, status='verified', completed_at=now, assigned_to=[member])
    contribution_factory(project=project, status='in_progress', assigned_to=[member])
    contribution_factory(project=project, status='completed', completed_at=now - timedelta(days=400),
                         assigned_to=[member])

    columns = ProfileService(member).heatmap(weeks=4)
    days = [day for column in columns for day in column]
    assert days[-1].day == timezone.localdate()
    assert days[-1].count == 2
    assert sum(day.count for day in days) == 2
