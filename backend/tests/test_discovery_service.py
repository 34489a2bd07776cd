"""
Discovery service tests: feed rows built from the database, filters,
recommendations, bookmarks and view tracking.
"""

from datetime import timedelta

import pytest
from django.utils import timezone

from application.services.discovery import DiscoveryService
from domain.shared.exceptions import EntityNotFoundException, ValidationException
from infrastructure.persistence.models import InternalProject, ProjectView, SavedProject


@pytest.mark.django_db
class TestFeed:
    """Tests for DiscoveryService.feed."""

    def test_rows_carry_the_users_match(self, user, skills, project):
        skills(user, 'Python', 'React')
        page = DiscoveryService(user).feed()
        assert page.total == 1
        row = page.items[0]
        assert row.id == project.id
        assert row.match_score == 70
        assert row.required_skills == ['Python', 'React']
        assert row.preferred_skills == ['Figma']
        assert row.organization_slug == project.organization.slug

    def test_only_listed_projects(self, user, project, internal_project_factory, project_factory):
        internal_project_factory(organization=project.organization)
        project_factory(organization=project.organization, status='completed')
        ids = [row.id for row in DiscoveryService(user).feed().items]
        assert ids == [project.id]

    def test_newest_first(self, user, project_factory, organization):
        older = project_factory(organization=organization, published_at=timezone.now() - timedelta(days=2))
        newer = project_factory(organization=organization)
        assert [r.id for r in DiscoveryService(user).feed().items] == [newer.id, older.id]

    def test_task_skills_join_project_skills(self, user, project, contribution_factory):
        from infrastructure.persistence.models import Skill, TaskRequiredSkill
        task = contribution_factory(project=project)
        TaskRequiredSkill.objects.create(task=task, skill=Skill.get_or_create_by_name('SQL'))
        TaskRequiredSkill.objects.create(task=task, skill=Skill.get_or_create_by_name('python'))
        row = DiscoveryService(user).feed().items[0]
        assert row.required_skills == ['Python', 'React', 'SQL']

    def test_remote_filter(self, user, project, project_factory):
        remote = project_factory(organization=project.organization, is_remote=True)
        page = DiscoveryService(user).feed('remote')
        assert [r.id for r in page.items] == [remote.id]

    def test_closing_soon_filter(self, user, project, project_factory):
        closing = project_factory(
            organization=project.organization,
            application_deadline=timezone.localdate() + timedelta(days=3),
        )
        project_factory(
            organization=project.organization,
            application_deadline=timezone.localdate() + timedelta(days=30),
        )
        page = DiscoveryService(user).feed('closing_soon')
        assert [r.id for r in page.items] == [closing.id]

    def test_trending_filter(self, user, project, project_factory, project_view_factory):
        popular = project_factory(organization=project.organization, published_at=timezone.now() - timedelta(days=3))
        for _ in range(3):
            project_view_factory(project=popular)
        page = DiscoveryService(user).feed('trending')
        assert page.items[0].id == popular.id
        assert page.items[0].trending_score > page.items[1].trending_score

    def test_search(self, user, project_factory, organization):
        match = project_factory(organization=organization, name='Robot Arena')
        project_factory(organization=organization, name='Bake Sale')
        page = DiscoveryService(user).feed(search='robot')
        assert [r.id for r in page.items] == [match.id]

    def test_unknown_filter(self, user):
        with pytest.raises(ValidationException):
            DiscoveryService(user).feed('popular')

    def test_paging(self, user, project_factory, organization):
        for _ in range(3):
            project_factory(organization=organization)
        page = DiscoveryService(user).feed(offset=0, limit=2)
        assert len(page.items) == 2
        assert page.total == 3
        assert page.next_offset == 2

    def test_applied_projects_are_flagged(self, user, project, application_factory):
        application_factory(project=project, applicant=user)
        row = DiscoveryService(user).feed().items[0]
        assert row.has_applied
        assert row.application_status == 'pending'


@pytest.mark.django_db
class TestForYou:

    def test_excludes_applied_and_low_matches(self, user, skills, project, project_factory, application_factory):
        skills(user, 'Python', 'React')
        applied = project_factory(organization=project.organization, required=['Python'])
        application_factory(project=applied, applicant=user)
        project_factory(organization=project.organization, required=['Rust'])
        selection = DiscoveryService(user).for_you()
        assert [r.id for r in selection.items] == [project.id]


@pytest.mark.django_db
class TestBookmarksAndViews:

    def test_toggle_save(self, user, project):
        service = DiscoveryService(user)
        assert service.toggle_save(project.id) is True
        assert SavedProject.objects.filter(user=user, project=project).exists()
        assert [r.id for r in service.saved()] == [project.id]
        assert service.toggle_save(project.id) is False
        assert service.saved() == []

    def test_cannot_save_internal_project(self, user, internal_project_factory):
        hidden = internal_project_factory()
        with pytest.raises(EntityNotFoundException):
            DiscoveryService(user).toggle_save(hidden.id)

    def test_record_view(self, user, project):
        view = DiscoveryService(user).record_view(project.id, referrer='feed', duration_seconds=12)
        assert view.viewer == user
        assert view.view_duration_seconds == 12
        project.refresh_from_db()
        assert project.view_count == 1
        assert ProjectView.objects.filter(project=project).count() == 1

    def test_applied_list(self, user, project, project_factory, application_factory):
        other = project_factory(organization=project.organization)
        application_factory(project=project, applicant=user)
        application_factory(project=other, applicant=user)
        ids = [r.id for r in DiscoveryService(user).applied()]
        assert set(ids) == {project.id, other.id}

    def test_saved_skips_deleted_projects(self, user, project):
        SavedProject.objects.create(user=user, project=project)
        InternalProject.objects.get(pk=project.pk).soft_delete()
        assert DiscoveryService(user).saved() == []
