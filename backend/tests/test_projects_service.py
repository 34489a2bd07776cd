"""
Project service tests: creating, publishing, lifecycle changes and skill
edits that refresh stored match scores.
"""

import pytest

from application.services.projects import ProjectService
from domain.shared.exceptions import (
    AuthorizationException,
    ConcurrencyException,
    StatusTransitionException,
    ValidationException,
)
from infrastructure.persistence.models import InternalProject, UserActivity


@pytest.mark.django_db
class TestCreate:

    def test_create_with_skills(self, organization, org_admin):
        project = ProjectService(org_admin).create(
            organization,
            'Club Website',
            required_skills=['React', 'react', 'Python'],
            preferred_skills=['Python', 'Figma'],
            public_description='Rebuild our site',
            max_applicants=5,
            color='red',
        )
        assert project.status == 'planning'
        assert project.visibility == 'internal'
        assert project.max_applicants == 5
        assert project.required_skills == ['React', 'Python']
        assert project.preferred_skills == ['Figma']
        assert project.created_by == org_admin

    def test_members_cannot_create(self, organization, member):
        with pytest.raises(AuthorizationException):
            ProjectService(member).create(organization, 'Side Project')

    def test_name_required(self, organization, org_admin):
        with pytest.raises(ValidationException):
            ProjectService(org_admin).create(organization, '   ')


@pytest.mark.django_db
class TestLifecycle:
    """Tests for publish, unpublish and change_status."""

    def test_publish(self, organization, org_admin, internal_project_factory):
        project = internal_project_factory(organization=organization)
        published = ProjectService(org_admin).publish(project.id, expected_version=1)
        assert published.status == 'active'
        assert published.visibility == 'public'
        assert published.published_at is not None
        assert published.version == 2
        assert UserActivity.objects.filter(user=org_admin, action='project_published').exists()

    def test_publish_needs_public_description(self, organization, org_admin, internal_project_factory):
        project = internal_project_factory(organization=organization, public_description='')
        with pytest.raises(ValidationException):
            ProjectService(org_admin).publish(project.id)

    def test_unpublish(self, project, org_admin):
        hidden = ProjectService(org_admin).unpublish(project.id)
        assert hidden.visibility != 'public'

    def test_change_status_broadcasts(
        self, project, org_admin, broadcasts, messages, django_capture_on_commit_callbacks
    ):
        with django_capture_on_commit_callbacks(execute=True):
            updated = ProjectService(org_admin).change_status(project.id, 'completed')
        assert updated.status == 'completed'
        [(group, message)] = messages(broadcasts, 'project.status')
        assert group == f'project_{project.id}'
        assert message['new_status'] == 'completed'

    def test_invalid_transition(self, project, org_admin):
        ProjectService(org_admin).change_status(project.id, 'completed')
        with pytest.raises(StatusTransitionException):
            ProjectService(org_admin).change_status(project.id, 'active')

    def test_unknown_status(self, project, org_admin):
        with pytest.raises(ValidationException):
            ProjectService(org_admin).change_status(project.id, 'paused')

    def test_stale_version(self, project, org_admin):
        with pytest.raises(ConcurrencyException):
            ProjectService(org_admin).change_status(project.id, 'on_hold', expected_version=3)

    def test_delete(self, project, org_admin):
        ProjectService(org_admin).delete(project.id)
        assert not InternalProject.objects.filter(pk=project.pk).exists()
        assert InternalProject.all_objects.get(pk=project.pk).deleted_by == org_admin


@pytest.mark.django_db
class TestSkills:

    def test_set_skills_refreshes_pending_scores(
        self, project, org_admin, skills, user, application_factory, django_capture_on_commit_callbacks
    ):
        skills(user, 'Python')
        application = application_factory(project=project, applicant=user, skill_match_score=0)

        with django_capture_on_commit_callbacks(execute=True):
            updated = ProjectService(org_admin).set_skills(project.id, required_skills=['Python'])

        assert updated.required_skills == ['Python']
        assert updated.preferred_skills == ['Figma']
        application.refresh_from_db()
        # Python of Python, nothing of Figma
        assert application.skill_match_score == 70
        assert application.matched_skills == ['Python']

    def test_update_listing(self, project, org_admin):
        updated = ProjectService(org_admin).update(
            project.id, name='Renamed', is_remote=True, status='archived', preferred_skills=[]
        )
        assert updated.name == 'Renamed'
        assert updated.is_remote
        assert updated.status == 'active'
        assert updated.preferred_skills == []
        assert updated.required_skills == ['Python', 'React']
