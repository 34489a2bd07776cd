"""
Project Service.

Creating projects, editing their declared skills, publishing them to the
discovery feed and moving them through their lifecycle.
"""

import logging
from typing import Iterable, Optional

from django.db import transaction

from domain.matching import normalize_skill
from domain.project.aggregates import InternalProject as ProjectAggregate
from domain.shared.exceptions import EntityNotFoundException, ValidationException
from domain.shared.value_objects import ProjectStatus
from infrastructure.persistence.mappers import apply_project, project_to_domain
from infrastructure.persistence.models import (
    InternalProject,
    Organization,
    ProjectSkill,
    Skill,
    SkillImportanceChoices,
    UserActivity,
)

from .access import require_admin
from .realtime import broadcast_events

logger = logging.getLogger(__name__)

LISTING_FIELDS = (
    'description', 'public_description', 'application_deadline', 'max_applicants',
    'required_commitment_hours', 'preferred_start_date', 'due_date', 'timeline',
    'is_remote', 'image_url',
)


def _refresh_match_scores(project_id) -> None:
    from application.tasks.project_tasks import refresh_application_match_scores

    transaction.on_commit(lambda: refresh_application_match_scores.delay(str(project_id)))


class ProjectService:

    def __init__(self, user):
        self.user = user

    def _get(self, project_id) -> InternalProject:
        project = (
            InternalProject.objects.select_related('organization')
            .prefetch_related('project_skills__skill')
            .filter(id=project_id)
            .first()
        )
        if project is None:
            raise EntityNotFoundException("Project", project_id)
        return project

    @transaction.atomic
    def create(
        self,
        organization: Organization,
        name: str,
        required_skills: Iterable[str] = (),
        preferred_skills: Iterable[str] = (),
        **listing
    ) -> InternalProject:
        require_admin(self.user, organization, "create_project")
        fields = {k: v for k, v in listing.items() if k in LISTING_FIELDS}
        aggregate = ProjectAggregate(
            organization_id=organization.id,
            name=name,
            created_by=self.user.id,
            **{k: v for k, v in fields.items() if k != 'image_url'}
        )
        project = InternalProject.objects.create(
            id=aggregate.id,
            organization=organization,
            name=aggregate.name,
            status=aggregate.status.value,
            visibility=aggregate.visibility.value,
            created_by=self.user,
            updated_by=self.user,
            **fields
        )
        self._write_skills(project, required_skills, preferred_skills)
        logger.info(f"Project {project.id} created in {organization.slug} by {self.user.id}")
        return project

    @transaction.atomic
    def update(self, project_id, required_skills=None, preferred_skills=None, **listing) -> InternalProject:
        project = self._get(project_id)
        require_admin(self.user, project.organization, "update_project")
        for name, value in listing.items():
            if name in LISTING_FIELDS or name == 'name':
                setattr(project, name, value)
        # Run the aggregate's field validation over the new values
        project_to_domain(project)
        project.updated_by = self.user
        project.save()
        if required_skills is not None or preferred_skills is not None:
            self.set_skills(project, required_skills, preferred_skills)
        return project

    def _write_skills(self, project, required: Iterable[str], preferred: Iterable[str]) -> None:
        seen = set()
        order = 0
        for importance, names in (
            (SkillImportanceChoices.REQUIRED, required or ()),
            (SkillImportanceChoices.PREFERRED, preferred or ()),
        ):
            for name in names:
                key = normalize_skill(name)
                if not key or key in seen:
                    continue
                seen.add(key)
                ProjectSkill.objects.create(
                    project=project,
                    skill=Skill.get_or_create_by_name(name),
                    importance=importance,
                    order=order,
                )
                order += 1

    @transaction.atomic
    def set_skills(self, project, required_skills=None, preferred_skills=None) -> InternalProject:
        """
        Replace the project's declared skills. Pending applications get
        their match snapshot recomputed in the background.
        """
        if not isinstance(project, InternalProject):
            project = self._get(project)
        require_admin(self.user, project.organization, "update_project")
        if required_skills is None:
            required_skills = project.required_skills
        if preferred_skills is None:
            preferred_skills = project.preferred_skills
        project.project_skills.all().delete()
        self._write_skills(project, required_skills, preferred_skills)
        # Drop the prefetched rows so the caller sees the new skills
        getattr(project, '_prefetched_objects_cache', {}).pop('project_skills', None)
        _refresh_match_scores(project.id)
        return project

    @transaction.atomic
    def publish(self, project_id, expected_version: Optional[int] = None) -> InternalProject:
        project = self._get(project_id)
        require_admin(self.user, project.organization, "publish_project")
        aggregate = project_to_domain(project)
        aggregate.check_version(expected_version)
        aggregate.publish(self.user.id)
        apply_project(project, aggregate, self.user)
        UserActivity.record(self.user, 'project_published', project, project=project.name)
        broadcast_events(aggregate.clear_domain_events())
        logger.info(f"Project {project.id} published")
        return project

    @transaction.atomic
    def unpublish(self, project_id) -> InternalProject:
        project = self._get(project_id)
        require_admin(self.user, project.organization, "unpublish_project")
        aggregate = project_to_domain(project)
        aggregate.unpublish(self.user.id)
        apply_project(project, aggregate, self.user)
        return project

    @transaction.atomic
    def change_status(self, project_id, status, expected_version: Optional[int] = None) -> InternalProject:
        try:
            status = ProjectStatus(status)
        except ValueError:
            raise ValidationException(f"Unknown project status '{status}'", "status", status)
        project = self._get(project_id)
        require_admin(self.user, project.organization, "change_project_status")
        aggregate = project_to_domain(project)
        aggregate.check_version(expected_version)
        aggregate.change_status(status, self.user.id)
        apply_project(project, aggregate, self.user)
        broadcast_events(aggregate.clear_domain_events())
        return project

    @transaction.atomic
    def delete(self, project_id) -> None:
        project = self._get(project_id)
        require_admin(self.user, project.organization, "delete_project")
        project.soft_delete(user=self.user)
        logger.info(f"Project {project.id} deleted by {self.user.id}")
