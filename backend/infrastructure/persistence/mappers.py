"""
ORM <-> domain mapping.

Services load rows, hand the domain object its rules, then write the
changed fields back with the `apply_*` helpers.
"""

from decimal import Decimal

from domain.applications.aggregates import ProjectApplication
from domain.organization.aggregates import Membership, Organization
from domain.organization.entities import Position
from domain.project.aggregates import InternalProject
from domain.project.entities import Contribution, Subtask

from . import models as m


def _audit(model):
    return dict(
        id=model.id,
        created_at=model.created_at,
        updated_at=model.updated_at,
        version=model.version,
        created_by=model.created_by_id,
        updated_by=model.updated_by_id,
        deleted_at=model.deleted_at,
        deleted_by=model.deleted_by_id,
    )


# =============================================================================
# PROJECTS
# =============================================================================

def project_to_domain(project: m.InternalProject) -> InternalProject:
    return InternalProject(
        organization_id=project.organization_id,
        name=project.name,
        description=project.description,
        public_description=project.public_description,
        status=project.status,
        visibility=project.visibility,
        application_deadline=project.application_deadline,
        max_applicants=project.max_applicants,
        required_commitment_hours=project.required_commitment_hours,
        preferred_start_date=project.preferred_start_date,
        due_date=project.due_date,
        timeline=project.timeline or None,
        is_remote=project.is_remote,
        published_at=project.published_at,
        required_skills=project.required_skills,
        preferred_skills=project.preferred_skills,
        **_audit(project),
    )


def apply_project(model: m.InternalProject, project: InternalProject, user=None) -> m.InternalProject:
    model.status = project.status.value
    model.visibility = project.visibility.value
    model.published_at = project.published_at
    if user is not None:
        model.updated_by = user
    model.save()
    return model


# =============================================================================
# CONTRIBUTIONS
# =============================================================================

def contribution_to_domain(task: m.Contribution) -> Contribution:
    """Expects `task_assignees` prefetched for list use."""
    assignments = list(task.task_assignees.all())
    primary = next((a.assignee_id for a in assignments if a.is_primary), None)
    return Contribution(
        project_id=task.project_id,
        task_name=task.task_name,
        task_description=task.task_description,
        status=task.status,
        priority=task.priority,
        due_date=task.due_date,
        estimated_hours=task.estimated_hours,
        hours_worked=task.hours_worked if task.hours_worked is not None else Decimal('0'),
        skills_used=list(task.skills_used or []),
        subtasks=[Subtask.from_dict(s) for s in task.subtasks or []],
        assignee_ids=[a.assignee_id for a in assignments],
        primary_assignee_id=primary,
        completed_at=task.completed_at,
        verified_by=task.verified_by_id,
        **_audit(task),
    )


def apply_contribution(model: m.Contribution, task: Contribution, user=None) -> m.Contribution:
    """Write board state back; the row's own save bumps the version."""
    model.status = task.status.value
    model.priority = task.priority.value
    model.completed_at = task.completed_at
    model.verified_by_id = task.verified_by
    model.subtasks = [s.to_dict() for s in task.subtasks]
    if user is not None:
        model.updated_by = user
    model.save()
    return model


# =============================================================================
# APPLICATIONS
# =============================================================================

def application_to_domain(application: m.ProjectApplication) -> ProjectApplication:
    return ProjectApplication(
        project_id=application.project_id,
        applicant_id=application.applicant_id,
        cover_letter=application.cover_letter,
        portfolio_urls=list(application.portfolio_urls or []),
        availability_hours_per_week=application.availability_hours_per_week,
        expected_start_date=application.expected_start_date,
        skill_match_score=application.skill_match_score,
        matched_skills=list(application.matched_skills or []),
        missing_skills=list(application.missing_skills or []),
        status=application.status,
        reviewed_by=application.reviewed_by_id,
        reviewed_at=application.reviewed_at,
        reviewer_notes=application.reviewer_notes,
        **_audit(application),
    )


def apply_application(model: m.ProjectApplication, application: ProjectApplication, user=None) -> m.ProjectApplication:
    model.status = application.status.value
    model.reviewed_by_id = application.reviewed_by
    model.reviewed_at = application.reviewed_at
    model.reviewer_notes = application.reviewer_notes
    model.skill_match_score = application.skill_match_score
    model.matched_skills = list(application.matched_skills)
    model.missing_skills = list(application.missing_skills)
    if user is not None:
        model.updated_by = user
    model.save()
    return model


# =============================================================================
# ORGANIZATIONS
# =============================================================================

def organization_to_domain(organization: m.Organization) -> Organization:
    return Organization(
        name=organization.name,
        slug=organization.slug,
        category=organization.category,
        description=organization.description,
        admin_id=organization.admin_id,
        members=[
            Membership(user_id=ms.user_id, role=ms.role)
            for ms in organization.memberships.all()
        ],
        **_audit(organization),
    )


def position_to_domain(position: m.Position) -> Position:
    holder = position.holder
    return Position(
        id=position.id,
        created_at=position.created_at,
        updated_at=position.updated_at,
        version=position.version,
        organization_id=position.organization_id,
        role=position.role,
        title=position.title,
        description=position.description,
        holder_id=position.holder_id,
        holder_name=holder.full_name if holder else "",
        reports_to_id=position.reports_to_id,
        reports_to_role=position.reports_to_role or None,
        order=position.order,
        required_skills=list(position.required_skills or []),
        term_end_date=position.term_end_date,
    )
