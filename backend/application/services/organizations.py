"""
Organization Service.

Creating organizations, managing members and positions, and the read
models behind the org chart, role health, health score and dashboard
insights.
"""

import logging
from typing import Dict, List, Optional
from uuid import UUID

from django.db import transaction
from django.utils import timezone

from domain.matching import normalize_skill
from domain.organization.aggregates import Organization as OrganizationAggregate
from domain.organization.health import OrganizationHealth, organization_health
from domain.organization.org_chart import OrgChart, TeamInfo, build_org_chart, layout_org_chart
from domain.organization.role_health import (
    MemberProfile,
    RoleStatus,
    role_health_summary,
    role_status,
    succession_candidates,
    succession_timeline,
)
from domain.profile.completeness import organization_profile_completeness
from domain.project.insights import ProjectInsight, ProjectSummary, project_insights
from domain.shared.events import PositionFilled
from domain.shared.exceptions import EntityNotFoundException, ValidationException
from domain.shared.value_objects import ApplicationStatus, ContributionStatus, ProjectStatus
from infrastructure.persistence.mappers import organization_to_domain, position_to_domain
from infrastructure.persistence.models import (
    Contribution,
    InternalProject,
    MemberSkill,
    Organization,
    OrganizationAnalytics,
    OrganizationMember,
    OrganizationSkillNeed,
    Position,
    ProjectApplication,
    ProjectSkill,
    SkillImportanceChoices,
    TaskRequiredSkill,
    User,
    UserActivity,
)

from .access import require_admin, require_member
from .realtime import broadcast_events, notify_user

logger = logging.getLogger(__name__)

DONE_STATUSES = [s.value for s in ContributionStatus if s.is_done]


def unique_slug(base: str) -> str:
    slug = base
    suffix = 2
    while Organization.all_objects.filter(slug=slug).exists():
        slug = f"{base}-{suffix}"
        suffix += 1
    return slug


class OrganizationService:

    def __init__(self, user, now=None):
        self.user = user
        self.now = now or timezone.now()
        self.today = timezone.localdate(self.now)

    def get(self, organization_id) -> Organization:
        organization = Organization.objects.filter(id=organization_id).first()
        if organization is None:
            raise EntityNotFoundException("Organization", organization_id)
        return organization

    # =========================================================================
    # ORGANIZATIONS AND MEMBERS
    # =========================================================================

    @transaction.atomic
    def create(self, name: str, category: str = 'other', description: str = '', **profile) -> Organization:
        """Create an organization; the creator becomes its admin member."""
        aggregate = OrganizationAggregate.create(
            name=name, creator_id=self.user.id, category=category, description=description
        )
        organization = Organization.objects.create(
            id=aggregate.id,
            name=aggregate.name,
            slug=unique_slug(aggregate.slug),
            category=category,
            description=description,
            admin=self.user,
            university=self.user.university,
            created_by=self.user,
            updated_by=self.user,
            **profile
        )
        for membership in aggregate.members:
            OrganizationMember.objects.create(
                organization=organization,
                user_id=membership.user_id,
                role=membership.role.value,
            )
        UserActivity.record(self.user, 'joined_organization', organization, role='admin')
        logger.info(f"Organization {organization.slug} created by {self.user.id}")
        return organization

    def _aggregate(self, organization_id):
        organization = self.get(organization_id)
        return organization, organization_to_domain(organization)

    @transaction.atomic
    def add_member(self, organization_id, user_id, role: str = 'member') -> OrganizationMember:
        organization, aggregate = self._aggregate(organization_id)
        require_admin(self.user, organization, "add_member")
        user = User.objects.filter(id=user_id, is_active=True).first()
        if user is None:
            raise EntityNotFoundException("User", user_id)

        membership = aggregate.add_member(user.id, role)
        member = OrganizationMember.objects.create(
            organization=organization, user=user, role=membership.role.value
        )
        UserActivity.record(user, 'joined_organization', organization, role=member.role)
        transaction.on_commit(lambda: notify_user(
            user.id,
            'Welcome aboard',
            f"You were added to {organization.name}",
            level='success',
            action_url=f"/dashboard/org/{organization.slug}",
        ))
        return member

    @transaction.atomic
    def change_role(self, organization_id, user_id, role: str) -> OrganizationMember:
        organization, aggregate = self._aggregate(organization_id)
        require_admin(self.user, organization, "change_role")
        membership = aggregate.change_role(UUID(str(user_id)), role)
        member = OrganizationMember.objects.get(organization=organization, user_id=user_id)
        member.role = membership.role.value
        member.save(update_fields=['role'])
        self._apply_owner(organization, aggregate)
        return member

    @transaction.atomic
    def remove_member(self, organization_id, user_id) -> None:
        organization, aggregate = self._aggregate(organization_id)
        user_id = UUID(str(user_id))
        if user_id != self.user.id:
            require_admin(self.user, organization, "remove_member")
        aggregate.remove_member(user_id)
        OrganizationMember.objects.filter(organization=organization, user_id=user_id).delete()
        Position.objects.filter(organization=organization, holder_id=user_id).update(holder=None)
        self._apply_owner(organization, aggregate)
        logger.info(f"User {user_id} left organization {organization.slug}")

    def _apply_owner(self, organization, aggregate) -> None:
        if organization.admin_id == aggregate.admin_id:
            return
        organization.admin_id = aggregate.admin_id
        organization.updated_by = self.user
        organization.save(update_fields=['admin', 'updated_by', 'updated_at'])
        logger.info(f"Organization {organization.slug} handed to {aggregate.admin_id}")

    def profile_completeness(self, organization_id) -> int:
        return organization_profile_completeness(self.get(organization_id))

    # =========================================================================
    # POSITIONS
    # =========================================================================

    @transaction.atomic
    def fill_position(self, position_id, user_id, term_end_date=None) -> Position:
        position = Position.objects.select_related('organization').filter(id=position_id).first()
        if position is None:
            raise EntityNotFoundException("Position", position_id)
        require_admin(self.user, position.organization, "fill_position")

        holder = User.objects.filter(
            id=user_id, memberships__organization_id=position.organization_id
        ).first()
        if holder is None:
            raise ValidationException("Position holder must be a member", "user_id", user_id)

        entity = position_to_domain(position)
        was_vacant = entity.is_vacant
        entity.assign(holder.id, holder.full_name, term_end_date)
        position.holder = holder
        position.term_end_date = entity.term_end_date
        position.updated_by = self.user
        position.save()

        logger.info(f"Position {position.id} ({entity.role}) held by {holder.id}")
        if was_vacant:
            broadcast_events([PositionFilled(
                position_id=position.id,
                organization_id=position.organization_id,
                holder_id=holder.id,
            )])
        return position

    @transaction.atomic
    def vacate_position(self, position_id) -> Position:
        position = Position.objects.select_related('organization').filter(id=position_id).first()
        if position is None:
            raise EntityNotFoundException("Position", position_id)
        require_admin(self.user, position.organization, "vacate_position")
        position.holder = None
        position.term_end_date = None
        position.updated_by = self.user
        position.save()
        return position

    def _positions(self, organization_id):
        rows = Position.objects.filter(organization_id=organization_id).select_related('holder')
        return [position_to_domain(p) for p in rows]

    # =========================================================================
    # ORG CHART
    # =========================================================================

    def org_chart(self, organization_id, direction: str = 'TB') -> OrgChart:
        organization = self.get(organization_id)
        teams = [
            TeamInfo(
                id=team.id,
                name=team.name,
                color=team.color,
                lead_ids=tuple(lead.id for lead in team.leads.all()),
            )
            for team in organization.teams.prefetch_related('leads')
        ]
        chart = build_org_chart(self._positions(organization.id), teams)
        try:
            return layout_org_chart(chart, direction=direction)
        except ValueError as e:
            raise ValidationException(str(e), "direction", direction)

    # =========================================================================
    # ROLE HEALTH
    # =========================================================================

    def member_profiles(self, organization_id) -> List[MemberProfile]:
        users = (
            User.objects.filter(memberships__organization_id=organization_id)
            .prefetch_related('member_skills__skill')
        )
        return [
            MemberProfile(
                user_id=u.id,
                full_name=u.full_name or u.username,
                skills=tuple(ms.skill.name for ms in u.member_skills.all()),
                year_of_study=u.year_of_study or None,
            )
            for u in users
        ]

    def role_health(self, organization_id) -> Dict:
        """Summary, per-role status, semester timeline and succession picks."""
        organization = self.get(organization_id)
        require_member(self.user, organization.id, "view_role_health")
        positions = self._positions(organization.id)
        profiles = self.member_profiles(organization.id)
        summary = role_health_summary(positions, self.today)

        roles = []
        for position in positions:
            status = role_status(position, self.today)
            candidates = []
            if status != RoleStatus.STABLE:
                candidates = succession_candidates(position, profiles)
            roles.append({
                'id': str(position.id),
                'role': position.role,
                'title': position.display_title,
                'holder_id': str(position.holder_id) if position.holder_id else None,
                'holder_name': position.holder_name,
                'term_end_date': position.term_end_date.isoformat() if position.term_end_date else None,
                'days_remaining': position.term.days_remaining(self.today),
                'status': status.value,
                'required_skills': position.required_skills,
                'candidates': [c.to_dict() for c in candidates],
            })

        timeline = [
            {
                'key': bucket.key,
                'label': bucket.label,
                'start': bucket.start.isoformat(),
                'end': bucket.end.isoformat(),
                'transitions': [str(p.id) for p in bucket.transitions],
                'vacant': [str(p.id) for p in bucket.vacant],
                'has_issues': bucket.has_issues,
            }
            for bucket in succession_timeline(positions, self.today)
        ]
        return {
            'summary': {
                'total_roles': summary.total_roles,
                'filled_roles': summary.filled_roles,
                'vacant_roles': summary.vacant_roles,
                'at_risk_roles': summary.at_risk_roles,
            },
            'roles': roles,
            'timeline': timeline,
        }

    # =========================================================================
    # HEALTH AND INSIGHTS
    # =========================================================================

    def _required_project_skills(self, organization_id) -> Dict:
        """project_id -> required skill names (project and task level)."""
        result: Dict = {}
        for project_id, name in (
            ProjectSkill.objects
            .filter(project__organization_id=organization_id, importance=SkillImportanceChoices.REQUIRED)
            .values_list('project_id', 'skill__name')
        ):
            result.setdefault(project_id, []).append(name)
        for project_id, name in (
            TaskRequiredSkill.objects
            .filter(
                task__project__organization_id=organization_id,
                task__deleted_at__isnull=True,
                importance=SkillImportanceChoices.REQUIRED,
            )
            .values_list('task__project_id', 'skill__name')
        ):
            result.setdefault(project_id, []).append(name)
        return result

    def _member_skill_keys(self, organization_id) -> set:
        names = MemberSkill.objects.filter(
            user__memberships__organization_id=organization_id
        ).values_list('skill__name', flat=True)
        return {normalize_skill(n) for n in names}

    def health(self, organization_id) -> OrganizationHealth:
        organization = self.get(organization_id)
        member_ids = list(
            OrganizationMember.objects.filter(organization=organization).values_list('user_id', flat=True)
        )
        needed = list(
            OrganizationSkillNeed.objects.filter(organization=organization).values_list('skill__name', flat=True)
        )
        active_projects = set(
            InternalProject.objects.filter(
                organization=organization, status=ProjectStatus.ACTIVE.value
            ).values_list('id', flat=True)
        )
        for project_id, names in self._required_project_skills(organization.id).items():
            if project_id in active_projects:
                needed.extend(names)

        tasks = Contribution.objects.filter(project__organization=organization, project__deleted_at__isnull=True)
        busy = (
            tasks.exclude(status__in=DONE_STATUSES)
            .values_list('task_assignees__assignee_id', flat=True)
        )
        accepted = ProjectApplication.objects.filter(
            project__organization=organization, status=ApplicationStatus.ACCEPTED.value
        ).values_list('applicant_id', flat=True)

        return organization_health(
            needed_skills=needed,
            member_skills=MemberSkill.objects.filter(user_id__in=member_ids).values_list('skill__name', flat=True),
            total_tasks=tasks.count(),
            completed_tasks=tasks.filter(status__in=DONE_STATUSES).count(),
            member_ids=member_ids,
            busy_member_ids=[b for b in busy if b is not None],
            accepted_applicant_ids=list(accepted),
        )

    def snapshot_health(self, organization_id) -> OrganizationAnalytics:
        organization = self.get(organization_id)
        health = self.health(organization.id)
        return OrganizationAnalytics.objects.create(
            organization=organization,
            skill_sufficiency_score=health.skill_sufficiency,
            project_completion_rate=health.project_completion,
            member_utilization_rate=health.member_utilization,
            external_dependency_rate=health.external_dependency,
            active_members=organization.memberships.count(),
            total_projects=organization.projects.count(),
        )

    def insights(self, organization_id) -> List[ProjectInsight]:
        organization = self.get(organization_id)
        require_member(self.user, organization.id, "view_insights")
        have = self._member_skill_keys(organization.id)
        required = self._required_project_skills(organization.id)

        summaries = []
        for project in organization.projects.exclude(status=ProjectStatus.ARCHIVED.value):
            missing = {normalize_skill(n) for n in required.get(project.id, [])} - have - {""}
            summaries.append(ProjectSummary(
                id=project.id,
                name=project.name,
                status=ProjectStatus(project.status),
                due_date=project.due_date,
                skill_gaps=len(missing),
            ))
        return project_insights(summaries, self.today)

    def latest_snapshot(self, organization_id) -> Optional[OrganizationAnalytics]:
        return OrganizationAnalytics.objects.filter(organization_id=organization_id).first()
