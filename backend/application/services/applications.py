"""
Application Service.

Submitting, reviewing, withdrawing and exporting project applications.
The match snapshot stored with an application comes from the same scoring
function the discovery feed uses.
"""

import logging
from io import BytesIO
from typing import Optional

import openpyxl
from openpyxl.styles import Font
from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from domain.applications.aggregates import ProjectApplication as ApplicationAggregate
from domain.shared.exceptions import EntityAlreadyExistsException, EntityNotFoundException
from domain.shared.value_objects import ApplicationStatus, parse_entity_id
from infrastructure.persistence.mappers import (
    application_to_domain,
    apply_application,
    project_to_domain,
)
from infrastructure.persistence.models import (
    InternalProject,
    ProjectApplication,
    UserActivity,
)

from .access import require_admin
from .discovery import DiscoveryService
from .realtime import broadcast_events, notify_user

logger = logging.getLogger(__name__)

APPLICATION_REFERRER = 'application_modal'

ACTIVE_STATUSES = [s.value for s in ApplicationStatus if s.is_active]


def _send_email(to_email: str, subject: str, template_name: str, context: dict) -> None:
    if not to_email:
        return
    from application.tasks.notification_tasks import send_email_notification

    transaction.on_commit(lambda: send_email_notification.delay(
        to_emails=[to_email],
        subject=subject,
        template_name=template_name,
        context=context,
    ))


class ApplicationService:

    def __init__(self, user, now=None):
        self.user = user
        self.now = now or timezone.now()

    def _get(self, application_id) -> ProjectApplication:
        application = (
            ProjectApplication.objects
            .select_related('project__organization', 'applicant')
            .filter(id=application_id)
            .first()
        )
        if application is None:
            raise EntityNotFoundException("Application", application_id)
        return application

    # =========================================================================
    # SUBMIT
    # =========================================================================

    def submit(
        self,
        project_id,
        cover_letter: str = "",
        portfolio_urls=None,
        availability_hours_per_week: Optional[int] = None,
        expected_start_date=None,
    ) -> ProjectApplication:
        """
        Apply to a listed project.

        Raises EntityAlreadyExistsException on a second application to the
        same project and BusinessRuleViolationException when the project is
        closed, past its deadline or full.
        """
        discovery = DiscoveryService(self.user, self.now)
        project_id = parse_entity_id(project_id, "Project")

        with transaction.atomic():
            project = (
                InternalProject.objects
                .select_for_update()
                .filter(id=project_id)
                .first()
            )
            if project is None:
                raise EntityNotFoundException("Project", project_id)

            if ProjectApplication.all_objects.filter(project=project, applicant=self.user).exists():
                raise EntityAlreadyExistsException("Application", project.name)

            active_count = ProjectApplication.objects.filter(
                project=project, status__in=ACTIVE_STATUSES
            ).count()
            project_to_domain(project).check_accepts_applications(
                timezone.localdate(self.now), active_count
            )

            match = discovery.row(project.id).match
            aggregate = ApplicationAggregate.submit(
                project_id=project.id,
                applicant_id=self.user.id,
                match=match,
                cover_letter=cover_letter,
                portfolio_urls=portfolio_urls or [],
                availability_hours_per_week=availability_hours_per_week,
                expected_start_date=expected_start_date,
            )

            try:
                with transaction.atomic():
                    application = ProjectApplication.objects.create(
                        id=aggregate.id,
                        project=project,
                        applicant=self.user,
                        cover_letter=aggregate.cover_letter,
                        portfolio_urls=aggregate.portfolio_urls,
                        availability_hours_per_week=aggregate.availability_hours_per_week,
                        expected_start_date=aggregate.expected_start_date,
                        skill_match_score=aggregate.skill_match_score,
                        matched_skills=aggregate.matched_skills,
                        missing_skills=aggregate.missing_skills,
                        status=aggregate.status.value,
                        created_by=self.user,
                        updated_by=self.user,
                    )
            except IntegrityError:
                raise EntityAlreadyExistsException("Application", project.name)

            InternalProject.objects.filter(pk=project.pk).update(
                application_count=F('application_count') + 1
            )
            discovery.record_view(project.id, referrer=APPLICATION_REFERRER)
            UserActivity.record(self.user, 'applied', application, project=project.name)

        logger.info(
            f"User {self.user.id} applied to project {project.id} "
            f"(match {aggregate.skill_match_score})"
        )
        organization = project.organization
        transaction.on_commit(lambda: notify_user(
            organization.admin_id,
            'New application',
            f"{self.user.full_name or self.user.username} applied to {project.name}",
            action_url=f"/dashboard/org/{organization.slug}/projects/{project.id}",
        ))
        return application

    # =========================================================================
    # REVIEW / WITHDRAW
    # =========================================================================

    @transaction.atomic
    def review(self, application_id, status, notes: Optional[str] = None, expected_version: Optional[int] = None) -> ProjectApplication:
        application = self._get(application_id)
        require_admin(self.user, application.project.organization, "review")

        aggregate = application_to_domain(application)
        aggregate.check_version(expected_version)
        aggregate.review(status, self.user.id, notes)
        apply_application(application, aggregate, self.user)

        broadcast_events(aggregate.clear_domain_events(), recipient_id=application.applicant_id)
        logger.info(f"Application {application.id} set to {aggregate.status.value} by {self.user.id}")

        if aggregate.status in (ApplicationStatus.ACCEPTED, ApplicationStatus.REJECTED):
            _send_email(
                application.applicant.email,
                f"[CampusHub] Your application to {application.project.name}",
                'emails/application_status.html',
                {
                    'applicant_name': application.applicant.get_short_name(),
                    'project_name': application.project.name,
                    'organization_name': application.project.organization.name,
                    'status': aggregate.status.value,
                    'notes': aggregate.reviewer_notes,
                    'url': f"{settings.FRONTEND_URL}/discover/applied",
                },
            )
        return application

    @transaction.atomic
    def withdraw(self, application_id) -> ProjectApplication:
        application = self._get(application_id)
        aggregate = application_to_domain(application)
        aggregate.withdraw(self.user.id)
        apply_application(application, aggregate, self.user)
        broadcast_events(aggregate.clear_domain_events(), recipient_id=application.project.organization.admin_id)
        logger.info(f"Application {application.id} withdrawn")
        return application

    # =========================================================================
    # EXPORT
    # =========================================================================

    def for_project(self, project_id, operation: str = "view_applications"):
        """Applications of one project, best match first."""
        project_id = parse_entity_id(project_id, "Project")
        project = InternalProject.objects.select_related('organization').filter(id=project_id).first()
        if project is None:
            raise EntityNotFoundException("Project", project_id)
        require_admin(self.user, project.organization, operation)
        return (
            ProjectApplication.objects
            .filter(project=project)
            .select_related('applicant', 'project__organization')
            .order_by(F('skill_match_score').desc(nulls_last=True), 'created_at')
        )

    def export_xlsx(self, project_id) -> bytes:
        """Applications of one project as an Excel workbook, best match first."""
        applications = self.for_project(project_id, "export")

        wb = openpyxl.Workbook()
        ws = wb.active
        ws.title = "Applications"

        headers = [
            'Applicant', 'Email', 'Status', 'Match score', 'Matched skills',
            'Missing skills', 'Hours/week', 'Start date', 'Submitted',
        ]
        header_font = Font(bold=True)
        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=1, column=col, value=header)
            cell.font = header_font

        for row, application in enumerate(applications, 2):
            applicant = application.applicant
            ws.cell(row=row, column=1, value=applicant.full_name or applicant.username)
            ws.cell(row=row, column=2, value=applicant.email)
            ws.cell(row=row, column=3, value=application.get_status_display())
            ws.cell(row=row, column=4, value=application.skill_match_score)
            ws.cell(row=row, column=5, value=', '.join(application.matched_skills or []))
            ws.cell(row=row, column=6, value=', '.join(application.missing_skills or []))
            ws.cell(row=row, column=7, value=application.availability_hours_per_week)
            ws.cell(row=row, column=8, value=application.expected_start_date)
            ws.cell(row=row, column=9, value=timezone.localtime(application.created_at).replace(tzinfo=None))

        for column in ws.columns:
            width = max(len(str(cell.value)) if cell.value is not None else 0 for cell in column)
            ws.column_dimensions[column[0].column_letter].width = width + 2

        buffer = BytesIO()
        wb.save(buffer)
        logger.info(f"Exported {applications.count()} applications of project {project_id}")
        return buffer.getvalue()
