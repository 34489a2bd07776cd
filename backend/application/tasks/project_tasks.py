"""
Project Tasks.

Celery tasks for project-related operations.
"""

from celery import shared_task
from django.db import transaction
import logging

logger = logging.getLogger(__name__)

OPEN_APPLICATION_STATUSES = ['pending', 'reviewing']


@shared_task(bind=True, max_retries=3)
def refresh_application_match_scores(self, project_id: str):
    """
    Recompute the match snapshot of open applications after the project's
    skills changed. Decided applications keep the score they were judged on.
    """
    from application.services.discovery import DiscoveryService
    from infrastructure.persistence.mappers import application_to_domain, apply_application
    from infrastructure.persistence.models import InternalProject, ProjectApplication

    try:
        project = (
            InternalProject.objects
            .select_related('organization')
            .prefetch_related('project_skills__skill')
            .get(id=project_id)
        )
        applications = (
            ProjectApplication.objects
            .filter(project=project, status__in=OPEN_APPLICATION_STATUSES)
            .select_related('applicant')
        )

        updated = 0
        for application in applications:
            row = DiscoveryService(application.applicant).build_rows([project])[0]
            if row.match.score == application.skill_match_score:
                continue
            with transaction.atomic():
                aggregate = application_to_domain(application)
                aggregate.apply_match(row.match)
                apply_application(application, aggregate)
            updated += 1

        logger.info(f"Refreshed match scores for project {project.name}: {updated} updated")
        return {'project_id': project_id, 'updated': updated}

    except InternalProject.DoesNotExist:
        logger.error(f"Project {project_id} not found")
        return {'error': 'Project not found'}
    except Exception as e:
        logger.error(f"Error refreshing match scores for project {project_id}: {e}")
        raise self.retry(exc=e, countdown=60)
