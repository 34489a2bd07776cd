"""
Analytics Tasks.

Periodic snapshots of organization health.
"""

from celery import shared_task
import logging

logger = logging.getLogger(__name__)


@shared_task
def snapshot_organization_analytics():
    """
    Store today's health scores for every active organization.

    One organization failing does not stop the others.
    """
    from application.services.organizations import OrganizationService
    from infrastructure.persistence.models import Organization

    service = OrganizationService(None)
    created = 0
    failed = 0
    for organization_id in Organization.objects.values_list('id', flat=True):
        try:
            service.snapshot_health(organization_id)
            created += 1
        except Exception as e:
            logger.error(f"Failed to snapshot analytics for organization {organization_id}: {e}")
            failed += 1

    logger.info(f"Organization analytics: {created} snapshots, {failed} failures")
    return {'snapshots': created, 'failed': failed}
