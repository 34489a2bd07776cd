"""
Celery task tests (run eagerly).
"""

import uuid
from datetime import timedelta

import pytest
from django.core import mail
from django.utils import timezone

from application.tasks.analytics_tasks import snapshot_organization_analytics
from application.tasks.notification_tasks import (
    notify_closing_deadlines,
    notify_overdue_contributions,
    send_email_notification,
)
from application.tasks.project_tasks import refresh_application_match_scores
from infrastructure.persistence.models import OrganizationAnalytics


@pytest.mark.django_db
class TestNotificationTasks:

    def test_send_email(self, user):
        result = send_email_notification(
            to_emails=[user.email],
            subject='Hello',
            template_name='emails/application_status.html',
            context={'applicant_name': 'Sam', 'project_name': 'Portal', 'status': 'accepted'},
        )
        assert result == {'success': True, 'recipients': 1}
        assert mail.outbox[0].subject == 'Hello'
        assert 'Portal' in mail.outbox[0].alternatives[0][0]

    def test_missing_template_is_reported(self, user):
        result = send_email_notification([user.email], 'Hello', 'emails/missing.html')
        assert result['success'] is False
        assert mail.outbox == []

    def test_overdue_digest(self, member, user, project, contribution_factory):
        today = timezone.localdate()
        contribution_factory(project=project, task_name='Print flyers',
                             due_date=today - timedelta(days=3), assigned_to=[member])
        contribution_factory(project=project, due_date=today - timedelta(days=1), assigned_to=[member])
        contribution_factory(project=project, status='completed',
                             due_date=today - timedelta(days=1), assigned_to=[member])
        contribution_factory(project=project, due_date=today + timedelta(days=1), assigned_to=[user])

        assert notify_overdue_contributions() == {'notifications_sent': 1}
        [message] = mail.outbox
        assert message.to == [member.email]
        assert message.subject == '[CampusHub] You have 2 overdue tasks'
        assert 'Print flyers' in message.alternatives[0][0]

    def test_closing_deadlines(self, user, user_factory, project_factory, saved_project_factory,
                               application_factory, organization):
        today = timezone.localdate()
        closing = project_factory(organization=organization, application_deadline=today + timedelta(days=2))
        later = project_factory(organization=organization, application_deadline=today + timedelta(days=20))
        saved_project_factory(user=user, project=closing)
        saved_project_factory(user=user, project=later)

        applicant = user_factory()
        saved_project_factory(user=applicant, project=closing)
        application_factory(project=closing, applicant=applicant)

        assert notify_closing_deadlines() == {'notifications_sent': 1}
        [message] = mail.outbox
        assert message.to == [user.email]
        assert message.subject == '[CampusHub] 1 saved project closing soon'


@pytest.mark.django_db
class TestBackgroundJobs:

    def test_snapshot_every_organization(self, organization_factory):
        organization_factory()
        organization_factory()
        assert snapshot_organization_analytics() == {'snapshots': 2, 'failed': 0}
        assert OrganizationAnalytics.objects.count() == 2

    def test_refresh_scores(self, project, user, skills, application_factory):
        skills(user, 'Python', 'React')
        pending = application_factory(project=project, applicant=user, skill_match_score=0)
        decided = application_factory(project=project, status='accepted', skill_match_score=0)

        result = refresh_application_match_scores(str(project.id))
        assert result == {'project_id': str(project.id), 'updated': 1}
        pending.refresh_from_db()
        decided.refresh_from_db()
        assert pending.skill_match_score == 70
        assert decided.skill_match_score == 0

    def test_refresh_unknown_project(self):
        assert refresh_application_match_scores(str(uuid.uuid4())) == {'error': 'Project not found'}
