"""
Notification Tasks.

Celery tasks for sending notifications.
"""

from collections import defaultdict
from datetime import timedelta

from celery import shared_task
from django.core.mail import send_mail
from django.conf import settings
from django.template.loader import render_to_string
from django.utils import timezone
import logging

logger = logging.getLogger(__name__)

DONE_STATUSES = ['completed', 'verified']


@shared_task
def send_email_notification(
    to_emails: list,
    subject: str,
    template_name: str,
    context: dict = None
):
    """
    Send email notification using template.

    Args:
        to_emails: List of recipient emails
        subject: Email subject
        template_name: Path to email template
        context: Template context
    """
    try:
        html_content = render_to_string(template_name, context or {})

        send_mail(
            subject=subject,
            message='',  # Plain text fallback
            html_message=html_content,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=to_emails,
            fail_silently=False,
        )

        logger.info(f"Sent email to {to_emails}: {subject}")
        return {'success': True, 'recipients': len(to_emails)}

    except Exception as e:
        logger.error(f"Failed to send email: {e}")
        return {'success': False, 'error': str(e)}


@shared_task
def notify_overdue_contributions():
    """
    Email every assignee a digest of their overdue tasks.

    A task is overdue when its due date has passed and it is neither
    completed nor verified.
    """
    from infrastructure.persistence.models import TaskAssignee

    today = timezone.localdate()

    assignments = TaskAssignee.objects.filter(
        task__due_date__lt=today,
        task__deleted_at__isnull=True,
        task__project__deleted_at__isnull=True,
    ).exclude(
        task__status__in=DONE_STATUSES
    ).select_related(
        'assignee', 'task', 'task__project'
    )

    by_assignee = defaultdict(list)
    for assignment in assignments:
        if assignment.assignee.email:
            by_assignee[assignment.assignee].append(assignment.task)

    sent = 0
    for user, tasks in by_assignee.items():
        tasks.sort(key=lambda task: task.due_date)
        send_email_notification.delay(
            to_emails=[user.email],
            subject=f'[CampusHub] You have {len(tasks)} overdue task{"s" if len(tasks) != 1 else ""}',
            template_name='emails/overdue_contributions.html',
            context={
                'name': user.full_name,
                'tasks': [
                    {
                        'name': task.task_name,
                        'project': task.project.name,
                        'due_date': task.due_date.isoformat(),
                        'days_overdue': (today - task.due_date).days,
                    }
                    for task in tasks
                ],
                'count': len(tasks),
                'url': f'{settings.FRONTEND_URL}/my-tasks',
            }
        )
        sent += 1

    return {'notifications_sent': sent}


@shared_task
def notify_closing_deadlines():
    """
    Remind students about saved projects whose application deadline is
    within the next few days and which they have not applied to yet.
    """
    from infrastructure.persistence.models import ProjectApplication, SavedProject

    today = timezone.localdate()
    horizon = today + timedelta(days=settings.CAMPUSHUB['DEADLINE_REMINDER_DAYS'])

    saved = SavedProject.objects.filter(
        project__application_deadline__gte=today,
        project__application_deadline__lte=horizon,
        project__status='active',
        project__visibility='public',
        project__deleted_at__isnull=True,
    ).select_related(
        'user', 'project', 'project__organization'
    )

    applied = set(
        ProjectApplication.objects.filter(
            project_id__in=saved.values('project_id')
        ).values_list('applicant_id', 'project_id')
    )

    by_user = defaultdict(list)
    for bookmark in saved:
        if (bookmark.user_id, bookmark.project_id) in applied or not bookmark.user.email:
            continue
        by_user[bookmark.user].append(bookmark.project)

    sent = 0
    for user, projects in by_user.items():
        projects.sort(key=lambda project: project.application_deadline)
        send_email_notification.delay(
            to_emails=[user.email],
            subject=f'[CampusHub] {len(projects)} saved project{"s" if len(projects) != 1 else ""} closing soon',
            template_name='emails/closing_deadlines.html',
            context={
                'name': user.full_name,
                'projects': [
                    {
                        'name': project.name,
                        'organization': project.organization.name,
                        'deadline': project.application_deadline.isoformat(),
                        'days_left': (project.application_deadline - today).days,
                    }
                    for project in projects
                ],
                'count': len(projects),
                'url': f'{settings.FRONTEND_URL}/discover/saved',
            }
        )
        sent += 1

    return {'notifications_sent': sent}
