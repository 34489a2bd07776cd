"""
Celery configuration for CampusHub project.
"""

import os

from celery import Celery
from celery.schedules import crontab

# Set the default Django settings module
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('campushub')

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Tasks live in application.tasks, outside of the installed apps.
app.autodiscover_tasks(['application'])

app.conf.task_routes = {
    'application.tasks.notification_tasks.*': {'queue': 'notifications'},
    'application.tasks.analytics_tasks.*': {'queue': 'reports'},
}

# Periodic tasks
app.conf.beat_schedule = {
    'notify-overdue-contributions': {
        'task': 'application.tasks.notification_tasks.notify_overdue_contributions',
        'schedule': crontab(hour=8, minute=0),
    },
    'notify-closing-deadlines': {
        'task': 'application.tasks.notification_tasks.notify_closing_deadlines',
        'schedule': crontab(hour=9, minute=0),
    },
    'daily-organization-analytics': {
        'task': 'application.tasks.analytics_tasks.snapshot_organization_analytics',
        'schedule': 86400.0,  # Every 24 hours
    },
}


@app.task(bind=True, ignore_result=True)
def debug_task(self):
    print(f'Request: {self.request!r}')
