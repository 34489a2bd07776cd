"""
Celery tasks. Imported here so that autodiscovery of the
``application`` package registers every task module.
"""

from . import analytics_tasks, notification_tasks, project_tasks  # noqa: F401
