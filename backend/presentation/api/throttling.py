"""
API Throttling.

Per-endpoint rate limits on top of the global anon/user rates. Rates come
from REST_FRAMEWORK['DEFAULT_THROTTLE_RATES'] keyed by `scope`.
"""

from rest_framework.throttling import UserRateThrottle


class TaskParseThrottle(UserRateThrottle):
    """Natural language task entry calls the language model on every request."""

    scope = 'task_parse'
