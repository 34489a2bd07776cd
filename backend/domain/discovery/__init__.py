"""
Discovery Domain - the student-facing project feed.

Deadline urgency, quick filters, search, ranking and infinite-scroll pages.
"""

from .deadlines import (
    DeadlineStatus,
    DeadlineUrgency,
    days_until,
    deadline_status,
    is_closing_soon,
)
from .feed import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    DiscoverProject,
    FeedFilter,
    FeedPage,
    ForYouSelection,
    apply_feed_filter,
    paginate,
    rank_recommendations,
    search_projects,
    select_for_you,
    trending_score,
)
