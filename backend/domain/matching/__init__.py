"""
Matching Domain - how well a student's skills fit a project.

The one scoring function in this package backs every surface that shows a
match score: discovery feeds, "for you", project cards and the snapshot
stored on an application.
"""

from .scoring import (
    BASE_SCORE,
    FOR_YOU_THRESHOLD,
    HIGHLIGHT_THRESHOLD,
    MatchQuality,
    SkillMatch,
    compute_skill_match,
    coverage_score,
    match_message,
    match_quality,
    normalize_skill,
    reviewer_insight,
)

__all__ = [
    'BASE_SCORE',
    'FOR_YOU_THRESHOLD',
    'HIGHLIGHT_THRESHOLD',
    'MatchQuality',
    'SkillMatch',
    'compute_skill_match',
    'coverage_score',
    'match_message',
    'match_quality',
    'normalize_skill',
    'reviewer_insight',
]
