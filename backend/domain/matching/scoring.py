"""
Skill Match Scoring.

Pure functions; no Django imports. Skills are compared by a normalized key
so "React", " react " and "REACT" are the same skill, while the matched and
missing lists keep the spelling the project used.
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple


# Score of a project that declares no required skills.
BASE_SCORE = 50

REQUIRED_WEIGHT = 70
PREFERRED_WEIGHT = 30

# Minimum score for the "for you" feed.
FOR_YOU_THRESHOLD = 50

# Cards show the match badge from this score on.
HIGHLIGHT_THRESHOLD = 70


class MatchQuality(str, Enum):
    """Qualitative bucket of a match score."""

    PERFECT = "perfect"
    STRONG = "strong"
    GOOD = "good"
    STRETCH = "stretch"
    REACH = "reach"

    @property
    def label(self) -> str:
        return {
            MatchQuality.PERFECT: "Perfect Match",
            MatchQuality.STRONG: "Strong Match",
            MatchQuality.GOOD: "Good Match",
            MatchQuality.STRETCH: "Stretch Goal",
            MatchQuality.REACH: "Reach Goal",
        }[self]

    @property
    def description(self) -> str:
        return {
            MatchQuality.PERFECT: "Ideal for your skills and experience",
            MatchQuality.STRONG: "Great fit with minor gaps",
            MatchQuality.GOOD: "Solid opportunity to grow",
            MatchQuality.STRETCH: "Challenge yourself",
            MatchQuality.REACH: "Ambitious but possible",
        }[self]


def normalize_skill(name: Optional[str]) -> str:
    """Comparison key for a skill name: trimmed, single-spaced, case-folded."""
    if not name:
        return ""
    return " ".join(str(name).split()).casefold()


def _unique(names: Iterable[str], exclude: Iterable[str] = ()) -> List[Tuple[str, str]]:
    """(key, display) pairs in first-seen order, skipping blanks and `exclude` keys."""
    seen = set(exclude)
    result = []
    for name in names or ():
        key = normalize_skill(name)
        if not key or key in seen:
            continue
        seen.add(key)
        result.append((key, " ".join(str(name).split())))
    return result


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class SkillMatch:
    """Outcome of comparing a user's skills with a project's skills."""

    score: int
    matched_required: Tuple[str, ...] = field(default_factory=tuple)
    matched_preferred: Tuple[str, ...] = field(default_factory=tuple)
    missing_required: Tuple[str, ...] = field(default_factory=tuple)
    missing_preferred: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def total_required(self) -> int:
        return len(self.matched_required) + len(self.missing_required)

    @property
    def total_preferred(self) -> int:
        return len(self.matched_preferred) + len(self.missing_preferred)

    @property
    def matched_skills(self) -> List[str]:
        """All matched skills, required first."""
        return list(self.matched_required) + list(self.matched_preferred)

    @property
    def quality(self) -> MatchQuality:
        return match_quality(self.score)

    @property
    def is_highlighted(self) -> bool:
        return self.score >= HIGHLIGHT_THRESHOLD

    def to_dict(self) -> Dict:
        return {
            'score': self.score,
            'quality': self.quality.value,
            'matched_required': list(self.matched_required),
            'matched_preferred': list(self.matched_preferred),
            'missing_required': list(self.missing_required),
            'missing_preferred': list(self.missing_preferred),
            'total_required': self.total_required,
            'total_preferred': self.total_preferred,
            'message': match_message(self.score),
        }


def compute_skill_match(
    user_skills: Iterable[str],
    required_skills: Iterable[str],
    preferred_skills: Iterable[str] = (),
) -> SkillMatch:
    """
    Score how well `user_skills` cover a project's skills (0..100).

    Required skills carry 70 points, preferred skills 30. A project without
    preferred skills therefore tops out at 70 unless it also has no
    required skills, in which case every user gets BASE_SCORE. A skill
    listed as both required and preferred counts as required only.
    """
    user_keys = {normalize_skill(s) for s in user_skills or ()}
    user_keys.discard("")

    required = _unique(required_skills)
    preferred = _unique(preferred_skills, exclude=(key for key, _ in required))

    matched_required = tuple(name for key, name in required if key in user_keys)
    missing_required = tuple(name for key, name in required if key not in user_keys)
    matched_preferred = tuple(name for key, name in preferred if key in user_keys)
    missing_preferred = tuple(name for key, name in preferred if key not in user_keys)

    if not required:
        score = BASE_SCORE
    else:
        raw = REQUIRED_WEIGHT * len(matched_required) / len(required)
        if preferred:
            raw += PREFERRED_WEIGHT * len(matched_preferred) / len(preferred)
        score = max(0, min(100, _round_half_up(raw)))

    return SkillMatch(
        score=score,
        matched_required=matched_required,
        matched_preferred=matched_preferred,
        missing_required=missing_required,
        missing_preferred=missing_preferred,
    )


def coverage_score(user_skills: Iterable[str], required_skills: Iterable[str]) -> Tuple[int, List[str]]:
    """
    Plain coverage ratio used for succession planning.

    Returns (percent of required skills the user has, matched skill names).
    Positions are not projects, so this deliberately does not go through
    compute_skill_match. No required skills gives 0.
    """
    user_keys = {normalize_skill(s) for s in user_skills or ()}
    required = _unique(required_skills)
    if not required:
        return 0, []
    matched = [name for key, name in required if key in user_keys]
    return _round_half_up(100 * len(matched) / len(required)), matched


def match_quality(score: int) -> MatchQuality:
    if score >= 90:
        return MatchQuality.PERFECT
    if score >= 75:
        return MatchQuality.STRONG
    if score >= 60:
        return MatchQuality.GOOD
    if score >= 40:
        return MatchQuality.STRETCH
    return MatchQuality.REACH


def match_message(score: int) -> str:
    """Sentence shown to the student next to the breakdown."""
    if score >= 90:
        return "You're an excellent match for this project!"
    if score >= 75:
        return "You're a strong candidate for this project"
    if score >= 60:
        return "You have good foundational skills for this project"
    return "This project will help you develop new skills"


def reviewer_insight(score: Optional[int]) -> str:
    """Summary shown to organization admins reviewing an application."""
    score = score or 0
    if score >= 80:
        return "Excellent candidate! Strong skill alignment and availability matches project needs perfectly."
    if score >= 60:
        return "Good candidate with solid foundational skills. May need some onboarding for specific requirements."
    return "Enthusiastic candidate who could grow into the role. Consider if you have capacity for mentoring."
