"""
Organization health indicators (all percentages, 0..100).
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Set
from uuid import UUID

from domain.matching import normalize_skill


@dataclass(frozen=True)
class OrganizationHealth:
    skill_sufficiency: int
    project_completion: int
    member_utilization: int
    external_dependency: int

    @property
    def overall(self) -> int:
        """Average of the four, with external dependency counted inversely."""
        return round((
            self.skill_sufficiency
            + self.project_completion
            + self.member_utilization
            + (100 - self.external_dependency)
        ) / 4)

    def to_dict(self) -> dict:
        return {
            'skill_sufficiency': self.skill_sufficiency,
            'project_completion': self.project_completion,
            'member_utilization': self.member_utilization,
            'external_dependency': self.external_dependency,
            'overall': self.overall,
        }


def _percent(part: int, whole: int, empty: int = 0) -> int:
    if whole <= 0:
        return empty
    return round(100 * part / whole)


def organization_health(
    needed_skills: Iterable[str],
    member_skills: Iterable[str],
    total_tasks: int,
    completed_tasks: int,
    member_ids: Iterable[UUID],
    busy_member_ids: Iterable[UUID],
    accepted_applicant_ids: Iterable[UUID],
) -> OrganizationHealth:
    """
    skill_sufficiency: share of needed skills some member has (100 when
        nothing is needed).
    project_completion: share of tasks completed or verified.
    member_utilization: share of members with at least one open task.
    external_dependency: share of accepted applicants who are not members.
    """
    needed: Set[str] = {normalize_skill(s) for s in needed_skills} - {""}
    have: Set[str] = {normalize_skill(s) for s in member_skills}
    members = set(member_ids)
    busy = set(busy_member_ids) & members
    accepted = set(accepted_applicant_ids)

    return OrganizationHealth(
        skill_sufficiency=_percent(len(needed & have), len(needed), empty=100),
        project_completion=_percent(completed_tasks, total_tasks),
        member_utilization=_percent(len(busy), len(members)),
        external_dependency=_percent(len(accepted - members), len(accepted)),
    )
