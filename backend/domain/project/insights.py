"""
Organization dashboard insights over its projects.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, List, Optional
from uuid import UUID

from domain.shared.value_objects import ProjectStatus


@dataclass(frozen=True)
class ProjectSummary:
    """The few project facts the insights bar needs."""

    id: UUID
    name: str
    status: ProjectStatus
    due_date: Optional[date] = None
    skill_gaps: int = 0


@dataclass(frozen=True)
class ProjectInsight:
    id: str
    text: str
    value: Optional[int] = None
    urgent: bool = False

    def to_dict(self) -> dict:
        return {'id': self.id, 'text': self.text, 'value': self.value, 'urgent': self.urgent}


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'s' if count != 1 else ''}"


def needs_attention(project: ProjectSummary, today: date) -> bool:
    overdue = project.due_date is not None and project.due_date < today
    return overdue or project.skill_gaps > 0 or project.status == ProjectStatus.ON_HOLD


def project_insights(projects: Iterable[ProjectSummary], today: date) -> List[ProjectInsight]:
    projects = list(projects)
    week_end = today + timedelta(days=7)

    attention = [p for p in projects if needs_attention(p, today)]
    deadlines = [p for p in projects if p.due_date and today <= p.due_date <= week_end]
    active = [p for p in projects if p.status == ProjectStatus.ACTIVE]
    skill_gaps = sum(p.skill_gaps for p in projects)
    completion_rate = (
        round(100 * sum(1 for p in projects if p.status == ProjectStatus.COMPLETED) / len(projects))
        if projects else 0
    )

    insights = []
    if attention:
        insights.append(ProjectInsight(
            'attention',
            f"{_plural(len(attention), 'project')} need attention",
            len(attention),
            urgent=True,
        ))
    if deadlines:
        insights.append(ProjectInsight(
            'deadlines',
            f"{_plural(len(deadlines), 'deadline')} this week",
            len(deadlines),
            urgent=len(deadlines) > 2,
        ))
    if completion_rate > 0:
        insights.append(ProjectInsight(
            'velocity',
            f"Team velocity {completion_rate}% completion rate",
            completion_rate,
        ))
    if skill_gaps > 0:
        insights.append(ProjectInsight(
            'skills',
            f"{_plural(skill_gaps, 'skill gap')} to fill",
            skill_gaps,
        ))
    if active:
        insights.append(ProjectInsight(
            'active',
            f"{_plural(len(active), 'active project')}",
            len(active),
        ))

    if not insights:
        insights.append(ProjectInsight('ready', "All systems go! Ready to create something amazing?"))
    return insights
