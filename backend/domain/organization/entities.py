"""
Organization Domain - Entities.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional
from uuid import UUID

from domain.shared.base_entity import VersionedEntity
from domain.shared.value_objects import Term
from domain.shared.exceptions import ValidationException


def role_key(text: str) -> str:
    """'Vice President' -> 'vice_president'."""
    return "_".join((text or "").lower().split())


def role_title(role: str) -> str:
    """'vice_president' -> 'Vice President'."""
    return " ".join(word.capitalize() for word in (role or "").replace("_", " ").split())


@dataclass(eq=False, repr=False)
class Position(VersionedEntity):
    """
    An office inside an organization (president, treasurer, ...).

    The position above it is `reports_to_id` when set, otherwise the first
    position whose role key is `reports_to_role`.
    """

    organization_id: Optional[UUID] = None
    role: str = ""
    title: str = ""
    description: str = ""
    holder_id: Optional[UUID] = None
    holder_name: str = ""
    reports_to_id: Optional[UUID] = None
    reports_to_role: Optional[str] = None
    order: int = 0
    required_skills: List[str] = field(default_factory=list)
    term_end_date: Optional[date] = None

    def __post_init__(self):
        self.role = role_key(self.role or self.title)
        if not self.role:
            raise ValidationException("Position role is required", "role")
        if self.reports_to_id is not None and self.reports_to_id == self.id:
            raise ValidationException("A position cannot report to itself", "reports_to")
        if self.reports_to_role:
            self.reports_to_role = role_key(self.reports_to_role)
            if self.reports_to_role == self.role:
                raise ValidationException("A position cannot report to itself", "reports_to_role")

    @property
    def display_title(self) -> str:
        return self.title or role_title(self.role)

    @property
    def is_vacant(self) -> bool:
        return self.holder_id is None

    @property
    def term(self) -> Term:
        return Term(end=self.term_end_date)

    def assign(self, user_id: UUID, name: str = "", term_end_date: Optional[date] = None) -> None:
        self.holder_id = user_id
        self.holder_name = name
        if term_end_date is not None:
            self.term_end_date = term_end_date
        self.increment_version()

    def vacate(self) -> None:
        self.holder_id = None
        self.holder_name = ""
        self.term_end_date = None
        self.increment_version()
