"""
Organization Domain - Aggregates.
"""

from __future__ import annotations
import re
from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from domain.shared.base_aggregate import AggregateRoot
from domain.shared.value_objects import MemberRole, OrganizationCategory
from domain.shared.events import OrganizationCreated
from domain.shared.exceptions import (
    EntityAlreadyExistsException,
    EntityNotFoundException,
    ValidationException,
    BusinessRuleViolationException,
)

_NON_SLUG_CHARS = re.compile(r'[^a-z0-9]+')


def _role(value) -> MemberRole:
    try:
        return MemberRole(value)
    except ValueError:
        raise ValidationException(f"Unknown member role '{value}'", "role", value)


def slugify_name(name: str) -> str:
    """'Robotics Club @ State' -> 'robotics-club-state'."""
    return _NON_SLUG_CHARS.sub('-', (name or '').lower()).strip('-')


@dataclass(frozen=True)
class Membership:
    user_id: UUID
    role: MemberRole = MemberRole.MEMBER

    @property
    def can_manage(self) -> bool:
        return MemberRole(self.role).can_manage


@dataclass(eq=False, repr=False)
class Organization(AggregateRoot):
    """
    A campus organization (club, society, lab).

    The creator always becomes an admin member.
    """

    name: str = ""
    slug: str = ""
    category: OrganizationCategory = OrganizationCategory.OTHER
    description: str = ""
    admin_id: Optional[UUID] = None
    members: List[Membership] = field(default_factory=list)

    def __post_init__(self):
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValidationException("Organization name is required", "name")
        self.slug = self.slug or slugify_name(self.name)
        if not self.slug:
            raise ValidationException(
                "Organization name must contain letters or digits", "name", self.name
            )
        try:
            self.category = OrganizationCategory(self.category or OrganizationCategory.OTHER)
        except ValueError:
            raise ValidationException(f"Unknown category '{self.category}'", "category", self.category)

    @classmethod
    def create(cls, name: str, creator_id: UUID, **details) -> Organization:
        organization = cls(name=name, admin_id=creator_id, created_by=creator_id, **details)
        organization.members.append(Membership(user_id=creator_id, role=MemberRole.ADMIN))
        organization.add_domain_event(OrganizationCreated(
            organization_id=organization.id,
            slug=organization.slug,
            created_by=creator_id,
        ))
        return organization

    # =========================================================================
    # MEMBERSHIP
    # =========================================================================

    def membership_of(self, user_id: UUID) -> Optional[Membership]:
        for membership in self.members:
            if membership.user_id == user_id:
                return membership
        return None

    def is_member(self, user_id: UUID) -> bool:
        return self.membership_of(user_id) is not None

    def is_admin(self, user_id: UUID) -> bool:
        membership = self.membership_of(user_id)
        if membership is None:
            return False
        return user_id == self.admin_id or membership.can_manage

    def add_member(self, user_id: UUID, role: MemberRole = MemberRole.MEMBER) -> Membership:
        if self.is_member(user_id):
            raise EntityAlreadyExistsException("Membership", user_id)
        membership = Membership(user_id=user_id, role=_role(role))
        self.members.append(membership)
        self.increment_version()
        return membership

    def change_role(self, user_id: UUID, role: MemberRole) -> Membership:
        current = self.membership_of(user_id)
        if current is None:
            raise EntityNotFoundException("Membership", user_id)
        role = _role(role)
        if current.can_manage and not role.can_manage and self._manager_count() == 1:
            raise BusinessRuleViolationException(
                "LAST_ADMIN",
                "An organization needs at least one admin"
            )
        if not role.can_manage:
            self._hand_over_ownership(user_id)
        updated = Membership(user_id=user_id, role=role)
        self.members[self.members.index(current)] = updated
        self.increment_version()
        return updated

    def remove_member(self, user_id: UUID) -> None:
        current = self.membership_of(user_id)
        if current is None:
            raise EntityNotFoundException("Membership", user_id)
        if current.can_manage and self._manager_count() == 1:
            raise BusinessRuleViolationException(
                "LAST_ADMIN",
                "An organization needs at least one admin"
            )
        self._hand_over_ownership(user_id)
        self.members.remove(current)
        self.increment_version()

    def _manager_count(self) -> int:
        return sum(1 for m in self.members if m.can_manage)

    def _hand_over_ownership(self, user_id: UUID) -> None:
        """The owner seat moves to the longest-standing remaining manager."""
        if user_id != self.admin_id:
            return
        successor = next(
            (m.user_id for m in self.members if m.can_manage and m.user_id != user_id), None
        )
        if successor is None:
            raise BusinessRuleViolationException(
                "LAST_ADMIN",
                "An organization needs at least one admin"
            )
        self.admin_id = successor
