"""
Organization access checks shared by services and API permissions.
"""

from domain.shared.exceptions import AuthorizationException
from domain.shared.value_objects import MemberRole
from infrastructure.persistence.models import OrganizationMember

MANAGER_ROLES = [role.value for role in MemberRole if role.can_manage]


def is_member(user, organization_id) -> bool:
    if not user or not user.is_authenticated:
        return False
    return OrganizationMember.objects.filter(
        organization_id=organization_id, user_id=user.id
    ).exists()


def is_admin(user, organization) -> bool:
    """Organization owner, a managing member, or a superuser.

    The owner counts only while still a member.
    """
    if not user or not user.is_authenticated:
        return False
    if user.is_superuser:
        return True
    membership = OrganizationMember.objects.filter(
        organization_id=organization.id, user_id=user.id
    ).only('role').first()
    if membership is None:
        return False
    return organization.admin_id == user.id or membership.role in MANAGER_ROLES


def require_member(user, organization_id, operation: str) -> None:
    if not (user and user.is_superuser) and not is_member(user, organization_id):
        raise AuthorizationException(operation, "Organization")


def require_admin(user, organization, operation: str) -> None:
    if not is_admin(user, organization):
        raise AuthorizationException(operation, "Organization")
