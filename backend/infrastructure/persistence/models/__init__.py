"""
Persistence Models Package.

All Django ORM models for the CampusHub system.
"""

# Base mixins and managers
from .base import (
    TimeStampedMixin,
    SoftDeleteMixin,
    VersionedMixin,
    AuditMixin,
    ActiveManager,
    AllObjectsManager,
)

# Users
from .users import (
    User,
    University,
)

# Skills
from .skills import (
    Skill,
    MemberSkill,
    SkillCategoryChoices,
    SkillSourceChoices,
)

# Organizations
from .organizations import (
    Organization,
    OrganizationMember,
    Position,
    Team,
    Invitation,
    OrganizationSkillNeed,
    OrganizationAnalytics,
    OrganizationCategoryChoices,
    MemberRoleChoices,
    InvitationStatusChoices,
)

# Projects
from .projects import (
    InternalProject,
    ProjectSkill,
    SavedProject,
    ProjectView,
    ProjectStatusChoices,
    ProjectVisibilityChoices,
    ProjectTimelineChoices,
    SkillImportanceChoices,
)

# Contributions
from .contributions import (
    Contribution,
    TaskAssignee,
    TaskRequiredSkill,
    ContributionStatusChoices,
    PriorityChoices,
)

# Applications
from .applications import (
    ProjectApplication,
    ApplicationStatusChoices,
)

# Activity / audit
from .activity import (
    UserActivity,
    AuditLog,
)


__all__ = [
    # Base
    'TimeStampedMixin',
    'SoftDeleteMixin',
    'VersionedMixin',
    'AuditMixin',
    'ActiveManager',
    'AllObjectsManager',

    # Users
    'User',
    'University',

    # Skills
    'Skill',
    'MemberSkill',
    'SkillCategoryChoices',
    'SkillSourceChoices',

    # Organizations
    'Organization',
    'OrganizationMember',
    'Position',
    'Team',
    'Invitation',
    'OrganizationSkillNeed',
    'OrganizationAnalytics',
    'OrganizationCategoryChoices',
    'MemberRoleChoices',
    'InvitationStatusChoices',

    # Projects
    'InternalProject',
    'ProjectSkill',
    'SavedProject',
    'ProjectView',
    'ProjectStatusChoices',
    'ProjectVisibilityChoices',
    'ProjectTimelineChoices',
    'SkillImportanceChoices',

    # Contributions
    'Contribution',
    'TaskAssignee',
    'TaskRequiredSkill',
    'ContributionStatusChoices',
    'PriorityChoices',

    # Applications
    'ProjectApplication',
    'ApplicationStatusChoices',

    # Activity
    'UserActivity',
    'AuditLog',
]
