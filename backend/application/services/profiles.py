"""
Profile Service.

Profile edits, the self-reported skill list and the contribution heatmap.
"""

import logging
from typing import List

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from domain.profile.completeness import HeatmapDay, activity_heatmap, profile_completeness
from domain.shared.exceptions import EntityAlreadyExistsException, EntityNotFoundException
from domain.shared.value_objects import ContributionStatus
from infrastructure.persistence.models import (
    Contribution,
    MemberSkill,
    Skill,
    SkillCategoryChoices,
    SkillSourceChoices,
    UserActivity,
)

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    'first_name', 'last_name', 'bio', 'tagline', 'university', 'major',
    'year_of_study', 'location', 'website', 'linkedin_url', 'github_url',
    'avatar_url', 'cover_photo_url', 'interests', 'looking_for', 'timezone',
    'onboarding_completed',
)

DONE_STATUSES = [s.value for s in ContributionStatus if s.is_done]


class ProfileService:

    def __init__(self, user):
        self.user = user

    def recompute_completeness(self, save: bool = True) -> int:
        score = profile_completeness(self.user)
        if score != self.user.profile_completeness:
            self.user.profile_completeness = score
            if save:
                self.user.save(update_fields=['profile_completeness'])
        return score

    @transaction.atomic
    def update_profile(self, **fields):
        """Apply editable fields and refresh the completeness score."""
        changed = []
        for name, value in fields.items():
            if name not in EDITABLE_FIELDS:
                continue
            if getattr(self.user, name) != value:
                setattr(self.user, name, value)
                changed.append(name)
        self.recompute_completeness(save=False)
        self.user.save(update_fields=changed + ['profile_completeness'])
        logger.info(f"Profile {self.user.id} updated: {', '.join(changed) or 'no changes'}")
        return self.user

    # =========================================================================
    # SKILLS
    # =========================================================================

    @transaction.atomic
    def add_skill(self, name: str, category: str = SkillCategoryChoices.OTHER) -> MemberSkill:
        skill = Skill.get_or_create_by_name(name, category)
        if MemberSkill.objects.filter(user=self.user, skill=skill).exists():
            raise EntityAlreadyExistsException("Skill", skill.name)
        member_skill = MemberSkill.objects.create(
            user=self.user, skill=skill, source=SkillSourceChoices.SELF_REPORTED
        )
        Skill.objects.filter(pk=skill.pk).update(usage_count=F('usage_count') + 1)
        UserActivity.record(self.user, 'skill_added', skill, skill=skill.name)
        return member_skill

    @transaction.atomic
    def remove_skill(self, member_skill_id) -> None:
        deleted, _ = MemberSkill.objects.filter(id=member_skill_id, user=self.user).delete()
        if not deleted:
            raise EntityNotFoundException("MemberSkill", member_skill_id)

    # =========================================================================
    # ACTIVITY
    # =========================================================================

    def heatmap(self, weeks: int = 12) -> List[List[HeatmapDay]]:
        completed = (
            Contribution.objects
            .filter(
                task_assignees__assignee=self.user,
                status__in=DONE_STATUSES,
                completed_at__isnull=False,
            )
            .values_list('completed_at', flat=True)
        )
        days = [timezone.localtime(value).date() for value in completed]
        return activity_heatmap(days, timezone.localdate(), weeks=weeks)
