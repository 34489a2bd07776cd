"""
Discovery Service.

Loads the public project listing for one student, scores every row with the
shared match function and hands the rows to the discovery domain for
filtering, ranking and paging.
"""

import logging
from collections import defaultdict
from datetime import timedelta
from typing import Dict, Iterable, List, Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, F
from django.utils import timezone

from domain.discovery import (
    DiscoverProject,
    FeedFilter,
    FeedPage,
    ForYouSelection,
    apply_feed_filter,
    paginate,
    search_projects,
    select_for_you,
    trending_score,
)
from domain.matching import SkillMatch, compute_skill_match, normalize_skill
from domain.shared.exceptions import EntityNotFoundException, ValidationException
from domain.shared.value_objects import parse_entity_id
from infrastructure.persistence.models import (
    ApplicationStatusChoices,
    InternalProject,
    ProjectApplication,
    ProjectStatusChoices,
    ProjectView,
    ProjectVisibilityChoices,
    SavedProject,
    SkillImportanceChoices,
    TaskRequiredSkill,
)

logger = logging.getLogger(__name__)


def listed_projects():
    """Public, active projects of active organizations."""
    return (
        InternalProject.objects
        .filter(
            visibility=ProjectVisibilityChoices.PUBLIC,
            status=ProjectStatusChoices.ACTIVE,
            organization__is_active=True,
        )
        .select_related('organization')
        .prefetch_related('project_skills__skill')
    )


def _merge(*groups: Iterable[str]) -> List[str]:
    seen = set()
    merged = []
    for group in groups:
        for name in group:
            key = normalize_skill(name)
            if key and key not in seen:
                seen.add(key)
                merged.append(name)
    return merged


def _counts_since(queryset, field: str, since) -> Dict:
    rows = (
        queryset.filter(**{f'{field}__gte': since})
        .order_by()
        .values('project_id')
        .annotate(n=Count('id'))
    )
    return {row['project_id']: row['n'] for row in rows}


class DiscoveryService:
    """Feeds, recommendations and bookmarks for one user."""

    def __init__(self, user, now=None):
        self.user = user
        self.now = now or timezone.now()
        self.config = settings.CAMPUSHUB
        self._user_skills = None

    @property
    def user_skills(self) -> List[str]:
        if self._user_skills is None:
            self._user_skills = self.user.skill_names
        return self._user_skills

    # =========================================================================
    # ROWS
    # =========================================================================

    def _task_skills(self, project_ids) -> Dict:
        """project_id -> {importance: [skill names]} from active tasks."""
        result = defaultdict(lambda: defaultdict(list))
        rows = (
            TaskRequiredSkill.objects
            .filter(task__project_id__in=project_ids, task__deleted_at__isnull=True)
            .values_list('task__project_id', 'importance', 'skill__name')
            .order_by('added_at')
        )
        for project_id, importance, name in rows:
            result[project_id][importance].append(name)
        return result

    def build_rows(self, projects) -> List[DiscoverProject]:
        """Turn project rows into scored feed rows, newest first."""
        projects = list(projects)
        ids = [p.id for p in projects]
        if not ids:
            return []

        since = self.now - timedelta(days=self.config['TRENDING_WINDOW_DAYS'])
        views = _counts_since(ProjectView.objects.filter(project_id__in=ids), 'viewed_at', since)
        applications = _counts_since(ProjectApplication.objects.filter(project_id__in=ids), 'created_at', since)
        saves = _counts_since(SavedProject.objects.filter(project_id__in=ids), 'saved_at', since)
        task_skills = self._task_skills(ids)

        saved_ids = set(
            SavedProject.objects.filter(user=self.user, project_id__in=ids)
            .values_list('project_id', flat=True)
        )
        applied = dict(
            ProjectApplication.objects.filter(applicant=self.user, project_id__in=ids)
            .values_list('project_id', 'status')
        )

        rows = []
        for project in projects:
            extra = task_skills.get(project.id, {})
            required = _merge(project.required_skills, extra.get(SkillImportanceChoices.REQUIRED, []))
            preferred = _merge(project.preferred_skills, extra.get(SkillImportanceChoices.PREFERRED, []))
            status = applied.get(project.id)
            organization = project.organization
            rows.append(DiscoverProject(
                id=project.id,
                name=project.name,
                description=project.public_description or project.description,
                organization_id=organization.id,
                organization_name=organization.name,
                organization_slug=organization.slug,
                organization_logo_url=organization.logo_url,
                category=organization.category,
                required_skills=required,
                preferred_skills=preferred,
                commitment_hours=project.required_commitment_hours,
                application_deadline=project.application_deadline,
                is_remote=project.is_remote,
                timeline=project.timeline or None,
                max_applicants=project.max_applicants,
                view_count=project.view_count,
                application_count=project.application_count,
                created_at=project.created_at,
                published_at=project.published_at,
                match=compute_skill_match(self.user_skills, required, preferred),
                is_saved=project.id in saved_ids,
                has_applied=status is not None and status != ApplicationStatusChoices.WITHDRAWN,
                application_status=status,
                trending_score=trending_score(
                    views.get(project.id, 0),
                    applications.get(project.id, 0),
                    saves.get(project.id, 0),
                ),
            ))
        rows.sort(key=lambda row: row.sort_timestamp, reverse=True)
        return rows

    # =========================================================================
    # FEEDS
    # =========================================================================

    def _limit(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.config['FEED_PAGE_SIZE']
        return max(1, min(int(limit), self.config['MAX_PAGE_SIZE']))

    def feed(
        self,
        feed_filter=FeedFilter.ALL,
        search: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> FeedPage:
        if not isinstance(feed_filter, FeedFilter):
            try:
                feed_filter = FeedFilter.parse(feed_filter)
            except ValueError:
                raise ValidationException(f"Unknown feed filter '{feed_filter}'", "filter", feed_filter)

        rows = self.build_rows(listed_projects())
        rows = search_projects(rows, search)
        rows = apply_feed_filter(
            rows,
            feed_filter,
            self.now,
            for_you_threshold=self.config['FOR_YOU_THRESHOLD'],
            closing_soon_days=self.config['CLOSING_SOON_DAYS'],
            low_commitment_hours=self.config['LOW_COMMITMENT_HOURS'],
        )
        return paginate(rows, offset, self._limit(limit))

    def for_you(self) -> ForYouSelection:
        rows = [r for r in self.build_rows(listed_projects()) if not r.has_applied]
        return select_for_you(
            rows,
            limit=self.config['FOR_YOU_LIMIT'],
            threshold=self.config['FOR_YOU_THRESHOLD'],
        )

    def saved(self) -> List[DiscoverProject]:
        """Bookmarked projects, most recently saved first."""
        saved = list(
            SavedProject.objects.filter(user=self.user, project__is_active=True)
            .values_list('project_id', flat=True)
        )
        rows = {r.id: r for r in self.build_rows(
            InternalProject.objects.filter(id__in=saved)
            .select_related('organization')
            .prefetch_related('project_skills__skill')
        )}
        return [rows[pid] for pid in saved if pid in rows]

    def applied(self) -> List[DiscoverProject]:
        """Projects the user applied to, most recent application first."""
        project_ids = list(
            ProjectApplication.objects.filter(applicant=self.user)
            .order_by('-created_at')
            .values_list('project_id', flat=True)
        )
        rows = {r.id: r for r in self.build_rows(
            InternalProject.objects.filter(id__in=project_ids)
            .select_related('organization')
            .prefetch_related('project_skills__skill')
        )}
        return [rows[pid] for pid in project_ids if pid in rows]

    def get_listed(self, project_id) -> InternalProject:
        project_id = parse_entity_id(project_id, "Project")
        project = listed_projects().filter(id=project_id).first()
        if project is None:
            raise EntityNotFoundException("Project", project_id)
        return project

    def row(self, project_id) -> DiscoverProject:
        return self.build_rows([self.get_listed(project_id)])[0]

    def match(self, project_id) -> SkillMatch:
        return self.row(project_id).match

    # =========================================================================
    # BOOKMARKS AND VIEWS
    # =========================================================================

    def toggle_save(self, project_id) -> bool:
        """Save or unsave a listed project; returns the new saved state."""
        project = self.get_listed(project_id)
        deleted, _ = SavedProject.objects.filter(user=self.user, project=project).delete()
        if deleted:
            logger.info(f"User {self.user.id} unsaved project {project.id}")
            return False
        try:
            with transaction.atomic():
                SavedProject.objects.create(user=self.user, project=project)
        except IntegrityError:
            # Saved concurrently by another request
            pass
        logger.info(f"User {self.user.id} saved project {project.id}")
        return True

    def record_view(self, project_id, referrer: str = '', duration_seconds: Optional[int] = None) -> ProjectView:
        project = self.get_listed(project_id)
        view = ProjectView.objects.create(
            project=project,
            viewer=self.user if self.user.is_authenticated else None,
            referrer=referrer[:50],
            view_duration_seconds=duration_seconds,
        )
        InternalProject.objects.filter(pk=project.pk).update(view_count=F('view_count') + 1)
        return view
