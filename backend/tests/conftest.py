"""
CampusHub Test Configuration - pytest fixtures and factories

This module provides:
- factory_boy factories for the persistence models
- shared fixtures (users, organizations, API clients)
- helpers to capture realtime broadcasts and on-commit work

RUNNING TESTS:
# Run all tests
pytest -v

# Run by module
pytest backend/tests/test_matching.py -v
"""

import uuid
from datetime import timedelta
from unittest.mock import patch

import factory
import pytest
from django.core.cache import cache
from django.utils import timezone
from factory.django import DjangoModelFactory


# ============================================================================
# USER FACTORIES
# ============================================================================

class UniversityFactory(DjangoModelFactory):
    """Factory for University model."""

    class Meta:
        model = 'persistence.University'
        django_get_or_create = ('name',)

    name = factory.Sequence(lambda n: f"University {n}")
    domain = factory.Sequence(lambda n: f"uni{n}.edu")
    location = 'Springfield'


class UserFactory(DjangoModelFactory):
    """Factory for the custom User model."""

    class Meta:
        model = 'persistence.User'
        django_get_or_create = ('username',)

    username = factory.LazyAttribute(lambda o: f"user_{uuid.uuid4().hex[:8]}")
    email = factory.LazyAttribute(lambda o: f"{o.username}@example.edu")
    first_name = factory.Sequence(lambda n: f"Student{n}")
    last_name = 'Tester'
    password = factory.django.Password('testpass123')
    major = 'Computer Science'
    year_of_study = 'Junior'
    is_active = True


class SuperUserFactory(UserFactory):
    """Factory for superuser accounts."""

    is_staff = True
    is_superuser = True


# ============================================================================
# SKILL FACTORIES
# ============================================================================

class SkillFactory(DjangoModelFactory):
    class Meta:
        model = 'persistence.Skill'
        django_get_or_create = ('name',)

    name = factory.Sequence(lambda n: f"Skill {n}")
    category = 'technical'


class MemberSkillFactory(DjangoModelFactory):
    class Meta:
        model = 'persistence.MemberSkill'

    user = factory.SubFactory(UserFactory)
    skill = factory.SubFactory(SkillFactory)
    source = 'self_reported'


def give_skills(user, *names):
    """Record self-reported skills for a user."""
    for name in names:
        MemberSkillFactory(user=user, skill=SkillFactory(name=name))
    return user


# ============================================================================
# ORGANIZATION FACTORIES
# ============================================================================

class OrganizationFactory(DjangoModelFactory):
    """Organization whose admin is also an admin member."""

    class Meta:
        model = 'persistence.Organization'
        django_get_or_create = ('slug',)
        skip_postgeneration_save = True

    name = factory.Sequence(lambda n: f"Club {n}")
    slug = factory.LazyAttribute(lambda o: o.name.lower().replace(' ', '-'))
    category = 'technology'
    description = factory.Faker('sentence')
    admin = factory.SubFactory(UserFactory)
    created_by = factory.SelfAttribute('admin')
    updated_by = factory.SelfAttribute('admin')

    @factory.post_generation
    def admin_membership(obj, create, extracted, **kwargs):
        if not create:
            return
        from infrastructure.persistence.models import OrganizationMember
        OrganizationMember.objects.get_or_create(
            organization=obj, user=obj.admin, defaults={'role': 'admin'}
        )


class OrganizationMemberFactory(DjangoModelFactory):
    class Meta:
        model = 'persistence.OrganizationMember'

    organization = factory.SubFactory(OrganizationFactory)
    user = factory.SubFactory(UserFactory)
    role = 'member'


class PositionFactory(DjangoModelFactory):
    class Meta:
        model = 'persistence.Position'

    organization = factory.SubFactory(OrganizationFactory)
    role = factory.Sequence(lambda n: f"role_{n}")
    title = ''
    order = factory.Sequence(lambda n: n)
    required_skills = factory.LazyFunction(list)


class TeamFactory(DjangoModelFactory):
    class Meta:
        model = 'persistence.Team'

    organization = factory.SubFactory(OrganizationFactory)
    name = factory.Sequence(lambda n: f"Team {n}")
    color = '#4f46e5'


# ============================================================================
# PROJECT FACTORIES
# ============================================================================

class ProjectFactory(DjangoModelFactory):
    """
    Published (public, active) project.

    `required` / `preferred` take lists of skill names.
    """

    class Meta:
        model = 'persistence.InternalProject'
        skip_postgeneration_save = True

    organization = factory.SubFactory(OrganizationFactory)
    name = factory.Sequence(lambda n: f"Project {n}")
    description = factory.Faker('sentence')
    public_description = factory.Faker('sentence')
    status = 'active'
    visibility = 'public'
    published_at = factory.LazyFunction(timezone.now)
    created_by = factory.SelfAttribute('organization.admin')
    updated_by = factory.SelfAttribute('organization.admin')

    @factory.post_generation
    def required(obj, create, extracted, **kwargs):
        if create and extracted:
            _add_project_skills(obj, extracted, 'required')

    @factory.post_generation
    def preferred(obj, create, extracted, **kwargs):
        if create and extracted:
            _add_project_skills(obj, extracted, 'preferred')


class InternalProjectFactory(ProjectFactory):
    """Members-only project still being planned."""

    status = 'planning'
    visibility = 'internal'
    published_at = None


def _add_project_skills(project, names, importance):
    from infrastructure.persistence.models import ProjectSkill, Skill
    offset = project.project_skills.count()
    for order, name in enumerate(names, offset):
        ProjectSkill.objects.create(
            project=project,
            skill=Skill.get_or_create_by_name(name),
            importance=importance,
            order=order,
        )


class ContributionFactory(DjangoModelFactory):
    """Task; `assigned_to` takes a list of users (the first is primary)."""

    class Meta:
        model = 'persistence.Contribution'
        skip_postgeneration_save = True

    project = factory.SubFactory(ProjectFactory)
    task_name = factory.Sequence(lambda n: f"Task {n}")
    status = 'pending'
    priority = 'medium'
    subtasks = factory.LazyFunction(list)
    created_by = factory.SelfAttribute('project.organization.admin')

    @factory.post_generation
    def assigned_to(obj, create, extracted, **kwargs):
        if not (create and extracted):
            return
        from infrastructure.persistence.models import TaskAssignee
        for index, user in enumerate(extracted):
            TaskAssignee.objects.create(task=obj, assignee=user, is_primary=index == 0)


class ProjectApplicationFactory(DjangoModelFactory):
    class Meta:
        model = 'persistence.ProjectApplication'

    project = factory.SubFactory(ProjectFactory)
    applicant = factory.SubFactory(UserFactory)
    cover_letter = factory.Faker('paragraph')
    status = 'pending'
    skill_match_score = 50
    matched_skills = factory.LazyFunction(list)
    missing_skills = factory.LazyFunction(list)
    created_by = factory.SelfAttribute('applicant')


class SavedProjectFactory(DjangoModelFactory):
    class Meta:
        model = 'persistence.SavedProject'

    user = factory.SubFactory(UserFactory)
    project = factory.SubFactory(ProjectFactory)


class ProjectViewFactory(DjangoModelFactory):
    class Meta:
        model = 'persistence.ProjectView'

    project = factory.SubFactory(ProjectFactory)
    viewer = factory.SubFactory(UserFactory)


# ============================================================================
# FACTORY FIXTURES
# ============================================================================

@pytest.fixture
def user_factory(db):
    return UserFactory


@pytest.fixture
def skill_factory(db):
    return SkillFactory


@pytest.fixture
def organization_factory(db):
    return OrganizationFactory


@pytest.fixture
def member_factory(db):
    return OrganizationMemberFactory


@pytest.fixture
def position_factory(db):
    return PositionFactory


@pytest.fixture
def team_factory(db):
    return TeamFactory


@pytest.fixture
def project_factory(db):
    return ProjectFactory


@pytest.fixture
def internal_project_factory(db):
    return InternalProjectFactory


@pytest.fixture
def contribution_factory(db):
    return ContributionFactory


@pytest.fixture
def application_factory(db):
    return ProjectApplicationFactory


@pytest.fixture
def saved_project_factory(db):
    return SavedProjectFactory


@pytest.fixture
def project_view_factory(db):
    return ProjectViewFactory


@pytest.fixture
def skills(db):
    """`skills(user, 'Python', 'React')` records member skills."""
    return give_skills


# ============================================================================
# COMMON TEST FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def clear_cache():
    """Throttle counters live in the cache."""
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def user(db):
    return UserFactory()


@pytest.fixture
def admin_user(db):
    return SuperUserFactory()


@pytest.fixture
def organization(db):
    return OrganizationFactory()


@pytest.fixture
def org_admin(organization):
    return organization.admin


@pytest.fixture
def member(organization):
    """A plain member of `organization`."""
    return OrganizationMemberFactory(organization=organization).user


@pytest.fixture
def project(organization):
    return ProjectFactory(organization=organization, required=['Python', 'React'], preferred=['Figma'])


@pytest.fixture
def api_client(db):
    """Provide a DRF API test client."""
    from rest_framework.test import APIClient
    return APIClient()


@pytest.fixture
def auth_client(api_client):
    """`auth_client(user)` returns the API client authenticated as `user`."""
    def login(user):
        api_client.force_authenticate(user=user)
        return api_client
    return login


@pytest.fixture
def broadcasts():
    """Record realtime group sends instead of hitting the channel layer."""
    with patch('application.services.realtime.group_send') as mocked:
        yield mocked


def sent_messages(mocked, message_type=None):
    """(group, message) pairs recorded by the `broadcasts` fixture."""
    pairs = [(c.args[0], c.args[1]) for c in mocked.call_args_list]
    if message_type is None:
        return pairs
    return [(group, message) for group, message in pairs if message['type'] == message_type]


@pytest.fixture
def messages():
    return sent_messages


@pytest.fixture
def tomorrow():
    return timezone.localdate() + timedelta(days=1)
