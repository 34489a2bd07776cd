"""\
Setup Demo Data Command.

Purpose:
- Optionally clear campus data (organizations, projects, applications, tasks).
- Seed a small campus: one university, students with skills, two
  organizations with positions and teams, published projects with tasks,
  and a few applications.

Everything is created through the application services so the demo data
obeys the same rules as the API. Intended for local demo environments.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import List

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone


@dataclass(frozen=True)
class DemoStudentSpec:
    username: str
    first_name: str
    last_name: str
    major: str
    year_of_study: str
    skills: List[str] = field(default_factory=list)


STUDENTS = [
    DemoStudentSpec('maya', 'Maya', 'Patel', 'Computer Science', 'Junior',
                    ['Python', 'React', 'SQL', 'Public Speaking']),
    DemoStudentSpec('leo', 'Leo', 'Martins', 'Graphic Design', 'Sophomore',
                    ['Figma', 'Illustration', 'Branding']),
    DemoStudentSpec('ana', 'Ana', 'Kowalski', 'Economics', 'Senior',
                    ['Budgeting', 'Excel', 'Event Planning', 'Leadership']),
    DemoStudentSpec('sam', 'Sam', 'Okafor', 'Computer Science', 'Freshman',
                    ['JavaScript', 'HTML', 'CSS']),
    DemoStudentSpec('ines', 'Ines', 'Duarte', 'Marketing', 'Junior',
                    ['Social Media', 'Copywriting', 'Photography']),
]


class Command(BaseCommand):
    help = 'Seed a demo campus (students, organizations, projects, tasks)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Delete existing campus data before seeding'
        )
        parser.add_argument(
            '--password',
            type=str,
            default='demo123',
            help='Password for created demo users'
        )

    def handle(self, *args, **options):
        password = options.get('password')

        with transaction.atomic():
            if options.get('clear'):
                self.stdout.write('Clearing campus data...')
                self._clear()
                self.stdout.write(self.style.SUCCESS('Campus data cleared.'))

            self.stdout.write('Seeding demo data...')
            users = self._seed(password)
            self.stdout.write(self.style.SUCCESS('Demo data seeded.'))

        self.stdout.write('')
        self.stdout.write(self.style.SUCCESS('Demo login accounts:'))
        for user in users:
            self.stdout.write(f"- {user.username} / {password} ({user.major})")

    def _clear(self):
        from infrastructure.persistence.models import (
            Contribution,
            InternalProject,
            Organization,
            ProjectApplication,
            SavedProject,
            ProjectView,
            UserActivity,
        )

        for model in (ProjectApplication, Contribution, SavedProject, ProjectView, InternalProject, Organization):
            manager = getattr(model, 'all_objects', model.objects)
            manager.all().delete()
        UserActivity.objects.all().delete()

    # ---------------------------------------------------------------------
    # Seeding
    # ---------------------------------------------------------------------
    def _seed(self, password):
        from application.services.applications import ApplicationService
        from application.services.contributions import ContributionService
        from application.services.organizations import OrganizationService
        from application.services.profiles import ProfileService
        from application.services.projects import ProjectService
        from infrastructure.persistence.models import (
            Organization,
            Position,
            Team,
            University,
            User,
        )

        today = timezone.localdate()
        university, _ = University.objects.get_or_create(
            domain='demo.edu',
            defaults={'name': 'Demo State University', 'location': 'Springfield'},
        )

        users = []
        for student in STUDENTS:
            user, created = User.objects.get_or_create(
                username=student.username,
                defaults={
                    'email': f'{student.username}@demo.edu',
                    'first_name': student.first_name,
                    'last_name': student.last_name,
                    'major': student.major,
                    'year_of_study': student.year_of_study,
                    'university': university,
                    'bio': f'{student.major} student at Demo State.',
                },
            )
            if created:
                user.set_password(password)
                user.save()
                profile = ProfileService(user)
                for skill in student.skills:
                    profile.add_skill(skill)
                profile.recompute_completeness()
            users.append(user)

        maya, leo, ana, sam, ines = users
        if Organization.objects.filter(slug='campus-coders').exists():
            return users

        # Organizations
        coders = OrganizationService(maya).create(
            'Campus Coders',
            category='technology',
            description='Students building software for campus groups.',
            mission='Ship useful tools and learn by doing.',
            meeting_schedule='Thursdays 6pm, Library 204',
            email='coders@demo.edu',
        )
        service = OrganizationService(maya)
        service.add_member(coders.id, ana.id, role='treasurer')
        service.add_member(coders.id, sam.id)
        service.add_member(coders.id, leo.id)

        president = Position.objects.create(
            organization=coders, role='president', title='President', order=0,
            required_skills=['Leadership', 'Public Speaking'], created_by=maya, updated_by=maya,
        )
        treasurer = Position.objects.create(
            organization=coders, role='treasurer', title='Treasurer', order=1,
            reports_to=president, required_skills=['Budgeting', 'Excel'],
            created_by=maya, updated_by=maya,
        )
        Position.objects.create(
            organization=coders, role='tech_lead', title='Tech Lead', order=2,
            reports_to_role='president', required_skills=['Python', 'React'],
            created_by=maya, updated_by=maya,
        )
        service.fill_position(president.id, maya.id, term_end_date=today + timedelta(days=45))
        service.fill_position(treasurer.id, ana.id, term_end_date=today + timedelta(days=200))

        web_team = Team.objects.create(organization=coders, name='Web', color='#4f46e5')
        web_team.leads.add(maya)

        OrganizationService(ines).create(
            'Photo Society',
            category='arts',
            description='Campus photography walks and exhibitions.',
        )

        # Projects
        projects = ProjectService(maya)
        portal = projects.create(
            coders,
            'Club Portal Redesign',
            required_skills=['React', 'Figma'],
            preferred_skills=['Copywriting'],
            description='Rebuild the club portal front end.',
            public_description='Help us redesign the portal every club on campus uses.',
            application_deadline=today + timedelta(days=5),
            required_commitment_hours=4,
            is_remote=True,
            timeline='this_month',
            due_date=today + timedelta(days=40),
        )
        projects.publish(portal.id)

        hackathon = projects.create(
            coders,
            'Spring Hackathon',
            required_skills=['Event Planning', 'Budgeting'],
            preferred_skills=['Social Media'],
            description='Organize a 24h hackathon.',
            public_description='Plan the biggest student hackathon of the year.',
            application_deadline=today + timedelta(days=20),
            required_commitment_hours=8,
            max_applicants=10,
            timeline='this_semester',
        )
        projects.publish(hackathon.id)

        # Tasks
        tasks = ContributionService(maya)
        tasks.create(
            portal.id, 'Audit current pages', priority='high',
            due_date=today - timedelta(days=2), assignee_ids=[sam.id],
            subtasks=['List pages', 'Screenshot flows'],
        )
        tasks.create(
            portal.id, 'Design new navigation', priority='medium',
            due_date=today + timedelta(days=7), assignee_ids=[leo.id],
            required_skills=['Figma'],
        )
        tasks.create(
            portal.id, 'Set up React project', priority='urgent',
            due_date=today + timedelta(days=1), assignee_ids=[maya.id, sam.id],
            required_skills=['React'],
        )
        tasks.create(hackathon.id, 'Book venue', priority='high', due_date=today + timedelta(days=10),
                     assignee_ids=[ana.id])

        # Discovery activity
        ApplicationService(ines).submit(
            portal.id,
            cover_letter='I write copy for the student paper and would love to help.',
            availability_hours_per_week=5,
        )
        ApplicationService(leo).submit(hackathon.id, cover_letter='I can design the posters.')

        return users
