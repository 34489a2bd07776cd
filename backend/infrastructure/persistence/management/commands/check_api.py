"""
Django management command: smoke check a running CampusHub API.

Logs in with a demo account through the JWT endpoint and calls a handful
of read endpoints, printing status and a short summary for each.
"""

import requests
from django.core.management.base import BaseCommand, CommandError


ENDPOINTS = [
    ('Profile', 'auth/me/'),
    ('Discovery feed', 'discover/feed/?limit=5'),
    ('For you', 'discover/for-you/'),
    ('My organizations', 'organizations/mine/'),
    ('My tasks', 'contributions/my-tasks/'),
    ('Dashboard', 'dashboard/summary/'),
]


class Command(BaseCommand):
    help = 'Check that a running CampusHub API answers the main endpoints'

    def add_arguments(self, parser):
        parser.add_argument('--base-url', default='http://localhost:8000/api/v1/')
        parser.add_argument('--username', default='maya')
        parser.add_argument('--password', default='demo123')
        parser.add_argument('--timeout', type=int, default=5)

    def handle(self, *args, **options):
        base_url = options['base_url'].rstrip('/') + '/'
        timeout = options['timeout']
        session = requests.Session()

        self.stdout.write("=" * 60)
        self.stdout.write(self.style.SUCCESS("CAMPUSHUB API CHECK"))
        self.stdout.write("=" * 60)

        try:
            response = session.post(
                base_url + 'auth/login/',
                json={'username': options['username'], 'password': options['password']},
                timeout=timeout,
            )
        except requests.exceptions.ConnectionError:
            raise CommandError(f"Could not connect to {base_url}")

        if response.status_code != 200:
            raise CommandError(f"Login failed: {response.status_code} {response.text[:200]}")
        session.headers['Authorization'] = f"Bearer {response.json()['access']}"
        self.stdout.write(self.style.SUCCESS(f"✓ Logged in as {options['username']}"))

        failures = 0
        for label, path in ENDPOINTS:
            try:
                response = session.get(base_url + path, timeout=timeout)
            except requests.exceptions.RequestException as e:
                failures += 1
                self.stdout.write(self.style.ERROR(f"✗ {label}: {e}"))
                continue

            if response.status_code != 200:
                failures += 1
                self.stdout.write(self.style.ERROR(f"✗ {label}: HTTP {response.status_code}"))
                continue
            self.stdout.write(self.style.SUCCESS(f"✓ {label}: {self._summary(response.json())}"))

        self.stdout.write("")
        if failures:
            raise CommandError(f"{failures} endpoint(s) failed")
        self.stdout.write(self.style.SUCCESS("All checks passed"))

    def _summary(self, data):
        if isinstance(data, list):
            return f"{len(data)} items"
        if 'total' in data:
            return f"{data['total']} total"
        if 'results' in data:
            return f"{len(data['results'])} results"
        return ', '.join(sorted(data)[:5])
