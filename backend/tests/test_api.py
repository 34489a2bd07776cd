"""
REST API tests.

Covers:
- Authentication (JWT login, unauthenticated access)
- Discovery feed, bookmarks and applying
- Board moves with optimistic versions
- Reviewer endpoints and the Excel export
- Error response shape
"""

from datetime import timedelta
from unittest.mock import patch

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone
from rest_framework import status

from domain.project.task_parsing import ParsedTask
from domain.shared.exceptions import ExternalServiceException
from presentation.api.exception_handler import custom_exception_handler


def rows(response):
    data = response.json()
    return data['results'] if isinstance(data, dict) and 'results' in data else data


@pytest.mark.django_db
class TestAuth:

    def test_login_returns_tokens(self, api_client, user):
        response = api_client.post(
            '/api/v1/auth/login/', {'username': user.username, 'password': 'testpass123'}, format='json'
        )
        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body['access'] and body['refresh']

        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {body['access']}")
        me = api_client.get('/api/v1/auth/me/')
        assert me.status_code == status.HTTP_200_OK
        assert me.json()['username'] == user.username

    def test_wrong_password(self, api_client, user):
        response = api_client.post(
            '/api/v1/auth/login/', {'username': user.username, 'password': 'nope'}, format='json'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.parametrize('url', [
        '/api/v1/discover/feed/',
        '/api/v1/contributions/my-tasks/',
        '/api/v1/organizations/',
    ])
    def test_requires_authentication(self, api_client, url):
        assert api_client.get(url).status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.django_db
class TestDiscoverApi:
    """Tests for /discover/."""

    def test_feed(self, auth_client, user, skills, project):
        skills(user, 'Python', 'React')
        response = auth_client(user).get('/api/v1/discover/feed/')
        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body['total'] == 1
        assert body['has_more'] is False
        row = body['results'][0]
        assert row['id'] == str(project.id)
        assert row['match']['score'] == 70
        assert row['organization']['slug'] == project.organization.slug
        assert row['deadline']['label'] == 'Rolling basis'

    def test_unknown_filter_shape(self, auth_client, user):
        response = auth_client(user).get('/api/v1/discover/feed/', {'filter': 'popular'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        body = response.json()
        assert body['error'] == 'validation_error'
        assert body['details']['field'] == 'filter'
        assert body['detail']

    def test_bad_offset(self, auth_client, user):
        response = auth_client(user).get('/api/v1/discover/feed/', {'offset': 'x'})
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_save_toggle(self, auth_client, user, project):
        client = auth_client(user)
        assert client.post(f'/api/v1/discover/{project.id}/save/').json() == {'is_saved': True}
        saved = client.get('/api/v1/discover/saved/').json()
        assert [r['id'] for r in saved] == [str(project.id)]
        assert client.post(f'/api/v1/discover/{project.id}/save/').json() == {'is_saved': False}

    def test_apply(self, auth_client, user, skills, project):
        skills(user, 'Python')
        client = auth_client(user)
        response = client.post(
            f'/api/v1/discover/{project.id}/apply/',
            {'cover_letter': 'Hi', 'availability_hours_per_week': 5},
            format='json',
        )
        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body['skill_match_score'] == 35
        assert body['status'] == 'pending'

        again = client.post(f'/api/v1/discover/{project.id}/apply/', {}, format='json')
        assert again.status_code == status.HTTP_409_CONFLICT
        assert again.json()['error'] == 'entity_already_exists'

    def test_apply_after_deadline(self, auth_client, user, project_factory):
        project = project_factory(application_deadline=timezone.localdate() - timedelta(days=1))
        response = auth_client(user).post(f'/api/v1/discover/{project.id}/apply/', {}, format='json')
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()['details']['rule'] == 'DEADLINE_PASSED'

    def test_hidden_project_is_not_found(self, auth_client, user, internal_project_factory):
        project = internal_project_factory()
        response = auth_client(user).get(f'/api/v1/discover/{project.id}/')
        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.parametrize('method, suffix', [
        ('get', ''),
        ('get', 'match/'),
        ('post', 'save/'),
        ('post', 'apply/'),
        ('post', 'view/'),
    ])
    def test_malformed_id_is_not_found(self, auth_client, user, method, suffix):
        client = auth_client(user)
        response = getattr(client, method)(f'/api/v1/discover/not-a-uuid/{suffix}', format='json')
        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()['error'] == 'entity_not_found'


@pytest.mark.django_db
class TestProjectsApi:

    def test_publish_with_form_version(self, auth_client, org_admin, organization, internal_project_factory):
        project = internal_project_factory(organization=organization)
        response = auth_client(org_admin).post(
            f'/api/v1/projects/{project.id}/publish/', {'expected_version': '1'}, format='multipart'
        )
        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body['version'] == 2
        assert body['status'] == 'active'

    def test_publish_rejects_bad_version(self, auth_client, org_admin, organization, internal_project_factory):
        project = internal_project_factory(organization=organization)
        response = auth_client(org_admin).post(
            f'/api/v1/projects/{project.id}/publish/', {'expected_version': 'one'}, format='multipart'
        )
        assert response.status_code == status.HTTP_400_BAD_REQUEST


@pytest.mark.django_db
class TestBoardApi:

    def test_board(self, auth_client, member, project, contribution_factory):
        contribution_factory(project=project, task_name='Design logo', assigned_to=[member])
        response = auth_client(member).get(f'/api/v1/projects/{project.id}/board/')
        assert response.status_code == status.HTTP_200_OK
        columns = {c['status']: c for c in response.json()['columns']}
        card = columns['pending']['tasks'][0]
        assert card['task_name'] == 'Design logo'
        assert card['assignees'][0]['id'] == str(member.id)

    def test_move_conflict(self, auth_client, member, project, contribution_factory):
        task = contribution_factory(project=project)
        client = auth_client(member)
        first = client.post(
            f'/api/v1/contributions/{task.id}/move/',
            {'status': 'in_progress', 'expected_version': 1},
            format='json',
        )
        assert first.status_code == status.HTTP_200_OK
        assert first.json()['version'] == 2

        stale = client.post(
            f'/api/v1/contributions/{task.id}/move/',
            {'status': 'completed', 'expected_version': 1},
            format='json',
        )
        assert stale.status_code == status.HTTP_409_CONFLICT
        assert stale.json()['error'] == 'concurrency_error'

    def test_outsider_cannot_see_tasks(self, auth_client, user, project, contribution_factory):
        task = contribution_factory(project=project)
        response = auth_client(user).post(
            f'/api/v1/contributions/{task.id}/move/', {'status': 'completed'}, format='json'
        )
        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_parse_preview(self, auth_client, org_admin, project):
        parsed = ParsedTask(title='Order pizza', due_date_text='tomorrow')
        with patch('infrastructure.ai.task_parser.TaskParserClient.parse', return_value=parsed):
            response = auth_client(org_admin).post(
                '/api/v1/contributions/parse/',
                {'project': str(project.id), 'text': 'order pizza tomorrow'},
                format='json',
            )
        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body['title'] == 'Order pizza'
        assert body['due_date_confidence'] == 'high'

    def test_parse_rate_limited(self, auth_client, org_admin, project):
        error = ExternalServiceException('openai', 'Slow down', retry_after=60)
        with patch('infrastructure.ai.task_parser.TaskParserClient.parse', side_effect=error):
            response = auth_client(org_admin).post(
                '/api/v1/contributions/parse/',
                {'project': str(project.id), 'text': 'order pizza'},
                format='json',
            )
        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert response['Retry-After'] == '60'
        assert response.json()['error'] == 'external_service_error'

    def test_parse_is_throttled(self, auth_client, org_admin, project):
        client = auth_client(org_admin)
        payload = {'project': str(project.id), 'text': 'order pizza'}
        parsed = ParsedTask(title='Order pizza')
        with patch('infrastructure.ai.task_parser.TaskParserClient.parse', return_value=parsed):
            codes = [
                client.post('/api/v1/contributions/parse/', payload, format='json').status_code
                for _ in range(11)
            ]
        assert codes[:10] == [status.HTTP_200_OK] * 10
        assert codes[10] == status.HTTP_429_TOO_MANY_REQUESTS

    def test_my_tasks(self, auth_client, member, project, contribution_factory):
        contribution_factory(project=project, due_date=timezone.localdate(), assigned_to=[member])
        response = auth_client(member).get('/api/v1/contributions/my-tasks/', {'filter': 'today'})
        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body['stats']['due_today'] == 1
        assert len(body['results']) == 1


@pytest.mark.django_db
class TestApplicationsApi:

    def test_review(self, auth_client, project, application_factory):
        application = application_factory(project=project)
        response = auth_client(project.organization.admin).post(
            f'/api/v1/applications/{application.id}/review/', {'status': 'accepted'}, format='json'
        )
        assert response.status_code == status.HTTP_200_OK
        assert response.json()['status'] == 'accepted'

    def test_applicant_cannot_review(self, auth_client, project, application_factory):
        application = application_factory(project=project)
        response = auth_client(application.applicant).post(
            f'/api/v1/applications/{application.id}/review/', {'status': 'accepted'}, format='json'
        )
        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()['error'] == 'authorization_error'

    def test_lists_are_scoped(self, auth_client, user, project, application_factory):
        mine = application_factory(project=project, applicant=user)
        application_factory(project=project)
        ids = [r['id'] for r in rows(auth_client(user).get('/api/v1/applications/'))]
        assert ids == [str(mine.id)]

    def test_export(self, auth_client, project, application_factory):
        application_factory(project=project)
        response = auth_client(project.organization.admin).get(
            '/api/v1/applications/export/', {'project': str(project.id)}
        )
        assert response.status_code == status.HTTP_200_OK
        assert response['Content-Type'].startswith('application/vnd.openxmlformats')
        assert 'attachment' in response['Content-Disposition']

    def test_export_needs_project(self, auth_client, org_admin):
        response = auth_client(org_admin).get('/api/v1/applications/export/')
        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_export_with_malformed_project(self, auth_client, org_admin):
        response = auth_client(org_admin).get('/api/v1/applications/export/', {'project': 'nope'})
        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestExceptionHandler:

    def test_orm_validation_error_is_bad_request(self):
        response = custom_exception_handler(ValidationError('“nope” is not a valid UUID.'), {})
        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error'] == 'validation_error'
        assert response.data['details']['messages'] == ['“nope” is not a valid UUID.']
