"""
Tests for core endpoints and the API error contract.

Tests cover:
- Health, liveness, readiness and status endpoints
- JWT login, current user and logout
- Request ID header propagation
- Standardized error bodies
- Editor permission helpers
"""

import uuid

import pytest
from django.contrib.auth import get_user_model
from django.contrib.auth.models import AnonymousUser
from django.core.cache import cache
from django.test import RequestFactory
from rest_framework import status
from rest_framework.test import APIClient

from apps.core.documents import ARTICLES, default_repository
from apps.core.exceptions import (
    AuthError,
    FormValidationError,
    NotFoundError,
    ValidationError,
    newsroom_exception_handler,
)
from apps.core.permissions import IsEditorOrReadOnly, is_editor, require_authenticated

User = get_user_model()


# ============================================================================
# Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    """Create an API client."""
    return APIClient()


@pytest.fixture
def user(db):
    """Create a test user."""
    return User.objects.create_user(
        username='testuser',
        email='test@example.com',
        password='testpass123'
    )


@pytest.fixture
def authenticated_client(user):
    client = APIClient()
    client.force_authenticate(user=user)
    return client


# ============================================================================
# Health Tests
# ============================================================================

@pytest.mark.django_db
class TestHealthEndpoints:
    """Test probes and status."""

    def test_health(self, api_client):
        response = api_client.get('/health/')

        assert response.status_code == 200
        assert response.json()['status'] == 'healthy'

    def test_single_check(self, api_client):
        response = api_client.get('/health/database/')

        assert response.status_code == 200
        assert response.json()['name'] == 'database'
        assert response.json()['status'] == 'healthy'

    def test_unknown_check(self, api_client):
        assert api_client.get('/health/search-index/').status_code == 503

    def test_liveness_and_readiness(self, api_client):
        assert api_client.get('/livez/').json() == {'status': 'alive'}
        assert api_client.get('/readyz/').json() == {'status': 'ready'}

    def test_status_counts(self, api_client):
        default_repository.create(ARTICLES, {'title': 'Hello'})

        body = api_client.get('/status/').json()

        assert body['application'] == 'Newsroom'
        assert body['stats'] == {'articles': 1, 'submissions': 0, 'events': 0, 'pending_submissions': 0}


# ============================================================================
# Auth Tests
# ============================================================================

@pytest.mark.django_db
class TestAuth:
    """Test JWT login flow."""

    def test_login_returns_tokens_and_user(self, api_client, user):
        response = api_client.post(
            '/api/auth/login/', {'username': 'testuser', 'password': 'testpass123'}, format='json'
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['access']
        assert response.data['refresh']
        assert response.data['user']['username'] == 'testuser'

    def test_bad_credentials(self, api_client, user):
        response = api_client.post(
            '/api/auth/login/', {'username': 'testuser', 'password': 'wrong'}, format='json'
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['error']['code'] == 'AUTHENTICATION_REQUIRED'

    def test_me(self, authenticated_client):
        response = authenticated_client.get('/api/auth/me/')

        assert response.data['email'] == 'test@example.com'

    def test_logout_blacklists_refresh(self, api_client, user):
        tokens = api_client.post(
            '/api/auth/login/', {'username': 'testuser', 'password': 'testpass123'}, format='json'
        ).data
        api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

        response = api_client.post('/api/auth/logout/', {'refresh': tokens['refresh']}, format='json')
        refresh = api_client.post('/api/auth/refresh/', {'refresh': tokens['refresh']}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert refresh.status_code == status.HTTP_401_UNAUTHORIZED

    def test_logout_without_token(self, authenticated_client):
        response = authenticated_client.post('/api/auth/logout/', {}, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['error']['field'] == 'refresh'


# ============================================================================
# Request ID Tests
# ============================================================================

@pytest.mark.django_db
class TestRequestId:
    """Test X-Request-ID propagation."""

    def test_incoming_id_echoed(self, api_client):
        request_id = str(uuid.uuid4())

        response = api_client.get('/livez/', HTTP_X_REQUEST_ID=request_id)

        assert response['X-Request-ID'] == request_id

    def test_malformed_id_replaced(self, api_client):
        response = api_client.get('/livez/', HTTP_X_REQUEST_ID='not-a-uuid')

        assert uuid.UUID(response['X-Request-ID'])

    def test_error_body_carries_request_id(self, api_client):
        request_id = str(uuid.uuid4())

        response = api_client.get('/api/articles/', HTTP_X_REQUEST_ID=request_id)

        assert response.data['request_id'] == request_id


# ============================================================================
# Error Contract Tests
# ============================================================================

class TestExceptionHandler:
    """Test the standardized error format."""

    def context(self):
        request = RequestFactory().get('/api/articles/')
        request.request_id = 'req-1'
        return {'request': request}

    def test_form_errors_listed_in_order(self):
        exc = FormValidationError([
            ValidationError("Title is required", field='title'),
            ValidationError("Date is required", field='date'),
        ])

        response = newsroom_exception_handler(exc, self.context())

        assert response.status_code == 400
        assert response.data['request_id'] == 'req-1'
        assert response.data['error']['field'] == 'title'
        assert response.data['errors'] == [
            {'field': 'title', 'message': 'Title is required'},
            {'field': 'date', 'message': 'Date is required'},
        ]
        assert exc.fields == ['title', 'date']

    def test_not_found(self):
        response = newsroom_exception_handler(NotFoundError('events', 'e1'), self.context())

        assert response.status_code == 404
        assert response.data['error']['code'] == 'NOT_FOUND'
        assert response.data['error']['details'] == {'collection': 'events', 'id': 'e1'}

    def test_unexpected_error_is_500(self):
        response = newsroom_exception_handler(RuntimeError('boom'), self.context())

        assert response.status_code == 500
        assert response.data['error']['message'] == 'An unexpected error occurred'


# ============================================================================
# Permission Tests
# ============================================================================

@pytest.mark.django_db
class TestPermissions:
    """Test the editor session gate."""

    def test_require_authenticated(self, user):
        assert require_authenticated(user) is user
        with pytest.raises(AuthError):
            require_authenticated(AnonymousUser())
        with pytest.raises(AuthError):
            require_authenticated(None)

    def test_inactive_user_is_not_editor(self, user):
        user.is_active = False

        assert not is_editor(user)

    def test_read_only_for_anonymous(self):
        permission = IsEditorOrReadOnly()
        factory = RequestFactory()
        get, put = factory.get('/'), factory.put('/')
        get.user = put.user = AnonymousUser()

        assert permission.has_permission(get, None)
        assert not permission.has_permission(put, None)
