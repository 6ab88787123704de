"""
Tests for the event API endpoints.

Tests cover:
- Editor CRUD with field errors
- Grouped admin listing with status filter
- Public featured + timeline view
- Public ticker feed
"""

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework import status
from rest_framework.test import APIClient

from apps.core.documents import EVENTS, default_repository

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


@pytest.fixture
def payload():
    return {
        'title': 'Robotics Showcase',
        'date': '2099-05-01',
        'endDate': '2099-05-02',
        'multiDay': True,
        'time': '10:00 - 16:00',
        'location': 'Library',
        'description': 'Teams demo their robots.',
        'organizer': 'Robotics Club',
        'featured': True,
        'subEvents': [
            {'title': 'Finals', 'time': '14:00 - 16:00', 'location': 'Library', 'description': 'Top four', 'day': 2},
        ],
    }


# ============================================================================
# Editor Tests
# ============================================================================

@pytest.mark.django_db
class TestEventCrud:
    """Test editor endpoints."""

    def test_requires_editor(self, api_client, payload):
        response = api_client.post('/api/events/', payload, format='json')

        assert response.status_code in (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN)

    def test_create(self, authenticated_client, payload):
        response = authenticated_client.post('/api/events/', payload, format='json')

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data['date'] == '2099-05-01 to 2099-05-02'
        assert response.data['startDate'] == '2099-05-01'
        assert response.data['endDate'] == '2099-05-02'
        assert response.data['multiDay'] is True
        assert response.data['dayCount'] == 2
        assert response.data['status'] == 'upcoming'
        assert response.data['subEvents'][0]['day'] == 2

    def test_field_errors(self, authenticated_client, payload):
        payload.update(title='', endDate='2099-04-01')

        response = authenticated_client.post('/api/events/', payload, format='json')

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert [e['field'] for e in response.data['errors']] == ['title', 'endDate']

    def test_get_put_delete(self, authenticated_client, payload):
        event_id = authenticated_client.post('/api/events/', payload, format='json').data['id']
        url = f'/api/events/{event_id}/'

        payload.update(endDate='', multiDay=False, title='Robotics Day')
        response = authenticated_client.put(url, payload, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['date'] == '2099-05-01'
        assert 'day' not in response.data['subEvents'][0]

        assert authenticated_client.get(url).data['title'] == 'Robotics Day'
        assert authenticated_client.delete(url).status_code == status.HTTP_204_NO_CONTENT
        assert authenticated_client.get(url).status_code == status.HTTP_404_NOT_FOUND

    def test_put_missing(self, authenticated_client, payload):
        response = authenticated_client.put('/api/events/missing/', payload, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestEventListing:
    """Test the grouped admin listing."""

    def test_grouped_by_start_date(self, authenticated_client, payload):
        authenticated_client.post('/api/events/', payload, format='json')
        authenticated_client.post('/api/events/', {**payload, 'date': '2000-01-01', 'endDate': '', 'multiDay': False, 'subEvents': []}, format='json')

        response = authenticated_client.get('/api/events/')

        assert response.status_code == status.HTTP_200_OK
        assert [g['date'] for g in response.data] == ['2099-05-01', '2000-01-01']

    def test_status_filter(self, authenticated_client, payload):
        authenticated_client.post('/api/events/', payload, format='json')
        authenticated_client.post('/api/events/', {**payload, 'date': '2000-01-01', 'endDate': '', 'multiDay': False, 'subEvents': []}, format='json')

        response = authenticated_client.get('/api/events/?status=completed')

        assert [g['date'] for g in response.data] == ['2000-01-01']

    def test_bad_status(self, authenticated_client):
        response = authenticated_client.get('/api/events/?status=cancelled')

        assert response.status_code == status.HTTP_400_BAD_REQUEST


# ============================================================================
# Public Tests
# ============================================================================

@pytest.mark.django_db
class TestPublicEvents:
    """Test the public timeline."""

    def test_featured_and_groups(self, api_client, authenticated_client, payload):
        authenticated_client.post('/api/events/', payload, format='json')
        authenticated_client.post('/api/events/', {**payload, 'title': 'Bake Sale', 'date': '2099-03-10', 'endDate': '', 'multiDay': False, 'featured': False, 'subEvents': []}, format='json')

        response = api_client.get('/api/events/public/')

        assert response.status_code == status.HTTP_200_OK
        assert [e['title'] for e in response.data['featured']] == ['Robotics Showcase']
        assert [g['label'] for g in response.data['groups']] == ['March 2099']
        assert response.data['groups'][0]['events'][0]['title'] == 'Bake Sale'

    def test_ticker_is_public(self, api_client):
        default_repository.create(EVENTS, {'title': 'Alumni Night', 'date': '2099-05-01'})
        default_repository.create(EVENTS, {'title': 'Old Fair', 'date': '2001-05-01'})

        response = api_client.get('/api/events/ticker/')

        assert response.status_code == status.HTTP_200_OK
        assert response.data == [
            {'id': response.data[0]['id'], 'title': 'Alumni Night', 'date': '2099-05-01', 'label': 'May 1'},
        ]
