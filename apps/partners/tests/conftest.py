import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.partners.models import Partner


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def partner(db):
    """Create and return a test partner."""
    return Partner.objects.create_user(
        email='partner@example.com',
        password='TestPass123!',
        full_name='Test Partner',
    )


@pytest.fixture
def other_partner(db):
    """Create and return a second partner."""
    return Partner.objects.create_user(
        email='other@example.com',
        password='OtherPass123!',
        full_name='Other Partner',
    )


@pytest.fixture
def inactive_partner(db):
    """Create and return a deactivated partner."""
    return Partner.objects.create_user(
        email='inactive@example.com',
        password='TestPass123!',
        full_name='Inactive Partner',
        is_active=False,
    )


@pytest.fixture
def authenticated_client(api_client, partner):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(partner)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client
