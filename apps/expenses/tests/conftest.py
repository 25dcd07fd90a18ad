from decimal import Decimal

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.partners.models import Partner
from apps.expenses.models import ExpenseCategory
from apps.expenses.services import create_expense


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def partner(db):
    return Partner.objects.create_user(
        email='partner@example.com',
        password='TestPass123!',
        full_name='Test Partner',
    )


@pytest.fixture
def authenticated_client(api_client, partner):
    """Return an authenticated API client using JWT."""
    refresh = RefreshToken.for_user(partner)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


@pytest.fixture
def rent(db):
    """Seeded by migration."""
    return ExpenseCategory.objects.get(name='Rent')


@pytest.fixture
def expense(rent, partner):
    return create_expense(
        category_id=rent.id,
        amount=Decimal('1200.00'),
        description='June rent',
        created_by=partner,
    )


@pytest.fixture
def other_partner(db):
    return Partner.objects.create_user(
        email='other@example.com',
        password='TestPass123!',
        full_name='Other Partner',
    )


@pytest.fixture
def other_client(other_partner):
    """API client authenticated as a partner who did not record the expense."""
    client = APIClient()
    refresh = RefreshToken.for_user(other_partner)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client
