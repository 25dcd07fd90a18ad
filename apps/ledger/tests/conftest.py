import uuid
from datetime import date
from decimal import Decimal

import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.partners.models import Partner
from apps.ledger.services import BUSINESS, PERSONAL, create_transaction, approve_transaction


# Fixed ids so pair ordering is known: A < B < C
PARTNER_A_ID = uuid.UUID('00000000-0000-0000-0000-00000000000a')
PARTNER_B_ID = uuid.UUID('00000000-0000-0000-0000-00000000000b')
PARTNER_C_ID = uuid.UUID('00000000-0000-0000-0000-00000000000c')


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def partner_a(db):
    return Partner.objects.create_user(
        id=PARTNER_A_ID,
        email='alice@example.com',
        password='TestPass123!',
        full_name='Alice',
    )


@pytest.fixture
def partner_b(db):
    return Partner.objects.create_user(
        id=PARTNER_B_ID,
        email='bob@example.com',
        password='TestPass123!',
        full_name='Bob',
    )


@pytest.fixture
def partner_c(db):
    return Partner.objects.create_user(
        id=PARTNER_C_ID,
        email='carol@example.com',
        password='TestPass123!',
        full_name='Carol',
    )


@pytest.fixture
def staff_partner(db):
    return Partner.objects.create_user(
        email='staff@example.com',
        password='TestPass123!',
        full_name='Staff',
        is_staff=True,
    )


def _client_for(partner):
    client = APIClient()
    refresh = RefreshToken.for_user(partner)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def client_a(partner_a):
    """API client authenticated as partner A."""
    return _client_for(partner_a)


@pytest.fixture
def client_b(partner_b):
    """API client authenticated as partner B."""
    return _client_for(partner_b)


@pytest.fixture
def client_c(partner_c):
    return _client_for(partner_c)


@pytest.fixture
def staff_client(staff_partner):
    return _client_for(staff_partner)


@pytest.fixture
def sale_day():
    return date(2025, 6, 1)


@pytest.fixture
def pending_business(partner_a, partner_b):
    """Business transfer A -> B of 300, pending."""
    return create_transaction(
        from_partner_id=partner_a.id,
        to_partner_id=partner_b.id,
        amount=Decimal('300.00'),
        domain=BUSINESS,
        description='Stock purchase',
    )


@pytest.fixture
def approved_business(pending_business, partner_b):
    return approve_transaction(
        transaction_id=pending_business.id,
        domain=BUSINESS,
        actor_id=partner_b.id,
    )


@pytest.fixture
def pending_personal(partner_a, partner_b):
    """Personal transfer A -> B of 50, pending."""
    return create_transaction(
        from_partner_id=partner_a.id,
        to_partner_id=partner_b.id,
        amount=Decimal('50.00'),
        domain=PERSONAL,
        transaction_type='lend',
    )
