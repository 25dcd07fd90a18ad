import pytest
from decimal import Decimal
from datetime import date
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.partners.models import Partner
from apps.expenses.models import ExpenseCategory
from apps.expenses.services import create_expense
from apps.ledger.services import (
    BUSINESS,
    PERSONAL,
    create_sale,
    create_transaction,
    approve_transaction,
)


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


# =============================================================================
# Partners
# =============================================================================

@pytest.fixture
def alice(db):
    return Partner.objects.create_user(
        email='alice@example.com',
        password='TestPass123!',
        full_name='Alice',
    )


@pytest.fixture
def bob(db):
    return Partner.objects.create_user(
        email='bob@example.com',
        password='TestPass123!',
        full_name='Bob',
    )


@pytest.fixture
def alice_client(api_client, alice):
    """Return an API client authenticated as Alice."""
    refresh = RefreshToken.for_user(alice)
    api_client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return api_client


# =============================================================================
# Ledger data
# =============================================================================

@pytest.fixture
def june_ledger(alice, bob):
    """
    Two June sales, two June expenses and one July entry of each.

    June: sales 1500.00 (online 1000.00, cash 500.00), expenses 1400.00.
    Balances after everything: Alice 500.00, Bob 1100.00.
    """
    create_sale(
        date=date(2025, 6, 1),
        online_amount=Decimal('300.00'),
        cash_amount=Decimal('200.00'),
        partner_id=alice.id,
    )
    create_sale(
        date=date(2025, 6, 15),
        online_amount=Decimal('700.00'),
        cash_amount=Decimal('300.00'),
        partner_id=bob.id,
    )
    create_sale(
        date=date(2025, 7, 1),
        online_amount=Decimal('100.00'),
        cash_amount=Decimal('0.00'),
        partner_id=alice.id,
    )

    rent = ExpenseCategory.objects.get(name='Rent')
    utilities = ExpenseCategory.objects.get(name='Utilities')
    create_expense(
        category_id=rent.id,
        amount=Decimal('1200.00'),
        description='June rent',
        expense_date=date(2025, 6, 5),
        created_by=alice,
    )
    create_expense(
        category_id=utilities.id,
        amount=Decimal('200.00'),
        description='Electricity',
        expense_date=date(2025, 6, 10),
        created_by=bob,
    )
    create_expense(
        category_id=utilities.id,
        amount=Decimal('50.00'),
        description='Internet',
        expense_date=date(2025, 7, 2),
        created_by=bob,
    )

    business = create_transaction(
        from_partner_id=alice.id,
        to_partner_id=bob.id,
        amount=Decimal('100.00'),
        domain=BUSINESS,
        transaction_date=date(2025, 6, 20),
    )
    approve_transaction(transaction_id=business.id, domain=BUSINESS, actor_id=bob.id)
    create_transaction(
        from_partner_id=alice.id,
        to_partner_id=bob.id,
        amount=Decimal('40.00'),
        domain=PERSONAL,
        transaction_date=date(2025, 6, 21),
    )
