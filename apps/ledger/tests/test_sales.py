import uuid
from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import patch

import pytest
from django.db import DatabaseError
from apps.ledger.models import SaleEntry
from apps.ledger.services import (
    create_sale,
    update_sale,
    delete_sale,
    get_sale,
    DuplicateDateError,
    InvalidAmountError,
    NotFoundError,
    NotPartyError,
    StorageError,
)


def _balance(partner):
    partner.refresh_from_db()
    return partner.balance


# =============================================================================
# create_sale
# =============================================================================

@pytest.mark.django_db
class TestCreateSale:

    def test_credits_partner(self, partner_a, sale_day):
        sale = create_sale(
            date=sale_day,
            partner_id=partner_a.id,
            online_amount=Decimal('500.00'),
            cash_amount=Decimal('500.00'),
        )

        assert sale.amount == Decimal('1000.00')
        assert _balance(partner_a) == Decimal('1000.00')

    def test_without_partner_moves_nothing(self, partner_a, sale_day):
        sale = create_sale(
            date=sale_day,
            online_amount=Decimal('100.00'),
            cash_amount=Decimal('0.00'),
        )

        assert sale.partner_id is None
        assert _balance(partner_a) == Decimal('0.00')

    def test_duplicate_date_rejected_without_trace(self, partner_a, partner_b, sale_day):
        create_sale(
            date=sale_day,
            partner_id=partner_a.id,
            online_amount=Decimal('500.00'),
            cash_amount=Decimal('500.00'),
        )

        with pytest.raises(DuplicateDateError):
            create_sale(
                date=sale_day,
                partner_id=partner_b.id,
                online_amount=Decimal('200.00'),
                cash_amount=Decimal('0.00'),
            )

        assert SaleEntry.objects.count() == 1
        assert _balance(partner_a) == Decimal('1000.00')
        assert _balance(partner_b) == Decimal('0.00')

    def test_duplicate_date_caught_at_insert(self, partner_a, partner_b, sale_day):
        """Unique constraint still maps to DuplicateDateError if the pre-check is raced."""
        create_sale(
            date=sale_day,
            partner_id=partner_a.id,
            online_amount=Decimal('10.00'),
            cash_amount=Decimal('0.00'),
        )

        with patch('apps.ledger.services.sales._ensure_date_free'):
            with pytest.raises(DuplicateDateError):
                create_sale(
                    date=sale_day,
                    partner_id=partner_b.id,
                    online_amount=Decimal('20.00'),
                    cash_amount=Decimal('0.00'),
                )

        assert SaleEntry.objects.count() == 1
        assert _balance(partner_b) == Decimal('0.00')

    def test_negative_amount_rejected(self, partner_a, sale_day):
        with pytest.raises(InvalidAmountError):
            create_sale(
                date=sale_day,
                partner_id=partner_a.id,
                online_amount=Decimal('-1.00'),
                cash_amount=Decimal('0.00'),
            )
        assert SaleEntry.objects.count() == 0

    def test_unknown_partner(self, db, sale_day):
        with pytest.raises(NotFoundError):
            create_sale(
                date=sale_day,
                partner_id=uuid.uuid4(),
                online_amount=Decimal('1.00'),
                cash_amount=Decimal('0.00'),
            )

    def test_storage_failure_rolls_back_sale(self, partner_a, sale_day):
        with patch(
            'apps.ledger.services.sales.apply_sale_change',
            side_effect=DatabaseError('disk full'),
        ):
            with pytest.raises(StorageError):
                create_sale(
                    date=sale_day,
                    partner_id=partner_a.id,
                    online_amount=Decimal('100.00'),
                    cash_amount=Decimal('0.00'),
                )

        assert SaleEntry.objects.count() == 0
        assert _balance(partner_a) == Decimal('0.00')


# =============================================================================
# update_sale / delete_sale
# =============================================================================

@pytest.mark.django_db
class TestUpdateDeleteSale:

    @pytest.fixture
    def sale(self, partner_a, sale_day):
        return create_sale(
            date=sale_day,
            partner_id=partner_a.id,
            online_amount=Decimal('500.00'),
            cash_amount=Decimal('500.00'),
        )

    def test_amount_change_moves_difference(self, sale, partner_a):
        update_sale(sale_id=sale.id, cash_amount=Decimal('200.00'))

        assert _balance(partner_a) == Decimal('700.00')
        sale.refresh_from_db()
        assert sale.amount == Decimal('700.00')

    def test_partner_change_moves_whole_amount(self, sale, partner_a, partner_b):
        update_sale(sale_id=sale.id, partner_id=partner_b.id)

        assert _balance(partner_a) == Decimal('0.00')
        assert _balance(partner_b) == Decimal('1000.00')

    def test_clearing_partner_reverses(self, sale, partner_a):
        update_sale(sale_id=sale.id, partner_id=None)

        assert _balance(partner_a) == Decimal('0.00')

    def test_notes_only_is_noop(self, sale, partner_a):
        update_sale(sale_id=sale.id, notes='rainy day')

        assert _balance(partner_a) == Decimal('1000.00')

    def test_move_to_taken_date(self, sale, partner_a, sale_day):
        other = create_sale(
            date=sale_day + timedelta(days=1),
            partner_id=partner_a.id,
            online_amount=Decimal('1.00'),
            cash_amount=Decimal('0.00'),
        )

        with pytest.raises(DuplicateDateError):
            update_sale(sale_id=other.id, date=sale_day)

        other.refresh_from_db()
        assert other.date == sale_day + timedelta(days=1)

    def test_unknown_field(self, sale):
        with pytest.raises(TypeError):
            update_sale(sale_id=sale.id, amount=Decimal('5.00'))

    def test_delete_reverses(self, sale, partner_a):
        delete_sale(sale_id=sale.id)

        assert _balance(partner_a) == Decimal('0.00')
        assert not SaleEntry.objects.filter(pk=sale.id).exists()

    def test_create_then_delete_leaves_balances_unchanged(self, partner_a, partner_b):
        before = (_balance(partner_a), _balance(partner_b))

        sale = create_sale(
            date=date(2025, 1, 15),
            partner_id=partner_b.id,
            online_amount=Decimal('12.34'),
            cash_amount=Decimal('56.78'),
        )
        delete_sale(sale_id=sale.id)

        assert (_balance(partner_a), _balance(partner_b)) == before

    def test_missing_sale(self, db):
        with pytest.raises(NotFoundError):
            get_sale(sale_id=uuid.uuid4())
        with pytest.raises(NotFoundError):
            delete_sale(sale_id=uuid.uuid4())


# =============================================================================
# Ownership
# =============================================================================

@pytest.mark.django_db
class TestSaleOwnership:

    @pytest.fixture
    def sale(self, partner_a, sale_day):
        return create_sale(
            date=sale_day,
            partner_id=partner_a.id,
            online_amount=Decimal('600.00'),
            cash_amount=Decimal('400.00'),
            created_by=partner_a,
        )

    def test_creator_can_update_and_delete(self, sale, partner_a):
        update_sale(sale_id=sale.id, actor_id=partner_a.id, cash_amount=Decimal('0.00'))
        assert _balance(partner_a) == Decimal('600.00')

        delete_sale(sale_id=sale.id, actor_id=partner_a.id)
        assert _balance(partner_a) == Decimal('0.00')

    def test_other_partner_cannot_move_sale_to_themselves(self, sale, partner_a, partner_c):
        with pytest.raises(NotPartyError):
            update_sale(sale_id=sale.id, actor_id=partner_c.id, partner_id=partner_c.id)

        assert _balance(partner_a) == Decimal('1000.00')
        assert _balance(partner_c) == Decimal('0.00')
        sale.refresh_from_db()
        assert sale.partner_id == partner_a.id

    def test_other_partner_cannot_delete(self, sale, partner_a, partner_b):
        with pytest.raises(NotPartyError):
            delete_sale(sale_id=sale.id, actor_id=partner_b.id)

        assert _balance(partner_a) == Decimal('1000.00')
        assert SaleEntry.objects.filter(pk=sale.id).exists()

    def test_sale_without_creator_is_locked_for_partners(self, partner_a, sale_day):
        sale = create_sale(
            date=sale_day,
            partner_id=partner_a.id,
            online_amount=Decimal('10.00'),
            cash_amount=Decimal('0.00'),
        )

        with pytest.raises(NotPartyError):
            delete_sale(sale_id=sale.id, actor_id=partner_a.id)
