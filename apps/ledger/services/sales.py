from decimal import Decimal
import logging
from uuid import UUID

from django.db import IntegrityError, transaction

from apps.ledger.models import SaleEntry

from .balance_sinks import as_uuid
from .domains import get_active_partner
from .exceptions import DuplicateDateError, InvalidAmountError, NotFoundError, NotPartyError
from .mutation import apply_sale_change, sale_state
from .operations import ledger_operation

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = {'date', 'partner_id', 'online_amount', 'cash_amount', 'notes'}


def _validate_amounts(online_amount: Decimal, cash_amount: Decimal) -> None:
    if online_amount is None or cash_amount is None:
        raise InvalidAmountError("Online and cash amounts are required")
    if online_amount < 0 or cash_amount < 0:
        raise InvalidAmountError("Sale amounts cannot be negative")


def _ensure_date_free(date, exclude_id=None) -> None:
    taken = SaleEntry.objects.filter(date=date)
    if exclude_id is not None:
        taken = taken.exclude(pk=exclude_id)
    if taken.exists():
        raise DuplicateDateError(f"A sale entry already exists for {date}")


def _ensure_creator(sale: SaleEntry, actor_id) -> None:
    if actor_id is not None and sale.created_by_id != as_uuid(actor_id):
        raise NotPartyError("Only the partner who recorded this sale can change it")


def _save_sale(sale: SaleEntry, **save_kwargs) -> None:
    # Savepoint so a unique-date race leaves the outer block usable
    try:
        with transaction.atomic():
            sale.save(**save_kwargs)
    except IntegrityError as exc:
        raise DuplicateDateError(f"A sale entry already exists for {sale.date}") from exc


@ledger_operation
def create_sale(
    *,
    date,
    online_amount: Decimal,
    cash_amount: Decimal,
    partner_id: UUID = None,
    notes: str = '',
    created_by=None,
) -> SaleEntry:
    """
    Record one day's sales and credit them to the partner.

    Raises:
        InvalidAmountError: If either amount is negative
        DuplicateDateError: If a sale already exists for the date
        NotFoundError: If the partner doesn't exist
    """
    _validate_amounts(online_amount, cash_amount)
    if partner_id is not None:
        get_active_partner(partner_id)
    _ensure_date_free(date)

    sale = SaleEntry(
        date=date,
        partner_id=partner_id,
        online_amount=online_amount,
        cash_amount=cash_amount,
        notes=notes,
        created_by=created_by,
    )
    _save_sale(sale, force_insert=True)

    apply_sale_change(None, sale_state(sale))

    logger.info("Sale %s recorded for %s: %s", sale.id, date, sale.amount)
    return sale


@ledger_operation
def update_sale(*, sale_id: UUID, actor_id: UUID = None, **changes) -> SaleEntry:
    """
    Edit a sale entry and move the balance difference.

    Accepts any of: date, partner_id, online_amount, cash_amount, notes.
    When ``actor_id`` is given it must be the partner who recorded the sale.
    """
    unknown = set(changes) - _UPDATABLE_FIELDS
    if unknown:
        raise TypeError(f"update_sale() got unexpected fields: {', '.join(sorted(unknown))}")

    try:
        sale = SaleEntry.objects.select_for_update().get(pk=sale_id)
    except SaleEntry.DoesNotExist:
        raise NotFoundError(f"Sale entry {sale_id} not found")

    _ensure_creator(sale, actor_id)
    old = sale_state(sale)

    _validate_amounts(
        changes.get('online_amount', sale.online_amount),
        changes.get('cash_amount', sale.cash_amount),
    )
    if changes.get('partner_id') is not None and changes['partner_id'] != sale.partner_id:
        get_active_partner(changes['partner_id'])
    if 'date' in changes and changes['date'] != sale.date:
        _ensure_date_free(changes['date'], exclude_id=sale.pk)

    for field, value in changes.items():
        setattr(sale, field, value)
    _save_sale(sale)

    apply_sale_change(old, sale_state(sale))

    logger.info("Sale %s updated", sale.id)
    return sale


@ledger_operation
def delete_sale(*, sale_id: UUID, actor_id: UUID = None) -> None:
    """
    Delete a sale entry and take its amount back off the partner.

    When ``actor_id`` is given it must be the partner who recorded the sale.
    """
    try:
        sale = SaleEntry.objects.select_for_update().get(pk=sale_id)
    except SaleEntry.DoesNotExist:
        raise NotFoundError(f"Sale entry {sale_id} not found")

    _ensure_creator(sale, actor_id)
    old = sale_state(sale)
    sale.delete()

    apply_sale_change(old, None)

    logger.info("Sale %s deleted", sale_id)


def get_sale(*, sale_id: UUID) -> SaleEntry:
    try:
        return SaleEntry.objects.select_related('partner', 'created_by').get(pk=sale_id)
    except SaleEntry.DoesNotExist:
        raise NotFoundError(f"Sale entry {sale_id} not found")
