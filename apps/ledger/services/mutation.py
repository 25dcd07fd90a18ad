"""
Balance mutation engine.

Services hand over immutable snapshots of a record before and after a
change (None for insert or delete) and the engine books the difference.
"""
from collections import defaultdict
from decimal import Decimal
from typing import NamedTuple, Optional
from uuid import UUID

from apps.ledger.models import TransactionStatus

from .balance_sinks import BalanceSink, adjust_partner_balances, as_uuid


class SaleState(NamedTuple):
    partner_id: Optional[UUID]
    amount: Decimal


class TransactionState(NamedTuple):
    from_partner_id: UUID
    to_partner_id: UUID
    amount: Decimal
    status: str

    @property
    def is_approved(self):
        return self.status == TransactionStatus.APPROVED


def sale_state(sale) -> SaleState:
    partner_id = as_uuid(sale.partner_id) if sale.partner_id is not None else None
    return SaleState(partner_id=partner_id, amount=sale.amount)


def transaction_state(txn) -> TransactionState:
    return TransactionState(
        from_partner_id=as_uuid(txn.from_partner_id),
        to_partner_id=as_uuid(txn.to_partner_id),
        amount=txn.amount,
        status=txn.status,
    )


def apply_sale_change(old: Optional[SaleState], new: Optional[SaleState]) -> None:
    """Move the old contribution out and the new one in."""
    if old == new:
        return

    deltas = defaultdict(Decimal)
    if old is not None and old.partner_id is not None:
        deltas[old.partner_id] -= old.amount
    if new is not None and new.partner_id is not None:
        deltas[new.partner_id] += new.amount
    adjust_partner_balances(deltas)


def apply_transaction_change(
    sink: BalanceSink,
    old: Optional[TransactionState],
    new: Optional[TransactionState],
) -> None:
    """
    Book the balance effect of a transaction change.

    Only approved rows count. Leaving approved reverses the old amount,
    entering approved applies the new one, and an approved row whose
    amount or parties changed is reversed then re-applied.
    """
    was_approved = old is not None and old.is_approved
    now_approved = new is not None and new.is_approved

    if was_approved and now_approved and old[:3] == new[:3]:
        return

    if was_approved:
        sink.reverse(
            from_partner_id=old.from_partner_id,
            to_partner_id=old.to_partner_id,
            amount=old.amount,
        )
    if now_approved:
        sink.apply(
            from_partner_id=new.from_partner_id,
            to_partner_id=new.to_partner_id,
            amount=new.amount,
        )
