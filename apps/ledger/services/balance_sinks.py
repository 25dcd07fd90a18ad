"""
Balance projections that approved transaction amounts land in.

Business transfers move the partners' aggregate balances; personal
transfers move the pairwise balance of the two partners involved.
"""
from collections import defaultdict
from decimal import Decimal
import logging
import uuid

from django.db.models import F
from django.utils import timezone

from apps.partners.models import Partner
from apps.ledger.models import PairwiseBalance

logger = logging.getLogger(__name__)


def canonical_pair(partner_x_id, partner_y_id):
    """Return the pair ordered as stored: (lower id, higher id)."""
    x, y = as_uuid(partner_x_id), as_uuid(partner_y_id)
    return (x, y) if x < y else (y, x)


def pairwise_delta(from_partner_id, to_partner_id, amount: Decimal) -> Decimal:
    """
    Signed change to the stored pair balance for one transfer.

    Negative when the lower id is the sender, positive otherwise.
    """
    lo, _ = canonical_pair(from_partner_id, to_partner_id)
    if as_uuid(from_partner_id) == lo:
        return -amount
    return amount


def adjust_partner_balances(deltas) -> None:
    """
    Add each delta to the partner's stored balance.

    Rows are locked in primary-key order before the F() updates so two
    concurrent adjustments touching the same partners cannot deadlock.
    """
    ids = sorted(pid for pid, delta in deltas.items() if delta)
    if not ids:
        return

    list(
        Partner.objects.select_for_update()
        .filter(pk__in=ids)
        .order_by('pk')
        .values_list('pk', flat=True)
    )
    now = timezone.now()
    for pid in ids:
        Partner.objects.filter(pk=pid).update(
            balance=F('balance') + deltas[pid],
            updated_at=now,
        )
        logger.debug("Partner %s balance %+.2f", pid, deltas[pid])


class BalanceSink:
    """Where an approved transfer's amount is booked."""

    def apply(self, *, from_partner_id, to_partner_id, amount: Decimal) -> None:
        raise NotImplementedError

    def reverse(self, *, from_partner_id, to_partner_id, amount: Decimal) -> None:
        self.apply(
            from_partner_id=from_partner_id,
            to_partner_id=to_partner_id,
            amount=-amount,
        )


class AggregateBalanceSink(BalanceSink):
    """Sender's balance goes down, receiver's goes up."""

    def apply(self, *, from_partner_id, to_partner_id, amount: Decimal) -> None:
        deltas = defaultdict(Decimal)
        deltas[as_uuid(from_partner_id)] -= amount
        deltas[as_uuid(to_partner_id)] += amount
        adjust_partner_balances(deltas)


class PairwiseBalanceSink(BalanceSink):
    """Upserts the pair row and applies the signed delta."""

    def apply(self, *, from_partner_id, to_partner_id, amount: Decimal) -> None:
        lo, hi = canonical_pair(from_partner_id, to_partner_id)
        delta = pairwise_delta(from_partner_id, to_partner_id, amount)

        row, created = PairwiseBalance.objects.select_for_update().get_or_create(
            partner_a_id=lo,
            partner_b_id=hi,
        )
        PairwiseBalance.objects.filter(pk=row.pk).update(
            balance_amount=F('balance_amount') + delta,
            last_updated=timezone.now(),
        )
        logger.debug("Pair %s/%s balance %+.2f%s", lo, hi, delta, " (new)" if created else "")


def as_uuid(value):
    """Normalise a partner id given as UUID or string."""
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))
