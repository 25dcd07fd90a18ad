from decimal import Decimal
from uuid import UUID

from django.db.models import Q

from apps.partners.models import Partner
from apps.ledger.models import PairwiseBalance

from .balance_sinks import as_uuid, canonical_pair
from .exceptions import NotFoundError, SamePartnerError


def get_balance(*, partner_id: UUID) -> Decimal:
    """Stored aggregate balance of one partner."""
    try:
        return Partner.objects.values_list('balance', flat=True).get(pk=partner_id)
    except Partner.DoesNotExist:
        raise NotFoundError(f"Partner {partner_id} not found")


def get_pairwise_balance(*, partner_a_id: UUID, partner_b_id: UUID) -> Decimal:
    """
    Stored personal balance of an unordered pair.

    Always the canonical value (lower id's side), whatever order the
    partners are passed in. Zero when the pair has no approved history.
    """
    if as_uuid(partner_a_id) == as_uuid(partner_b_id):
        raise SamePartnerError("A pairwise balance needs two different partners")
    lo, hi = canonical_pair(partner_a_id, partner_b_id)
    amount = (
        PairwiseBalance.objects.filter(partner_a_id=lo, partner_b_id=hi)
        .values_list('balance_amount', flat=True)
        .first()
    )
    return amount if amount is not None else Decimal('0.00')


def get_partner_pairwise_balances(*, partner):
    """
    Personal balances between ``partner`` and each counterparty.

    Values are from ``partner``'s point of view: positive means they
    have received more than they sent.
    """
    rows = PairwiseBalance.objects.filter(
        Q(partner_a=partner) | Q(partner_b=partner)
    ).select_related('partner_a', 'partner_b')

    balances = []
    for row in rows:
        counterparty = row.partner_b if row.partner_a_id == partner.pk else row.partner_a
        balances.append({
            'counterparty': counterparty,
            'balance': row.balance_for(partner.pk),
            'last_updated': row.last_updated,
        })
    return balances
