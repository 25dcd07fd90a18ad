"""
Balance reconciliation engine.

Rebuilds every stored balance from history:

- partner balance = sales attributed to the partner
  + approved business transfers received
  - approved business transfers sent
- pairwise balance = sum of signed deltas of approved personal transfers

The derivation is also exposed read-only so drift can be inspected
without writing anything.
"""
from collections import defaultdict
from decimal import Decimal
import logging

from django.db.models import Sum
from django.utils import timezone

from apps.partners.models import Partner
from apps.ledger.models import (
    BusinessTransaction,
    PairwiseBalance,
    PersonalTransaction,
    SaleEntry,
    TransactionStatus,
)

from .balance_sinks import canonical_pair, pairwise_delta
from .operations import ledger_operation

logger = logging.getLogger(__name__)

ZERO = Decimal('0.00')


def compute_expected_balances():
    """Map of partner id -> balance derived from sales and approved business transfers."""
    expected = {pk: ZERO for pk in Partner.objects.values_list('pk', flat=True)}

    sales = (
        SaleEntry.objects.filter(partner__isnull=False)
        .values('partner')
        .annotate(total=Sum('amount'))
    )
    for row in sales:
        expected[row['partner']] = expected.get(row['partner'], ZERO) + row['total']

    approved = BusinessTransaction.objects.filter(status=TransactionStatus.APPROVED)
    for row in approved.values('to_partner').annotate(total=Sum('amount')):
        expected[row['to_partner']] = expected.get(row['to_partner'], ZERO) + row['total']
    for row in approved.values('from_partner').annotate(total=Sum('amount')):
        expected[row['from_partner']] = expected.get(row['from_partner'], ZERO) - row['total']

    return expected


def compute_expected_pairwise_balances():
    """Map of (lower id, higher id) -> balance derived from approved personal transfers."""
    expected = defaultdict(lambda: ZERO)
    approved = PersonalTransaction.objects.filter(
        status=TransactionStatus.APPROVED
    ).values_list('from_partner_id', 'to_partner_id', 'amount')

    for from_id, to_id, amount in approved:
        expected[canonical_pair(from_id, to_id)] += pairwise_delta(from_id, to_id, amount)
    return dict(expected)


def find_balance_drift():
    """
    Compare stored balances with the derived ones.

    Returns:
        dict with 'partners' and 'pairs' lists; each item holds the
        stored value, the expected value and their difference. Empty
        lists mean the ledger is consistent.
    """
    expected = compute_expected_balances()
    partners = []
    for pk, email, stored in Partner.objects.values_list('pk', 'email', 'balance'):
        should_be = expected.get(pk, ZERO)
        if stored != should_be:
            partners.append({
                'partner_id': pk,
                'email': email,
                'stored': stored,
                'expected': should_be,
                'drift': stored - should_be,
            })

    expected_pairs = compute_expected_pairwise_balances()
    pairs = []
    stored_pairs = {
        (a, b): amount
        for a, b, amount in PairwiseBalance.objects.values_list('partner_a_id', 'partner_b_id', 'balance_amount')
    }
    for key in sorted(set(stored_pairs) | set(expected_pairs)):
        stored = stored_pairs.get(key, ZERO)
        should_be = expected_pairs.get(key, ZERO)
        if stored != should_be:
            pairs.append({
                'partner_a_id': key[0],
                'partner_b_id': key[1],
                'stored': stored,
                'expected': should_be,
                'drift': stored - should_be,
            })

    return {'partners': partners, 'pairs': pairs}


@ledger_operation
def reconcile_all_balances():
    """
    Rewrite every stored balance from history.

    Idempotent. Runs in one atomic block holding locks on all partner
    and pair rows, so no balance change can interleave with it.

    Returns:
        dict report with the number of partners checked and the
        corrections applied to partner and pairwise balances
    """
    partners = list(Partner.objects.select_for_update().order_by('pk'))
    stored_pairs = {
        (row.partner_a_id, row.partner_b_id): row
        for row in PairwiseBalance.objects.select_for_update().order_by('partner_a', 'partner_b')
    }

    expected = compute_expected_balances()
    now = timezone.now()

    partner_corrections = []
    for partner in partners:
        should_be = expected.get(partner.pk, ZERO)
        if partner.balance != should_be:
            partner_corrections.append({
                'partner_id': partner.pk,
                'email': partner.email,
                'previous': partner.balance,
                'corrected': should_be,
            })
            Partner.objects.filter(pk=partner.pk).update(balance=should_be, updated_at=now)

    expected_pairs = compute_expected_pairwise_balances()
    pairwise_corrections = []
    for key in sorted(set(stored_pairs) | set(expected_pairs)):
        should_be = expected_pairs.get(key, ZERO)
        row = stored_pairs.get(key)
        previous = row.balance_amount if row is not None else ZERO
        if row is not None and previous == should_be:
            continue
        if row is None:
            if should_be == ZERO:
                continue
            PairwiseBalance.objects.create(partner_a_id=key[0], partner_b_id=key[1], balance_amount=should_be)
        else:
            PairwiseBalance.objects.filter(pk=row.pk).update(balance_amount=should_be, last_updated=now)
        pairwise_corrections.append({
            'partner_a_id': key[0],
            'partner_b_id': key[1],
            'previous': previous,
            'corrected': should_be,
        })

    for item in partner_corrections:
        logger.warning(
            "Balance drift corrected for %s: %s -> %s",
            item['email'], item['previous'], item['corrected'],
        )
    logger.info(
        "Reconciled %d partners: %d partner and %d pairwise corrections",
        len(partners), len(partner_corrections), len(pairwise_corrections),
    )

    return {
        'partners_checked': len(partners),
        'partner_corrections': partner_corrections,
        'pairwise_corrections': pairwise_corrections,
    }
