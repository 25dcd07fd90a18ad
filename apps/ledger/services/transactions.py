from decimal import Decimal
import logging
from uuid import UUID

from django.db.models import Q

from apps.ledger.models import PersonalTransactionType, TransactionStatus

from .approval import reset_to_pending
from .balance_sinks import as_uuid
from .domains import PERSONAL, balance_sink, get_active_partner, lock_transaction, transaction_model
from .exceptions import (
    InvalidAmountError,
    InvalidStateError,
    NotFoundError,
    NotPartyError,
    SamePartnerError,
)
from .mutation import apply_transaction_change, transaction_state
from .operations import ledger_operation

logger = logging.getLogger(__name__)


def _validate_amount(amount: Decimal) -> None:
    if amount is None or amount <= 0:
        raise InvalidAmountError("Amount must be greater than zero")


@ledger_operation
def create_transaction(
    *,
    from_partner_id: UUID,
    to_partner_id: UUID,
    amount: Decimal,
    domain: str,
    description: str = '',
    transaction_date=None,
    transaction_type: str = None,
    category: str = None,
    recurring_rule=None,
):
    """
    Record a transfer between two partners.

    The transaction starts out pending and does not touch any balance
    until the receiver approves it.

    Raises:
        SamePartnerError: If sender and receiver are the same
        InvalidAmountError: If amount is not positive
        NotFoundError: If either partner doesn't exist
    """
    if as_uuid(from_partner_id) == as_uuid(to_partner_id):
        raise SamePartnerError("Cannot create a transaction to yourself")
    _validate_amount(amount)

    model = transaction_model(domain)
    get_active_partner(from_partner_id)
    get_active_partner(to_partner_id)

    fields = {
        'from_partner_id': from_partner_id,
        'to_partner_id': to_partner_id,
        'amount': amount,
        'description': description or '',
        'status': TransactionStatus.PENDING,
    }
    if transaction_date is not None:
        fields['transaction_date'] = transaction_date
    if domain == PERSONAL:
        fields['transaction_type'] = transaction_type or PersonalTransactionType.TRANSFER
        fields['category'] = category or 'general'
        fields['recurring_rule'] = recurring_rule

    txn = model.objects.create(**fields)

    logger.info(
        "%s transaction %s created: %s -> %s, %s",
        domain.title(), txn.id, from_partner_id, to_partner_id, amount,
    )
    return txn


@ledger_operation
def update_transaction(
    *,
    transaction_id: UUID,
    domain: str,
    actor_id: UUID,
    amount: Decimal = None,
    description: str = None,
    transaction_date=None,
):
    """
    Edit a transaction.

    A pending transaction can only be edited by its sender and stays
    pending. Editing an approved transaction is a correction: either
    party may do it, the amount is reversed and the transaction goes
    back to pending for the receiver to approve again. Rejected
    transactions cannot be edited.

    Raises:
        NotFoundError: If the transaction doesn't exist
        NotPartyError: If actor may not edit this transaction
        InvalidStateError: If the transaction was rejected
        InvalidAmountError: If the new amount is not positive
    """
    txn = lock_transaction(domain, transaction_id)

    if not txn.involves(as_uuid(actor_id)):
        raise NotPartyError("You are not a party to this transaction")
    if txn.status == TransactionStatus.REJECTED:
        raise InvalidStateError("Rejected transactions cannot be edited")
    if txn.status == TransactionStatus.PENDING and txn.from_partner_id != as_uuid(actor_id):
        raise NotPartyError("Only the sender can edit a pending transaction")
    if amount is not None:
        _validate_amount(amount)

    old = transaction_state(txn)

    if amount is not None:
        txn.amount = amount
    if description is not None:
        txn.description = description
    if transaction_date is not None:
        txn.transaction_date = transaction_date
    if txn.status == TransactionStatus.APPROVED:
        reset_to_pending(txn)
        logger.info("%s transaction %s reset to pending after edit", domain.title(), txn.id)

    txn.save()

    apply_transaction_change(balance_sink(domain), old, transaction_state(txn))
    return txn


@ledger_operation
def delete_transaction(*, transaction_id: UUID, domain: str, actor_id: UUID = None) -> None:
    """
    Delete a transaction, reversing its amount if it was approved.

    When ``actor_id`` is given it must be one of the two partners.
    """
    txn = lock_transaction(domain, transaction_id)

    if actor_id is not None and not txn.involves(as_uuid(actor_id)):
        raise NotPartyError("You are not a party to this transaction")

    old = transaction_state(txn)
    txn.delete()

    apply_transaction_change(balance_sink(domain), old, None)

    logger.info("%s transaction %s deleted", domain.title(), transaction_id)


def get_transaction(*, transaction_id: UUID, domain: str):
    model = transaction_model(domain)
    try:
        return model.objects.select_related('from_partner', 'to_partner', 'approved_by').get(pk=transaction_id)
    except model.DoesNotExist:
        raise NotFoundError(f"{domain.title()} transaction {transaction_id} not found")


def list_pending_approvals(*, partner, domain: str):
    """Transactions waiting for this partner's decision, newest first."""
    model = transaction_model(domain)
    return (
        model.objects.filter(to_partner=partner, status=TransactionStatus.PENDING)
        .select_related('from_partner', 'to_partner')
        .order_by('-created_at')
    )


def get_partner_transactions(*, partner, domain: str, status: str = None):
    """All transactions the partner sent or received."""
    model = transaction_model(domain)
    qs = model.objects.filter(
        Q(from_partner=partner) | Q(to_partner=partner)
    ).select_related('from_partner', 'to_partner', 'approved_by')
    if status:
        qs = qs.filter(status=status)
    return qs
