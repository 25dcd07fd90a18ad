"""
Approval state machine for business and personal transactions.

    pending  --approve (receiver)-->  approved
    pending  --reject  (receiver)-->  rejected
    approved --edit    (either)  -->  pending

Rejected is terminal. Entering or leaving approved books or reverses
the amount exactly once through the domain's balance sink.
"""
import logging
from uuid import UUID

from django.utils import timezone

from apps.ledger.models import TransactionStatus

from .balance_sinks import as_uuid
from .domains import balance_sink, lock_transaction
from .exceptions import InvalidStateError, NotReceiverError
from .mutation import apply_transaction_change, transaction_state
from .operations import ledger_operation

logger = logging.getLogger(__name__)


def _ensure_receiver(txn, actor_id) -> None:
    if txn.to_partner_id != as_uuid(actor_id):
        raise NotReceiverError("Only the receiving partner can approve or reject this transaction")


def _ensure_pending(txn) -> None:
    if txn.status != TransactionStatus.PENDING:
        raise InvalidStateError(f"Transaction is already {txn.status}")


def reset_to_pending(txn) -> None:
    """Clear approval metadata after a correction edit."""
    txn.status = TransactionStatus.PENDING
    txn.approved_by = None
    txn.approved_at = None
    txn.rejection_reason = ''


@ledger_operation
def approve_transaction(*, transaction_id: UUID, domain: str, actor_id: UUID):
    """
    Approve a pending transaction and book its amount.

    Raises:
        NotFoundError: If the transaction doesn't exist
        NotReceiverError: If actor is not the receiving partner
        InvalidStateError: If the transaction is not pending
    """
    txn = lock_transaction(domain, transaction_id)
    _ensure_receiver(txn, actor_id)
    _ensure_pending(txn)

    old = transaction_state(txn)

    txn.status = TransactionStatus.APPROVED
    txn.approved_by_id = txn.to_partner_id
    txn.approved_at = timezone.now()
    txn.rejection_reason = ''
    txn.save(update_fields=['status', 'approved_by', 'approved_at', 'rejection_reason', 'updated_at'])

    apply_transaction_change(balance_sink(domain), old, transaction_state(txn))

    logger.info("%s transaction %s approved by %s", domain.title(), txn.id, actor_id)
    return txn


@ledger_operation
def reject_transaction(*, transaction_id: UUID, domain: str, actor_id: UUID, reason: str = ''):
    """
    Reject a pending transaction. Balances are untouched.

    Raises:
        NotFoundError: If the transaction doesn't exist
        NotReceiverError: If actor is not the receiving partner
        InvalidStateError: If the transaction is not pending
    """
    txn = lock_transaction(domain, transaction_id)
    _ensure_receiver(txn, actor_id)
    _ensure_pending(txn)

    txn.status = TransactionStatus.REJECTED
    txn.approved_by_id = txn.to_partner_id
    txn.approved_at = None
    txn.rejection_reason = reason or ''
    txn.save(update_fields=['status', 'approved_by', 'approved_at', 'rejection_reason', 'updated_at'])

    logger.info("%s transaction %s rejected by %s", domain.title(), txn.id, actor_id)
    return txn
