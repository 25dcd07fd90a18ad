"""
Recurring personal transactions.

A rule generates one pending personal transaction per period. The
receiver still has to approve each one before it moves the pairwise
balance.
"""
import calendar
from datetime import date, timedelta
from decimal import Decimal
import logging
from uuid import UUID

from django.utils import timezone

from apps.ledger.models import (
    PersonalTransactionType,
    RecurrenceFrequency,
    RecurringTransactionRule,
)

from .balance_sinks import as_uuid
from .domains import PERSONAL, get_active_partner
from .exceptions import (
    InvalidAmountError,
    InvalidScheduleError,
    NotFoundError,
    NotPartyError,
    SamePartnerError,
)
from .operations import ledger_operation
from .transactions import create_transaction

logger = logging.getLogger(__name__)


def add_months(start: date, months: int, anchor_day: int = None) -> date:
    """Shift by whole months, clamping to the last day of shorter months."""
    index = start.month - 1 + months
    year = start.year + index // 12
    month = index % 12 + 1
    day = anchor_day or start.day
    return date(year, month, min(day, calendar.monthrange(year, month)[1]))


def advance(current: date, frequency: str, anchor_day: int = None) -> date:
    """Next occurrence after ``current``."""
    if frequency == RecurrenceFrequency.DAILY:
        return current + timedelta(days=1)
    if frequency == RecurrenceFrequency.WEEKLY:
        return current + timedelta(weeks=1)
    if frequency == RecurrenceFrequency.MONTHLY:
        return add_months(current, 1, anchor_day)
    if frequency == RecurrenceFrequency.YEARLY:
        return add_months(current, 12, anchor_day)
    raise InvalidScheduleError(f"Unknown frequency: {frequency}")


def calculate_next_execution(start_date: date, frequency: str, today: date = None) -> date:
    """
    First execution date for a new rule.

    A rule starting in the future first runs on its start date;
    otherwise it first runs one period from today.
    """
    today = today or timezone.localdate()
    if start_date > today:
        return start_date
    return advance(today, frequency, anchor_day=start_date.day)


@ledger_operation
def create_recurring_rule(
    *,
    from_partner_id: UUID,
    to_partner_id: UUID,
    amount: Decimal,
    frequency: str,
    start_date: date,
    created_by,
    end_date: date = None,
    transaction_type: str = PersonalTransactionType.TRANSFER,
    description: str = '',
    category: str = 'general',
    today: date = None,
) -> RecurringTransactionRule:
    """
    Schedule a recurring personal transfer.

    Raises:
        SamePartnerError: If sender and receiver are the same
        InvalidAmountError: If amount is not positive
        InvalidScheduleError: If frequency is unknown or end_date precedes start_date
        NotFoundError: If either partner doesn't exist
    """
    if as_uuid(from_partner_id) == as_uuid(to_partner_id):
        raise SamePartnerError("Cannot schedule a transaction to yourself")
    if amount is None or amount <= 0:
        raise InvalidAmountError("Amount must be greater than zero")
    if frequency not in RecurrenceFrequency.values:
        raise InvalidScheduleError(f"Unknown frequency: {frequency}")
    if end_date is not None and end_date < start_date:
        raise InvalidScheduleError("End date cannot be before start date")

    get_active_partner(from_partner_id)
    get_active_partner(to_partner_id)

    rule = RecurringTransactionRule.objects.create(
        from_partner_id=from_partner_id,
        to_partner_id=to_partner_id,
        amount=amount,
        transaction_type=transaction_type,
        description=description,
        category=category,
        frequency=frequency,
        start_date=start_date,
        end_date=end_date,
        next_execution_date=calculate_next_execution(start_date, frequency, today),
        created_by=created_by,
    )

    logger.info("Recurring rule %s created (%s, next %s)", rule.id, frequency, rule.next_execution_date)
    return rule


def _lock_owned_rule(rule_id, actor_id) -> RecurringTransactionRule:
    try:
        rule = RecurringTransactionRule.objects.select_for_update().get(pk=rule_id)
    except RecurringTransactionRule.DoesNotExist:
        raise NotFoundError(f"Recurring rule {rule_id} not found")

    if as_uuid(actor_id) not in (rule.created_by_id, rule.from_partner_id):
        raise NotPartyError("Only the rule's creator can change it")
    return rule


@ledger_operation
def set_rule_active(*, rule_id: UUID, actor_id: UUID, is_active: bool) -> RecurringTransactionRule:
    """Pause or resume a rule. Only its creator or sender may do this."""
    rule = _lock_owned_rule(rule_id, actor_id)

    rule.is_active = is_active
    rule.save(update_fields=['is_active', 'updated_at'])
    return rule


@ledger_operation
def delete_recurring_rule(*, rule_id: UUID, actor_id: UUID) -> None:
    """
    Delete a rule. Only its creator or sender may do this.

    Transactions it already generated are kept.
    """
    rule = _lock_owned_rule(rule_id, actor_id)
    rule.delete()
    logger.info("Recurring rule %s deleted by %s", rule_id, actor_id)


@ledger_operation
def run_due_rules(*, today: date = None):
    """
    Generate pending transactions for every rule that is due.

    Missed periods are caught up, one transaction per period. Rules
    whose next occurrence falls past their end date are deactivated.

    Returns:
        list of created PersonalTransaction objects
    """
    today = today or timezone.localdate()
    created = []

    due = RecurringTransactionRule.objects.select_for_update().filter(
        is_active=True,
        next_execution_date__lte=today,
    ).order_by('next_execution_date', 'pk')

    for rule in due:
        while rule.is_active and rule.next_execution_date <= today:
            if rule.end_date is not None and rule.next_execution_date > rule.end_date:
                rule.is_active = False
                break

            try:
                txn = create_transaction(
                    from_partner_id=rule.from_partner_id,
                    to_partner_id=rule.to_partner_id,
                    amount=rule.amount,
                    domain=PERSONAL,
                    description=rule.description,
                    transaction_date=rule.next_execution_date,
                    transaction_type=rule.transaction_type,
                    category=rule.category,
                    recurring_rule=rule,
                )
            except NotFoundError:
                logger.warning("Recurring rule %s deactivated: a partner is no longer active", rule.id)
                rule.is_active = False
                break
            created.append(txn)
            rule.next_execution_date = advance(
                rule.next_execution_date, rule.frequency, anchor_day=rule.start_date.day,
            )

        if rule.end_date is not None and rule.next_execution_date > rule.end_date:
            rule.is_active = False
        rule.save(update_fields=['next_execution_date', 'is_active', 'updated_at'])

    if created:
        logger.info("Recurring rules generated %d pending transactions", len(created))
    return created
