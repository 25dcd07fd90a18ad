from datetime import date
from decimal import Decimal

import pytest
from django.core.management import call_command
from apps.ledger.models import PersonalTransaction, RecurringTransactionRule, TransactionStatus
from apps.ledger.services import (
    create_recurring_rule,
    set_rule_active,
    delete_recurring_rule,
    run_due_rules,
    calculate_next_execution,
    InvalidAmountError,
    InvalidScheduleError,
    NotPartyError,
    SamePartnerError,
)
from apps.ledger.services.recurring import add_months, advance


# =============================================================================
# Date arithmetic
# =============================================================================

class TestSchedule:

    def test_add_months_clamps(self):
        assert add_months(date(2025, 1, 31), 1) == date(2025, 2, 28)
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2025, 11, 15), 3) == date(2026, 2, 15)

    def test_anchor_day_recovers_after_short_month(self):
        assert add_months(date(2025, 2, 28), 1, anchor_day=31) == date(2025, 3, 31)

    @pytest.mark.parametrize('frequency, expected', [
        ('daily', date(2025, 3, 2)),
        ('weekly', date(2025, 3, 8)),
        ('monthly', date(2025, 4, 1)),
        ('yearly', date(2026, 3, 1)),
    ])
    def test_advance(self, frequency, expected):
        assert advance(date(2025, 3, 1), frequency) == expected

    def test_unknown_frequency(self):
        with pytest.raises(InvalidScheduleError):
            advance(date(2025, 3, 1), 'hourly')

    def test_future_start_runs_on_start(self):
        assert calculate_next_execution(date(2025, 7, 1), 'monthly', today=date(2025, 6, 1)) == date(2025, 7, 1)

    def test_past_start_runs_one_period_from_today(self):
        assert calculate_next_execution(date(2025, 1, 10), 'weekly', today=date(2025, 6, 1)) == date(2025, 6, 8)


# =============================================================================
# Rules
# =============================================================================

@pytest.mark.django_db
class TestRecurringRules:

    @pytest.fixture
    def rule(self, partner_a, partner_b):
        return create_recurring_rule(
            from_partner_id=partner_a.id,
            to_partner_id=partner_b.id,
            amount=Decimal('25.00'),
            frequency='weekly',
            start_date=date(2025, 6, 2),
            end_date=date(2025, 6, 30),
            created_by=partner_a,
            description='Lunch money',
            today=date(2025, 6, 1),
        )

    def test_create(self, rule):
        assert rule.next_execution_date == date(2025, 6, 2)
        assert rule.is_active

    def test_same_partner(self, partner_a):
        with pytest.raises(SamePartnerError):
            create_recurring_rule(
                from_partner_id=partner_a.id,
                to_partner_id=partner_a.id,
                amount=Decimal('1.00'),
                frequency='daily',
                start_date=date(2025, 6, 1),
                created_by=partner_a,
            )

    def test_bad_amount(self, partner_a, partner_b):
        with pytest.raises(InvalidAmountError):
            create_recurring_rule(
                from_partner_id=partner_a.id,
                to_partner_id=partner_b.id,
                amount=Decimal('0.00'),
                frequency='daily',
                start_date=date(2025, 6, 1),
                created_by=partner_a,
            )

    def test_end_before_start(self, partner_a, partner_b):
        with pytest.raises(InvalidScheduleError):
            create_recurring_rule(
                from_partner_id=partner_a.id,
                to_partner_id=partner_b.id,
                amount=Decimal('1.00'),
                frequency='daily',
                start_date=date(2025, 6, 10),
                end_date=date(2025, 6, 1),
                created_by=partner_a,
            )

    def test_run_creates_pending_transactions(self, rule, partner_a, partner_b):
        created = run_due_rules(today=date(2025, 6, 2))

        assert len(created) == 1
        txn = created[0]
        assert txn.status == TransactionStatus.PENDING
        assert txn.transaction_date == date(2025, 6, 2)
        assert txn.recurring_rule_id == rule.id
        assert txn.amount == Decimal('25.00')

        rule.refresh_from_db()
        assert rule.next_execution_date == date(2025, 6, 9)

        partner_a.refresh_from_db()
        assert partner_a.balance == Decimal('0.00')

    def test_run_catches_up_and_deactivates_past_end(self, rule):
        created = run_due_rules(today=date(2025, 7, 15))

        assert [t.transaction_date for t in created] == [
            date(2025, 6, 2), date(2025, 6, 9), date(2025, 6, 16), date(2025, 6, 23), date(2025, 6, 30),
        ]
        rule.refresh_from_db()
        assert not rule.is_active

    def test_not_due_yet(self, rule):
        assert run_due_rules(today=date(2025, 6, 1)) == []

    def test_paused_rule_is_skipped(self, rule, partner_a):
        set_rule_active(rule_id=rule.id, actor_id=partner_a.id, is_active=False)

        assert run_due_rules(today=date(2025, 6, 10)) == []

    def test_only_creator_can_pause(self, rule, partner_b):
        with pytest.raises(NotPartyError):
            set_rule_active(rule_id=rule.id, actor_id=partner_b.id, is_active=False)

    def test_delete_keeps_generated_transactions(self, rule, partner_a):
        created = run_due_rules(today=date(2025, 6, 2))

        delete_recurring_rule(rule_id=rule.id, actor_id=partner_a.id)

        assert not RecurringTransactionRule.objects.filter(pk=rule.id).exists()
        txn = PersonalTransaction.objects.get(pk=created[0].id)
        assert txn.recurring_rule_id is None

    def test_only_creator_can_delete(self, rule, partner_b):
        with pytest.raises(NotPartyError):
            delete_recurring_rule(rule_id=rule.id, actor_id=partner_b.id)

        assert RecurringTransactionRule.objects.filter(pk=rule.id).exists()

    def test_inactive_partner_deactivates_rule(self, rule, partner_b):
        partner_b.is_active = False
        partner_b.save(update_fields=['is_active'])

        assert run_due_rules(today=date(2025, 6, 2)) == []
        rule.refresh_from_db()
        assert not rule.is_active

    def test_command(self, rule, capsys):
        call_command('run_recurring_transactions', '--date', '2025-06-09')

        assert 'Created 2 pending transaction(s)' in capsys.readouterr().out
        assert PersonalTransaction.objects.filter(recurring_rule=rule).count() == 2
        assert RecurringTransactionRule.objects.get(pk=rule.pk).next_execution_date == date(2025, 6, 16)
