"""
Ledger services - Business logic layer.

This package contains all balance-affecting operations:
- Sale entries (credited to a partner's balance)
- Business and personal transactions with receiver approval
- Balance mutation engine and balance sinks
- Reconciliation of stored balances against history
- Recurring personal transactions
"""

# Sales
from .sales import (
    create_sale,
    update_sale,
    delete_sale,
    get_sale,
)

# Transactions
from .transactions import (
    create_transaction,
    update_transaction,
    delete_transaction,
    get_transaction,
    list_pending_approvals,
    get_partner_transactions,
)

# Approval state machine
from .approval import (
    approve_transaction,
    reject_transaction,
)

# Balances
from .balances import (
    get_balance,
    get_pairwise_balance,
    get_partner_pairwise_balances,
)

# Reconciliation
from .reconciliation import (
    reconcile_all_balances,
    compute_expected_balances,
    compute_expected_pairwise_balances,
    find_balance_drift,
)

# Recurring rules
from .recurring import (
    create_recurring_rule,
    set_rule_active,
    delete_recurring_rule,
    run_due_rules,
    calculate_next_execution,
)

from .domains import BUSINESS, PERSONAL, DOMAINS

# Exceptions
from .exceptions import (
    LedgerServiceError,
    DuplicateDateError,
    SamePartnerError,
    NotReceiverError,
    NotPartyError,
    InvalidStateError,
    InvalidAmountError,
    InvalidScheduleError,
    NotFoundError,
    StorageError,
)

__all__ = [
    # Sales
    'create_sale',
    'update_sale',
    'delete_sale',
    'get_sale',
    # Transactions
    'create_transaction',
    'update_transaction',
    'delete_transaction',
    'get_transaction',
    'list_pending_approvals',
    'get_partner_transactions',
    'approve_transaction',
    'reject_transaction',
    # Balances
    'get_balance',
    'get_pairwise_balance',
    'get_partner_pairwise_balances',
    # Reconciliation
    'reconcile_all_balances',
    'compute_expected_balances',
    'compute_expected_pairwise_balances',
    'find_balance_drift',
    # Recurring rules
    'create_recurring_rule',
    'set_rule_active',
    'delete_recurring_rule',
    'run_due_rules',
    'calculate_next_execution',
    # Domains
    'BUSINESS',
    'PERSONAL',
    'DOMAINS',
    # Exceptions
    'LedgerServiceError',
    'DuplicateDateError',
    'SamePartnerError',
    'NotReceiverError',
    'NotPartyError',
    'InvalidStateError',
    'InvalidAmountError',
    'InvalidScheduleError',
    'NotFoundError',
    'StorageError',
]
