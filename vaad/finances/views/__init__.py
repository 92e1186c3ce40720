"""
finances/views/
───────────────
Split into sub-modules for clarity:
  budget.py   – budget plan, event allocations, expenses
  payments.py – payment rounds, payment status, reminders
"""
from .budget import (
    add_custom_event_view,
    budget_settings_view,
    budget_view,
    delete_expense_view,
    event_allocations_view,
    log_expense_view,
)
from .payments import (
    bulk_update_payments_view,
    create_payment_round_view,
    delete_payment_round_view,
    payments_view,
    update_payment_status_view,
)

__all__ = [
    # budget
    'budget_view',
    'budget_settings_view',
    'event_allocations_view',
    'add_custom_event_view',
    'log_expense_view',
    'delete_expense_view',
    # payments
    'payments_view',
    'create_payment_round_view',
    'delete_payment_round_view',
    'update_payment_status_view',
    'bulk_update_payments_view',
]
