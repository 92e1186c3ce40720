"""
finances/budget.py
──────────────────
Budget arithmetic.  Everything here is a pure function of row values and is
recomputed on every render; nothing is cached or stored except the class
`total_budget` written at creation / settings time.

Amounts are whole NIS in practice; Decimal and int inputs are both accepted
and no rounding is applied.
"""

from decimal import Decimal

from django.db.models import Sum


class BudgetValidationError(ValueError):
    """Raised when a new budget total would be below what is already allocated."""

    def __init__(self, new_total, allocated):
        self.new_total = new_total
        self.allocated = allocated
        super().__init__(
            f'Cannot save: event allocations ({allocated:,} NIS) exceed '
            f'the new budget ({new_total:,} NIS).'
        )


def calculate_total_budget(budget_type, budget_amount, child_count):
    """
    Total budget for a class.

    per-child mode → amount × number of children; total mode → the flat amount.
    """
    if budget_type == 'per-child':
        return budget_amount * child_count
    return budget_amount


def event_allocation(amount_per_kid, amount_per_staff, kids_count, staff_count):
    """Split of one event's allocation between kids and staff."""
    for_kids = amount_per_kid * kids_count
    for_staff = amount_per_staff * staff_count
    return {
        'allocated_for_kids':  for_kids,
        'allocated_for_staff': for_staff,
        'allocated_budget':    for_kids + for_staff,
    }


def summarize_budget(total, events):
    """
    Summarise a budget against its events.

    *events* is any iterable of objects or dicts carrying `allocated_budget`
    and `spent_amount`.  Remaining may go negative.
    """
    allocated = Decimal(0)
    spent = Decimal(0)
    for event in events:
        allocated += Decimal(_field(event, 'allocated_budget') or 0)
        spent += Decimal(_field(event, 'spent_amount') or 0)
    total = Decimal(total or 0)

    return {
        'total':           total,
        'allocated':       allocated,
        'spent':           spent,
        'remaining':       total - allocated,
        'unspent':         total - spent,
        'percentage_used': round(allocated / total * 100) if total else 0,
        'over_allocated':  allocated > total,
    }


def class_budget_summary(school_class):
    """summarize_budget() for a SchoolClass, read from its current Event rows."""
    totals = school_class.events.aggregate(
        allocated=Sum('allocated_budget'),
        spent=Sum('spent_amount'),
    )
    return summarize_budget(school_class.total_budget, [{
        'allocated_budget': totals['allocated'] or 0,
        'spent_amount':     totals['spent'] or 0,
    }])


def validate_budget_total(new_total, allocated):
    """Raise BudgetValidationError when *new_total* is below *allocated*."""
    if new_total < allocated:
        raise BudgetValidationError(new_total, allocated)


def _field(obj, name):
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)
