"""
finances/services.py
────────────────────
Budget editing, payment collection and expenses.

Every function is scoped to one SchoolClass and returns a core.results dict.
Event `spent_amount` is kept in step with Expenses by read-modify-write;
concurrent edits can overwrite each other.
"""

import logging
from decimal import Decimal, InvalidOperation
from urllib.parse import quote

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import DatabaseError
from django.db.models import Prefetch, Sum
from django.utils import timezone

from core.results import failed, ok
from directory.models import Child, ChildParent

from .budget import BudgetValidationError, event_allocation, validate_budget_total
from .event_types import get_event_date, get_event_icon
from .models import Event, Expense, Payment, PaymentRound

logger = logging.getLogger(__name__)

STORE_ERRORS = (DatabaseError, ValidationError, ObjectDoesNotExist, ValueError)

# UI wording → stored status
STATUS_ALIASES = {
    'paid':   Payment.Status.COMPLETED,
    'unpaid': Payment.Status.PENDING,
}


def _money(value):
    try:
        return Decimal(str(value or 0))
    except InvalidOperation:
        raise ValueError(f'Invalid amount: {value!r}')


def _nis(value):
    """Decimal("250.00") → "250"."""
    return f"{Decimal(value).normalize():f}"


def _status(value):
    status = STATUS_ALIASES.get(value, value)
    if status not in Payment.Status.values:
        raise ValueError(f'Unknown payment status: {value!r}')
    return status


# ── Payment rounds ────────────────────────────────────────────────────────────

def create_payment_round(school_class, name, amount_per_child, due_date=None):
    """Create a round and one PENDING payment for every child in the class."""
    try:
        amount = _money(amount_per_child)
        payment_round = PaymentRound.objects.create(
            school_class=school_class,
            name=name,
            amount_per_child=amount,
            due_date=due_date,
        )
        payments = Payment.objects.bulk_create([
            Payment(
                school_class=school_class,
                child=child,
                payment_round=payment_round,
                amount=amount,
                status=Payment.Status.PENDING,
            )
            for child in Child.objects.filter(school_class=school_class)
        ])
        logger.info(
            'Payment round %s created for class %s with %d payments',
            payment_round.pk, school_class.pk, len(payments),
        )
        return ok(data=payment_round)
    except STORE_ERRORS as exc:
        return failed(logger, 'create_payment_round', exc)


def delete_payment_round(school_class, round_id):
    """Delete a round; its payments go with it."""
    try:
        deleted, _ = PaymentRound.objects.filter(pk=round_id, school_class=school_class).delete()
        if not deleted:
            raise PaymentRound.DoesNotExist(f'Payment round {round_id} not found')
        return ok()
    except STORE_ERRORS as exc:
        return failed(logger, 'delete_payment_round', exc)


def _status_patch(status):
    return {
        'status':       status,
        'payment_date': timezone.now() if status == Payment.Status.COMPLETED else None,
    }


def update_payment_status(school_class, payment_id, status):
    """Set one payment's status; COMPLETED stamps `payment_date`, anything else clears it."""
    try:
        updated = Payment.objects.filter(pk=payment_id, school_class=school_class).update(
            **_status_patch(_status(status)),
        )
        if not updated:
            raise Payment.DoesNotExist(f'Payment {payment_id} not found')
        return ok()
    except STORE_ERRORS as exc:
        return failed(logger, 'update_payment_status', exc)


def bulk_update_payments(school_class, payment_ids, status):
    try:
        updated = Payment.objects.filter(pk__in=payment_ids, school_class=school_class).update(
            **_status_patch(_status(status)),
        )
        return ok(updated=updated)
    except STORE_ERRORS as exc:
        return failed(logger, 'bulk_update_payments', exc)


def get_payment_rounds_with_payments(school_class):
    """
    Rounds of the class, newest first, each with one row per child:

        {'round', 'payments': [{'child', 'parents', 'status', 'payment_id', 'paid_at'}],
         'summary': {'total_children', 'paid_count', 'unpaid_count',
                     'total_collected', 'expected_total', 'progress_percentage'}}

    A child with no payment row in the round counts as unpaid.
    """
    rounds = list(
        PaymentRound.objects
        .filter(school_class=school_class)
        .prefetch_related('payments')
        .order_by('-created_at')
    )
    children = list(
        Child.objects
        .filter(school_class=school_class)
        .prefetch_related(
            Prefetch('parent_links', queryset=ChildParent.objects.select_related('parent')),
        )
    )

    result = []
    for payment_round in rounds:
        by_child = {p.child_id: p for p in payment_round.payments.all()}
        rows = []
        for child in children:
            payment = by_child.get(child.pk)
            paid = payment is not None and payment.status == Payment.Status.COMPLETED
            rows.append({
                'child':      child,
                'parents':    [link.parent for link in child.parent_links.all()],
                'status':     'paid' if paid else 'unpaid',
                'payment_id': payment.pk if payment else None,
                'paid_at':    payment.payment_date if payment else None,
            })

        paid_count = sum(1 for r in rows if r['status'] == 'paid')
        total_children = len(rows)
        result.append({
            'round':    payment_round,
            'payments': rows,
            'summary': {
                'total_children':      total_children,
                'paid_count':          paid_count,
                'unpaid_count':        total_children - paid_count,
                'total_collected':     paid_count * payment_round.amount_per_child,
                'expected_total':      total_children * payment_round.amount_per_child,
                'progress_percentage': paid_count / total_children * 100 if total_children else 0,
            },
        })
    return result


def build_payment_reminder(round_data):
    """
    WhatsApp reminder for one entry of get_payment_rounds_with_payments():
    returns {'message', 'whatsapp_url'} listing the children not yet paid.
    """
    payment_round = round_data['round']
    lines = []
    for row in round_data['payments']:
        if row['status'] != 'unpaid':
            continue
        names = ', '.join(p.name for p in row['parents'])
        lines.append(f"{row['child'].name} ({names})" if names else row['child'].name)

    message = (
        f'שלום,\nתזכורת לתשלום "{payment_round.name}" - ₪{_nis(payment_round.amount_per_child)}\n\n'
        f'טרם שילמו:\n' + '\n'.join(lines)
    )
    return {
        'message':      message,
        'whatsapp_url': f'https://wa.me/?text={quote(message)}',
    }


# ── Expenses ──────────────────────────────────────────────────────────────────

def create_expense(school_class, data):
    """Record an expense; when charged to an event, add it to the event's spent amount."""
    try:
        amount = _money(data.get('amount'))
        event = None
        if data.get('event_id'):
            event = Event.objects.get(pk=data['event_id'], school_class=school_class)

        expense = Expense.objects.create(
            school_class=school_class,
            event=event,
            description=data['description'],
            amount=amount,
            expense_date=data.get('expense_date') or timezone.localdate(),
            receipt_url=data.get('receipt_url') or None,
        )

        if event is not None:
            event.spent_amount = event.spent_amount + amount
            event.save(update_fields=['spent_amount'])

        return ok(data=expense)
    except STORE_ERRORS as exc:
        return failed(logger, 'create_expense', exc)


def delete_expense(school_class, expense_id):
    """Delete an expense and take it back off its event (never below 0)."""
    try:
        expense = Expense.objects.select_related('event').get(pk=expense_id, school_class=school_class)
        event = expense.event
        amount = expense.amount
        expense.delete()

        if event is not None:
            event.spent_amount = max(Decimal(0), event.spent_amount - amount)
            event.save(update_fields=['spent_amount'])

        return ok()
    except STORE_ERRORS as exc:
        return failed(logger, 'delete_expense', exc)


def get_expenses_with_events(school_class):
    return (
        Expense.objects
        .filter(school_class=school_class)
        .select_related('event')
        .order_by('-expense_date', '-created_at')
    )


# ── Budget settings & allocations ─────────────────────────────────────────────

def update_event_budget(school_class, event_id, allocated_budget):
    try:
        updated = Event.objects.filter(pk=event_id, school_class=school_class).update(
            allocated_budget=_money(allocated_budget),
        )
        if not updated:
            raise Event.DoesNotExist(f'Event {event_id} not found')
        return ok()
    except STORE_ERRORS as exc:
        return failed(logger, 'update_event_budget', exc)


def update_class_budget_settings(school_class, amount_per_child, estimated_children,
                                 estimated_staff, total_budget=None):
    """
    Save the class budget plan.  `total_budget` defaults to
    amount_per_child × estimated_children and may not drop below what the
    events already have allocated.
    """
    try:
        amount = _money(amount_per_child)
        new_total = _money(total_budget) if total_budget is not None else amount * estimated_children
        allocated = school_class.events.aggregate(s=Sum('allocated_budget'))['s'] or Decimal(0)
        validate_budget_total(new_total, allocated)

        school_class.budget_amount = amount
        school_class.estimated_children = estimated_children
        school_class.estimated_staff = estimated_staff
        school_class.total_budget = new_total
        school_class.save(update_fields=[
            'budget_amount', 'estimated_children', 'estimated_staff', 'total_budget',
        ])
        return ok(total_budget=new_total)
    except BudgetValidationError as exc:
        logger.info('Rejected budget %s for class %s: %s', new_total, school_class.pk, exc)
        return {'success': False, 'error': str(exc)}
    except STORE_ERRORS as exc:
        return failed(logger, 'update_class_budget_settings', exc)


def update_event_allocations(school_class, events, disabled_event_ids=()):
    """
    Apply the allocation editor: each entry of *events* is
    {'id' (None for new), 'event_type', 'name', 'amount_per_kid',
    'amount_per_staff', 'kids_count', 'staff_count'}.  Existing events are
    updated, new ones created; events in *disabled_event_ids* have their
    allocation zeroed but are kept.
    """
    today = timezone.localdate()
    try:
        for idx, entry in enumerate(events):
            per_kid = _money(entry.get('amount_per_kid'))
            per_staff = _money(entry.get('amount_per_staff'))
            kids = int(entry.get('kids_count') or 0)
            staff = int(entry.get('staff_count') or 0)
            fields = {
                'name':             entry['name'],
                'amount_per_kid':   per_kid,
                'amount_per_staff': per_staff,
                'kids_count':       kids,
                'staff_count':      staff,
                **event_allocation(per_kid, per_staff, kids, staff),
            }
            if entry.get('id'):
                Event.objects.filter(pk=entry['id'], school_class=school_class).update(**fields)
            else:
                event_type = entry['event_type']
                Event.objects.create(
                    school_class=school_class,
                    event_type=event_type,
                    icon=get_event_icon(event_type),
                    event_date=get_event_date(event_type, today),
                    sort_order=idx,
                    **fields,
                )

        if disabled_event_ids:
            Event.objects.filter(pk__in=disabled_event_ids, school_class=school_class).update(
                amount_per_kid=0,
                amount_per_staff=0,
                allocated_for_kids=0,
                allocated_for_staff=0,
                allocated_budget=0,
            )
        return ok()
    except STORE_ERRORS as exc:
        return failed(logger, 'update_event_allocations', exc)
