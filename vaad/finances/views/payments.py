"""
finances/views/payments.py
──────────────────────────
Payment collection: rounds, per-child paid / unpaid status and the
WhatsApp reminder for children who have not paid yet.
"""

from django.contrib import messages
from django.shortcuts import redirect, render

from classes.utils import add_form_control_class, class_admin_required, require_POST_or_405

from .. import services
from ..forms import PaymentRoundForm


@class_admin_required
def payments_view(req, school_class):
    rounds = services.get_payment_rounds_with_payments(school_class)
    for round_data in rounds:
        round_data['reminder'] = services.build_payment_reminder(round_data)

    return render(req, 'finances/payments.html', {
        'school_class': school_class,
        'rounds':       rounds,
        'form':         add_form_control_class(PaymentRoundForm()),
    })


@class_admin_required
@require_POST_or_405
def create_payment_round_view(req, school_class):
    form = PaymentRoundForm(req.POST)
    if form.is_valid():
        cd = form.cleaned_data
        result = services.create_payment_round(
            school_class, cd['name'], cd['amount_per_child'], cd.get('due_date'),
        )
        if result['success']:
            messages.success(req, f'✅ Payment round "{cd["name"]}" opened.')
        else:
            messages.error(req, result['error'])
    else:
        messages.error(req, 'Please fix the payment round details.')
    return redirect('payments')


@class_admin_required
@require_POST_or_405
def delete_payment_round_view(req, school_class, round_id):
    result = services.delete_payment_round(school_class, round_id)
    if result['success']:
        messages.success(req, '🗑 Payment round deleted.')
    else:
        messages.error(req, 'Payment round not found.')
    return redirect('payments')


@class_admin_required
@require_POST_or_405
def update_payment_status_view(req, school_class, payment_id):
    """POST-only: mark one payment paid / unpaid (or any stored status)."""
    result = services.update_payment_status(school_class, payment_id, req.POST.get('status', ''))
    if not result['success']:
        messages.error(req, result['error'])
    return redirect('payments')


@class_admin_required
@require_POST_or_405
def bulk_update_payments_view(req, school_class):
    try:
        payment_ids = [int(pk) for pk in req.POST.getlist('payment_ids')]
    except ValueError:
        payment_ids = []
    if not payment_ids:
        messages.error(req, 'No payments selected.')
        return redirect('payments')

    result = services.bulk_update_payments(school_class, payment_ids, req.POST.get('status', ''))
    if result['success']:
        messages.success(req, f'✅ {result["updated"]} payments updated.')
    else:
        messages.error(req, result['error'])
    return redirect('payments')
