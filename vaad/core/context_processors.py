"""
core/context_processors.py
──────────────────────────
Global template context injected into every request.

Registered in settings.py → TEMPLATES[0]['OPTIONS']['context_processors'].
"""

from django.db.models import Sum


def budget_summary(request):
    """
    Injects the budget summary of the class the current user administers:

        admin_class     – the SchoolClass the user administers, or None
        budget          – finances.budget.class_budget_summary() dict, or None
        fund_collected  – total NIS from completed payments (this class)
        show_budget_summary – False when the user has opted to hide it

    Unauthenticated users / users without a class get None and zeros.
    """
    # Import here to avoid circular imports during app startup
    from classes.utils import get_admin_class
    from finances.budget import class_budget_summary
    from finances.models import Payment

    school_class = get_admin_class(request.user)

    if school_class is not None:
        budget = class_budget_summary(school_class)
        collected = (
            Payment.objects
            .filter(status=Payment.Status.COMPLETED, school_class=school_class)
            .aggregate(s=Sum('amount'))['s'] or 0
        )
    else:
        budget = None
        collected = 0

    show_summary = not (
        request.user.is_authenticated and request.user.hide_budget_summary
    )

    return {
        'admin_class':         school_class,
        'budget':              budget,
        'fund_collected':      collected,
        'show_budget_summary': show_summary,
    }
