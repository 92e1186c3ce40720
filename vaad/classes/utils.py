"""
classes/utils.py
────────────────
Shared view helpers: access control and class scoping.
Nothing here imports from view modules (no circular imports).
"""

from functools import wraps

from django.contrib import messages
from django.http import HttpResponseNotAllowed
from django.shortcuts import redirect

from .models import ClassMember, SchoolClass


# ── Form styling ──────────────────────────────────────────────────────────────

def add_form_control_class(form):
    """Inject a uniform CSS class onto every visible widget."""
    for field in form.fields.values():
        field.widget.attrs.setdefault('class', 'form-control-input')
    return form


# ── Class-scoping helpers ─────────────────────────────────────────────────────

def get_admin_class(user):
    """
    Return the SchoolClass *user* administers, or None if they have not
    created or joined one yet.  Always use this to scope admin querysets.
    """
    if not user.is_authenticated:
        return None
    return (
        SchoolClass.objects
        .filter(members__user=user, members__role=ClassMember.Role.ADMIN)
        .order_by('-created_at')
        .first()
    )


# ── Access control ────────────────────────────────────────────────────────────

def class_admin_required(view_fn):
    """
    Decorator: unauthenticated users → login, users without a class →
    onboarding.  The admin's class is passed to the view as `school_class`.
    """
    @wraps(view_fn)
    def wrapper(req, *args, **kwargs):
        if not req.user.is_authenticated:
            return redirect('login')
        school_class = get_admin_class(req.user)
        if school_class is None:
            messages.info(req, 'Create your class first.')
            return redirect('onboarding')
        return view_fn(req, school_class, *args, **kwargs)
    return wrapper


def require_POST_or_405(view_fn):
    """Decorator: return 405 for any non-POST request."""
    @wraps(view_fn)
    def wrapper(req, *args, **kwargs):
        if req.method != 'POST':
            return HttpResponseNotAllowed(['POST'])
        return view_fn(req, *args, **kwargs)
    return wrapper
