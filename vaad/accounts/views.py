"""
accounts/views.py
─────────────────
Authentication views: sign-up, login, logout, password change.

Logging in also accepts any admin invitations waiting for the user's email.
"""

import logging

from django.contrib import messages
from django.contrib.auth import authenticate, login, logout, update_session_auth_hash
from django.contrib.auth.decorators import login_required
from django.contrib.auth.forms import PasswordChangeForm
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme

from classes.services import accept_pending_invitations
from classes.utils import add_form_control_class, require_POST_or_405

from .forms import SignUpForm

logger = logging.getLogger(__name__)


def _join_invited_classes(req, user):
    accepted = accept_pending_invitations(user)
    if accepted:
        messages.success(req, f'✅ You were added as admin to {accepted} class(es).')


def _safe_next(req):
    next_url = req.POST.get('next') or req.GET.get('next')
    if next_url and url_has_allowed_host_and_scheme(
        next_url, allowed_hosts={req.get_host()}, require_https=req.is_secure(),
    ):
        return next_url
    return None


# ── Sign-up ───────────────────────────────────────────────────────────────────

def signup_view(req):
    if req.user.is_authenticated:
        return redirect('dashboard')

    if req.method == 'POST':
        form = SignUpForm(req.POST)
        if form.is_valid():
            user = form.save()
            login(req, user)
            logger.info('New committee admin signed up: %s', user.username)
            _join_invited_classes(req, user)
            return redirect('onboarding')
        messages.error(req, 'Please fix the errors below.')
    else:
        form = SignUpForm()

    return render(req, 'accounts/signup.html', {'form': add_form_control_class(form)})


# ── Login / Logout ────────────────────────────────────────────────────────────

def login_view(req):
    """Show the login form (GET) or authenticate and redirect (POST)."""
    if req.user.is_authenticated:
        return redirect('dashboard')

    if req.method == 'POST':
        username = req.POST.get('username', '').strip()
        password = req.POST.get('password', '')
        user = authenticate(req, username=username, password=password)
        if user is not None:
            login(req, user)
            messages.success(req, f'Welcome back, {user.get_full_name() or user.username}!')
            _join_invited_classes(req, user)
            return redirect(_safe_next(req) or 'dashboard')
        else:
            messages.error(req, 'Invalid username or password. Please try again.')

    return render(req, 'accounts/login.html', {'next': req.GET.get('next', '')})


@require_POST_or_405
def logout_view(req):
    """Log the current user out; POST only for CSRF safety."""
    logout(req)
    messages.info(req, 'You have been logged out.')
    return redirect('login')


# ── Password management ───────────────────────────────────────────────────────

@login_required
def password_change_view(req):
    """Allow a logged-in user to change their own password."""
    if req.method == 'POST':
        form = PasswordChangeForm(req.user, req.POST)
        if form.is_valid():
            user = form.save()
            update_session_auth_hash(req, user)
            messages.success(req, 'Your password was updated successfully.')
            return redirect('password_change_done')
        else:
            messages.error(req, 'Please fix the errors below.')
    else:
        form = PasswordChangeForm(req.user)

    return render(req, 'accounts/password_change.html', {'form': add_form_control_class(form)})


@login_required
def password_change_done_view(req):
    """Confirmation page shown after a successful password change."""
    return render(req, 'accounts/password_change_done.html')
