"""
classes/models.py
─────────────────
The tenancy models.  Everything else (children, staff, events, payments)
hangs off a SchoolClass.

SchoolClass        – one class / kindergarten committee with its budget plan
                     and public invite code.
ClassMember        – grants a user a role (admin / member) in a class.
OnboardingResponse – the questionnaire answers a user gave on first login.
AdminInvitation    – a pending invitation for another user to co-administer.
"""

from django.conf import settings
from django.db import models
from django.utils import timezone

DEFAULT_DIRECTORY_SETTINGS = {
    'show_phone':    True,
    'show_address':  True,
    'show_birthday': True,
    'is_public':     True,
}


class SchoolClass(models.Model):
    """
    A single school/kindergarten class being administered by a parent committee.

    The budget is either a per-child amount (total = amount × number of
    children at creation time) or a flat total.  `invite_code` is the public
    lookup key for the calendar, directory and parent-intake pages.
    """

    class BudgetType(models.TextChoices):
        PER_CHILD = 'per-child', 'Per child'
        TOTAL     = 'total',     'Total amount'

    name = models.CharField(
        max_length=200,
        help_text='Class name, e.g. "גן חבצלת" or "כיתה ב׳ 2".',
    )
    school_name = models.CharField(max_length=200, blank=True)
    city = models.CharField(max_length=100, blank=True)
    year = models.CharField(
        max_length=20,
        blank=True,
        help_text='School year label, e.g. "2026".',
    )

    # ── Budget plan ──────────────────────────────────────────────────────────
    budget_type = models.CharField(
        max_length=20,
        choices=BudgetType.choices,
        default=BudgetType.PER_CHILD,
    )
    budget_amount = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        default=0,
        help_text='Amount per child (per-child mode) or the whole budget (total mode), NIS.',
    )
    total_budget = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=0,
        help_text='Budget available for allocation across events (NIS).',
    )
    estimated_children = models.PositiveIntegerField(
        default=0,
        help_text='Expected number of children, used by the allocation editor.',
    )
    estimated_staff = models.PositiveIntegerField(
        default=0,
        help_text='Expected number of staff members, used by the allocation editor.',
    )

    # ── Public access ────────────────────────────────────────────────────────
    invite_code = models.CharField(
        max_length=16,
        unique=True,
        help_text='Public token for the calendar / directory / parent-form pages.',
    )
    paybox_link = models.URLField(
        blank=True,
        help_text='Payment link shown to parents after they fill in the form.',
    )
    directory_settings = models.JSONField(
        null=True,
        blank=True,
        help_text='Visibility flags for the public directory page.',
    )

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='created_classes',
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Class'
        verbose_name_plural = 'Classes'

    def __str__(self):
        if self.school_name:
            return f"{self.name} – {self.school_name}"
        return self.name

    @property
    def amount_per_child(self):
        """Annual amount collected per child (0 in total mode)."""
        if self.budget_type == self.BudgetType.PER_CHILD:
            return self.budget_amount
        return 0

    def get_directory_settings(self):
        """Stored visibility flags merged over the all-visible defaults."""
        merged = dict(DEFAULT_DIRECTORY_SETTINGS)
        merged.update(self.directory_settings or {})
        return merged


class ClassMember(models.Model):
    """Grants *user* a role inside *school_class*."""

    class Role(models.TextChoices):
        ADMIN  = 'admin',  'Admin'
        MEMBER = 'member', 'Member'

    school_class = models.ForeignKey(
        SchoolClass,
        on_delete=models.CASCADE,
        related_name='members',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='class_memberships',
    )
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.ADMIN,
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['created_at']
        verbose_name = 'Class Member'
        verbose_name_plural = 'Class Members'

    def __str__(self):
        return f"{self.user} @ {self.school_class} ({self.get_role_display()})"


class OnboardingResponse(models.Model):
    """Questionnaire answers collected the first time a user logs in."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='onboarding_response',
    )
    responses = models.JSONField(default=dict)
    completed_at = models.DateTimeField(default=timezone.now)

    class Meta:
        verbose_name = 'Onboarding Response'
        verbose_name_plural = 'Onboarding Responses'

    def __str__(self):
        return f"Onboarding – {self.user}"


class AdminInvitation(models.Model):
    """
    Invitation for another user (identified by e-mail) to co-administer a
    class.  Accepted automatically the next time a user with that e-mail
    logs in.
    """

    class Status(models.TextChoices):
        PENDING  = 'pending',  'Pending'
        ACCEPTED = 'accepted', 'Accepted'

    school_class = models.ForeignKey(
        SchoolClass,
        on_delete=models.CASCADE,
        related_name='admin_invitations',
    )
    email = models.EmailField()
    invited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sent_admin_invitations',
    )
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Admin Invitation'
        verbose_name_plural = 'Admin Invitations'

    def __str__(self):
        return f"{self.email} → {self.school_class} ({self.get_status_display()})"
