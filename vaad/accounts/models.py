"""
accounts/models.py
──────────────────
Identity and authentication.

User – extends AbstractUser with a contact phone and a preference flag
       (hide_budget_summary).  Which classes a user administers is
       recorded by classes.ClassMember, not here.
"""

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """
    Custom user model for the class committee manager.

    Extends Django's built-in AbstractUser so we keep all the standard auth
    functionality (username, password, email, etc.).  Committee admins sign
    up here; parents filling in the public intake form never need an account.
    """

    phone = models.CharField(
        max_length=20,
        blank=True,
        verbose_name='Phone',
        help_text='Contact phone shown to co-admins.',
    )
    hide_budget_summary = models.BooleanField(
        default=False,
        verbose_name='Hide budget summary',
        help_text="When checked, the budget summary card is hidden on this user's pages.",
    )

    class Meta:
        verbose_name = 'User'
        verbose_name_plural = 'Users'

    def __str__(self):
        return self.get_full_name() or self.username
