"""
accounts/forms.py
─────────────────
Sign-up form for committee admins.
"""

from django import forms
from django.contrib.auth.forms import UserCreationForm

from .models import User


class SignUpForm(UserCreationForm):
    """Username + password plus the contact details co-admins see."""

    email = forms.EmailField(
        label='Email',
        help_text='Admin invitations are matched to this address.',
    )

    class Meta(UserCreationForm.Meta):
        model  = User
        fields = ('username', 'email', 'first_name', 'last_name', 'phone')

    def clean_email(self):
        email = self.cleaned_data['email'].strip().lower()
        if User.objects.filter(email__iexact=email).exists():
            raise forms.ValidationError('An account with this email already exists.')
        return email
