"""
classes/forms.py
────────────────
Forms for the first-login questionnaire and the class settings page.
"""

from django import forms

from .models import SchoolClass


class OnboardingForm(forms.Form):
    """Three quick questions asked once, stored as OnboardingResponse.responses."""

    role = forms.ChoiceField(
        label='1. What is your role in the class?',
        choices=[
            ('',          'Select an option'),
            ('committee', 'Parent committee member'),
            ('treasurer', 'Class treasurer'),
            ('teacher',   'Teacher / kindergarten teacher'),
            ('other',     'Other'),
        ],
    )
    source = forms.ChoiceField(
        label='2. How did you hear about us?',
        choices=[
            ('',       'Select an option'),
            ('search', 'Search engine'),
            ('social', 'Social media'),
            ('friend', 'Friend / another parent'),
            ('other',  'Other'),
        ],
    )
    experience = forms.ChoiceField(
        label='3. Have you managed a class budget before?',
        choices=[
            ('',         'Select an option'),
            ('first',    'This is my first year'),
            ('some',     'A year or two'),
            ('veteran',  'Many years'),
        ],
    )


class ClassDetailsForm(forms.ModelForm):

    class Meta:
        model  = SchoolClass
        fields = ['name', 'school_name', 'city', 'year']
        labels = {
            'name':        'שם הכיתה / הגן',
            'school_name': 'בית ספר',
            'city':        'עיר',
            'year':        'שנת לימודים',
        }


class DirectorySettingsForm(forms.Form):
    is_public = forms.BooleanField(required=False, label='דף הקשר ציבורי')
    show_phone = forms.BooleanField(required=False, label='הצג טלפונים')
    show_address = forms.BooleanField(required=False, label='הצג כתובות')
    show_birthday = forms.BooleanField(required=False, label='הצג ימי הולדת')


class PayboxLinkForm(forms.Form):
    paybox_link = forms.URLField(
        required=False, label='קישור לתשלום',
        widget=forms.URLInput(attrs={'placeholder': 'https://payboxapp.page.link/…'}),
    )


class InviteAdminForm(forms.Form):
    email = forms.EmailField(label='Email of the new admin')
