"""
directory/forms.py
──────────────────
Forms for the committee admin to manage children / staff, the public
parent-intake form and the spreadsheet upload.
"""

from django import forms

from .models import Staff
from .services import is_valid_phone
from .spreadsheet import SpreadsheetError, parse_children_workbook

INVALID_PHONE = 'מספר טלפון לא תקין'


class ChildForm(forms.Form):
    """
    Admin form for adding / editing a child with up to two parents.
    The parent ids are hidden fields, filled when editing.
    """

    name = forms.CharField(max_length=200, label='שם הילד/ה')
    birthday = forms.CharField(
        required=False, label='תאריך לידה',
        widget=forms.TextInput(attrs={'placeholder': 'DD/MM/YYYY'}),
    )
    address = forms.CharField(required=False, max_length=300, label='כתובת')

    parent1_id = forms.IntegerField(required=False, widget=forms.HiddenInput)
    parent1_name = forms.CharField(required=False, max_length=200, label='שם הורה 1')
    parent1_phone = forms.CharField(required=False, max_length=20, label='טלפון הורה 1')
    parent2_id = forms.IntegerField(required=False, widget=forms.HiddenInput)
    parent2_name = forms.CharField(required=False, max_length=200, label='שם הורה 2')
    parent2_phone = forms.CharField(required=False, max_length=20, label='טלפון הורה 2')

    def clean(self):
        cleaned = super().clean()
        for slot in ('parent1', 'parent2'):
            phone = cleaned.get(f'{slot}_phone')
            if phone and not is_valid_phone(phone):
                self.add_error(f'{slot}_phone', INVALID_PHONE)
        return cleaned


class StaffForm(forms.Form):
    name = forms.CharField(max_length=200, label='שם')
    role = forms.ChoiceField(choices=Staff.Role.choices, initial=Staff.Role.TEACHER, label='תפקיד')
    birthday = forms.CharField(
        required=False, label='יום הולדת',
        widget=forms.TextInput(attrs={'placeholder': 'DD/MM'}),
    )


class ParentIntakeForm(forms.Form):
    """
    Public form a parent fills in from the class link.  Child name, birthday
    and the first parent are required; the second parent is optional.
    """

    name = forms.CharField(
        max_length=200, label='שם מלא של הילד/ה',
        error_messages={'required': 'שם מלא הוא שדה חובה'},
    )
    birthday = forms.DateField(
        label='תאריך לידה',
        widget=forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
        input_formats=['%Y-%m-%d'],
        error_messages={'required': 'תאריך לידה הוא שדה חובה'},
    )
    address = forms.CharField(required=False, max_length=300, label='כתובת')
    parent1_name = forms.CharField(
        max_length=200, label='שם הורה 1',
        error_messages={'required': 'שם הורה 1 הוא שדה חובה'},
    )
    parent1_phone = forms.CharField(
        max_length=20, label='טלפון הורה 1',
        error_messages={'required': 'טלפון הורה 1 הוא שדה חובה'},
    )
    parent2_name = forms.CharField(required=False, max_length=200, label='שם הורה 2')
    parent2_phone = forms.CharField(required=False, max_length=20, label='טלפון הורה 2')

    def clean_parent1_phone(self):
        phone = self.cleaned_data['parent1_phone']
        if not is_valid_phone(phone):
            raise forms.ValidationError(INVALID_PHONE)
        return phone

    def clean(self):
        cleaned = super().clean()
        name = (cleaned.get('parent2_name') or '').strip()
        phone = (cleaned.get('parent2_phone') or '').strip()
        if name and phone and not is_valid_phone(phone):
            self.add_error('parent2_phone', INVALID_PHONE)
        return cleaned


class SpreadsheetUploadForm(forms.Form):
    """Upload an .xlsx built from the template; cleaned to a list of row dicts."""

    file = forms.FileField(
        label='קובץ Excel',
        help_text='Columns: שם הילד/ה, שם הורה 1, טלפון הורה 1, שם הורה 2, טלפון הורה 2, כתובת',
    )

    def clean_file(self):
        f = self.cleaned_data['file']
        if not f.name.lower().endswith('.xlsx'):
            raise forms.ValidationError('File must be an .xlsx workbook.')
        try:
            rows = parse_children_workbook(f)
        except SpreadsheetError as exc:
            raise forms.ValidationError(str(exc))
        if not rows:
            raise forms.ValidationError('The workbook has no children rows.')
        return rows
