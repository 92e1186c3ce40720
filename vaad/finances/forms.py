"""
finances/forms.py
─────────────────
Forms for the committee admin to edit the budget plan and event
allocations, open payment rounds and record expenses.
"""

from django import forms
from django.utils import timezone

from .models import Event, PaymentRound


class BudgetSettingsForm(forms.Form):
    """
    The class budget plan.  Leaving the total empty uses
    amount per child × estimated children.
    """

    amount_per_child = forms.DecimalField(
        max_digits=10, decimal_places=2, min_value=0,
        label='סכום לילד (₪)',
        widget=forms.NumberInput(attrs={'step': '1', 'min': '0'}),
    )
    estimated_children = forms.IntegerField(min_value=0, label='מספר ילדים')
    estimated_staff = forms.IntegerField(min_value=0, label='מספר אנשי צוות')
    total_budget = forms.DecimalField(
        max_digits=12, decimal_places=2, min_value=0, required=False,
        label='תקציב כולל (₪)',
        widget=forms.NumberInput(attrs={'step': '1', 'min': '0'}),
    )


class EventAllocationForm(forms.Form):
    """
    One row of the allocation editor.  Rendered once per event with a
    prefix of "event-<id>" (existing) or "new-<event_type>" (default event
    not created yet).
    """

    enabled = forms.BooleanField(required=False)
    amount_per_kid = forms.DecimalField(
        max_digits=8, decimal_places=2, min_value=0, required=False,
        widget=forms.NumberInput(attrs={'step': '1', 'min': '0'}),
    )
    amount_per_staff = forms.DecimalField(
        max_digits=8, decimal_places=2, min_value=0, required=False,
        widget=forms.NumberInput(attrs={'step': '1', 'min': '0'}),
    )


class CustomEventForm(forms.Form):
    name = forms.CharField(
        max_length=200, label='אירוע נוסף',
        widget=forms.TextInput(attrs={'placeholder': 'שם האירוע'}),
    )


class PaymentRoundForm(forms.ModelForm):
    """Form for the committee to open a new collection round."""

    class Meta:
        model  = PaymentRound
        fields = ['name', 'amount_per_child', 'due_date']
        widgets = {
            'name':             forms.TextInput(attrs={'placeholder': 'e.g. תשלום שנתי', 'class': 'form-control'}),
            'amount_per_child': forms.NumberInput(attrs={'step': '1', 'min': '0', 'class': 'form-control'}),
            'due_date':         forms.DateInput(attrs={'type': 'date', 'class': 'form-control'}, format='%Y-%m-%d'),
        }

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['due_date'].input_formats = ['%Y-%m-%d']

    def clean_amount_per_child(self):
        amount = self.cleaned_data['amount_per_child']
        if amount <= 0:
            raise forms.ValidationError('Amount must be greater than zero.')
        return amount


class ExpenseForm(forms.Form):
    """Record money spent, optionally charged to one of the class's events."""

    description = forms.CharField(
        max_length=300, label='תיאור',
        widget=forms.TextInput(attrs={'placeholder': 'e.g. מתנות לפורים'}),
    )
    amount = forms.DecimalField(
        max_digits=8, decimal_places=2, min_value=0, label='סכום (₪)',
        widget=forms.NumberInput(attrs={'step': '0.01', 'min': '0'}),
    )
    expense_date = forms.DateField(
        label='תאריך',
        widget=forms.DateInput(attrs={'type': 'date'}, format='%Y-%m-%d'),
        input_formats=['%Y-%m-%d'],
    )
    event = forms.ModelChoiceField(
        queryset=Event.objects.none(),   # set in __init__
        required=False,
        label='אירוע',
        empty_label='— ללא אירוע —',
    )
    receipt_url = forms.URLField(required=False, label='קישור לקבלה')

    def __init__(self, *args, **kwargs):
        school_class = kwargs.pop('school_class')
        super().__init__(*args, **kwargs)
        self.fields['event'].queryset = Event.objects.filter(school_class=school_class)
        if not self.data.get('expense_date'):
            self.fields['expense_date'].initial = timezone.localdate()
