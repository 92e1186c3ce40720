"""
finances/models.py
──────────────────
The money engine.  All models here deal with the class budget: where it is
planned to go, what was collected and what was spent.

Event        – a budgeted occasion (holiday, birthdays, trip) with its
               allocation split between kids and staff.
PaymentRound – a collection drive, e.g. "Annual fee – 250 NIS per child".
Payment      – one payment (or expected payment) towards the class fund.
Expense      – money spent from the fund, optionally charged to an Event.
"""

from django.db import models
from django.utils import timezone


class Event(models.Model):
    """
    A calendar occasion the committee budgets for.

    `allocated_budget` is the planned spend; in the kids/staff split
    it equals allocated_for_kids + allocated_for_staff.  `spent_amount` is
    kept in step with linked Expenses by finances.services.
    """

    school_class = models.ForeignKey(
        'classes.SchoolClass',
        on_delete=models.CASCADE,
        related_name='events',
    )
    name = models.CharField(max_length=200)
    event_type = models.CharField(
        max_length=50,
        help_text='Fixed event id (e.g. "purim") or "custom-…" for user events.',
    )
    icon = models.CharField(max_length=16, blank=True)
    event_date = models.DateField(
        null=True,
        blank=True,
        help_text='Often an estimate for recurring holidays.',
    )
    allocated_budget = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    spent_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    # Kids / staff split of the allocation
    amount_per_kid = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    amount_per_staff = models.DecimalField(max_digits=8, decimal_places=2, default=0)
    allocated_for_kids = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    allocated_for_staff = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    kids_count = models.PositiveIntegerField(default=0)
    staff_count = models.PositiveIntegerField(default=0)

    sort_order = models.PositiveIntegerField(default=0)
    is_paid = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['event_date', 'sort_order', 'id']
        verbose_name = 'Event'
        verbose_name_plural = 'Events'

    def __str__(self):
        return f"{self.icon} {self.name}".strip()

    @property
    def remaining_budget(self):
        return self.allocated_budget - self.spent_amount


class PaymentRound(models.Model):
    """A request to every child in the class to pay `amount_per_child`."""

    school_class = models.ForeignKey(
        'classes.SchoolClass',
        on_delete=models.CASCADE,
        related_name='payment_rounds',
    )
    name = models.CharField(
        max_length=200,
        help_text='e.g. "תשלום שנתי" or "גיוס לטיול".',
    )
    amount_per_child = models.DecimalField(max_digits=8, decimal_places=2)
    due_date = models.DateField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Payment Round'
        verbose_name_plural = 'Payment Rounds'

    def __str__(self):
        return f"{self.name} – {self.amount_per_child} NIS"


class Payment(models.Model):
    """
    One payment towards the class fund.

    Rows created by a PaymentRound start as PENDING for every child and move
    to COMPLETED when the committee marks the child as paid.
    """

    class Status(models.TextChoices):
        PENDING   = 'pending',   'Pending'
        COMPLETED = 'completed', 'Completed'
        FAILED    = 'failed',    'Failed'
        REFUNDED  = 'refunded',  'Refunded'

    school_class = models.ForeignKey(
        'classes.SchoolClass',
        on_delete=models.CASCADE,
        related_name='payments',
    )
    parent = models.ForeignKey(
        'directory.Parent',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments',
    )
    child = models.ForeignKey(
        'directory.Child',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='payments',
    )
    payment_round = models.ForeignKey(
        PaymentRound,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='payments',
    )
    amount = models.DecimalField(max_digits=8, decimal_places=2)
    payment_date = models.DateTimeField(null=True, blank=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
    )
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']
        verbose_name = 'Payment'
        verbose_name_plural = 'Payments'

    def __str__(self):
        payer = self.child or self.parent or 'unknown'
        return f"{payer} – {self.amount} NIS ({self.get_status_display()})"


class Expense(models.Model):
    """Money spent FROM the class fund, optionally charged to an Event."""

    school_class = models.ForeignKey(
        'classes.SchoolClass',
        on_delete=models.CASCADE,
        related_name='expenses',
    )
    event = models.ForeignKey(
        Event,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='expenses',
    )
    description = models.CharField(max_length=300)
    amount = models.DecimalField(max_digits=8, decimal_places=2)
    expense_date = models.DateField(default=timezone.localdate)
    receipt_url = models.URLField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['-expense_date', '-created_at']
        verbose_name = 'Expense'
        verbose_name_plural = 'Expenses'

    def __str__(self):
        return f"{self.description} – {self.amount} NIS ({self.expense_date})"
