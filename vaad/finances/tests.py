import datetime
from decimal import Decimal
from urllib.parse import unquote

from django.test import TestCase
from django.urls import reverse

from accounts.models import User
from classes.models import ClassMember, SchoolClass
from directory.models import Child, ChildParent, Parent

from . import services
from .budget import (
    BudgetValidationError,
    calculate_total_budget,
    event_allocation,
    summarize_budget,
    validate_budget_total,
)
from .event_types import get_event_date, get_event_icon
from .models import Event, Expense, Payment, PaymentRound


class BudgetArithmeticTests(TestCase):
    def test_total_budget(self):
        self.assertEqual(calculate_total_budget('per-child', 100, 5), 500)
        self.assertEqual(calculate_total_budget('total', 2500, 5), 2500)

    def test_event_allocation_split(self):
        self.assertEqual(event_allocation(20, 50, 25, 2), {
            'allocated_for_kids':  500,
            'allocated_for_staff': 100,
            'allocated_budget':    600,
        })

    def test_summary_may_go_negative(self):
        summary = summarize_budget(1000, [
            {'allocated_budget': 700, 'spent_amount': 200},
            {'allocated_budget': 500, 'spent_amount': 0},
        ])
        self.assertEqual(summary['allocated'], Decimal('1200'))
        self.assertEqual(summary['remaining'], Decimal('-200'))
        self.assertEqual(summary['percentage_used'], 120)
        self.assertTrue(summary['over_allocated'])

    def test_summary_of_empty_budget(self):
        summary = summarize_budget(0, [])
        self.assertEqual(summary['percentage_used'], 0)
        self.assertFalse(summary['over_allocated'])

    def test_validate_budget_total(self):
        validate_budget_total(Decimal('500'), Decimal('500'))
        with self.assertRaises(BudgetValidationError):
            validate_budget_total(Decimal('499'), Decimal('500'))


class EventTypeTests(TestCase):
    def test_icons(self):
        self.assertEqual(get_event_icon('purim'), '🎭')
        self.assertEqual(get_event_icon('hanukkah'), '🕎')
        self.assertEqual(get_event_icon('something-new'), '✨')

    def test_dates(self):
        today = datetime.date(2025, 9, 1)
        self.assertEqual(get_event_date('hanukkah', today), datetime.date(2025, 12, 7))
        self.assertEqual(get_event_date('purim', today), datetime.date(2026, 3, 15))
        self.assertIsNone(get_event_date('kids-birthdays', today))


class FinanceServiceTestCase(TestCase):
    def setUp(self):
        self.school_class = SchoolClass.objects.create(
            name='גן חבצלת', invite_code='ABCD1234', total_budget=Decimal('1000'),
        )
        self.noa = Child.objects.create(school_class=self.school_class, name='נועה')
        self.itai = Child.objects.create(school_class=self.school_class, name='איתי')
        parent = Parent.objects.create(school_class=self.school_class, name='רונית', phone='0501234567')
        ChildParent.objects.create(child=self.itai, parent=parent, relationship='parent1')


class PaymentRoundTests(FinanceServiceTestCase):
    def test_round_creates_pending_payment_per_child(self):
        result = services.create_payment_round(self.school_class, 'דמי ועד', 250)
        self.assertTrue(result['success'])

        payments = Payment.objects.filter(payment_round=result['data'])
        self.assertEqual(payments.count(), 2)
        self.assertTrue(all(p.status == Payment.Status.PENDING for p in payments))
        self.assertTrue(all(p.amount == Decimal('250') for p in payments))

    def test_paid_stamps_date_and_unpaid_clears_it(self):
        payment_round = services.create_payment_round(self.school_class, 'דמי ועד', 250)['data']
        payment = Payment.objects.get(payment_round=payment_round, child=self.noa)

        services.update_payment_status(self.school_class, payment.pk, 'paid')
        payment.refresh_from_db()
        self.assertEqual(payment.status, Payment.Status.COMPLETED)
        self.assertIsNotNone(payment.payment_date)

        services.update_payment_status(self.school_class, payment.pk, 'unpaid')
        payment.refresh_from_db()
        self.assertEqual(payment.status, Payment.Status.PENDING)
        self.assertIsNone(payment.payment_date)

    def test_unknown_status_is_rejected(self):
        payment_round = services.create_payment_round(self.school_class, 'דמי ועד', 250)['data']
        payment = Payment.objects.filter(payment_round=payment_round).first()
        result = services.update_payment_status(self.school_class, payment.pk, 'maybe')
        self.assertFalse(result['success'])

    def test_bulk_update(self):
        payment_round = services.create_payment_round(self.school_class, 'דמי ועד', 250)['data']
        ids = list(Payment.objects.filter(payment_round=payment_round).values_list('pk', flat=True))
        result = services.bulk_update_payments(self.school_class, ids, 'paid')
        self.assertEqual(result['updated'], 2)

    def test_round_summary(self):
        payment_round = services.create_payment_round(self.school_class, 'דמי ועד', 250)['data']
        payment = Payment.objects.get(payment_round=payment_round, child=self.noa)
        services.update_payment_status(self.school_class, payment.pk, 'paid')

        [round_data] = services.get_payment_rounds_with_payments(self.school_class)
        summary = round_data['summary']
        self.assertEqual(summary['total_children'], 2)
        self.assertEqual(summary['paid_count'], 1)
        self.assertEqual(summary['unpaid_count'], 1)
        self.assertEqual(summary['total_collected'], Decimal('250'))
        self.assertEqual(summary['expected_total'], Decimal('500'))
        self.assertEqual(summary['progress_percentage'], 50)

    def test_reminder_lists_unpaid_children_with_parents(self):
        payment_round = services.create_payment_round(self.school_class, 'דמי ועד', 250)['data']
        payment = Payment.objects.get(payment_round=payment_round, child=self.noa)
        services.update_payment_status(self.school_class, payment.pk, 'paid')

        [round_data] = services.get_payment_rounds_with_payments(self.school_class)
        reminder = services.build_payment_reminder(round_data)

        self.assertIn('"דמי ועד" - ₪250', reminder['message'])
        self.assertIn('איתי (רונית)', reminder['message'])
        self.assertNotIn('נועה', reminder['message'])
        self.assertTrue(reminder['whatsapp_url'].startswith('https://wa.me/?text='))
        self.assertEqual(unquote(reminder['whatsapp_url'].split('text=', 1)[1]), reminder['message'])

    def test_delete_round_removes_payments(self):
        payment_round = services.create_payment_round(self.school_class, 'דמי ועד', 250)['data']
        self.assertTrue(services.delete_payment_round(self.school_class, payment_round.pk)['success'])
        self.assertFalse(Payment.objects.exists())
        self.assertFalse(PaymentRound.objects.exists())


class ExpenseTests(FinanceServiceTestCase):
    def setUp(self):
        super().setUp()
        self.event = Event.objects.create(
            school_class=self.school_class, name='פורים', event_type='purim',
            allocated_budget=Decimal('300'),
        )

    def test_expense_adds_to_event_spent(self):
        result = services.create_expense(self.school_class, {
            'description': 'משלוחי מנות', 'amount': '120', 'event_id': self.event.pk,
        })
        self.assertTrue(result['success'])
        self.event.refresh_from_db()
        self.assertEqual(self.event.spent_amount, Decimal('120'))

    def test_delete_expense_never_below_zero(self):
        expense = services.create_expense(self.school_class, {
            'description': 'משלוחי מנות', 'amount': '120', 'event_id': self.event.pk,
        })['data']
        Event.objects.filter(pk=self.event.pk).update(spent_amount=Decimal('50'))

        self.assertTrue(services.delete_expense(self.school_class, expense.pk)['success'])
        self.event.refresh_from_db()
        self.assertEqual(self.event.spent_amount, Decimal('0'))
        self.assertFalse(Expense.objects.exists())

    def test_expense_for_other_class_event_fails(self):
        other = SchoolClass.objects.create(name='כיתה א׳', invite_code='ZZZZ9999')
        result = services.create_expense(other, {
            'description': 'x', 'amount': '10', 'event_id': self.event.pk,
        })
        self.assertFalse(result['success'])


class BudgetSettingsTests(FinanceServiceTestCase):
    def setUp(self):
        super().setUp()
        Event.objects.create(
            school_class=self.school_class, name='פורים', event_type='purim',
            allocated_budget=Decimal('800'),
        )

    def test_total_below_allocated_is_rejected(self):
        result = services.update_class_budget_settings(
            self.school_class, amount_per_child=100, estimated_children=5, estimated_staff=2,
        )
        self.assertFalse(result['success'])
        self.assertIn('exceed', result['error'])

        self.school_class.refresh_from_db()
        self.assertEqual(self.school_class.total_budget, Decimal('1000'))

    def test_default_total_is_amount_times_children(self):
        result = services.update_class_budget_settings(
            self.school_class, amount_per_child=200, estimated_children=5, estimated_staff=2,
        )
        self.assertTrue(result['success'])
        self.school_class.refresh_from_db()
        self.assertEqual(self.school_class.total_budget, Decimal('1000'))
        self.assertEqual(self.school_class.estimated_staff, 2)

    def test_explicit_total_wins(self):
        services.update_class_budget_settings(
            self.school_class, amount_per_child=100, estimated_children=5, estimated_staff=2,
            total_budget=1500,
        )
        self.school_class.refresh_from_db()
        self.assertEqual(self.school_class.total_budget, Decimal('1500'))

    def test_bad_amount_returns_failure(self):
        result = services.update_class_budget_settings(
            self.school_class, amount_per_child='abc', estimated_children=5, estimated_staff=2,
        )
        self.assertFalse(result['success'])
        self.assertIn('Invalid amount', result['error'])
        self.school_class.refresh_from_db()
        self.assertEqual(self.school_class.total_budget, Decimal('1000'))

    def test_update_event_budget(self):
        event = Event.objects.get(school_class=self.school_class)
        services.update_event_budget(self.school_class, event.pk, 450)
        event.refresh_from_db()
        self.assertEqual(event.allocated_budget, Decimal('450'))


class EventAllocationTests(FinanceServiceTestCase):
    def test_new_and_existing_events(self):
        existing = Event.objects.create(
            school_class=self.school_class, name='פורים', event_type='purim',
            allocated_budget=Decimal('300'),
        )
        result = services.update_event_allocations(self.school_class, [
            {'id': existing.pk, 'event_type': 'purim', 'name': 'פורים',
             'amount_per_kid': 10, 'amount_per_staff': 0, 'kids_count': 20, 'staff_count': 2},
            {'id': None, 'event_type': 'hanukkah', 'name': 'חנוכה',
             'amount_per_kid': 15, 'amount_per_staff': 30, 'kids_count': 20, 'staff_count': 2},
        ])
        self.assertTrue(result['success'])

        existing.refresh_from_db()
        self.assertEqual(existing.allocated_budget, Decimal('200'))

        hanukkah = Event.objects.get(event_type='hanukkah')
        self.assertEqual(hanukkah.icon, '🕎')
        self.assertEqual(hanukkah.allocated_for_kids, Decimal('300'))
        self.assertEqual(hanukkah.allocated_for_staff, Decimal('60'))
        self.assertEqual(hanukkah.allocated_budget, Decimal('360'))

    def test_disabled_event_is_zeroed_not_deleted(self):
        event = Event.objects.create(
            school_class=self.school_class, name='פורים', event_type='purim',
            allocated_budget=Decimal('300'), allocated_for_kids=Decimal('300'),
        )
        services.update_event_allocations(self.school_class, [], disabled_event_ids=[event.pk])
        event.refresh_from_db()
        self.assertEqual(event.allocated_budget, Decimal('0'))
        self.assertEqual(event.allocated_for_kids, Decimal('0'))


class FinanceViewsTests(FinanceServiceTestCase):
    def setUp(self):
        super().setUp()
        self.user = User.objects.create_user('dana', 'dana@example.com', 'pass12345')
        ClassMember.objects.create(school_class=self.school_class, user=self.user, role=ClassMember.Role.ADMIN)
        self.client.force_login(self.user)

    def test_budget_page(self):
        resp = self.client.get(reverse('budget'))
        self.assertEqual(resp.status_code, 200)

    def test_payments_page_with_round(self):
        services.create_payment_round(self.school_class, 'דמי ועד', 250)
        resp = self.client.get(reverse('payments'))
        self.assertContains(resp, 'דמי ועד')
        self.assertContains(resp, 'wa.me')

    def test_create_round_through_view(self):
        resp = self.client.post(reverse('create_payment_round'), {'name': 'טיול', 'amount_per_child': '80'})
        self.assertRedirects(resp, reverse('payments'), fetch_redirect_response=False)
        self.assertEqual(Payment.objects.filter(payment_round__name='טיול').count(), 2)

    def test_budget_settings_rejection_shows_message(self):
        Event.objects.create(
            school_class=self.school_class, name='פורים', event_type='purim',
            allocated_budget=Decimal('800'),
        )
        resp = self.client.post(reverse('budget_settings'), {
            'amount_per_child': '100', 'estimated_children': '5', 'estimated_staff': '2',
        }, follow=True)
        self.assertContains(resp, 'exceed')
        self.school_class.refresh_from_db()
        self.assertEqual(self.school_class.total_budget, Decimal('1000'))

    def test_post_only_endpoints(self):
        resp = self.client.get(reverse('log_expense'))
        self.assertEqual(resp.status_code, 405)
