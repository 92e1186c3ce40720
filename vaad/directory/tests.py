import datetime
import io

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.urls import reverse
from django.utils import timezone
from openpyxl import Workbook, load_workbook

from accounts.models import User
from classes.models import ClassMember, SchoolClass

from . import services
from .birthdays import parse_day_month, parse_full_date
from .forms import ParentIntakeForm
from .models import Child, ChildParent, Parent, Staff
from .spreadsheet import (
    DATA_SHEET_TITLE,
    SpreadsheetError,
    build_children_template,
    parse_children_workbook,
)


def workbook_bytes(rows):
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf


class BirthdayParsingTests(TestCase):
    def test_day_month(self):
        self.assertEqual(parse_day_month('15/03', year=2026), '2026-03-15')
        self.assertEqual(parse_day_month('3/3', year=2026), '2026-03-03')
        self.assertIsNone(parse_day_month('31/02', year=2026))
        self.assertIsNone(parse_day_month('march'))
        self.assertIsNone(parse_day_month(''))

    def test_full_date(self):
        self.assertEqual(parse_full_date('07/11/2019'), '2019-11-07')
        self.assertIsNone(parse_full_date('07/11'))
        self.assertIsNone(parse_full_date('32/01/2019'))
        self.assertIsNone(parse_full_date('01/01/1899'))
        self.assertIsNone(parse_full_date(None))


class DirectoryServiceTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user('dana', 'dana@example.com', 'pass12345')
        self.school_class = SchoolClass.objects.create(name='גן חבצלת', invite_code='ABCD1234')

    def test_add_child_with_one_parent(self):
        result = services.add_child(self.user, self.school_class, {
            'name': 'נועה',
            'birthday': '07/11/2019',
            'parent1_name': 'רונית',
        })
        self.assertTrue(result['success'])

        child = Child.objects.get(pk=result['data'].pk)
        self.assertEqual(child.birthday, datetime.date(2019, 11, 7))
        links = ChildParent.objects.filter(child=child)
        self.assertEqual(links.count(), 1)
        self.assertEqual(links.get().relationship, ChildParent.Relationship.PARENT1)
        self.assertIsNone(links.get().parent.phone)

    def test_add_child_with_two_parents_keeps_order(self):
        result = services.add_child(self.user, self.school_class, {
            'name': 'איתי',
            'parent1_name': 'רונית', 'parent1_phone': '0501234567',
            'parent2_name': 'אבי', 'parent2_phone': '0527654321',
        })
        links = {link.relationship: link.parent.name for link in result['data'].parent_links.all()}
        self.assertEqual(links, {'parent1': 'רונית', 'parent2': 'אבי'})

    def test_update_child_rejects_blank_name(self):
        child = Child.objects.create(school_class=self.school_class, name='נועה')
        result = services.update_child(self.school_class, child.pk, {'name': '  '})
        self.assertFalse(result['success'])
        self.assertEqual(result['error'], 'Child name is required')

    def test_update_child_clears_invalid_birthday_and_updates_parent(self):
        result = services.add_child(self.user, self.school_class, {
            'name': 'נועה', 'birthday': '07/11/2019', 'parent1_name': 'רונית',
        })
        child = result['data']
        parent = child.parent_links.get().parent

        result = services.update_child(self.school_class, child.pk, {
            'name': 'נועה כהן',
            'birthday': '45/13/2019',
            'parent1_id': parent.pk,
            'parent1_name': 'רונית כהן',
            'parent1_phone': '0501234567',
        })
        self.assertTrue(result['success'])

        child.refresh_from_db()
        parent.refresh_from_db()
        self.assertEqual(child.name, 'נועה כהן')
        self.assertIsNone(child.birthday)
        self.assertEqual(parent.name, 'רונית כהן')
        self.assertEqual(parent.phone, '0501234567')

    def test_update_child_in_other_class_fails(self):
        other = SchoolClass.objects.create(name='כיתה א׳', invite_code='ZZZZ9999')
        child = Child.objects.create(school_class=other, name='נועה')
        result = services.update_child(self.school_class, child.pk, {'name': 'שם אחר'})
        self.assertFalse(result['success'])

    def test_delete_child(self):
        child = Child.objects.create(school_class=self.school_class, name='נועה')
        self.assertTrue(services.delete_child(self.school_class, child.pk)['success'])
        self.assertFalse(services.delete_child(self.school_class, child.pk)['success'])

    def test_staff_birthday_uses_current_year(self):
        result = services.add_staff(self.school_class, {'name': 'מירב', 'birthday': '15/03'})
        staff = Staff.objects.get(pk=result['data'].pk)
        self.assertEqual(staff.birthday, datetime.date(timezone.localdate().year, 3, 15))
        self.assertEqual(staff.role, Staff.Role.TEACHER)

        services.update_staff(self.school_class, staff.pk, {'name': 'מירב', 'role': 'assistant', 'birthday': '3/3'})
        staff.refresh_from_db()
        self.assertEqual(staff.birthday, datetime.date(timezone.localdate().year, 3, 3))
        self.assertEqual(staff.role, Staff.Role.ASSISTANT)

    def test_phone_cleaning(self):
        self.assertEqual(services.clean_phone('050-123 4567'), '0501234567')
        self.assertTrue(services.is_valid_phone('050-1234567'))
        self.assertFalse(services.is_valid_phone('12345'))


class ImportChildrenTests(TestCase):
    ROW = {'name': 'נועה לוי', 'parent1_name': 'רונית', 'parent1_phone': '050 1234567', 'birthday': '2019-03-07'}

    def setUp(self):
        self.user = User.objects.create_user('dana', 'dana@example.com', 'pass12345')
        self.school_class = SchoolClass.objects.create(name='גן חבצלת', invite_code='ABCD1234')

    def test_reimport_skips_existing_child(self):
        first = services.import_children(self.user, self.school_class, [self.ROW])
        self.assertEqual((first['imported'], first['skipped']), (1, 0))

        again = dict(self.ROW, name=' נועה לוי ', parent1_phone='0501234567')
        second = services.import_children(self.user, self.school_class, [again])
        self.assertTrue(second['success'])
        self.assertEqual((second['imported'], second['skipped']), (0, 1))
        self.assertEqual(Child.objects.filter(school_class=self.school_class).count(), 1)

    def test_repeated_row_in_one_batch_is_imported_once(self):
        result = services.import_children(self.user, self.school_class, [self.ROW, dict(self.ROW)])
        self.assertEqual((result['imported'], result['skipped']), (1, 1))
        self.assertEqual(Child.objects.count(), 1)

    def test_same_name_with_other_phone_is_a_different_child(self):
        services.import_children(self.user, self.school_class, [self.ROW])
        other = dict(self.ROW, parent1_phone='0527654321')
        result = services.import_children(self.user, self.school_class, [other])
        self.assertEqual(result['imported'], 1)
        self.assertEqual(Child.objects.count(), 2)


class ParentIntakeTests(TestCase):
    def setUp(self):
        self.school_class = SchoolClass.objects.create(name='גן חבצלת', invite_code='ABCD1234')

    def submission(self, **overrides):
        data = {
            'name': 'נועה לוי',
            'birthday': datetime.date(2019, 11, 7),
            'address': 'הרימון 4',
            'parent1_name': 'רונית',
            'parent1_phone': '050-123-4567',
            'parent2_name': '',
            'parent2_phone': '',
        }
        data.update(overrides)
        return data

    def test_first_submission_creates_child_and_parent(self):
        result = services.submit_parent_form(self.school_class, self.submission())
        self.assertTrue(result['success'])
        self.assertTrue(result['created'])

        parent = Parent.objects.get()
        self.assertEqual(parent.phone, '0501234567')
        self.assertEqual(parent.school_class, self.school_class)

    def test_same_name_any_case_updates_instead_of_duplicating(self):
        services.submit_parent_form(self.school_class, self.submission(name='Noa Levi'))
        result = services.submit_parent_form(self.school_class, self.submission(
            name='NOA LEVI',
            address='האלון 9',
            parent1_name='רונית לוי',
        ))

        self.assertFalse(result['created'])
        self.assertEqual(Child.objects.filter(school_class=self.school_class).count(), 1)
        child = Child.objects.get()
        self.assertEqual(child.address, 'האלון 9')
        self.assertEqual(Parent.objects.count(), 1)
        self.assertEqual(Parent.objects.get().name, 'רונית לוי')

    def test_second_parent_added_later(self):
        services.submit_parent_form(self.school_class, self.submission())
        services.submit_parent_form(self.school_class, self.submission(
            parent2_name='אבי', parent2_phone='052 765 4321',
        ))
        child = Child.objects.get()
        self.assertEqual(
            sorted(child.parent_links.values_list('relationship', flat=True)),
            ['parent1', 'parent2'],
        )

    def test_form_requires_valid_phone(self):
        form = ParentIntakeForm(data={
            'name': 'נועה', 'birthday': '2019-11-07',
            'parent1_name': 'רונית', 'parent1_phone': '123',
        })
        self.assertFalse(form.is_valid())
        self.assertIn('parent1_phone', form.errors)


class SpreadsheetTests(TestCase):
    def test_hebrew_headers_and_date_cells(self):
        buf = workbook_bytes([
            ['שם הילד/ה', 'שם הורה 1', 'טלפון הורה 1', 'כתובת', 'תאריך לידה'],
            ['נועה', 'רונית', 501234567, 'הרימון 4', datetime.datetime(2019, 11, 7)],
            ['', 'לא', 'נספר', '', ''],
            ['איתי', 'אבי', '052-7654321', None, '03/02/2020'],
        ])
        rows = parse_children_workbook(buf)

        self.assertEqual(len(rows), 2)
        self.assertEqual(rows[0]['name'], 'נועה')
        self.assertEqual(rows[0]['parent1_phone'], '501234567')
        self.assertEqual(rows[0]['birthday'], '2019-11-07')
        self.assertEqual(rows[1]['birthday'], '2020-02-03')

    def test_english_headers(self):
        buf = workbook_bytes([
            ['Child Name', 'Parent 1 Name', 'Parent 1 Phone'],
            ['Noa', 'Ronit', '0501234567'],
        ])
        rows = parse_children_workbook(buf)
        self.assertEqual(rows[0]['name'], 'Noa')
        self.assertEqual(rows[0]['parent1_name'], 'Ronit')

    def test_missing_name_column(self):
        buf = workbook_bytes([['כתובת'], ['הרימון 4']])
        with self.assertRaises(SpreadsheetError):
            parse_children_workbook(buf)

    def test_template_has_data_and_instruction_sheets(self):
        wb = load_workbook(io.BytesIO(build_children_template()))
        self.assertEqual(wb.sheetnames[0], DATA_SHEET_TITLE)
        self.assertEqual(len(wb.sheetnames), 2)
        self.assertEqual(wb[DATA_SHEET_TITLE].sheet_view.rightToLeft, True)

    def test_template_parses_back(self):
        rows = parse_children_workbook(io.BytesIO(build_children_template()))
        self.assertEqual(len(rows), 1)
        self.assertTrue(rows[0]['name'])


class DirectoryViewsTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user('dana', 'dana@example.com', 'pass12345')
        self.school_class = SchoolClass.objects.create(name='גן חבצלת', invite_code='ABCD1234')
        ClassMember.objects.create(school_class=self.school_class, user=self.user, role=ClassMember.Role.ADMIN)
        self.client.force_login(self.user)

    def test_directory_page(self):
        Child.objects.create(school_class=self.school_class, name='נועה')
        resp = self.client.get(reverse('directory'))
        self.assertContains(resp, 'נועה')

    def test_add_child_through_form(self):
        resp = self.client.post(reverse('child_create'), {
            'name': 'איתי',
            'birthday': '03/02/2020',
            'parent1_name': 'אבי',
            'parent1_phone': '0527654321',
        })
        self.assertRedirects(resp, reverse('directory'), fetch_redirect_response=False)
        self.assertEqual(Child.objects.get().birthday, datetime.date(2020, 2, 3))

    def test_child_of_other_class_is_404(self):
        other = SchoolClass.objects.create(name='כיתה א׳', invite_code='ZZZZ9999')
        child = Child.objects.create(school_class=other, name='נועה')
        resp = self.client.get(reverse('child_edit', args=[child.pk]))
        self.assertEqual(resp.status_code, 404)

    def test_template_download(self):
        resp = self.client.get(reverse('children_template'))
        self.assertEqual(resp.status_code, 200)
        self.assertIn('attachment', resp['Content-Disposition'])

    def test_import_children(self):
        buf = workbook_bytes([
            ['שם הילד/ה', 'שם הורה 1', 'טלפון הורה 1'],
            ['נועה', 'רונית', '0501234567'],
            ['איתי', 'אבי', '0527654321'],
        ])
        upload = SimpleUploadedFile(
            'children.xlsx', buf.getvalue(),
            content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        )
        resp = self.client.post(reverse('children_import'), {'file': upload})
        self.assertRedirects(resp, reverse('directory'), fetch_redirect_response=False)
        self.assertEqual(Child.objects.filter(school_class=self.school_class).count(), 2)
        self.assertEqual(Parent.objects.count(), 2)
