import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='SchoolClass',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Class name, e.g. "גן חבצלת" or "כיתה ב׳ 2".', max_length=200)),
                ('school_name', models.CharField(blank=True, max_length=200)),
                ('city', models.CharField(blank=True, max_length=100)),
                ('year', models.CharField(blank=True, help_text='School year label, e.g. "2026".', max_length=20)),
                ('budget_type', models.CharField(
                    choices=[('per-child', 'Per child'), ('total', 'Total amount')],
                    default='per-child',
                    max_length=20,
                )),
                ('budget_amount', models.DecimalField(
                    decimal_places=2, default=0, max_digits=10,
                    help_text='Amount per child (per-child mode) or the whole budget (total mode), NIS.',
                )),
                ('total_budget', models.DecimalField(
                    decimal_places=2, default=0, max_digits=12,
                    help_text='Budget available for allocation across events (NIS).',
                )),
                ('estimated_children', models.PositiveIntegerField(
                    default=0, help_text='Expected number of children, used by the allocation editor.',
                )),
                ('estimated_staff', models.PositiveIntegerField(
                    default=0, help_text='Expected number of staff members, used by the allocation editor.',
                )),
                ('invite_code', models.CharField(
                    help_text='Public token for the calendar / directory / parent-form pages.',
                    max_length=16,
                    unique=True,
                )),
                ('paybox_link', models.URLField(
                    blank=True, help_text='Payment link shown to parents after they fill in the form.',
                )),
                ('directory_settings', models.JSONField(
                    blank=True, null=True, help_text='Visibility flags for the public directory page.',
                )),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('created_by', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='created_classes',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'verbose_name': 'Class',
                'verbose_name_plural': 'Classes',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='ClassMember',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('role', models.CharField(
                    choices=[('admin', 'Admin'), ('member', 'Member')],
                    default='admin',
                    max_length=20,
                )),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('school_class', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='members',
                    to='classes.schoolclass',
                )),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='class_memberships',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'verbose_name': 'Class Member',
                'verbose_name_plural': 'Class Members',
                'ordering': ['created_at'],
            },
        ),
        migrations.CreateModel(
            name='OnboardingResponse',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('responses', models.JSONField(default=dict)),
                ('completed_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('user', models.OneToOneField(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='onboarding_response',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'verbose_name': 'Onboarding Response',
                'verbose_name_plural': 'Onboarding Responses',
            },
        ),
        migrations.CreateModel(
            name='AdminInvitation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('email', models.EmailField(max_length=254)),
                ('status', models.CharField(
                    choices=[('pending', 'Pending'), ('accepted', 'Accepted')],
                    default='pending',
                    max_length=20,
                )),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('invited_by', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='sent_admin_invitations',
                    to=settings.AUTH_USER_MODEL,
                )),
                ('school_class', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE,
                    related_name='admin_invitations',
                    to='classes.schoolclass',
                )),
            ],
            options={
                'verbose_name': 'Admin Invitation',
                'verbose_name_plural': 'Admin Invitations',
                'ordering': ['-created_at'],
            },
        ),
    ]
