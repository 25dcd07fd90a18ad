# Generated manually for ledger app

from decimal import Decimal
import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


APPROVAL_CONSISTENT = (
    models.Q(status='pending', approved_by__isnull=True, approved_at__isnull=True)
    | models.Q(status='approved', approved_by__isnull=False, approved_at__isnull=False)
    | models.Q(status='rejected', approved_by__isnull=False)
)

STATUS_CHOICES = [('pending', 'Pending'), ('approved', 'Approved'), ('rejected', 'Rejected')]
TYPE_CHOICES = [('borrow', 'Borrow'), ('lend', 'Lend'), ('payment', 'Payment'), ('transfer', 'Transfer')]


def transaction_fields(model_name):
    return [
        ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
        ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
        ('description', models.CharField(blank=True, max_length=255)),
        ('transaction_date', models.DateField(default=django.utils.timezone.localdate)),
        ('status', models.CharField(choices=STATUS_CHOICES, default='pending', max_length=20)),
        ('approved_at', models.DateTimeField(blank=True, null=True)),
        ('rejection_reason', models.TextField(blank=True)),
        ('created_at', models.DateTimeField(auto_now_add=True)),
        ('updated_at', models.DateTimeField(auto_now=True)),
        ('from_partner', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name=f'{model_name}_sent', to=settings.AUTH_USER_MODEL)),
        ('to_partner', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name=f'{model_name}_received', to=settings.AUTH_USER_MODEL)),
        ('approved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name=f'{model_name}_reviewed', to=settings.AUTH_USER_MODEL)),
    ]


def transaction_constraints(model_name):
    return [
        models.CheckConstraint(condition=~models.Q(from_partner=models.F('to_partner')), name=f'ledger_{model_name}_distinct_parties'),
        models.CheckConstraint(condition=models.Q(amount__gt=0), name=f'ledger_{model_name}_amount_positive'),
        models.CheckConstraint(condition=APPROVAL_CONSISTENT, name=f'ledger_{model_name}_approval_consistent'),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='SaleEntry',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('date', models.DateField(unique=True)),
                ('online_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('cash_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), editable=False, help_text='online_amount + cash_amount', max_digits=12)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('partner', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sales', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='recorded_sales', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'sale_entries',
                'ordering': ['-date'],
                'verbose_name_plural': 'sale entries',
                'indexes': [models.Index(fields=['partner', 'date'], name='sale_partner_date_idx')],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(online_amount__gte=0) & models.Q(cash_amount__gte=0), name='sale_amounts_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='BusinessTransaction',
            fields=transaction_fields('businesstransaction'),
            options={
                'db_table': 'business_transactions',
                'ordering': ['-transaction_date', '-created_at'],
                'abstract': False,
                'indexes': [
                    models.Index(fields=['to_partner', 'status'], name='biz_txn_receiver_status_idx'),
                    models.Index(fields=['from_partner', 'status'], name='biz_txn_sender_status_idx'),
                ],
                'constraints': transaction_constraints('businesstransaction'),
            },
        ),
        migrations.CreateModel(
            name='RecurringTransactionRule',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('transaction_type', models.CharField(choices=TYPE_CHOICES, default='transfer', max_length=20)),
                ('description', models.CharField(blank=True, max_length=255)),
                ('category', models.CharField(default='general', max_length=50)),
                ('frequency', models.CharField(choices=[('daily', 'Daily'), ('weekly', 'Weekly'), ('monthly', 'Monthly'), ('yearly', 'Yearly')], max_length=10)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField(blank=True, null=True)),
                ('next_execution_date', models.DateField()),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('from_partner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='recurring_rules_sent', to=settings.AUTH_USER_MODEL)),
                ('to_partner', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='recurring_rules_received', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='created_recurring_rules', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'recurring_transaction_rules',
                'ordering': ['next_execution_date'],
                'indexes': [models.Index(fields=['is_active', 'next_execution_date'], name='rule_due_idx')],
                'constraints': [
                    models.CheckConstraint(condition=~models.Q(from_partner=models.F('to_partner')), name='rule_distinct_parties'),
                    models.CheckConstraint(condition=models.Q(amount__gt=0), name='rule_amount_positive'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PersonalTransaction',
            fields=transaction_fields('personaltransaction') + [
                ('transaction_type', models.CharField(choices=TYPE_CHOICES, default='transfer', max_length=20)),
                ('category', models.CharField(default='general', max_length=50)),
                ('recurring_rule', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='generated_transactions', to='ledger.recurringtransactionrule')),
            ],
            options={
                'db_table': 'personal_transactions',
                'ordering': ['-transaction_date', '-created_at'],
                'abstract': False,
                'indexes': [
                    models.Index(fields=['to_partner', 'status'], name='pers_txn_receiver_status_idx'),
                    models.Index(fields=['from_partner', 'status'], name='pers_txn_sender_status_idx'),
                ],
                'constraints': transaction_constraints('personaltransaction'),
            },
        ),
        migrations.CreateModel(
            name='PairwiseBalance',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('balance_amount', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=14)),
                ('last_updated', models.DateTimeField(auto_now=True)),
                ('partner_a', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='pairwise_balances_as_a', to=settings.AUTH_USER_MODEL)),
                ('partner_b', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='pairwise_balances_as_b', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'pairwise_balances',
                'ordering': ['partner_a', 'partner_b'],
                'constraints': [
                    models.UniqueConstraint(fields=['partner_a', 'partner_b'], name='unique_partner_pair'),
                    models.CheckConstraint(condition=models.Q(partner_a__lt=models.F('partner_b')), name='pairwise_partners_ordered'),
                ],
            },
        ),
    ]
