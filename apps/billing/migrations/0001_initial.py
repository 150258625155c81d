from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('patients', '0002_patient_insurance_details'),
        ('clinical', '0001_initial'),
        ('insurance', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Bill',
            fields=[
                ('id', models.AutoField(primary_key=True, serialize=False)),
                ('bill_number', models.CharField(
                    blank=True, help_text='Unique bill identifier (e.g., BILL/20231223/001)',
                    max_length=50, unique=True)),
                ('generation_date', models.DateField(
                    default=django.utils.timezone.localdate,
                    help_text='Bill generation date; compared against policy end dates')),
                ('gross_amount', models.DecimalField(
                    decimal_places=2, default=Decimal('0.00'), help_text='Sum of all bill items', max_digits=12,
                    validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('insurance_covered', models.DecimalField(
                    decimal_places=2, default=Decimal('0.00'),
                    help_text='Coverage consumed when the bill was composed', max_digits=12,
                    validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('total_amount', models.DecimalField(
                    decimal_places=2, default=Decimal('0.00'),
                    help_text='Amount owed by the patient after insurance', max_digits=12,
                    validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('payment_status', models.CharField(
                    choices=[('pending', 'Pending'), ('partially_paid', 'Partially Paid'), ('paid', 'Paid')],
                    default='pending', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('insurance_enrollment', models.ForeignKey(
                    blank=True, help_text='Enrollment whose coverage was applied, if any', null=True,
                    on_delete=django.db.models.deletion.SET_NULL, related_name='bills',
                    to='insurance.policyenrollment')),
                ('patient', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name='bills',
                    to='patients.patient')),
            ],
            options={
                'verbose_name': 'Bill',
                'verbose_name_plural': 'Bills',
                'db_table': 'bills',
                'ordering': ['-generation_date', '-id'],
                'indexes': [
                    models.Index(fields=['patient', 'generation_date'], name='bill_patient_date_idx'),
                    models.Index(fields=['payment_status'], name='bill_payment_status_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=models.Q(total_amount__gte=0), name='bill_total_amount_non_negative'),
                ],
            },
        ),
        migrations.CreateModel(
            name='BillItem',
            fields=[
                ('id', models.AutoField(primary_key=True, serialize=False)),
                ('item_type', models.CharField(
                    choices=[('consultation', 'Consultation'), ('medication', 'Medication'),
                             ('surgery', 'Surgery'), ('diagnostic', 'Diagnostic'),
                             ('procedure', 'Procedure'), ('room_charge', 'Room Charge'),
                             ('test', 'Test'), ('other', 'Other')],
                    default='other', max_length=20)),
                ('item_description', models.CharField(max_length=255)),
                ('item_amount', models.DecimalField(
                    decimal_places=2, help_text='Unit price', max_digits=12,
                    validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('quantity', models.PositiveIntegerField(
                    default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('price', models.DecimalField(
                    decimal_places=2, help_text='Line total (item_amount x quantity)', max_digits=12,
                    validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('bill', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='items', to='billing.bill')),
                ('consultation', models.OneToOneField(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name='bill_item', to='clinical.consultation')),
                ('report', models.OneToOneField(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name='bill_item', to='clinical.report')),
                ('prescription', models.OneToOneField(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name='bill_item', to='clinical.prescription')),
                ('room_stay', models.OneToOneField(
                    blank=True, null=True, on_delete=django.db.models.deletion.PROTECT,
                    related_name='bill_item', to='clinical.roomstay')),
            ],
            options={
                'verbose_name': 'Bill Item',
                'verbose_name_plural': 'Bill Items',
                'db_table': 'bill_items',
                'ordering': ['bill', 'id'],
                'constraints': [
                    models.CheckConstraint(
                        condition=(
                            models.Q(consultation__isnull=True, report__isnull=True, prescription__isnull=True)
                            | models.Q(consultation__isnull=True, report__isnull=True, room_stay__isnull=True)
                            | models.Q(consultation__isnull=True, prescription__isnull=True, room_stay__isnull=True)
                            | models.Q(report__isnull=True, prescription__isnull=True, room_stay__isnull=True)
                        ),
                        name='bill_item_single_event_reference'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.AutoField(primary_key=True, serialize=False)),
                ('amount', models.DecimalField(
                    decimal_places=2, max_digits=12,
                    validators=[django.core.validators.MinValueValidator(Decimal('0.01'))])),
                ('payment_method', models.CharField(
                    choices=[('cash', 'Cash'), ('card', 'Card'), ('bank_transfer', 'Bank Transfer'),
                             ('insurance', 'Insurance')],
                    default='cash', max_length=20)),
                ('payment_date', models.DateField(default=django.utils.timezone.localdate)),
                ('status', models.CharField(
                    choices=[('success', 'Success'), ('failed', 'Failed'), ('pending', 'Pending')],
                    default='success', max_length=20)),
                ('transaction_id', models.CharField(
                    blank=True, help_text='Unique transaction reference; generated when omitted',
                    max_length=64, unique=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('bill', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='billing.bill')),
                ('insurance_enrollment', models.ForeignKey(
                    blank=True, help_text='Enrollment that paid, for insurance payments', null=True,
                    on_delete=django.db.models.deletion.SET_NULL, related_name='payments',
                    to='insurance.policyenrollment')),
            ],
            options={
                'verbose_name': 'Payment',
                'verbose_name_plural': 'Payments',
                'db_table': 'bill_payments',
                'ordering': ['payment_date', 'id'],
                'indexes': [models.Index(fields=['bill', 'status'], name='payment_bill_status_idx')],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(amount__gt=0), name='payment_amount_positive'),
                ],
            },
        ),
    ]
