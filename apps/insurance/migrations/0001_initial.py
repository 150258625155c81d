from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('patients', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='InsurancePolicy',
            fields=[
                ('id', models.AutoField(primary_key=True, serialize=False)),
                ('insurance_provider', models.CharField(
                    help_text="Provider name, e.g. 'Star Health'", max_length=200, unique=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name': 'Insurance Policy',
                'verbose_name_plural': 'Insurance Policies',
                'db_table': 'insurance_policies',
                'ordering': ['insurance_provider'],
            },
        ),
        migrations.CreateModel(
            name='PolicyEnrollment',
            fields=[
                ('id', models.AutoField(primary_key=True, serialize=False)),
                ('policy_number', models.PositiveIntegerField(
                    help_text='Policy number; also the coverage tier when coverage_limit is empty')),
                ('coverage_limit', models.DecimalField(
                    blank=True, decimal_places=2, max_digits=12, null=True,
                    help_text='Explicit lifetime cover; overrides policy_number x INSURANCE_COVERAGE_UNIT',
                    validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('amount_paid', models.DecimalField(
                    decimal_places=2, default=Decimal('0.00'), max_digits=12,
                    help_text='Cumulative amount paid out under this enrollment',
                    validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('policy_end_date', models.DateField(help_text='Last date the policy covers bills')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('patient', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name='insurance_enrollments',
                    to='patients.patient')),
                ('policy', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name='enrollments',
                    to='insurance.insurancepolicy')),
            ],
            options={
                'verbose_name': 'Policy Enrollment',
                'verbose_name_plural': 'Policy Enrollments',
                'db_table': 'insurance_enrollments',
                'ordering': ['policy__insurance_provider'],
                'constraints': [
                    models.UniqueConstraint(fields=('policy', 'patient'), name='unique_policy_patient_enrollment'),
                    models.CheckConstraint(
                        condition=models.Q(amount_paid__gte=0), name='enrollment_amount_paid_non_negative'),
                ],
            },
        ),
    ]
