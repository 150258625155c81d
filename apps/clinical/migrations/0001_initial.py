from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('patients', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Consultation',
            fields=[
                ('id', models.AutoField(primary_key=True, serialize=False)),
                ('doctor_name', models.CharField(blank=True, max_length=200)),
                ('consultation_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('reason', models.TextField(blank=True)),
                ('diagnosis', models.TextField(blank=True)),
                ('status', models.CharField(
                    choices=[('scheduled', 'Scheduled'), ('ongoing', 'Ongoing'),
                             ('completed', 'Completed'), ('cancelled', 'Cancelled')],
                    default='scheduled', max_length=20)),
                ('fee', models.DecimalField(
                    decimal_places=2, default=Decimal('0.00'), help_text='Consultation fee', max_digits=12,
                    validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('patient', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name='consultations',
                    to='patients.patient')),
            ],
            options={
                'db_table': 'clinical_consultations',
                'ordering': ['-consultation_date'],
                'indexes': [models.Index(fields=['patient', 'status'], name='consult_patient_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='Report',
            fields=[
                ('id', models.AutoField(primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('result', models.TextField(blank=True)),
                ('price', models.DecimalField(
                    decimal_places=2, default=Decimal('0.00'), max_digits=12,
                    validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('consultation', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name='reports',
                    to='clinical.consultation')),
            ],
            options={
                'db_table': 'clinical_reports',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Prescription',
            fields=[
                ('id', models.AutoField(primary_key=True, serialize=False)),
                ('medications', models.TextField(blank=True, help_text='Medication summary')),
                ('status', models.CharField(
                    choices=[('pending', 'Pending'), ('dispensed', 'Dispensed'),
                             ('partially_dispensed', 'Partially Dispensed'), ('cancelled', 'Cancelled')],
                    default='pending', max_length=20)),
                ('total_price', models.DecimalField(
                    decimal_places=2, default=Decimal('0.00'), max_digits=12,
                    validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('issued_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('consultation', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='prescriptions', to='clinical.consultation')),
                ('patient', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name='prescriptions',
                    to='patients.patient')),
            ],
            options={
                'db_table': 'clinical_prescriptions',
                'ordering': ['-issued_at'],
                'indexes': [models.Index(fields=['patient', 'status'], name='rx_patient_status_idx')],
            },
        ),
        migrations.CreateModel(
            name='RoomStay',
            fields=[
                ('id', models.AutoField(primary_key=True, serialize=False)),
                ('room_number', models.CharField(max_length=20)),
                ('room_type', models.CharField(blank=True, max_length=50)),
                ('daily_charge', models.DecimalField(
                    decimal_places=2, default=Decimal('0.00'), max_digits=12,
                    validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('admitted_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('discharged_at', models.DateTimeField(blank=True, null=True)),
                ('status', models.CharField(
                    choices=[('active', 'Active'), ('discharged', 'Discharged'), ('cancelled', 'Cancelled')],
                    default='active', max_length=20)),
                ('patient', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name='room_stays',
                    to='patients.patient')),
            ],
            options={
                'db_table': 'clinical_room_stays',
                'ordering': ['-admitted_at'],
                'indexes': [models.Index(fields=['patient', 'status'], name='room_stay_patient_status_idx')],
            },
        ),
    ]
