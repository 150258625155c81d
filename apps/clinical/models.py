# clinical/models.py
from django.db import models
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal


class Consultation(models.Model):
    """
    Consultation Model - A doctor consultation for a patient.

    Only completed consultations can be billed.
    """

    STATUS_CHOICES = [
        ('scheduled', 'Scheduled'),
        ('ongoing', 'Ongoing'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    BILLABLE_STATUSES = ['completed']

    id = models.AutoField(primary_key=True)
    patient = models.ForeignKey(
        'patients.Patient',
        on_delete=models.PROTECT,
        related_name='consultations'
    )
    doctor_name = models.CharField(max_length=200, blank=True)
    consultation_date = models.DateTimeField(default=timezone.now)
    reason = models.TextField(blank=True)
    diagnosis = models.TextField(blank=True)
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default='scheduled'
    )
    fee = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Consultation fee"
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'clinical_consultations'
        ordering = ['-consultation_date']
        indexes = [
            models.Index(fields=['patient', 'status'], name='consult_patient_status_idx'),
        ]

    def __str__(self):
        return f"Consultation #{self.pk} - {self.patient_id}"

    @property
    def is_billable(self):
        return self.status in self.BILLABLE_STATUSES

    def billable_amount(self):
        return self.fee

    def bill_description(self):
        doctor = f" with {self.doctor_name}" if self.doctor_name else ""
        return f"Consultation{doctor} on {timezone.localtime(self.consultation_date).date()}"


class Report(models.Model):
    """
    Report Model - Lab/diagnostic report attached to a consultation.
    """

    id = models.AutoField(primary_key=True)
    consultation = models.ForeignKey(
        Consultation,
        on_delete=models.PROTECT,
        related_name='reports'
    )
    title = models.CharField(max_length=200)
    result = models.TextField(blank=True)
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'clinical_reports'
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} (consultation #{self.consultation_id})"

    @property
    def patient_id(self):
        return self.consultation.patient_id

    @property
    def is_billable(self):
        return self.consultation.is_billable

    def billable_amount(self):
        return self.price

    def bill_description(self):
        return f"Report: {self.title}"


class Prescription(models.Model):
    """
    Prescription Model - Medication issued to a patient.

    Cancelled prescriptions are never billed.
    """

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('dispensed', 'Dispensed'),
        ('partially_dispensed', 'Partially Dispensed'),
        ('cancelled', 'Cancelled'),
    ]

    id = models.AutoField(primary_key=True)
    patient = models.ForeignKey(
        'patients.Patient',
        on_delete=models.PROTECT,
        related_name='prescriptions'
    )
    consultation = models.ForeignKey(
        Consultation,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='prescriptions'
    )
    medications = models.TextField(blank=True, help_text="Medication summary")
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default='pending'
    )
    total_price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    issued_at = models.DateTimeField(default=timezone.now)

    class Meta:
        db_table = 'clinical_prescriptions'
        ordering = ['-issued_at']
        indexes = [
            models.Index(fields=['patient', 'status'], name='rx_patient_status_idx'),
        ]

    def __str__(self):
        return f"Prescription #{self.pk} - {self.patient_id}"

    @property
    def is_billable(self):
        return self.status != 'cancelled'

    def billable_amount(self):
        return self.total_price

    def bill_description(self):
        return f"Medication: {self.medications}" if self.medications else f"Prescription #{self.pk}"


class RoomStay(models.Model):
    """
    RoomStay Model - A patient's occupancy of a room.

    Active and discharged stays are billable; cancelled bookings are not.
    """

    STATUS_CHOICES = [
        ('active', 'Active'),
        ('discharged', 'Discharged'),
        ('cancelled', 'Cancelled'),
    ]

    BILLABLE_STATUSES = ['active', 'discharged']

    id = models.AutoField(primary_key=True)
    patient = models.ForeignKey(
        'patients.Patient',
        on_delete=models.PROTECT,
        related_name='room_stays'
    )
    room_number = models.CharField(max_length=20)
    room_type = models.CharField(max_length=50, blank=True)
    daily_charge = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    admitted_at = models.DateTimeField(default=timezone.now)
    discharged_at = models.DateTimeField(null=True, blank=True)
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default='active'
    )

    class Meta:
        db_table = 'clinical_room_stays'
        ordering = ['-admitted_at']
        indexes = [
            models.Index(fields=['patient', 'status'], name='room_stay_patient_status_idx'),
        ]

    def __str__(self):
        return f"Room {self.room_number} - {self.patient_id}"

    @property
    def is_billable(self):
        return self.status in self.BILLABLE_STATUSES

    def length_of_stay(self):
        """Days in the room, minimum one day."""
        end = self.discharged_at or timezone.now()
        delta = end - self.admitted_at
        return max(1, delta.days)

    def billable_amount(self):
        return self.daily_charge * self.length_of_stay()

    def bill_description(self):
        return f"Room {self.room_number} - {self.length_of_stay()} day(s)"
