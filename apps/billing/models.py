# billing/models.py
import uuid

from django.db import models, transaction, IntegrityError
from django.core.validators import MinValueValidator
from django.utils import timezone
from decimal import Decimal

from common.exceptions import ImmutablePayment


class Bill(models.Model):
    """
    Bill Model - One billing event for a patient.

    gross_amount is the sum of the bill items (what was billed).
    insurance_covered is what the patient's insurance absorbed when the bill
    was composed, and total_amount is the remainder the patient owes.
    payment_status is derived from the payment history by the payment
    ledger; it is never set by hand.
    """

    PAYMENT_STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('partially_paid', 'Partially Paid'),
        ('paid', 'Paid'),
    ]

    id = models.AutoField(primary_key=True)
    patient = models.ForeignKey(
        'patients.Patient',
        on_delete=models.PROTECT,
        related_name='bills'
    )
    bill_number = models.CharField(
        max_length=50,
        unique=True,
        blank=True,
        help_text="Unique bill identifier (e.g., BILL/20231223/001)"
    )
    generation_date = models.DateField(
        default=timezone.localdate,
        help_text="Bill generation date; compared against policy end dates"
    )

    # Financial Details
    gross_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Sum of all bill items"
    )
    insurance_enrollment = models.ForeignKey(
        'insurance.PolicyEnrollment',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='bills',
        help_text="Enrollment whose coverage was applied, if any"
    )
    insurance_covered = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Coverage consumed when the bill was composed"
    )
    total_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Amount owed by the patient after insurance"
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PAYMENT_STATUS_CHOICES,
        default='pending'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'bills'
        ordering = ['-generation_date', '-id']
        verbose_name = 'Bill'
        verbose_name_plural = 'Bills'
        indexes = [
            models.Index(fields=['patient', 'generation_date'], name='bill_patient_date_idx'),
            models.Index(fields=['payment_status'], name='bill_payment_status_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(total_amount__gte=0),
                name='bill_total_amount_non_negative'
            ),
        ]

    def __str__(self):
        return self.bill_number or f"Bill #{self.pk}"

    def save(self, *args, **kwargs):
        """Save with an auto-generated bill number, retrying on number collisions."""
        max_retries = 3
        last_exception = None

        for attempt in range(max_retries):
            try:
                with transaction.atomic():
                    if not self.bill_number:
                        self.bill_number = self.generate_bill_number(self.generation_date, offset=attempt)
                    super().save(*args, **kwargs)
                return
            except IntegrityError as exc:
                last_exception = exc
                if 'bill_number' in str(exc):
                    self.bill_number = ''
                    continue
                raise

        if last_exception:
            raise last_exception

    @staticmethod
    def generate_bill_number(generation_date=None, offset=0):
        """Generate bill number: BILL/YYYYMMDD/###"""
        day = generation_date or timezone.localdate()
        prefix = f"BILL/{day.strftime('%Y%m%d')}/"

        day_count = Bill.objects.filter(bill_number__startswith=prefix).count() + 1 + offset

        return f"{prefix}{day_count:03d}"


class BillItem(models.Model):
    """
    Bill Item Model - One line of a bill.

    An item references at most one clinical event. The references are
    one-to-one, so a consultation, report, prescription or room stay can
    appear on a single bill item only.
    """

    ITEM_TYPE_CHOICES = [
        ('consultation', 'Consultation'),
        ('medication', 'Medication'),
        ('surgery', 'Surgery'),
        ('diagnostic', 'Diagnostic'),
        ('procedure', 'Procedure'),
        ('room_charge', 'Room Charge'),
        ('test', 'Test'),
        ('other', 'Other'),
    ]

    # (api field, model field) for each clinical event reference
    EVENT_REFERENCES = [
        ('consult_id', 'consultation'),
        ('report_id', 'report'),
        ('prescription_id', 'prescription'),
        ('room_id', 'room_stay'),
    ]

    id = models.AutoField(primary_key=True)
    bill = models.ForeignKey(
        Bill,
        on_delete=models.CASCADE,
        related_name='items'
    )
    item_type = models.CharField(
        max_length=20,
        choices=ITEM_TYPE_CHOICES,
        default='other'
    )
    item_description = models.CharField(max_length=255)
    item_amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Unit price"
    )
    quantity = models.PositiveIntegerField(
        default=1,
        validators=[MinValueValidator(1)]
    )
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Line total (item_amount x quantity)"
    )

    # Clinical event back-references (at most one is set)
    consultation = models.OneToOneField(
        'clinical.Consultation',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='bill_item'
    )
    report = models.OneToOneField(
        'clinical.Report',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='bill_item'
    )
    prescription = models.OneToOneField(
        'clinical.Prescription',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='bill_item'
    )
    room_stay = models.OneToOneField(
        'clinical.RoomStay',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='bill_item'
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'bill_items'
        ordering = ['bill', 'id']
        verbose_name = 'Bill Item'
        verbose_name_plural = 'Bill Items'
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(consultation__isnull=True, report__isnull=True, prescription__isnull=True)
                    | models.Q(consultation__isnull=True, report__isnull=True, room_stay__isnull=True)
                    | models.Q(consultation__isnull=True, prescription__isnull=True, room_stay__isnull=True)
                    | models.Q(report__isnull=True, prescription__isnull=True, room_stay__isnull=True)
                ),
                name='bill_item_single_event_reference'
            ),
        ]

    def __str__(self):
        return f"{self.item_description} ({self.item_type})"

    def save(self, *args, **kwargs):
        """Auto-calculate the line price."""
        self.price = self.item_amount * self.quantity
        super().save(*args, **kwargs)


def generate_transaction_id(payment_method):
    prefix = 'INS' if payment_method == 'insurance' else 'TXN'
    return f"{prefix}-{uuid.uuid4().hex[:20].upper()}"


class Payment(models.Model):
    """
    Payment Model - Money received against a bill.

    Only payments with status 'success' count toward the bill. A settled
    payment is immutable.
    """

    PAYMENT_METHOD_CHOICES = [
        ('cash', 'Cash'),
        ('card', 'Card'),
        ('bank_transfer', 'Bank Transfer'),
        ('insurance', 'Insurance'),
    ]

    STATUS_CHOICES = [
        ('success', 'Success'),
        ('failed', 'Failed'),
        ('pending', 'Pending'),
    ]

    id = models.AutoField(primary_key=True)
    bill = models.ForeignKey(
        Bill,
        on_delete=models.CASCADE,
        related_name='payments'
    )
    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.01'))]
    )
    payment_method = models.CharField(
        max_length=20,
        choices=PAYMENT_METHOD_CHOICES,
        default='cash'
    )
    payment_date = models.DateField(default=timezone.localdate)
    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default='success'
    )
    transaction_id = models.CharField(
        max_length=64,
        unique=True,
        blank=True,
        help_text="Unique transaction reference; generated when omitted"
    )
    insurance_enrollment = models.ForeignKey(
        'insurance.PolicyEnrollment',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='payments',
        help_text="Enrollment that paid, for insurance payments"
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'bill_payments'
        ordering = ['payment_date', 'id']
        verbose_name = 'Payment'
        verbose_name_plural = 'Payments'
        indexes = [
            models.Index(fields=['bill', 'status'], name='payment_bill_status_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0),
                name='payment_amount_positive'
            ),
        ]

    def __str__(self):
        return f"{self.transaction_id} - {self.amount} ({self.status})"

    def save(self, *args, **kwargs):
        if not self.transaction_id:
            self.transaction_id = generate_transaction_id(self.payment_method)

        if self.pk is not None:
            stored_status = Payment.objects.filter(pk=self.pk).values_list('status', flat=True).first()
            if stored_status == 'success':
                raise ImmutablePayment(f"Payment {self.transaction_id} is settled and cannot be changed")

        super().save(*args, **kwargs)
