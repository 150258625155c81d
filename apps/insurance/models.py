# insurance/models.py
from django.conf import settings
from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal


class InsurancePolicy(models.Model):
    """
    Insurance Policy Model - One row per insurance provider.

    The provider name is the policy's identity (unique, case-sensitive).
    Patients are attached through PolicyEnrollment.
    """

    id = models.AutoField(primary_key=True)
    insurance_provider = models.CharField(
        max_length=200,
        unique=True,
        help_text="Provider name, e.g. 'Star Health'"
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'insurance_policies'
        ordering = ['insurance_provider']
        verbose_name = 'Insurance Policy'
        verbose_name_plural = 'Insurance Policies'

    def __str__(self):
        return self.insurance_provider


class PolicyEnrollment(models.Model):
    """
    Policy Enrollment Model - A patient's membership in an insurance policy.

    amount_paid is the cumulative lifetime payout under this enrollment. It
    only grows, and only through the coverage calculator, and never passes
    lifetime_limit.
    """

    id = models.AutoField(primary_key=True)
    policy = models.ForeignKey(
        InsurancePolicy,
        on_delete=models.PROTECT,
        related_name='enrollments'
    )
    patient = models.ForeignKey(
        'patients.Patient',
        on_delete=models.PROTECT,
        related_name='insurance_enrollments'
    )
    policy_number = models.PositiveIntegerField(
        help_text="Policy number; also the coverage tier when coverage_limit is empty"
    )
    coverage_limit = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        null=True,
        blank=True,
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Explicit lifetime cover; overrides policy_number x INSURANCE_COVERAGE_UNIT"
    )
    amount_paid = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))],
        help_text="Cumulative amount paid out under this enrollment"
    )
    policy_end_date = models.DateField(help_text="Last date the policy covers bills")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'insurance_enrollments'
        ordering = ['policy__insurance_provider']
        verbose_name = 'Policy Enrollment'
        verbose_name_plural = 'Policy Enrollments'
        constraints = [
            models.UniqueConstraint(
                fields=['policy', 'patient'],
                name='unique_policy_patient_enrollment'
            ),
            models.CheckConstraint(
                condition=models.Q(amount_paid__gte=0),
                name='enrollment_amount_paid_non_negative'
            ),
        ]

    def __str__(self):
        return f"{self.policy.insurance_provider} / {self.patient_id} ({self.policy_number})"

    @property
    def lifetime_limit(self):
        """Lifetime cover for this enrollment."""
        if self.coverage_limit is not None:
            return self.coverage_limit
        unit = Decimal(str(settings.INSURANCE_COVERAGE_UNIT))
        return Decimal(self.policy_number) * unit

    @property
    def remaining_coverage(self):
        remaining = self.lifetime_limit - self.amount_paid
        return remaining if remaining > 0 else Decimal('0.00')

    def is_expired_on(self, bill_date):
        return bill_date > self.policy_end_date
