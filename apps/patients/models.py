# patients/models.py
from django.db import models


class Patient(models.Model):
    """
    Patient Model - Identity record referenced by billing.

    Registration owns this record; the billing engine only reads it.
    Insurance enrollments are reachable through `insurance_details`.
    """

    id = models.AutoField(primary_key=True)
    full_name = models.CharField(max_length=200)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)

    insurance_details = models.ManyToManyField(
        'insurance.InsurancePolicy',
        through='insurance.PolicyEnrollment',
        related_name='insured_patients',
        blank=True,
        help_text="Insurance policies this patient is enrolled in"
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'patients'
        ordering = ['full_name']
        verbose_name = 'Patient'
        verbose_name_plural = 'Patients'

    def __str__(self):
        return f"{self.full_name} (#{self.pk})"
