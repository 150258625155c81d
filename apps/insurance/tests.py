# apps/insurance/tests.py
import datetime
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from rest_framework.test import APITestCase

from apps.patients.models import Patient
from common.exceptions import DuplicateEnrollment, InvalidAmount, InvalidInput, PatientNotFound

from .models import InsurancePolicy, PolicyEnrollment
from .services import enroll_patient


class EnrollPatientTestCase(TestCase):
    """Insurance enrollment"""

    def setUp(self):
        self.patient = Patient.objects.create(full_name='Meera Iyer')

    def test_first_enrollment_registers_the_provider(self):
        enrollment = enroll_patient(self.patient.pk, 'Care Plus', 2, '2027-03-31', amount_paid='1500')

        self.assertEqual(InsurancePolicy.objects.get().insurance_provider, 'Care Plus')
        self.assertEqual(enrollment.amount_paid, Decimal('1500.00'))
        self.assertEqual(enrollment.policy_end_date, datetime.date(2027, 3, 31))
        self.assertEqual(enrollment.lifetime_limit, Decimal('200000'))
        self.assertEqual(enrollment.remaining_coverage, Decimal('198500.00'))
        self.assertEqual(list(self.patient.insurance_details.all()), [enrollment.policy])

    def test_second_enrollment_with_same_provider_is_rejected(self):
        enroll_patient(self.patient.pk, 'Care Plus', 1, '2027-03-31')

        with self.assertRaises(DuplicateEnrollment):
            enroll_patient(self.patient.pk, 'Care Plus', 5, '2028-03-31')

        self.assertEqual(PolicyEnrollment.objects.count(), 1)

    def test_patient_can_hold_several_providers(self):
        enroll_patient(self.patient.pk, 'Care Plus', 1, '2027-03-31')
        enroll_patient(self.patient.pk, 'Star Health', 1, '2027-03-31')

        self.assertEqual(self.patient.insurance_enrollments.count(), 2)

    def test_invalid_enrollments_are_rejected(self):
        with self.assertRaises(PatientNotFound):
            enroll_patient(999999, 'Care Plus', 1, '2027-03-31')
        with self.assertRaises(InvalidInput):
            enroll_patient(self.patient.pk, '  ', 1, '2027-03-31')
        with self.assertRaises(InvalidInput):
            enroll_patient(self.patient.pk, 'Care Plus', 0, '2027-03-31')
        with self.assertRaises(InvalidInput):
            enroll_patient(self.patient.pk, 'Care Plus', 1, 'soon')

        self.assertFalse(PolicyEnrollment.objects.exists())

    def test_amount_paid_cannot_exceed_lifetime_cover(self):
        with self.assertRaises(InvalidAmount):
            enroll_patient(self.patient.pk, 'Star Health', 1, '2030-01-01', amount_paid='250000')
        with self.assertRaises(InvalidAmount):
            enroll_patient(
                self.patient.pk, 'Star Health', 5, '2030-01-01', amount_paid='60000', coverage_limit='50000'
            )

        self.assertFalse(PolicyEnrollment.objects.exists())

        enrollment = enroll_patient(self.patient.pk, 'Star Health', 1, '2030-01-01', amount_paid='100000')
        self.assertEqual(enrollment.remaining_coverage, Decimal('0.00'))


class InsuranceAPITestCase(APITestCase):
    """REST endpoints under /api/insurance/"""

    def setUp(self):
        self.patient = Patient.objects.create(full_name='Meera Iyer')

    def test_verify_and_list_insurances(self):
        response = self.client.post(f'/api/insurance/{self.patient.pk}/verify/', {
            'insurance_provider': 'Care Plus',
            'policy_number': 1,
            'amount_paid': '25000.00',
            'policy_end_date': '2030-01-31',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()['data']['remaining_coverage'], '75000.00')

        response = self.client.get(f'/api/insurance/{self.patient.pk}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()['data']
        self.assertEqual(len(data), 1)
        self.assertEqual(data[0]['insurance_provider'], 'Care Plus')
        self.assertEqual(data[0]['amount_paid'], '25000.00')
        self.assertEqual(data[0]['lifetime_limit'], '100000.00')
        self.assertFalse(data[0]['is_expired'])

    def test_verification_over_lifetime_cover_is_rejected(self):
        response = self.client.post(f'/api/insurance/{self.patient.pk}/verify/', {
            'insurance_provider': 'Care Plus',
            'policy_number': 1,
            'amount_paid': '250000.00',
            'policy_end_date': '2030-01-31',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['code'], 'invalid_amount')
        self.assertEqual(response.json()['details']['lifetime_limit'], '100000.00')
        self.assertFalse(PolicyEnrollment.objects.exists())

    def test_duplicate_verification(self):
        payload = {'insurance_provider': 'Care Plus', 'policy_number': 1, 'policy_end_date': '2030-01-31'}
        self.client.post(f'/api/insurance/{self.patient.pk}/verify/', payload, format='json')

        response = self.client.post(f'/api/insurance/{self.patient.pk}/verify/', payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()['error'], 'Patient already has this insurance')

    def test_providers_list(self):
        InsurancePolicy.objects.create(insurance_provider='Star Health')
        InsurancePolicy.objects.create(insurance_provider='Care Plus')

        response = self.client.get('/api/insurance/providers/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(
            [p['insurance_provider'] for p in response.json()['data']],
            ['Care Plus', 'Star Health']
        )

    def test_unknown_patient(self):
        response = self.client.get('/api/insurance/999999/')

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()['code'], 'patient_not_found')
