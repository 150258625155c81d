# apps/billing/tests/test_locator.py
from django.test import TestCase

from apps.billing.composer import compose_bill
from apps.billing.locator import find_billable_events
from common.exceptions import PatientNotFound

from .factories import (
    BILL_DATE,
    make_consultation,
    make_patient,
    make_prescription,
    make_report,
    make_room_stay,
)


class FindBillableEventsTestCase(TestCase):
    """Billable-event locator"""

    def setUp(self):
        self.patient = make_patient()

    def test_patient_without_events_gets_empty_lists(self):
        events = find_billable_events(self.patient.pk)

        self.assertEqual(events, {
            'consultations': [],
            'reports': [],
            'prescriptions': [],
            'room_stays': [],
        })

    def test_unknown_patient_raises(self):
        with self.assertRaises(PatientNotFound):
            find_billable_events(999999)

    def test_only_billable_statuses_are_returned(self):
        completed = make_consultation(self.patient, status='completed')
        make_consultation(self.patient, status='scheduled')
        make_consultation(self.patient, status='cancelled')
        pending_rx = make_prescription(self.patient, status='pending')
        make_prescription(self.patient, status='cancelled')
        stay = make_room_stay(self.patient, status='active')
        make_room_stay(self.patient, status='cancelled')

        events = find_billable_events(self.patient.pk)

        self.assertEqual(events['consultations'], [completed])
        self.assertEqual(events['prescriptions'], [pending_rx])
        self.assertEqual(events['room_stays'], [stay])

    def test_reports_follow_their_consultation(self):
        completed = make_consultation(self.patient, status='completed')
        ongoing = make_consultation(self.patient, status='ongoing')
        report = make_report(completed)
        make_report(ongoing, title='X-Ray')

        events = find_billable_events(self.patient.pk)

        self.assertEqual(events['reports'], [report])

    def test_billed_events_are_excluded(self):
        billed = make_consultation(self.patient)
        open_consultation = make_consultation(self.patient, fee='300.00')
        stay = make_room_stay(self.patient)

        compose_bill(
            self.patient.pk,
            [{'item_type': 'consultation', 'consult_id': billed.pk},
             {'item_type': 'room_charge', 'room_id': stay.pk}],
            generation_date=BILL_DATE
        )

        events = find_billable_events(self.patient.pk)

        self.assertEqual(events['consultations'], [open_consultation])
        self.assertEqual(events['room_stays'], [])

    def test_other_patients_events_are_not_listed(self):
        other = make_patient('Ravi Kumar')
        make_consultation(other)

        events = find_billable_events(self.patient.pk)

        self.assertEqual(events['consultations'], [])
