"""
Billable-event locator.

Finds a patient's clinical events that can still go on a bill: completed
consultations, reports from completed consultations, prescriptions that
were not cancelled, and active or discharged room stays, minus anything a
bill item of the patient already references.
"""
import logging

from .store import ledger_store

logger = logging.getLogger(__name__)

# result key -> store event field
EVENT_GROUPS = [
    ('consultations', 'consultation'),
    ('reports', 'report'),
    ('prescriptions', 'prescription'),
    ('room_stays', 'room_stay'),
]


def find_billable_events(patient_id, store=None):
    """
    Return {'consultations', 'reports', 'prescriptions', 'room_stays'} for a patient.

    Raises PatientNotFound for an unknown patient; a patient without
    events gets four empty lists.
    """
    store = store or ledger_store
    patient = store.get_patient(patient_id)

    candidates = store.clinical_events(patient)
    referenced = store.referenced_event_ids(patient)

    events = {}
    for key, field in EVENT_GROUPS:
        events[key] = [
            event for event in candidates[field]
            if event.pk not in referenced[field]
        ]

    logger.debug(
        f"Billable events for patient {patient.pk}: "
        + ", ".join(f"{key}={len(events[key])}" for key, _ in EVENT_GROUPS)
    )
    return events
