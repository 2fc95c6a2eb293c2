"""
Lecture des faits établissement / ordonnance.

Le moteur consomme ces données mais ne les modifie jamais : le CRUD des
établissements et des ordonnances vit ailleurs.
"""

from __future__ import annotations

from sqlalchemy.orm import Session

from careline.app.db.models.models_v1 import Facility, Prescription
from careline.app.db.models.core_types import PrescriptionStatus
from careline.services.errors import (
    ConflictError,
    ConflictReason,
    NotFoundError,
    PermissionDeniedError,
)

# une ordonnance dans ces statuts ne peut plus servir de base à une commande
INACTIVE_PRESCRIPTION_STATUSES = {
    PrescriptionStatus.cancelled,
    PrescriptionStatus.revoked,
}


def get_facility(db: Session, facility_id: int) -> Facility:
    facility = db.get(Facility, facility_id)
    if not facility or not facility.active:
        raise NotFoundError("Facility not found", facility_id=facility_id)
    return facility


def get_usable_prescription(
    db: Session,
    *,
    prescription_id: int,
    patient_id: int,
    facility_id: int,
) -> Prescription:
    """
    Vérifie qu'une ordonnance peut accompagner la commande :
    même patient, même établissement, ni annulée ni révoquée.
    """
    rx = db.get(Prescription, prescription_id)
    if not rx:
        raise NotFoundError("Prescription not found", prescription_id=prescription_id)

    if rx.patient_id != patient_id:
        raise PermissionDeniedError("Prescription belongs to another patient", prescription_id=prescription_id)

    if rx.facility_id != facility_id:
        raise PermissionDeniedError(
            "Prescription was issued for another facility",
            prescription_id=prescription_id,
            facility_id=facility_id,
        )

    if rx.status in INACTIVE_PRESCRIPTION_STATUSES:
        raise ConflictError(
            ConflictReason.prescription_inactive,
            f"Prescription is {rx.status.value}",
            prescription_id=prescription_id,
            status=rx.status.value,
        )

    return rx
