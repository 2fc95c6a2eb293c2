from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from careline.app.db.models.models_v1 import FacilityMedicine
from careline.services.errors import InsufficientStock, NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def lookup_medicine(db: Session, medicine_id: int) -> FacilityMedicine:
    med = db.get(FacilityMedicine, medicine_id)
    if not med:
        raise NotFoundError(f"Medicine {medicine_id} not found", medicine_id=medicine_id)
    return med


def current_stock(db: Session, medicine_id: int) -> int | None:
    """Stock lu en base (jamais depuis l'identity map de la session)."""
    return db.execute(
        select(FacilityMedicine.stock).where(FacilityMedicine.id == medicine_id)
    ).scalar_one_or_none()


def reserve(db: Session, medicine_id: int, quantity: int) -> int:
    """
    Réservation = décrément conditionnel, en UNE écriture :

        UPDATE facility_medicines
        SET stock = stock - :qty
        WHERE id = :id AND stock >= :qty
        RETURNING stock

    Pas de lecture-puis-écriture : si la ligne ne matche plus (un autre
    acheteur est passé avant), on lève InsufficientStock même si une lecture
    antérieure dans la même transaction montrait assez de stock.

    Ne commit pas : composable dans la transaction de l'appelant.
    """
    if quantity <= 0:
        raise ValidationError("quantity must be > 0", medicine_id=medicine_id, quantity=quantity)

    new_stock = db.execute(
        update(FacilityMedicine)
        .where(FacilityMedicine.id == medicine_id)
        .where(FacilityMedicine.stock >= quantity)
        .values(stock=FacilityMedicine.stock - quantity)
        .returning(FacilityMedicine.stock)
        .execution_options(synchronize_session="fetch")
    ).scalar_one_or_none()

    if new_stock is not None:
        return int(new_stock)

    available = current_stock(db, medicine_id)
    if available is None:
        raise NotFoundError(f"Medicine {medicine_id} not found", medicine_id=medicine_id)

    logger.info(
        "reservation refused: medicine=%s required=%s available=%s",
        medicine_id,
        quantity,
        available,
    )
    raise InsufficientStock(medicine_id=medicine_id, required=quantity, available=int(available))


def release(db: Session, medicine_id: int, quantity: int) -> int:
    """
    Compensation : incrément inconditionnel.

    Aucune garde ici : c'est le contrôle de statut de la commande (côté
    annulation) qui garantit un seul appel par commande annulée.
    """
    if quantity <= 0:
        raise ValidationError("quantity must be > 0", medicine_id=medicine_id, quantity=quantity)

    new_stock = db.execute(
        update(FacilityMedicine)
        .where(FacilityMedicine.id == medicine_id)
        .values(stock=FacilityMedicine.stock + quantity)
        .returning(FacilityMedicine.stock)
        .execution_options(synchronize_session="fetch")
    ).scalar_one_or_none()

    if new_stock is None:
        raise NotFoundError(f"Medicine {medicine_id} not found", medicine_id=medicine_id)
    return int(new_stock)
