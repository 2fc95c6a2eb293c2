"""
Coordinateur de commande.

create_order transforme une demande d'achat en commande persistée, ou en UNE
erreur typée (careline.services.errors). Réservations, en-tête, lignes et
notification sont écrits dans la même unité de travail : si une seule ligne
échoue, rien n'est visible des autres lecteurs (aucun stock décrémenté,
aucune commande partielle).
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from careline.app.db.models.models_v1 import Order, OrderItem
from careline.app.db.models.core_types import OrderStatus, Role
from careline.app.schemas.order import OrderCreate
from careline.services import notifications
from careline.services.access import (
    Caller,
    can_view_order,
    require_facility_manager,
    require_role,
)
from careline.services.catalog import get_facility, get_usable_prescription
from careline.services.errors import (
    InvalidStateTransition,
    NotFoundError,
    PermissionDeniedError,
)
from careline.services.inventory import lookup_medicine, reserve
from careline.services.order_numbers import generate_order_number
from careline.services.order_status import ensure_fulfilment_transition
from careline.services.transactions import atomic

logger = logging.getLogger(__name__)


def create_order(db: Session, caller: Caller, payload: OrderCreate) -> Order:
    require_role(caller, Role.patient)

    with atomic(db, "create order"):
        facility = get_facility(db, payload.facility_id)

        if payload.prescription_id is not None:
            get_usable_prescription(
                db,
                prescription_id=payload.prescription_id,
                patient_id=caller.user_id,
                facility_id=facility.id,
            )

        # lignes traitées dans l'ordre fourni, sans tri
        total = Decimal("0")
        items: list[OrderItem] = []
        for position, line in enumerate(payload.items, start=1):
            med = lookup_medicine(db, line.medicine_id)
            if med.facility_id != facility.id:
                raise PermissionDeniedError(
                    f"Medicine {med.id} does not belong to facility {facility.id}",
                    medicine_id=med.id,
                    facility_id=facility.id,
                )
            unit_price = Decimal(str(med.price))

            reserve(db, med.id, line.quantity)

            subtotal = unit_price * line.quantity
            total += subtotal
            items.append(
                OrderItem(
                    medicine_id=med.id,
                    position=position,
                    quantity=line.quantity,
                    unit_price=unit_price,
                    subtotal=subtotal,
                )
            )

        order = Order(
            order_number=generate_order_number(),
            patient_id=caller.user_id,
            facility_id=facility.id,
            prescription_id=payload.prescription_id,
            status=OrderStatus.pending,
            total_amount=total,
            notes=payload.notes,
            delivery_address=payload.delivery_address,
            delivery_phone=payload.delivery_phone,
            items=items,
        )
        db.add(order)
        db.flush()  # order.id pour la notification

        notifications.order_created(db, order)
        order_number, order_total = order.order_number, total

    logger.info(
        "order %s placed: patient=%s facility=%s items=%s total=%s",
        order_number,
        caller.user_id,
        payload.facility_id,
        len(payload.items),
        order_total,
    )
    return order


def load_order_for_update(db: Session, order_id: int) -> Order:
    """Relit la commande en base sous verrou de ligne (FOR UPDATE)."""
    order = (
        db.execute(
            select(Order)
            .where(Order.id == order_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        .scalars()
        .one_or_none()
    )
    if not order:
        raise NotFoundError("Order not found", order_id=order_id)
    return order


def claim_transition(
    db: Session,
    order: Order,
    *,
    allowed_from: Iterable[OrderStatus],
    target: OrderStatus,
    **values,
) -> None:
    """
    Changement de statut en écriture conditionnelle :
    UPDATE orders SET status=:target WHERE id=:id AND status IN (:allowed_from)

    Zéro ligne touchée = quelqu'un a déjà fait bouger la commande.
    """
    current = order.status
    claimed = db.execute(
        update(Order)
        .where(Order.id == order.id)
        .where(Order.status.in_(list(allowed_from)))
        .values(status=target, **values)
        .returning(Order.id)
        .execution_options(synchronize_session="fetch")
    ).scalar_one_or_none()

    if claimed is None:
        raise InvalidStateTransition(current.value, target.value)


def update_order_status(db: Session, caller: Caller, order_id: int, new_status: OrderStatus) -> Order:
    """Transition de préparation / livraison. Aucun effet sur le stock."""
    require_role(caller, Role.facility_admin, Role.admin)

    with atomic(db, "update order status"):
        order = load_order_for_update(db, order_id)
        require_facility_manager(caller, order.facility)

        previous = order.status
        if new_status == OrderStatus.cancelled:
            # l'annulation passe obligatoirement par la compensation stock
            raise InvalidStateTransition(previous.value, new_status.value)
        ensure_fulfilment_transition(previous, new_status)

        claim_transition(db, order, allowed_from=[previous], target=new_status)
        notifications.order_status_changed(db, order, new_status)
        order_number = order.order_number

    logger.info("order %s: %s -> %s by user %s", order_number, previous.value, new_status.value, caller.user_id)
    return order


def get_order(db: Session, caller: Caller, order_id: int) -> Order:
    order = db.get(Order, order_id)
    if not order:
        raise NotFoundError("Order not found", order_id=order_id)
    if not can_view_order(caller, order):
        raise PermissionDeniedError("Access denied", order_id=order_id)
    return order


def list_patient_orders(db: Session, caller: Caller) -> list[Order]:
    require_role(caller, Role.patient)
    return list(
        db.execute(
            select(Order)
            .where(Order.patient_id == caller.user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        .scalars()
        .all()
    )


def list_facility_orders(db: Session, caller: Caller, facility_id: int) -> list[Order]:
    facility = get_facility(db, facility_id)
    require_facility_manager(caller, facility)
    return list(
        db.execute(
            select(Order)
            .where(Order.facility_id == facility.id)
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        .scalars()
        .all()
    )
