"""
Émetteur de notifications : une ligne locale par changement d'état.

Aucun envoi SMS / email / push ici (transports externes) : on écrit
seulement dans `notifications`, dans la transaction de l'appelant.
"""

from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from careline.app.db.models.models_v1 import Notification, Order
from careline.app.db.models.core_types import NotificationType, OrderStatus

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    OrderStatus.confirmed: "Your order has been confirmed",
    OrderStatus.preparing: "Your order is being prepared",
    OrderStatus.ready_for_pickup: "Your order is ready for pickup",
    OrderStatus.out_for_delivery: "Your order is out for delivery",
    OrderStatus.delivered: "Your order has been delivered",
}


def _record(db: Session, order: Order, type_: NotificationType, title: str, message: str) -> Notification:
    n = Notification(
        user_id=order.patient_id,
        order_id=order.id,
        type=type_,
        title=title,
        message=message,
    )
    db.add(n)
    logger.debug("notification %s queued for order %s", type_.value, order.order_number)
    return n


def order_created(db: Session, order: Order) -> Notification:
    return _record(
        db,
        order,
        NotificationType.order_created,
        "Order Placed",
        f"Your order {order.order_number} has been placed and is awaiting confirmation.",
    )


def order_status_changed(db: Session, order: Order, status: OrderStatus) -> Notification:
    type_ = NotificationType.order_delivered if status == OrderStatus.delivered else NotificationType.order_status_changed
    message = STATUS_MESSAGES.get(status, f"Your order is now {status.value}")
    return _record(db, order, type_, "Order Update", f"{message} ({order.order_number}).")


def order_cancelled(db: Session, order: Order) -> Notification:
    return _record(
        db,
        order,
        NotificationType.order_cancelled,
        "Order Cancelled",
        f"Your order {order.order_number} has been cancelled.",
    )
