from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from careline.app.db.models.models_v1 import Order, utcnow
from careline.app.db.models.core_types import OrderStatus, Role
from careline.services import notifications
from careline.services.access import Caller, require_role
from careline.services.errors import PermissionDeniedError
from careline.services.inventory import release
from careline.services.order_status import CANCELLABLE_STATUSES, ensure_cancellable
from careline.services.ordering import claim_transition, load_order_for_update
from careline.services.transactions import atomic

logger = logging.getLogger(__name__)


def cancel_order(db: Session, caller: Caller, order_id: int) -> Order:
    """
    Annule une commande pending/confirmed et rend son stock.

    Dans UNE transaction :
    - relecture de la commande sous verrou + garde de statut
    - passage conditionnel à cancelled (un 2e appel concurrent ne matche plus)
    - release de chaque ligne avec la quantité ENREGISTRÉE sur la commande
    - notification order_cancelled

    Rappeler sur une commande déjà annulée échoue proprement
    (InvalidStateTransition) sans recréditer le stock.
    """
    require_role(caller, Role.patient, Role.admin)

    with atomic(db, "cancel order"):
        order = load_order_for_update(db, order_id)
        if caller.role != Role.admin and order.patient_id != caller.user_id:
            raise PermissionDeniedError("Access denied", order_id=order_id)

        previous = order.status
        ensure_cancellable(previous)
        claim_transition(
            db,
            order,
            allowed_from=CANCELLABLE_STATUSES,
            target=OrderStatus.cancelled,
            cancelled_at=utcnow(),
        )

        restored = {}
        for item in order.items:
            restored[item.medicine_id] = release(db, item.medicine_id, item.quantity)

        notifications.order_cancelled(db, order)
        order_number = order.order_number

    logger.info(
        "order %s cancelled (was %s) by user %s, stock restored: %s",
        order_number,
        previous.value,
        caller.user_id,
        restored,
    )
    return order
