from __future__ import annotations

from careline.app.db.models.core_types import OrderStatus
from careline.services.errors import InvalidStateTransition

# transitions pilotées par l'établissement (aucun effet stock)
FULFILMENT_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.pending: {OrderStatus.confirmed},
    OrderStatus.confirmed: {OrderStatus.preparing},
    OrderStatus.preparing: {OrderStatus.ready_for_pickup},
    OrderStatus.ready_for_pickup: {OrderStatus.out_for_delivery},
    OrderStatus.out_for_delivery: {OrderStatus.delivered},
    OrderStatus.delivered: set(),
    OrderStatus.cancelled: set(),
}

# annulation : uniquement via careline.services.cancellation
# preparing exclu, la préparation a commencé
CANCELLABLE_STATUSES = {
    OrderStatus.pending,
    OrderStatus.confirmed,
}


def ensure_fulfilment_transition(current: OrderStatus, target: OrderStatus) -> None:
    if target not in FULFILMENT_TRANSITIONS.get(current, set()):
        raise InvalidStateTransition(current.value, target.value)


def ensure_cancellable(current: OrderStatus) -> None:
    if current not in CANCELLABLE_STATUSES:
        raise InvalidStateTransition(current.value, OrderStatus.cancelled.value)
