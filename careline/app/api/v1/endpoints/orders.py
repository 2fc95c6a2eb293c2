from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from careline.app.api.deps import get_caller, get_db
from careline.app.schemas.order import OrderCreate, OrderRead, OrderStatusUpdate
from careline.services import cancellation, ordering
from careline.services.access import Caller

router = APIRouter(prefix="/orders")


@router.post("", response_model=OrderRead, status_code=status.HTTP_201_CREATED)
def create_order(
    payload: OrderCreate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    order = ordering.create_order(db, caller, payload)
    return OrderRead.model_validate(order)


@router.get("", response_model=list[OrderRead])
def list_my_orders(
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    return [OrderRead.model_validate(o) for o in ordering.list_patient_orders(db, caller)]


@router.get("/{order_id}", response_model=OrderRead)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    return OrderRead.model_validate(ordering.get_order(db, caller, order_id))


@router.post("/{order_id}/cancel", response_model=OrderRead)
def cancel_order(
    order_id: int,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    order = cancellation.cancel_order(db, caller, order_id)
    return OrderRead.model_validate(order)


@router.patch("/{order_id}/status", response_model=OrderRead)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    order = ordering.update_order_status(db, caller, order_id, payload.status)
    return OrderRead.model_validate(order)
