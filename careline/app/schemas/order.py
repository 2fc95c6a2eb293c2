from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from careline.app.db.models.core_types import OrderStatus


class OrderItemCreate(BaseModel):
    medicine_id: int
    quantity: int = Field(gt=0)


class OrderCreate(BaseModel):
    facility_id: int
    # l'ordre des lignes est conservé (rapport d'erreur déterministe)
    items: list[OrderItemCreate] = Field(min_length=1)
    prescription_id: int | None = None
    notes: str | None = Field(default=None, max_length=2000)
    delivery_address: str | None = Field(default=None, max_length=255)
    delivery_phone: str | None = Field(default=None, max_length=32)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemRead(BaseModel):
    medicine_id: int
    position: int
    quantity: int
    unit_price: Decimal  # snapshot au moment de la commande
    subtotal: Decimal

    class Config:
        from_attributes = True


class OrderRead(BaseModel):
    id: int
    order_number: str
    patient_id: int
    facility_id: int
    prescription_id: int | None
    status: OrderStatus
    total_amount: Decimal
    notes: str | None
    delivery_address: str | None
    delivery_phone: str | None
    created_at: datetime
    updated_at: datetime
    cancelled_at: datetime | None
    items: list[OrderItemRead]

    class Config:
        from_attributes = True
