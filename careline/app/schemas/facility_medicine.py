from decimal import Decimal

from pydantic import BaseModel


class FacilityMedicineRead(BaseModel):
    id: int
    facility_id: int
    name: str
    category: str | None

    stock: int  # READ ONLY — modifié uniquement par réservation / compensation
    price: Decimal
    reorder_level: int
    requires_prescription: bool

    class Config:
        from_attributes = True
