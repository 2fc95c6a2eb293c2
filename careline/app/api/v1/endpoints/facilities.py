from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from careline.app.api.deps import get_caller, get_db
from careline.app.db.models.models_v1 import FacilityMedicine
from careline.app.schemas.facility_medicine import FacilityMedicineRead
from careline.app.schemas.order import OrderRead
from careline.services import ordering
from careline.services.access import Caller
from careline.services.catalog import get_facility

router = APIRouter(prefix="/facilities")


@router.get(
    "/{facility_id}/medicines",
    response_model=list[FacilityMedicineRead],
)
def list_facility_medicines(
    facility_id: int,
    in_stock: bool = False,
    db: Session = Depends(get_db),
):
    """
    Stock (READ ONLY)
    - stock n'est modifié que par réservation / compensation de commande
    - exposition via schema Pydantic
    """
    facility = get_facility(db, facility_id)

    stmt = (
        select(FacilityMedicine)
        .where(FacilityMedicine.facility_id == facility.id)
        .order_by(FacilityMedicine.name)
    )
    if in_stock:
        stmt = stmt.where(FacilityMedicine.stock > 0)

    return db.execute(stmt).scalars().all()


@router.get("/{facility_id}/orders", response_model=list[OrderRead])
def list_facility_orders(
    facility_id: int,
    db: Session = Depends(get_db),
    caller: Caller = Depends(get_caller),
):
    return [OrderRead.model_validate(o) for o in ordering.list_facility_orders(db, caller, facility_id)]
