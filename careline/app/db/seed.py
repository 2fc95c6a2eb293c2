from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select

from careline.app.db.session import SessionLocal
from careline.app.db.models.models_v1 import Facility, FacilityMedicine, User
from careline.app.db.models.core_types import FacilityType, Role


def run_seed():
    db = SessionLocal()
    try:
        # 1) Utilisateurs de démo (les identités viennent de la passerelle auth)
        users = {}
        for name, email, role in (
            ("ADMIN", "admin@careline.local", Role.admin),
            ("Pharmacy Admin", "pharmacy@careline.local", Role.facility_admin),
            ("Demo Patient", "patient@careline.local", Role.patient),
        ):
            user = db.scalar(select(User).where(User.email == email))
            if not user:
                user = User(name=name, email=email, role=role, active=True)
                db.add(user)
                db.flush()
            users[role] = user

        # 2) Établissement "Central Pharmacy"
        facility = db.scalar(select(Facility).where(Facility.name == "Central Pharmacy"))
        if not facility:
            facility = Facility(
                name="Central Pharmacy",
                type=FacilityType.pharmacy,
                admin_id=users[Role.facility_admin].id,
                active=True,
            )
            db.add(facility)
            db.flush()

        # 3) Catalogue minimal
        med = db.scalar(
            select(FacilityMedicine)
            .where(FacilityMedicine.facility_id == facility.id)
            .where(FacilityMedicine.name == "Amoxicillin")
        )
        if not med:
            db.add(
                FacilityMedicine(
                    facility_id=facility.id,
                    name="Amoxicillin",
                    category="Antibiotic",
                    stock=50,
                    price=Decimal("10.50"),
                    requires_prescription=True,
                )
            )

        db.commit()
        print(f"SEED OK: facility={facility.name}, users={len(users)}")
    finally:
        db.close()


if __name__ == "__main__":
    run_seed()
