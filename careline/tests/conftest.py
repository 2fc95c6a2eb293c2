import os

# les tests tournent sur SQLite, jamais sur la base Postgres de dev
os.environ.setdefault("DATABASE_URL", "sqlite:///./careline-test.db")

from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from careline.app.api.deps import get_db
from careline.app.db.base import Base
from careline.app.db.models import models_v1  # noqa: F401
from careline.app.db.models.models_v1 import (
    Facility,
    FacilityMedicine,
    Prescription,
    User,
)
from careline.app.db.models.core_types import FacilityType, PrescriptionStatus, Role
from careline.app.db.session import build_engine, make_session_factory
from careline.app.main import app
from careline.services.access import Caller
from careline.services.inventory import current_stock


@pytest.fixture(scope="function")
def engine(tmp_path):
    """
    Base SQLite fichier, neuve pour chaque test.

    Fichier (et pas :memory:) pour que plusieurs threads / connexions
    partagent la même base dans les tests de concurrence.
    """
    engine = build_engine(f"sqlite:///{tmp_path / 'careline.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    # expire_on_commit=False : relire un id après commit ne doit pas rouvrir
    # de transaction (elle bloquerait les autres connexions SQLite)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def world(db_session):
    """
    Données de base :
    - un admin plateforme
    - deux établissements, chacun avec son facility_admin
    - deux patients
    """
    admin = User(name="Admin", email="admin@test.local", role=Role.admin)
    fa_a = User(name="FA A", email="fa_a@test.local", role=Role.facility_admin)
    fa_b = User(name="FA B", email="fa_b@test.local", role=Role.facility_admin)
    alice = User(name="Alice", email="alice@test.local", role=Role.patient)
    bob = User(name="Bob", email="bob@test.local", role=Role.patient)
    db_session.add_all([admin, fa_a, fa_b, alice, bob])
    db_session.flush()

    pharmacy = Facility(name="Pharmacy A", type=FacilityType.pharmacy, admin_id=fa_a.id)
    clinic = Facility(name="Clinic B", type=FacilityType.clinic, admin_id=fa_b.id)
    db_session.add_all([pharmacy, clinic])
    db_session.commit()

    return SimpleNamespace(
        pharmacy=pharmacy,
        clinic=clinic,
        admin=Caller(user_id=admin.id, role=Role.admin),
        pharmacy_admin=Caller(user_id=fa_a.id, role=Role.facility_admin),
        clinic_admin=Caller(user_id=fa_b.id, role=Role.facility_admin),
        alice=Caller(user_id=alice.id, role=Role.patient),
        bob=Caller(user_id=bob.id, role=Role.patient),
    )


@pytest.fixture(scope="function")
def make_medicine(db_session):
    def _make(facility, name, stock, price="5.00", **kwargs) -> FacilityMedicine:
        med = FacilityMedicine(
            facility_id=facility.id,
            name=name,
            stock=stock,
            price=Decimal(str(price)),
            **kwargs,
        )
        db_session.add(med)
        db_session.commit()
        return med

    return _make


@pytest.fixture(scope="function")
def make_prescription(db_session):
    def _make(patient: Caller, facility, status=PrescriptionStatus.issued) -> Prescription:
        rx = Prescription(patient_id=patient.user_id, facility_id=facility.id, status=status, diagnosis="Test Diagnosis")
        db_session.add(rx)
        db_session.commit()
        return rx

    return _make


@pytest.fixture(scope="function")
def stock_of(session_factory):
    """Stock lu dans une session neuve (état réellement commité)."""

    def _read(medicine_id: int) -> int:
        with session_factory() as s:
            return current_stock(s, medicine_id)

    return _read


@pytest.fixture(scope="function")
def client(session_factory):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def production_client(engine):
    """
    Client HTTP avec des sessions réglées comme SessionLocal
    (expire_on_commit=True : la réponse relit la commande après commit).
    """
    factory = make_session_factory(engine)

    def _get_db():
        db = factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def headers():
    def _headers(caller: Caller) -> dict:
        return {"X-User-Id": str(caller.user_id), "X-User-Role": caller.role.value}

    return _headers
