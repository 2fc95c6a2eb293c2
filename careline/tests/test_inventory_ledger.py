import pytest
from sqlalchemy import text

from careline.services.errors import (
    ConflictReason,
    InsufficientStock,
    NotFoundError,
    ValidationError,
)
from careline.services.inventory import current_stock, lookup_medicine, release, reserve


def test_reserve_decrements_and_returns_new_stock(db_session, world, make_medicine):
    med = make_medicine(world.pharmacy, "Paracetamol 500mg", stock=10)

    assert reserve(db_session, med.id, 4) == 6
    db_session.commit()

    assert current_stock(db_session, med.id) == 6


def test_reserve_exact_stock_goes_to_zero(db_session, world, make_medicine):
    med = make_medicine(world.pharmacy, "Paracetamol 500mg", stock=3)

    assert reserve(db_session, med.id, 3) == 0


def test_reserve_refuses_more_than_available(db_session, world, make_medicine):
    med = make_medicine(world.pharmacy, "Paracetamol 500mg", stock=5)

    with pytest.raises(InsufficientStock) as exc:
        reserve(db_session, med.id, 6)

    assert exc.value.reason == ConflictReason.insufficient_stock
    assert exc.value.required == 6
    assert exc.value.available == 5
    assert current_stock(db_session, med.id) == 5


def test_reserve_ignores_stale_read(db_session, world, make_medicine):
    """
    GIVEN
    - une lecture du médicament (stock=10) déjà faite dans la transaction
    - un autre acheteur ramène le stock à 4 entre lecture et écriture

    THEN
    - la réservation de 6 échoue : c'est l'écriture conditionnelle qui décide,
      pas la lecture précédente
    """
    med = make_medicine(world.pharmacy, "Ibuprofen 400mg", stock=10)

    looked_up = lookup_medicine(db_session, med.id)
    assert looked_up.stock == 10

    db_session.execute(text("UPDATE facility_medicines SET stock = 4 WHERE id = :id"), {"id": med.id})
    assert looked_up.stock == 10  # identity map toujours périmée

    with pytest.raises(InsufficientStock) as exc:
        reserve(db_session, med.id, 6)

    assert exc.value.available == 4
    assert current_stock(db_session, med.id) == 4
    db_session.rollback()


def test_reserve_unknown_medicine(db_session, world):
    with pytest.raises(NotFoundError):
        reserve(db_session, 999_999, 1)


@pytest.mark.parametrize("quantity", [0, -3])
def test_reserve_rejects_non_positive_quantity(db_session, world, make_medicine, quantity):
    med = make_medicine(world.pharmacy, "Paracetamol 500mg", stock=10)

    with pytest.raises(ValidationError):
        reserve(db_session, med.id, quantity)
    assert current_stock(db_session, med.id) == 10


def test_release_increments(db_session, world, make_medicine):
    med = make_medicine(world.pharmacy, "Cetirizine", stock=2)

    assert release(db_session, med.id, 5) == 7


def test_release_unknown_medicine(db_session, world):
    with pytest.raises(NotFoundError):
        release(db_session, 999_999, 1)


def test_lookup_unknown_medicine(db_session, world):
    with pytest.raises(NotFoundError):
        lookup_medicine(db_session, 999_999)


def test_reservations_compose_inside_one_transaction(db_session, world, make_medicine):
    """Deux réservations sur deux lignes, puis rollback : aucune ne survit."""
    a = make_medicine(world.pharmacy, "Med A", stock=10)
    b = make_medicine(world.pharmacy, "Med B", stock=10)

    reserve(db_session, a.id, 3)
    reserve(db_session, b.id, 7)
    assert current_stock(db_session, a.id) == 7
    assert current_stock(db_session, b.id) == 3

    db_session.rollback()

    assert current_stock(db_session, a.id) == 10
    assert current_stock(db_session, b.id) == 10
