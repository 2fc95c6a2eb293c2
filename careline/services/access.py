from __future__ import annotations

from dataclasses import dataclass

from careline.app.db.models.core_types import Role
from careline.app.db.models.models_v1 import Facility, Order
from careline.services.errors import PermissionDeniedError


@dataclass(frozen=True)
class Caller:
    """Identité déjà vérifiée par la passerelle d'authentification amont."""

    user_id: int
    role: Role


def require_role(caller: Caller, *roles: Role) -> None:
    if caller.role not in roles:
        allowed = ", ".join(r.value for r in roles)
        raise PermissionDeniedError(f"Requires role: {allowed}", role=caller.role.value)


def manages_facility(caller: Caller, facility: Facility) -> bool:
    if caller.role == Role.admin:
        return True
    return caller.role == Role.facility_admin and facility.admin_id == caller.user_id


def require_facility_manager(caller: Caller, facility: Facility) -> None:
    if not manages_facility(caller, facility):
        raise PermissionDeniedError("Access denied", facility_id=facility.id)


def can_view_order(caller: Caller, order: Order) -> bool:
    if caller.role == Role.patient:
        return order.patient_id == caller.user_id
    return manages_facility(caller, order.facility)
