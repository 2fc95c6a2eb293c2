"""
Taxonomie des erreurs du moteur commandes / stock.

Chaque exception porte un ErrorKind. Les services lèvent exactement une de ces
erreurs ; seule la couche HTTP (careline.app.main) traduit le kind en code
de statut.
"""

from __future__ import annotations

import enum
from typing import Any


class ErrorKind(str, enum.Enum):
    validation = "validation"
    not_found = "not_found"
    permission = "permission"
    conflict = "conflict"
    internal = "internal"


class ConflictReason(str, enum.Enum):
    insufficient_stock = "insufficient_stock"
    invalid_state_transition = "invalid_state_transition"
    prescription_inactive = "prescription_inactive"
    duplicate = "duplicate"
    constraint_violation = "constraint_violation"


class OrderingError(Exception):
    kind: ErrorKind = ErrorKind.internal

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(OrderingError):
    kind = ErrorKind.validation


class NotFoundError(OrderingError):
    kind = ErrorKind.not_found


class PermissionDeniedError(OrderingError):
    kind = ErrorKind.permission


class ConflictError(OrderingError):
    kind = ErrorKind.conflict

    def __init__(self, reason: ConflictReason, message: str, **details: Any) -> None:
        super().__init__(message, **details)
        self.reason = reason


class InsufficientStock(ConflictError):
    def __init__(self, medicine_id: int, required: int, available: int) -> None:
        super().__init__(
            ConflictReason.insufficient_stock,
            f"Insufficient stock for medicine {medicine_id} (required={required}, available={available})",
            medicine_id=medicine_id,
            required=required,
            available=available,
        )
        self.medicine_id = medicine_id
        self.required = required
        self.available = available


class InvalidStateTransition(ConflictError):
    def __init__(self, current: str, target: str) -> None:
        super().__init__(
            ConflictReason.invalid_state_transition,
            f"Order cannot go from {current} to {target}",
            current=current,
            target=target,
        )
        self.current = current
        self.target = target


class InternalError(OrderingError):
    kind = ErrorKind.internal
