from __future__ import annotations

from typing import Generator

from fastapi import Header, HTTPException

from careline.app.db.session import SessionLocal
from careline.app.db.models.core_types import Role
from careline.services.access import Caller


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_caller(
    x_user_id: int | None = Header(default=None, alias="X-User-Id"),
    x_user_role: str | None = Header(default=None, alias="X-User-Role"),
) -> Caller:
    """
    Identité posée par la passerelle d'authentification amont
    (le jeton est déjà vérifié avant d'arriver ici).
    """
    if x_user_id is None or not x_user_role:
        raise HTTPException(status_code=401, detail="Missing caller identity")
    try:
        role = Role(x_user_role.strip())
    except ValueError:
        raise HTTPException(status_code=401, detail="Unknown caller role")
    return Caller(user_id=x_user_id, role=role)
