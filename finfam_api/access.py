"""
Family-scoped access control.

A request may touch a family's budgets and expenses when the caller is a
system admin, or when the caller is the family's admin. The decision is read
from the database on every call.
"""

from typing import Optional

from sqlalchemy.orm import Session

from . import crud, models, schemas
from .errors import AuthenticationError, AuthorizationError, ValidationError


def ensure_family_access(
    db: Session,
    user: Optional[schemas.TokenData],
    family_id: Optional[int],
) -> None:
    if user is None:
        raise AuthenticationError()

    if not family_id:
        raise ValidationError("Family ID not provided", {"familyId": "Family ID is required"})

    if user.role == models.ROLE_ADMIN:
        return

    family = crud.get_family(db, family_id=family_id)
    if family is None or family.admin_id != user.id:
        raise AuthorizationError("Access denied to this family")
