from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from .. import auth, crud, models, schemas, summary
from ..access import ensure_family_access
from ..database import get_db
from ..errors import NotFoundError

router = APIRouter()


def get_family_or_404(db: Session, family_id: int) -> models.Family:
    family = crud.get_family(db, family_id=family_id)
    if family is None:
        raise NotFoundError("Family")
    return family


@router.get("", response_model=List[schemas.Family])
def read_families(
    db: Session = Depends(get_db),
    current_user: schemas.TokenData = Depends(auth.get_current_user),
):
    if current_user.role == models.ROLE_ADMIN:
        return crud.get_families(db)
    return crud.get_families(db, admin_id=current_user.id)


@router.post("", response_model=schemas.Family, status_code=201)
def create_family(
    family: schemas.FamilyCreate,
    db: Session = Depends(get_db),
    current_user: schemas.TokenData = Depends(auth.get_current_user),
):
    return crud.create_family(db, family=family, admin_id=current_user.id)


@router.get("/{family_id}", response_model=schemas.Family)
def read_family(
    family_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current_user: schemas.TokenData = Depends(auth.get_current_user),
):
    ensure_family_access(db, current_user, family_id)
    return get_family_or_404(db, family_id)


@router.put("/{family_id}", response_model=schemas.Family)
def update_family(
    family: schemas.FamilyUpdate,
    family_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current_user: schemas.TokenData = Depends(auth.get_current_user),
):
    ensure_family_access(db, current_user, family_id)
    db_family = get_family_or_404(db, family_id)
    return crud.update_family(db, db_family, family)


@router.get("/{family_id}/summary", response_model=schemas.FamilySummary)
def read_family_summary(
    family_id: int = Path(..., gt=0),
    db: Session = Depends(get_db),
    current_user: schemas.TokenData = Depends(auth.get_current_user),
):
    ensure_family_access(db, current_user, family_id)
    get_family_or_404(db, family_id)
    result = summary.budget_summary(
        crud.get_records(db, models.Budget, family_id=family_id),
        crud.get_records(db, models.Expense, family_id=family_id),
    )
    return schemas.FamilySummary(family_id=family_id, **result)
