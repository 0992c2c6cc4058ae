from typing import List

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from . import auth, crud, schemas
from .access import ensure_family_access
from .crud import RecordModel
from .database import get_db
from .errors import NotFoundError


def build_resource_router(model: RecordModel, label: str) -> APIRouter:
    """
    Build the create/list/get/update/delete routes for a family-scoped table.

    ``label`` is the human name used in messages, e.g. "Budget".
    """
    router = APIRouter()

    def get_or_404(db: Session, record_id: int):
        db_record = crud.get_record(db, model, record_id=record_id)
        if db_record is None:
            raise NotFoundError(label)
        return db_record

    @router.post("", response_model=schemas.Record, status_code=201)
    def create_record(
        record: schemas.RecordCreate,
        db: Session = Depends(get_db),
        current_user: schemas.TokenData = Depends(auth.get_current_user),
    ):
        ensure_family_access(db, current_user, record.family_id)
        if crud.get_family(db, family_id=record.family_id) is None:
            raise NotFoundError("Family")
        return crud.create_record(db, model, record)

    @router.get("/family/{family_id}", response_model=List[schemas.Record])
    def read_family_records(
        family_id: int = Path(..., gt=0),
        db: Session = Depends(get_db),
        current_user: schemas.TokenData = Depends(auth.get_current_user),
    ):
        ensure_family_access(db, current_user, family_id)
        return crud.get_records(db, model, family_id=family_id)

    @router.get("/{record_id}", response_model=schemas.Record)
    def read_record(
        record_id: int = Path(..., gt=0),
        db: Session = Depends(get_db),
        current_user: schemas.TokenData = Depends(auth.get_current_user),
    ):
        db_record = get_or_404(db, record_id)
        ensure_family_access(db, current_user, db_record.family_id)
        return db_record

    @router.put("/{record_id}", response_model=schemas.Record)
    def update_record(
        record: schemas.RecordUpdate,
        record_id: int = Path(..., gt=0),
        db: Session = Depends(get_db),
        current_user: schemas.TokenData = Depends(auth.get_current_user),
    ):
        db_record = get_or_404(db, record_id)
        ensure_family_access(db, current_user, db_record.family_id)
        if record.family_id is not None and record.family_id != db_record.family_id:
            ensure_family_access(db, current_user, record.family_id)
            if crud.get_family(db, family_id=record.family_id) is None:
                raise NotFoundError("Family")
        return crud.update_record(db, db_record, record)

    @router.delete("/{record_id}", response_model=schemas.Message)
    def delete_record(
        record_id: int = Path(..., gt=0),
        db: Session = Depends(get_db),
        current_user: schemas.TokenData = Depends(auth.get_current_user),
    ):
        db_record = get_or_404(db, record_id)
        ensure_family_access(db, current_user, db_record.family_id)
        crud.delete_record(db, db_record)
        return {"message": f"{label} deleted successfully"}

    return router
