from typing import Optional, Type, Union

from sqlalchemy.orm import Session

from . import models, schemas

RecordModel = Union[Type[models.Budget], Type[models.Expense]]


# Users
def get_user(db: Session, user_id: int):
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_by_email(db: Session, email: str):
    return db.query(models.User).filter(models.User.email == email).first()


def create_user(db: Session, user: schemas.UserCreate, hashed_password: str):
    db_user = models.User(
        name=user.name,
        email=user.email,
        password=hashed_password,
        role=user.role,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


# Families
def get_family(db: Session, family_id: int):
    return db.query(models.Family).filter(models.Family.id == family_id).first()


def get_families(db: Session, admin_id: Optional[int] = None):
    query = db.query(models.Family)
    if admin_id is not None:
        query = query.filter(models.Family.admin_id == admin_id)
    return query.order_by(models.Family.id).all()


def create_family(db: Session, family: schemas.FamilyCreate, admin_id: int):
    db_family = models.Family(name=family.name, admin_id=admin_id)
    db.add(db_family)
    db.commit()
    db.refresh(db_family)
    return db_family


def update_family(db: Session, db_family: models.Family, family: schemas.FamilyUpdate):
    db_family.name = family.name
    db.commit()
    db.refresh(db_family)
    return db_family


# Budgets and expenses
def get_records(db: Session, model: RecordModel, family_id: int):
    return db.query(model).filter(model.family_id == family_id).order_by(model.id).all()


def get_record(db: Session, model: RecordModel, record_id: int):
    return db.query(model).filter(model.id == record_id).first()


def create_record(db: Session, model: RecordModel, record: schemas.RecordCreate):
    db_record = model(**record.model_dump())
    db.add(db_record)
    db.commit()
    db.refresh(db_record)
    return db_record


def update_record(db: Session, db_record, record: schemas.RecordUpdate):
    for key, value in record.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(db_record, key, value)
    db.commit()
    db.refresh(db_record)
    return db_record


def delete_record(db: Session, db_record):
    db.delete(db_record)
    db.commit()
    return db_record
