"""Populate an empty database with sample users, families, budgets and expenses."""

import sys
from datetime import datetime

import structlog
from pydantic import ValidationError as SettingsError
from sqlalchemy.orm import Session

from . import auth, models
from .config import get_settings
from .database import Database
from .logging_config import configure_logging

logger = structlog.get_logger(__name__)

SAMPLE_USERS = [
    ("Administrator", "admin@finfam.com", "admin12345", models.ROLE_ADMIN),
    ("Joao Silva", "joao@example.com", "user12345", models.ROLE_USER),
    ("Maria Santos", "maria@example.com", "user12345", models.ROLE_USER),
]

SAMPLE_BUDGETS = [
    ("Food", 1500),
    ("Housing", 2000),
    ("Transport", 500),
    ("Leisure", 300),
]

SAMPLE_EXPENSES = [
    ("Food", 1200),
    ("Housing", 2000),
    ("Transport", 450),
    ("Leisure", 350),
]


def seed_database(db: Session, rounds: int = 10) -> bool:
    """Insert sample rows; returns False without touching anything if users exist."""
    if db.query(models.User).first() is not None:
        logger.info("seed_skipped", reason="users table is not empty")
        return False

    users = [
        models.User(name=name, email=email, password=auth.get_password_hash(password, rounds=rounds), role=role)
        for name, email, password, role in SAMPLE_USERS
    ]
    db.add_all(users)
    db.flush()

    families = [
        models.Family(name="Silva Family", admin_id=users[1].id),
        models.Family(name="Santos Family", admin_id=users[2].id),
    ]
    db.add_all(families)
    db.flush()

    month = datetime.now().replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    for family in families:
        db.add_all(
            models.Budget(family_id=family.id, category=category, value=value, date=month)
            for category, value in SAMPLE_BUDGETS
        )
        db.add_all(
            models.Expense(family_id=family.id, category=category, value=value, date=month)
            for category, value in SAMPLE_EXPENSES
        )

    db.commit()
    logger.info("seed_completed", users=len(users), families=len(families))
    return True


def main():
    try:
        settings = get_settings()
    except SettingsError as e:
        logger.error("invalid_configuration", error=str(e))
        sys.exit(1)

    configure_logging(settings)
    database = Database(settings.database_url)
    database.create_all()
    db = database.SessionLocal()
    try:
        seed_database(db, rounds=settings.bcrypt_rounds)
    finally:
        db.close()
        database.dispose()


if __name__ == "__main__":
    main()
