from datetime import date, datetime, time, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

# INTEGER column upper bound
MAX_VALUE = 2**31 - 1


def parse_date(value):
    """Accept ISO-8601 dates and datetimes (``Z`` suffix included); return naive UTC."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError("Invalid date")
    else:
        raise ValueError("Invalid date")

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


class CamelModel(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


# User Schemas
class UserCreate(BaseModel):
    name: str = Field(..., min_length=2)
    email: EmailStr
    password: str = Field(..., min_length=8)
    role: Literal["admin", "user"] = "user"

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        return v


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class User(CamelModel):
    id: int
    name: str
    email: str
    role: str


class AuthResponse(BaseModel):
    message: str
    user: User
    token: str


class UserResponse(BaseModel):
    user: User


class TokenData(BaseModel):
    id: int
    email: Optional[str] = None
    role: str = "user"


class Message(BaseModel):
    message: str


# Family Schemas
class FamilyCreate(BaseModel):
    name: str = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Family name is required")
        return v


class FamilyUpdate(FamilyCreate):
    pass


class Family(CamelModel):
    id: int
    name: str
    admin_id: int = Field(alias="adminId")


# Budget / Expense Schemas
class RecordCreate(CamelModel):
    category: str = Field(..., min_length=1)
    value: int = Field(..., gt=0, le=MAX_VALUE, strict=True)
    date: datetime
    family_id: int = Field(..., gt=0, alias="familyId")

    @field_validator("category")
    @classmethod
    def category_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Category is required")
        return v

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v):
        return parse_date(v)


class RecordUpdate(CamelModel):
    category: Optional[str] = Field(default=None, min_length=1)
    value: Optional[int] = Field(default=None, gt=0, le=MAX_VALUE, strict=True)
    date: Optional[datetime] = None
    family_id: Optional[int] = Field(default=None, gt=0, alias="familyId")

    @field_validator("category")
    @classmethod
    def category_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Category is required")
        return v

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v):
        if v is None:
            return v
        return parse_date(v)


class Record(CamelModel):
    id: int
    family_id: int = Field(alias="familyId")
    category: str
    value: int
    date: datetime


# Summary Schemas
class CategorySummary(CamelModel):
    category: str
    planned: int
    spent: int
    remaining: int
    percent_used: float = Field(alias="percentUsed")
    share_of_expenses: float = Field(alias="shareOfExpenses")
    status: str


class FamilySummary(CamelModel):
    family_id: int = Field(alias="familyId")
    total_budget: int = Field(alias="totalBudget")
    total_expense: int = Field(alias="totalExpense")
    balance: int
    percent_used: float = Field(alias="percentUsed")
    categories: list[CategorySummary]
