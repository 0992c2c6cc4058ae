from fastapi import APIRouter

from .. import models
from ..resources import build_resource_router
from . import auth, families


def build_api_router() -> APIRouter:
    api = APIRouter()
    api.include_router(auth.router, prefix="/auth", tags=["auth"])
    api.include_router(families.router, prefix="/families", tags=["families"])
    api.include_router(build_resource_router(models.Budget, "Budget"), prefix="/budgets", tags=["budgets"])
    api.include_router(build_resource_router(models.Expense, "Expense"), prefix="/expenses", tags=["expenses"])
    return api
