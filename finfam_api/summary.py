"""
Budget versus expense aggregation.

Works on any objects (ORM rows, API dicts) exposing ``category`` and
``value``, and recomputes everything from the list it is given.
"""

from collections import OrderedDict
from typing import Iterable

STATUS_OK = "ok"
STATUS_ATTENTION = "attention"
STATUS_EXCEEDED = "exceeded"

ATTENTION_THRESHOLD = 80.0


def _field(item, name):
    if isinstance(item, dict):
        return item[name]
    return getattr(item, name)


def total(items: Iterable) -> int:
    return sum(_field(item, "value") for item in items)


def group_by_category(items: Iterable) -> "OrderedDict[str, int]":
    """Sum values per category, in first-seen order."""
    grouped: "OrderedDict[str, int]" = OrderedDict()
    for item in items:
        category = _field(item, "category")
        grouped[category] = grouped.get(category, 0) + _field(item, "value")
    return grouped


def percent_used(spent: float, planned: float) -> float:
    if planned <= 0:
        return 0.0
    return round(spent / planned * 100, 1)


def percent_of_total(value: float, whole: float) -> float:
    if whole <= 0:
        return 0.0
    return round(value / whole * 100, 1)


def category_status(percent: float) -> str:
    if percent > 100:
        return STATUS_EXCEEDED
    if percent >= ATTENTION_THRESHOLD:
        return STATUS_ATTENTION
    return STATUS_OK


def budget_summary(budgets: Iterable, expenses: Iterable) -> dict:
    """
    Compare planned (budgets) against actual (expenses) spend.

    Returns totals, balance and overall percent used, plus one row per
    category found in either list. Budget categories come first, then
    categories that only have expenses.
    """
    budgets = list(budgets)
    expenses = list(expenses)
    planned_by_category = group_by_category(budgets)
    spent_by_category = group_by_category(expenses)

    categories = list(planned_by_category)
    categories += [c for c in spent_by_category if c not in planned_by_category]

    total_budget = sum(planned_by_category.values())
    total_expense = sum(spent_by_category.values())

    rows = []
    for category in categories:
        planned = planned_by_category.get(category, 0)
        spent = spent_by_category.get(category, 0)
        percent = percent_used(spent, planned)
        if planned <= 0 and spent > 0:
            status = STATUS_EXCEEDED
        else:
            status = category_status(percent)
        rows.append({
            "category": category,
            "planned": planned,
            "spent": spent,
            "remaining": planned - spent,
            "percent_used": percent,
            "share_of_expenses": percent_of_total(spent, total_expense),
            "status": status,
        })

    return {
        "total_budget": total_budget,
        "total_expense": total_expense,
        "balance": total_budget - total_expense,
        "percent_used": percent_used(total_expense, total_budget),
        "categories": rows,
    }
