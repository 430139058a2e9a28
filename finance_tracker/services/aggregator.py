"""Budget progress aggregation.

The functions here are pure: callers load the rows (already scoped to one user,
one calendar month and expense type) and pass them in.
"""
import calendar
import math
import uuid
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Protocol, Tuple, Union

from ..core.errors import ValidationError


class BudgetLike(Protocol):
    amount: float
    category_id: Optional[uuid.UUID]


class TransactionLike(Protocol):
    amount: float
    category_id: Optional[uuid.UUID]


@dataclass(frozen=True)
class TotalBudget:
    """Budget covering every expense category of the month."""


@dataclass(frozen=True)
class CategoryBudget:
    category_id: uuid.UUID


BudgetScope = Union[TotalBudget, CategoryBudget]


@dataclass(frozen=True)
class BudgetProgress:
    spent: float
    remaining: float
    percent_used: float


def budget_scope(budget: BudgetLike) -> BudgetScope:
    if budget.category_id is None:
        return TotalBudget()
    return CategoryBudget(budget.category_id)


def validate_budget_amount(amount) -> float:
    """Return ``amount`` as a float, or raise if it is not positive and finite."""
    if isinstance(amount, bool) or not isinstance(amount, (int, float)):
        raise ValidationError("Budget amount must be a number")
    if not math.isfinite(amount) or amount <= 0:
        raise ValidationError("Budget amount must be a positive number")
    return float(amount)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar day of ``month`` in ``year``."""
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month: {month}")
    if not 1 <= year <= 9999:
        raise ValidationError(f"Invalid year: {year}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def compute_spent(scope: BudgetScope, transactions: Iterable[TransactionLike]) -> float:
    if isinstance(scope, CategoryBudget):
        return sum((float(t.amount) for t in transactions if t.category_id == scope.category_id), 0.0)
    return sum((float(t.amount) for t in transactions), 0.0)


def compute_budget_progress(
    budget: BudgetLike, transactions: Iterable[TransactionLike]
) -> BudgetProgress:
    """Spending, remaining amount and percentage used for one budget.

    ``remaining`` never goes below zero; overspend shows up as
    ``percent_used`` above 100.
    """
    amount = validate_budget_amount(budget.amount)
    spent = compute_spent(budget_scope(budget), transactions)
    return BudgetProgress(
        spent=spent,
        remaining=max(0.0, amount - spent),
        percent_used=spent * 100 / amount,
    )
