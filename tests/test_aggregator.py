import math
import uuid
from datetime import date

import pytest

from finance_tracker.core.errors import ValidationError
from finance_tracker.models.budget import Budget
from finance_tracker.models.category import TransactionType
from finance_tracker.models.transaction import Transaction
from finance_tracker.services.aggregator import (
    BudgetProgress,
    CategoryBudget,
    TotalBudget,
    budget_scope,
    compute_budget_progress,
    month_bounds,
    validate_budget_amount,
)


FOOD = uuid.uuid4()
TRANSPORT = uuid.uuid4()


def expense(amount, category_id=None, day=date(2025, 3, 10)):
    return Transaction(amount=amount, type=TransactionType.expense, category_id=category_id, date=day, currency="THB")


def budget(amount, category_id=None):
    return Budget(amount=amount, category_id=category_id, month=3, year=2025, currency="THB")


def test_total_budget_sums_every_expense():
    txs = [expense(100, FOOD), expense(250.5, TRANSPORT), expense(49.5)]
    progress = compute_budget_progress(budget(1000), txs)

    assert progress.spent == pytest.approx(400)
    assert progress.remaining == pytest.approx(600)
    assert progress.percent_used == pytest.approx(40)


def test_category_budget_only_counts_matching_category():
    txs = [expense(100, FOOD), expense(250, TRANSPORT), expense(30, FOOD), expense(70)]
    progress = compute_budget_progress(budget(200, FOOD), txs)

    assert progress.spent == pytest.approx(130)
    assert progress.remaining == pytest.approx(70)
    assert progress.percent_used == pytest.approx(65)


def test_overspend_clamps_remaining_but_not_percentage():
    txs = [expense(700), expense(500)]
    progress = compute_budget_progress(budget(1000), txs)

    assert progress.spent == pytest.approx(1200)
    assert progress.remaining == 0
    assert progress.percent_used == pytest.approx(120)


def test_no_transactions():
    progress = compute_budget_progress(budget(500, FOOD), [])
    assert progress == BudgetProgress(spent=0.0, remaining=500.0, percent_used=0.0)


def test_is_idempotent():
    txs = [expense(12.34, FOOD), expense(56.78, TRANSPORT)]
    b = budget(300)
    assert compute_budget_progress(b, txs) == compute_budget_progress(b, txs)


@pytest.mark.parametrize("amount", [0, -10, math.inf, math.nan, None, "100"])
def test_rejects_invalid_budget_amount(amount):
    with pytest.raises(ValidationError):
        compute_budget_progress(budget(amount), [expense(1)])


def test_validate_budget_amount_returns_float():
    assert validate_budget_amount(250) == 250.0
    with pytest.raises(ValidationError):
        validate_budget_amount(True)


def test_budget_scope_is_tagged():
    assert budget_scope(budget(10)) == TotalBudget()
    assert budget_scope(budget(10, FOOD)) == CategoryBudget(FOOD)


def test_month_bounds():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
    assert month_bounds(2025, 12) == (date(2025, 12, 1), date(2025, 12, 31))
    with pytest.raises(ValidationError):
        month_bounds(2025, 13)
    with pytest.raises(ValidationError):
        month_bounds(0, 1)
