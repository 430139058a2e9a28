"""Dashboard reductions over one user's transactions."""
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional

from ..models.category import TransactionType
from ..models.transaction import Transaction
from ..models.budget import Budget


UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class MonthSummary:
    income: float
    expenses: float
    balance: float
    total_budget: float
    remaining_budget: float


@dataclass(frozen=True)
class BreakdownItem:
    name: str
    value: float
    percent: float


@dataclass
class TimelineDay:
    date: date
    total: float
    transactions: List[Transaction] = field(default_factory=list)


@dataclass(frozen=True)
class MonthTotals:
    month: int
    income: float
    expenses: float


def _total(transactions: Iterable[Transaction], kind: TransactionType) -> float:
    return sum((float(t.amount) for t in transactions if t.type == kind), 0.0)


def summarize_month(transactions: List[Transaction], budgets: Iterable[Budget]) -> MonthSummary:
    income = _total(transactions, TransactionType.income)
    expenses = _total(transactions, TransactionType.expense)
    total_budget = sum((float(b.amount) for b in budgets if b.category_id is None), 0.0)
    # Unlike budget progress, the dashboard figure may go negative
    return MonthSummary(
        income=income,
        expenses=expenses,
        balance=income - expenses,
        total_budget=total_budget,
        remaining_budget=total_budget - expenses,
    )


def expense_breakdown(
    transactions: Iterable[Transaction], category_names: Dict[uuid.UUID, str]
) -> List[BreakdownItem]:
    """Expense totals per category name, in first-seen order."""
    grouped: "OrderedDict[str, float]" = OrderedDict()
    for t in transactions:
        if t.type != TransactionType.expense:
            continue
        name = category_names.get(t.category_id, UNCATEGORIZED) if t.category_id else UNCATEGORIZED
        grouped[name] = grouped.get(name, 0.0) + float(t.amount)

    total = sum(grouped.values())
    return [
        BreakdownItem(name=name, value=value, percent=(value * 100 / total) if total else 0.0)
        for name, value in grouped.items()
    ]


def timeline(transactions: Iterable[Transaction], limit: Optional[int] = 10) -> List[TimelineDay]:
    """Transactions grouped by day, newest day first."""
    days: Dict[date, TimelineDay] = {}
    for t in transactions:
        day = days.setdefault(t.date, TimelineDay(date=t.date, total=0.0))
        day.transactions.append(t)
        if t.type == TransactionType.income:
            day.total += float(t.amount)
        else:
            day.total -= float(t.amount)

    ordered = sorted(days.values(), key=lambda d: d.date, reverse=True)
    return ordered[:limit] if limit is not None else ordered


def monthly_totals(transactions: Iterable[Transaction], year: int) -> List[MonthTotals]:
    income = [0.0] * 12
    expenses = [0.0] * 12
    for t in transactions:
        if t.date.year != year:
            continue
        bucket = income if t.type == TransactionType.income else expenses
        bucket[t.date.month - 1] += float(t.amount)
    return [
        MonthTotals(month=i + 1, income=income[i], expenses=expenses[i]) for i in range(12)
    ]
