import datetime as dt
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlmodel import Session, SQLModel, select

from ..core.security import get_current_user
from ..database import get_session
from ..models.budget import Budget
from ..models.category import TransactionType
from ..models.transaction import Transaction
from ..models.user import User
from ..services.dashboard import UNCATEGORIZED, expense_breakdown, monthly_totals, summarize_month, timeline
from ..services.aggregator import month_bounds
from .budgets import BudgetRead, budget_read, category_names_for, load_month_transactions


router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
)


class SummaryRead(SQLModel):
    income: float
    expenses: float
    balance: float
    total_budget: float
    remaining_budget: float


class BreakdownRead(SQLModel):
    name: str
    value: float
    percent: float


class TimelineEntryRead(SQLModel):
    id: uuid.UUID
    amount: float
    type: TransactionType
    category_name: str
    note: Optional[str] = None


class TimelineDayRead(SQLModel):
    date: dt.date
    total: float
    transactions: List[TimelineEntryRead]


class DashboardRead(SQLModel):
    month: int
    year: int
    currency: str
    summary: SummaryRead
    breakdown: List[BreakdownRead]
    timeline: List[TimelineDayRead]
    budgets: List[BudgetRead]


class MonthTotalsRead(SQLModel):
    month: int
    income: float
    expenses: float


class MonthlySeriesRead(SQLModel):
    year: int
    currency: str
    months: List[MonthTotalsRead]


@router.get(
    "",
    response_model=DashboardRead,
)
def get_dashboard(
    month: Optional[int] = None,
    year: Optional[int] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Totals, expense breakdown, recent activity and budget progress for a month.

    Amounts are summed as recorded; they are reported in the user's base
    currency without conversion.
    """
    today = dt.date.today()
    month = today.month if month is None else month
    year = today.year if year is None else year

    transactions = load_month_transactions(session, current_user, year, month)
    expenses = [t for t in transactions if t.type == TransactionType.expense]
    budgets = session.exec(
        select(Budget).where(
            Budget.user_id == current_user.id,
            Budget.month == month,
            Budget.year == year,
        )
    ).all()
    names = category_names_for(session, current_user)

    summary = summarize_month(transactions, budgets)
    days = timeline(transactions)

    return DashboardRead(
        month=month,
        year=year,
        currency=current_user.base_currency,
        summary=SummaryRead(**vars(summary)),
        breakdown=[BreakdownRead(name=i.name, value=i.value, percent=i.percent) for i in expense_breakdown(transactions, names)],
        timeline=[
            TimelineDayRead(
                date=day.date,
                total=day.total,
                transactions=[
                    TimelineEntryRead(
                        id=t.id,
                        amount=t.amount,
                        type=t.type,
                        category_name=names.get(t.category_id, UNCATEGORIZED) if t.category_id else UNCATEGORIZED,
                        note=t.note,
                    )
                    for t in day.transactions
                ],
            )
            for day in days
        ],
        budgets=[budget_read(b, expenses, names) for b in budgets],
    )


@router.get(
    "/monthly",
    response_model=MonthlySeriesRead,
)
def get_monthly_series(
    year: Optional[int] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    year = dt.date.today().year if year is None else year
    start, _ = month_bounds(year, 1)
    _, end = month_bounds(year, 12)
    transactions = session.exec(
        select(Transaction).where(
            Transaction.user_id == current_user.id,
            Transaction.date >= start,
            Transaction.date <= end,
        )
    ).all()

    return MonthlySeriesRead(
        year=year,
        currency=current_user.base_currency,
        months=[MonthTotalsRead(month=m.month, income=m.income, expenses=m.expenses) for m in monthly_totals(transactions, year)],
    )
