import logging
import uuid
from datetime import date, datetime
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, status
from sqlmodel import Session, SQLModel, select

from ..core.errors import ConflictError, NotFoundError, ValidationError
from ..core.security import get_current_user
from ..currencies import normalize_currency
from ..core.timeutils import utcnow
from ..database import get_session
from ..models.budget import Budget
from ..models.category import Category, TransactionType
from ..models.transaction import Transaction
from ..models.user import User
from ..services.aggregator import compute_budget_progress, month_bounds, validate_budget_amount
from .categories import get_owned_category


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/budgets",
    tags=["budgets"],
)


class BudgetCreate(SQLModel):
    category_id: Optional[uuid.UUID] = None
    amount: float
    month: int
    year: int
    currency: Optional[str] = None


class BudgetUpdate(SQLModel):
    category_id: Optional[uuid.UUID] = None
    amount: Optional[float] = None
    month: Optional[int] = None
    year: Optional[int] = None
    currency: Optional[str] = None


class BudgetProgressRead(SQLModel):
    spent: float
    remaining: float
    percent_used: float


class BudgetRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    category_id: Optional[uuid.UUID] = None
    category_name: Optional[str] = None
    amount: float
    month: int
    year: int
    currency: str
    created_at: datetime
    updated_at: datetime
    progress: BudgetProgressRead


def load_month_transactions(
    session: Session,
    user: User,
    year: int,
    month: int,
    kind: Optional[TransactionType] = None,
) -> List[Transaction]:
    """The user's transactions dated within one calendar month."""
    start, end = month_bounds(year, month)
    stmt = select(Transaction).where(
        Transaction.user_id == user.id,
        Transaction.date >= start,
        Transaction.date <= end,
    )
    if kind is not None:
        stmt = stmt.where(Transaction.type == kind)
    stmt = stmt.order_by(Transaction.date.desc(), Transaction.created_at.desc())
    return list(session.exec(stmt).all())


def budget_read(budget: Budget, expenses: List[Transaction], category_names: Dict[uuid.UUID, str]) -> BudgetRead:
    progress = compute_budget_progress(budget, expenses)
    return BudgetRead(
        id=budget.id,
        user_id=budget.user_id,
        category_id=budget.category_id,
        category_name=category_names.get(budget.category_id) if budget.category_id else None,
        amount=budget.amount,
        month=budget.month,
        year=budget.year,
        currency=budget.currency,
        created_at=budget.created_at,
        updated_at=budget.updated_at,
        progress=BudgetProgressRead(
            spent=progress.spent,
            remaining=progress.remaining,
            percent_used=progress.percent_used,
        ),
    )


def category_names_for(session: Session, user: User) -> Dict[uuid.UUID, str]:
    rows = session.exec(select(Category).where(Category.user_id == user.id)).all()
    return {c.id: c.name for c in rows}


def _get_owned(session: Session, user: User, budget_id: uuid.UUID) -> Budget:
    budget = session.get(Budget, budget_id)
    if not budget or budget.user_id != user.id:
        raise NotFoundError("Budget not found")
    return budget


def _check_category(session: Session, user: User, category_id: Optional[uuid.UUID]) -> None:
    if category_id is None:
        return
    category = get_owned_category(session, user, category_id)
    if category.type != TransactionType.expense:
        raise ValidationError("Budgets can only be set on expense categories")


def _check_unique(
    session: Session,
    user: User,
    category_id: Optional[uuid.UUID],
    month: int,
    year: int,
    exclude_id: Optional[uuid.UUID] = None,
) -> None:
    stmt = select(Budget).where(
        Budget.user_id == user.id,
        Budget.month == month,
        Budget.year == year,
    )
    if category_id is None:
        stmt = stmt.where(Budget.category_id.is_(None))
    else:
        stmt = stmt.where(Budget.category_id == category_id)
    if exclude_id is not None:
        stmt = stmt.where(Budget.id != exclude_id)
    if session.exec(stmt).first() is not None:
        kind = "A total budget" if category_id is None else "A budget for this category"
        raise ConflictError(f"{kind} already exists for {year}-{month:02d}")


@router.get(
    "",
    response_model=List[BudgetRead],
    status_code=status.HTTP_200_OK,
)
def list_budgets(
    month: Optional[int] = None,
    year: Optional[int] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Budgets of one month (the current one by default) with their progress."""
    today = date.today()
    month = today.month if month is None else month
    year = today.year if year is None else year
    month_bounds(year, month)

    budgets = session.exec(
        select(Budget).where(
            Budget.user_id == current_user.id,
            Budget.month == month,
            Budget.year == year,
        )
    ).all()
    expenses = load_month_transactions(session, current_user, year, month, TransactionType.expense)
    names = category_names_for(session, current_user)

    # Total budget first, then category budgets by name
    ordered = sorted(
        budgets,
        key=lambda b: (b.category_id is not None, names.get(b.category_id, "") if b.category_id else ""),
    )
    return [budget_read(b, expenses, names) for b in ordered]


@router.get(
    "/{budget_id}",
    response_model=BudgetRead,
    status_code=status.HTTP_200_OK,
)
def get_budget(
    budget_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    budget = _get_owned(session, current_user, budget_id)
    expenses = load_month_transactions(session, current_user, budget.year, budget.month, TransactionType.expense)
    return budget_read(budget, expenses, category_names_for(session, current_user))


@router.post(
    "",
    response_model=BudgetRead,
    status_code=status.HTTP_201_CREATED,
)
def create_budget(
    payload: BudgetCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    amount = validate_budget_amount(payload.amount)
    month_bounds(payload.year, payload.month)
    _check_category(session, current_user, payload.category_id)
    _check_unique(session, current_user, payload.category_id, payload.month, payload.year)

    now = utcnow()
    budget = Budget(
        id=uuid.uuid4(),
        user_id=current_user.id,
        category_id=payload.category_id,
        amount=amount,
        month=payload.month,
        year=payload.year,
        currency=normalize_currency(payload.currency or current_user.base_currency),
        created_at=now,
        updated_at=now,
    )
    session.add(budget)
    session.commit()
    session.refresh(budget)
    logger.info("Created budget %s for user %s (%d-%02d)", budget.id, current_user.id, budget.year, budget.month)

    expenses = load_month_transactions(session, current_user, budget.year, budget.month, TransactionType.expense)
    return budget_read(budget, expenses, category_names_for(session, current_user))


@router.patch(
    "/{budget_id}",
    response_model=BudgetRead,
)
def update_budget(
    budget_id: uuid.UUID,
    payload: BudgetUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    budget = _get_owned(session, current_user, budget_id)

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update")

    if "amount" in changes:
        changes["amount"] = validate_budget_amount(changes["amount"])
    if "currency" in changes:
        if changes["currency"] is None:
            raise ValidationError("currency cannot be null")
        changes["currency"] = normalize_currency(changes["currency"])
    for key in ("month", "year"):
        if key in changes and changes[key] is None:
            raise ValidationError(f"{key} cannot be null")

    category_id = changes.get("category_id", budget.category_id)
    month = changes.get("month", budget.month)
    year = changes.get("year", budget.year)
    month_bounds(year, month)
    _check_category(session, current_user, category_id)
    _check_unique(session, current_user, category_id, month, year, exclude_id=budget.id)

    for key, value in changes.items():
        setattr(budget, key, value)
    budget.updated_at = utcnow()

    session.add(budget)
    session.commit()
    session.refresh(budget)

    expenses = load_month_transactions(session, current_user, budget.year, budget.month, TransactionType.expense)
    return budget_read(budget, expenses, category_names_for(session, current_user))


@router.delete(
    "/{budget_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_budget(
    budget_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    budget = _get_owned(session, current_user, budget_id)
    session.delete(budget)
    session.commit()
    logger.info("Deleted budget %s for user %s", budget_id, current_user.id)
    return None
