import datetime as dt
import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlmodel import SQLModel, Field, Session, select

from ..core.errors import NotFoundError, ValidationError
from ..core.security import get_current_user
from ..currencies import normalize_currency
from ..core.timeutils import utcnow
from ..database import get_session
from ..models.category import TransactionType
from ..models.transaction import Transaction
from ..models.user import User
from ..services.aggregator import month_bounds
from .categories import get_owned_category


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/transactions",
    tags=["transactions"],
)

# ─────────────────────────────
#   SCHEMAS
# ─────────────────────────────

class TransactionBase(SQLModel):
    amount: float = Field(ge=0)
    type: TransactionType = TransactionType.expense
    category_id: Optional[uuid.UUID] = None
    date: Optional[dt.date] = None
    note: Optional[str] = Field(default=None, max_length=255)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)


class TransactionCreate(TransactionBase):
    pass


class TransactionUpdate(SQLModel):
    amount: Optional[float] = Field(default=None, ge=0)
    type: Optional[TransactionType] = None
    category_id: Optional[uuid.UUID] = None
    date: Optional[dt.date] = None
    note: Optional[str] = Field(default=None, max_length=255)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)


class TransactionRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    amount: float
    type: TransactionType
    category_id: Optional[uuid.UUID] = None
    date: dt.date
    note: Optional[str] = None
    currency: str
    created_at: dt.datetime
    updated_at: dt.datetime


def _check_category(session: Session, user: User, category_id: Optional[uuid.UUID], kind: TransactionType) -> None:
    if category_id is None:
        return
    category = get_owned_category(session, user, category_id)
    if category.type != kind:
        raise ValidationError(f"Category '{category.name}' is not an {kind.value} category")


def _get_owned(session: Session, user: User, transaction_id: uuid.UUID) -> Transaction:
    transaction = session.get(Transaction, transaction_id)
    if not transaction or transaction.user_id != user.id:
        raise NotFoundError("Transaction not found")
    return transaction


# ─────────────────────────────
#   ENDPOINTS
# ─────────────────────────────

@router.post(
    "",
    response_model=TransactionRead,
    status_code=status.HTTP_201_CREATED,
)
def create_transaction(
    payload: TransactionCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Record an income or expense for the authenticated user.

    Currency defaults to the user's base currency and the date to today.
    """
    _check_category(session, current_user, payload.category_id, payload.type)

    now = utcnow()
    transaction = Transaction(
        id=uuid.uuid4(),
        user_id=current_user.id,
        amount=payload.amount,
        type=payload.type,
        category_id=payload.category_id,
        date=payload.date or dt.date.today(),
        note=payload.note or None,
        currency=normalize_currency(payload.currency or current_user.base_currency),
        created_at=now,
        updated_at=now,
    )
    session.add(transaction)
    session.commit()
    session.refresh(transaction)
    logger.info("Created %s transaction %s for user %s", transaction.type.value, transaction.id, current_user.id)
    return transaction


@router.get(
    "",
    response_model=List[TransactionRead],
)
def list_transactions(
    month: Optional[int] = None,
    year: Optional[int] = None,
    type: Optional[TransactionType] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """List the user's transactions, newest first.

    ``month`` and ``year`` must be given together.
    """
    statement = select(Transaction).where(Transaction.user_id == current_user.id)
    if (month is None) != (year is None):
        raise ValidationError("month and year must be given together")
    if month is not None:
        start, end = month_bounds(year, month)
        statement = statement.where(Transaction.date >= start, Transaction.date <= end)
    if type is not None:
        statement = statement.where(Transaction.type == type)
    statement = statement.order_by(Transaction.date.desc(), Transaction.created_at.desc())
    return list(session.exec(statement).all())


@router.get(
    "/{transaction_id}",
    response_model=TransactionRead,
)
def get_transaction(
    transaction_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return _get_owned(session, current_user, transaction_id)


@router.patch(
    "/{transaction_id}",
    response_model=TransactionRead,
)
def update_transaction(
    transaction_id: uuid.UUID,
    payload: TransactionUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    transaction = _get_owned(session, current_user, transaction_id)

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise ValidationError("No fields to update")

    if "currency" in changes and changes["currency"] is not None:
        changes["currency"] = normalize_currency(changes["currency"])
    if changes.get("note") == "":
        changes["note"] = None
    for key in ("amount", "type", "date", "currency"):
        if key in changes and changes[key] is None:
            raise ValidationError(f"{key} cannot be null")

    new_type = changes.get("type", transaction.type)
    new_category = changes.get("category_id", transaction.category_id)
    _check_category(session, current_user, new_category, new_type)

    for key, value in changes.items():
        setattr(transaction, key, value)
    transaction.updated_at = utcnow()

    session.add(transaction)
    session.commit()
    session.refresh(transaction)
    return transaction


@router.delete(
    "/{transaction_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_transaction(
    transaction_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    transaction = _get_owned(session, current_user, transaction_id)
    session.delete(transaction)
    session.commit()
    logger.info("Deleted transaction %s for user %s", transaction_id, current_user.id)
    return None
