import logging
import uuid
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlmodel import Field, Session, SQLModel, select

from ..core.errors import NotFoundError, ValidationError
from ..core.security import get_current_user
from ..core.timeutils import utcnow
from ..database import get_session
from ..models.budget import Budget
from ..models.category import Category, TransactionType
from ..models.transaction import Transaction
from ..models.user import User


logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/categories",
    tags=["categories"],
)


class CategoryBase(SQLModel):
    name: str = Field(min_length=1, max_length=50)
    type: TransactionType


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(SQLModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=50)
    type: Optional[TransactionType] = None


class CategoryRead(CategoryBase):
    id: uuid.UUID
    user_id: uuid.UUID
    is_default: bool
    created_at: datetime
    updated_at: datetime


def get_owned_category(session: Session, user: User, category_id: uuid.UUID) -> Category:
    category = session.get(Category, category_id)
    if not category or category.user_id != user.id:
        raise NotFoundError("Category not found")
    return category


def _editable(session: Session, user: User, category_id: uuid.UUID) -> Category:
    category = get_owned_category(session, user, category_id)
    if category.is_default:
        raise ValidationError("Default categories cannot be edited or deleted")
    return category


def _ensure_unreferenced(session: Session, category: Category) -> None:
    """A category in use keeps its type; transactions and budgets must match it."""
    used = session.exec(select(Transaction.id).where(Transaction.category_id == category.id)).first()
    if used is None:
        used = session.exec(select(Budget.id).where(Budget.category_id == category.id)).first()
    if used is not None:
        raise ValidationError("Cannot change the type of a category that has transactions or budgets")


@router.get(
    "",
    response_model=List[CategoryRead],
)
def list_categories(
    type: Optional[TransactionType] = None,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    stmt = select(Category).where(Category.user_id == current_user.id)
    if type is not None:
        stmt = stmt.where(Category.type == type)
    stmt = stmt.order_by(Category.name.asc())
    return list(session.exec(stmt).all())


@router.post(
    "",
    response_model=CategoryRead,
    status_code=status.HTTP_201_CREATED,
)
def create_category(
    payload: CategoryCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    now = utcnow()
    category = Category(
        id=uuid.uuid4(),
        user_id=current_user.id,
        name=payload.name.strip(),
        type=payload.type,
        is_default=False,
        created_at=now,
        updated_at=now,
    )
    session.add(category)
    session.commit()
    session.refresh(category)
    logger.info("Created category %s for user %s", category.id, current_user.id)
    return category


@router.patch(
    "/{category_id}",
    response_model=CategoryRead,
)
def update_category(
    category_id: uuid.UUID,
    payload: CategoryUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    category = _editable(session, current_user, category_id)

    if payload.name is None and payload.type is None:
        raise ValidationError("No fields to update")
    if payload.name is not None:
        category.name = payload.name.strip()
    if payload.type is not None and payload.type != category.type:
        _ensure_unreferenced(session, category)
        category.type = payload.type

    category.updated_at = utcnow()
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@router.delete(
    "/{category_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_category(
    category_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """Delete a custom category.

    Its transactions become uncategorized; budgets scoped to it go away
    with it.
    """
    category = _editable(session, current_user, category_id)

    for t in session.exec(select(Transaction).where(Transaction.category_id == category.id)).all():
        t.category_id = None
        session.add(t)
    for b in session.exec(select(Budget).where(Budget.category_id == category.id)).all():
        session.delete(b)

    session.delete(category)
    session.commit()
    logger.info("Deleted category %s for user %s", category_id, current_user.id)
    return None
