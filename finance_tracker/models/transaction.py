import datetime as dt
import uuid
from typing import Optional
from sqlmodel import SQLModel, Field

from ..core.timeutils import utcnow
from .category import TransactionType


class Transaction(SQLModel, table=True):
    __tablename__ = "transactions"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    user_id: uuid.UUID = Field(
        foreign_key="users.id",
        index=True
    )

    amount: float = Field(ge=0)
    type: TransactionType = Field(index=True)
    category_id: Optional[uuid.UUID] = Field(default=None, foreign_key="categories.id", index=True)
    date: dt.date = Field(default_factory=dt.date.today, index=True)
    note: Optional[str] = Field(default=None, max_length=255)
    currency: str = Field(default="THB", max_length=3)

    created_at: dt.datetime = Field(default_factory=utcnow)
    updated_at: dt.datetime = Field(default_factory=utcnow)
