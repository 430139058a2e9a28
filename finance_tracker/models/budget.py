import uuid
from datetime import datetime
from typing import Optional

from sqlmodel import SQLModel, Field

from ..core.timeutils import utcnow


class Budget(SQLModel, table=True):
    __tablename__ = "budgets"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)

    # NULL means the total monthly budget across all expense categories
    category_id: Optional[uuid.UUID] = Field(default=None, foreign_key="categories.id", index=True)

    amount: float = Field(gt=0)
    month: int = Field(ge=1, le=12, index=True)
    year: int = Field(index=True)
    currency: str = Field(default="THB", max_length=3)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
