import enum
import uuid
from datetime import datetime

from sqlmodel import SQLModel, Field

from ..core.timeutils import utcnow


class TransactionType(str, enum.Enum):
    income = "income"
    expense = "expense"


class Category(SQLModel, table=True):
    __tablename__ = "categories"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True, index=True)

    user_id: uuid.UUID = Field(foreign_key="users.id", index=True)

    name: str = Field(max_length=50)
    type: TransactionType = Field(index=True)
    # Seeded at registration; cannot be edited or deleted
    is_default: bool = Field(default=False)

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


DEFAULT_CATEGORIES = [
    ("Salary", TransactionType.income),
    ("Freelance", TransactionType.income),
    ("Investment", TransactionType.income),
    ("Other Income", TransactionType.income),
    ("Food", TransactionType.expense),
    ("Transport", TransactionType.expense),
    ("Shopping", TransactionType.expense),
    ("Bills", TransactionType.expense),
    ("Entertainment", TransactionType.expense),
    ("Health", TransactionType.expense),
    ("Other", TransactionType.expense),
]
