"""Transaction entities produced from inbound messages."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ledgerbot.lib.exceptions import ValidationError
from ledgerbot.lib.timestamps import generate_timestamp, generate_uuid


class Direction(str, Enum):
    """Money flow direction."""

    INCOME = "income"
    EXPENSE = "expense"


class ContextTag(str, Enum):
    """Which ledger the transaction belongs to."""

    HOME = "HOME"
    CLINIC = "CLINIC"


class TransactionStatus(str, Enum):
    """Payment status of a transaction."""

    PAID = "paid"


@dataclass(frozen=True)
class ExtractedTransactionIntent:
    """
    Structured intent parsed from free text.

    Attributes:
        amount: Positive amount with two decimal places
        direction: Income or expense
        category: Category label ("Outros" when nothing matched)
        context_tag: HOME or CLINIC
        description: Text following the amount, if any
        occurred_on: Date mentioned in the text, if any
    """

    amount: Decimal
    direction: Direction
    category: str
    context_tag: ContextTag
    description: Optional[str] = None
    occurred_on: Optional[date] = None


class Transaction(BaseModel):
    """
    Ledger record created from a WhatsApp message.

    Immutable after creation. Written once to the transaction store.
    """

    id: str = Field(default_factory=generate_uuid, description="Unique identifier (UUID)")
    amount: Decimal = Field(..., gt=0, description="Positive amount")
    type: Direction = Field(..., description="income or expense")
    status: TransactionStatus = Field(default=TransactionStatus.PAID)
    date: datetime = Field(..., description="When the transaction happened")
    description: str = Field(..., description="Free-text description")
    category: str = Field(..., description="Category label")
    context_id: ContextTag = Field(default=ContextTag.HOME, description="Ledger context")
    created_by: str = Field(..., description="Sender address")
    created_by_name: str = Field(..., description="Sender display name")
    source: str = Field(default="text", description="Inbound message kind (text or audio)")
    created_at: datetime = Field(default_factory=generate_timestamp)
    updated_at: datetime = Field(default_factory=generate_timestamp)

    model_config = {
        "frozen": True,
    }

    @field_validator("description", "category")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Reject blank strings; callers substitute defaults beforehand."""
        if not v or not v.strip():
            raise ValidationError("Transaction text fields cannot be blank")
        return v
