from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID
from app.schemas.trip.collaborator import CollaboratorOut


class CollaborationExpenseCreate(BaseModel):
    # Numeric(10, 2) on the expenses table
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    description: Optional[str] = None
    category: Optional[str] = Field(None, max_length=100)
    date: Optional[datetime] = None

    @field_validator("date")
    @classmethod
    def to_naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class ExpenseResponse(BaseModel):
    id: UUID
    trip_id: UUID
    amount: Decimal
    category: str
    description: Optional[str] = None
    expense_date: datetime
    paid_by: UUID
    payer_name: Optional[str] = None
    payer_email: Optional[str] = None
    is_collaboration_expense: bool
    for_user_id: Optional[UUID] = None
    is_paid: bool
    payment_date: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ContributionPaymentResult(BaseModel):
    message: str
    collaborator: CollaboratorOut
    expense: ExpenseResponse


class ReimbursementResult(BaseModel):
    message: str
    expense: ExpenseResponse
