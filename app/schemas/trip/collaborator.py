from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional, Any
from datetime import datetime
from decimal import Decimal, InvalidOperation
from uuid import UUID
from app.models.trips.trip_collaborator import CollaborationStatus
from app.schemas.user.user import UserBrief


# Largest pledge that fits Numeric(12, 2)
MAX_CONTRIBUTION = Decimal("9999999999.99")


class CollaboratorInvite(BaseModel):
    email: EmailStr
    budget_contribution: Decimal = Decimal("0")
    expected_version: Optional[int] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.lower()

    # Pledges that are negative or not numbers at all count as zero
    @field_validator("budget_contribution", mode="before")
    @classmethod
    def clamp_contribution(cls, value: Any) -> Decimal:
        if value is None or isinstance(value, bool):
            return Decimal("0")
        try:
            amount = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            return Decimal("0")
        if amount.is_nan() or amount < 0:
            return Decimal("0")
        if amount > MAX_CONTRIBUTION:
            raise ValueError(f"Budget contribution cannot exceed {MAX_CONTRIBUTION}")
        return amount.quantize(Decimal("0.01"))


class CollaborationReply(BaseModel):
    status: str
    expected_version: Optional[int] = None


class CollaboratorOut(BaseModel):
    id: UUID
    user_id: UUID
    user: UserBrief
    budget_contribution: Decimal
    status: CollaborationStatus
    has_paid: bool
    payment_date: Optional[datetime] = None
    invited_at: Optional[datetime] = None
    responded_at: Optional[datetime] = None

    model_config = {
        "from_attributes": True
    }


class InviteResult(BaseModel):
    message: str
    collaborator: CollaboratorOut
    trip_version: int


class ReplyResult(BaseModel):
    message: str
    trip_id: UUID
    status: CollaborationStatus


class MessageResponse(BaseModel):
    message: str
