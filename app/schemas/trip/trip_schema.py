from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from app.schemas.user.user import UserBrief
from app.schemas.trip.collaborator import CollaboratorOut

class TripBase(BaseModel):
    destination: str = Field(..., min_length=1)
    purpose: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    budget: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    notes: Optional[str] = None

class TripCreate(TripBase):

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self

class TripUpdate(BaseModel):
    destination: Optional[str] = Field(None, min_length=1)
    purpose: Optional[str] = Field(None, min_length=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    notes: Optional[str] = None
    expected_version: Optional[int] = None

class TripResponse(TripBase):
    id: UUID
    owner_id: UUID
    version: int
    created_at: datetime

    class Config:
        from_attributes = True

class TripDetail(TripResponse):
    owner: UserBrief
    collaborators: List[CollaboratorOut] = []
