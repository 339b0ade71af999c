from sqlalchemy import Column, Integer, Boolean, DateTime, Numeric, ForeignKey, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from app.core.database import Base
from datetime import datetime
import sqlalchemy as sa
import enum
import uuid

class CollaborationStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    declined = "declined"


class TripCollaborator(Base):
    __tablename__ = "trip_collaborators"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    trip_id = Column(Uuid, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)

    budget_contribution = Column(Numeric(12, 2), nullable=False, default=0)

    status_enum = sa.Enum(
        CollaborationStatus,
        name="collaboration_status",
        values_callable=lambda obj: [e.value for e in obj]
    )
    status = Column(status_enum, nullable=False, default=CollaborationStatus.pending)

    has_paid = Column(Boolean, nullable=False, default=False)
    payment_date = Column(DateTime, nullable=True)

    invited_at = Column(DateTime, default=datetime.utcnow)
    responded_at = Column(DateTime, nullable=True)

    # One entry per user per trip
    __table_args__ = (
        UniqueConstraint("trip_id", "user_id", name="uq_trip_collaborator_user"),
    )

    trip = relationship("Trip", back_populates="collaborators")
    user = relationship("User", back_populates="collaborations")

    def mark_paid(self, paid_at: datetime):
        if self.status != CollaborationStatus.accepted:
            raise ValueError("Only accepted collaborators can pay a contribution")
        if self.has_paid:
            raise ValueError("Contribution already paid")
        self.has_paid = True
        self.payment_date = paid_at
