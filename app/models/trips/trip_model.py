from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Numeric, ForeignKey, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.ext.orderinglist import ordering_list
from app.core.database import Base
from app.models.trips.trip_collaborator import CollaborationStatus
from datetime import datetime
import uuid

class Trip(Base):
    """Trip aggregate. The collaborator list is only reachable through the trip."""
    __tablename__ = "trips"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    destination = Column(String, nullable=False)
    purpose = Column(String, nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    budget = Column(Numeric(12, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)

    owner_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    owner = relationship("User", back_populates="owned_trips")

    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)

    collaborators = relationship(
        "TripCollaborator",
        back_populates="trip",
        cascade="all, delete-orphan",
        order_by="TripCollaborator.position",
        collection_class=ordering_list("position"),
    )
    expenses = relationship("Expense", back_populates="trip", cascade="all, delete", passive_deletes=True)

    __mapper_args__ = {"version_id_col": version}

    def is_owner(self, user_id) -> bool:
        return self.owner_id == user_id

    def find_collaborator(self, user_id):
        for collaborator in self.collaborators:
            if collaborator.user_id == user_id:
                return collaborator
        return None

    def is_accepted_collaborator(self, user_id) -> bool:
        collaborator = self.find_collaborator(user_id)
        return collaborator is not None and collaborator.status == CollaborationStatus.accepted

    def can_view(self, user_id) -> bool:
        return self.is_owner(user_id) or self.is_accepted_collaborator(user_id)

    def touch(self):
        """Mark the aggregate modified so the row version moves with its collaborator list."""
        self.updated_at = datetime.utcnow()
