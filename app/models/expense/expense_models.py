from sqlalchemy import Column, String, ForeignKey, DateTime, Boolean, Text, Index, Numeric, CheckConstraint, Uuid
from sqlalchemy.orm import relationship
from datetime import datetime
from app.core.database import Base
import uuid

COLLABORATION_PAYMENT_CATEGORY = "Collaboration Payment"
COLLABORATION_EXPENSE_CATEGORY = "Collaboration Expense"


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    trip_id = Column(Uuid, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    category = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    expense_date = Column(DateTime, nullable=False, default=datetime.utcnow)
    paid_by = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Cross-billed expenses: for_user owes paid_by the amount
    is_collaboration_expense = Column(Boolean, nullable=False, default=False)
    for_user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    is_paid = Column(Boolean, nullable=False, default=False)
    payment_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)

    # Relationships
    trip = relationship("Trip", back_populates="expenses")
    payer = relationship("User", foreign_keys=[paid_by])
    for_user = relationship("User", foreign_keys=[for_user_id])

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_expenses_amount_non_negative"),
        CheckConstraint(
            "for_user_id IS NULL OR for_user_id <> paid_by",
            name="ck_expenses_for_user_not_payer",
        ),
        Index("ix_expenses_trip_id", "trip_id"),
        Index("ix_expenses_paid_by", "paid_by"),
        Index("ix_expenses_for_user_id", "for_user_id"),
        Index("ix_expenses_expense_date", "expense_date"),
    )

    @property
    def payer_name(self):
        return self.payer.username if self.payer else None

    @property
    def payer_email(self):
        return self.payer.email if self.payer else None
