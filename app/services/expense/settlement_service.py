"""
Settlement of money owed between a trip owner and its collaborators.

Two explicit flows, never netted against each other:

* contribution: an accepted collaborator pays the amount they pledged to the
  owner.  The payment is recorded as an ordinary expense for audit purposes.
* reimbursement: an accepted collaborator logs an expense they paid for the
  trip; the owner later marks it as reimbursed.
"""
from datetime import datetime
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Tuple
from app.core.logger import logger
from app.core.cache import RedisCache
from app.core.exceptions import AlreadyPaidError, ForbiddenError, InvalidInputError, NotFoundError
from app.models.expense.expense_models import Expense, COLLABORATION_PAYMENT_CATEGORY, COLLABORATION_EXPENSE_CATEGORY
from app.models.trips.trip_collaborator import TripCollaborator, CollaborationStatus
from app.models.user.user import User
from app.schemas.expense.expense import CollaborationExpenseCreate
from app.services.expense import expense_service
from app.services.trips.trip_service import fetch_trip, commit_trip, invalidate_trip_cache


class SettlementService:
    def __init__(self, cache: RedisCache):
        self.cache = cache

    async def pay_contribution(
        self,
        db: AsyncSession,
        trip_id,
        current_user: User
    ) -> Tuple[TripCollaborator, Expense]:
        trip = await fetch_trip(db, trip_id)

        collaborator = trip.find_collaborator(current_user.id)
        if not collaborator or collaborator.status != CollaborationStatus.accepted:
            logger.warning(f"User {current_user.id} tried to pay a contribution on trip {trip_id}")
            raise ForbiddenError("You are not an accepted collaborator on this trip")

        if collaborator.has_paid:
            raise AlreadyPaidError(
                "Contribution has already been paid",
                details={"payment_date": collaborator.payment_date.isoformat() if collaborator.payment_date else None}
            )

        if collaborator.budget_contribution <= 0:
            raise InvalidInputError("No budget contribution was pledged for this trip")

        paid_at = datetime.utcnow()
        try:
            # Audit record first, then the flag; both land in the same commit
            expense = await expense_service.create_expense(
                db,
                trip_id=trip.id,
                payer=current_user,
                amount=collaborator.budget_contribution,
                category=COLLABORATION_PAYMENT_CATEGORY,
                description=f"Contribution payment from {current_user.username}",
                expense_date=paid_at,
                is_paid=True,
                payment_date=paid_at,
                commit=False
            )
            collaborator.mark_paid(paid_at)
            trip.touch()
        except Exception:
            await db.rollback()
            raise

        await commit_trip(db, trip)
        await invalidate_trip_cache(self.cache, trip.id)

        logger.info(
            f"User {current_user.id} paid contribution {collaborator.budget_contribution} "
            f"on trip {trip.id} (expense {expense.id})"
        )
        return collaborator, expense

    async def record_collaboration_expense(
        self,
        db: AsyncSession,
        trip_id,
        expense_data: CollaborationExpenseCreate,
        current_user: User
    ) -> Expense:
        trip = await fetch_trip(db, trip_id)

        if not trip.is_accepted_collaborator(current_user.id):
            logger.warning(f"User {current_user.id} tried to log a collaboration expense on trip {trip_id}")
            raise ForbiddenError("You are not an accepted collaborator on this trip")

        amount = expense_data.amount.quantize(Decimal("0.01"))
        if amount <= 0:
            raise InvalidInputError("Amount must be greater than zero")
        description = (expense_data.description or "").strip()
        if not description:
            raise InvalidInputError("Description is required")

        expense = await expense_service.create_expense(
            db,
            trip_id=trip.id,
            payer=current_user,
            amount=amount,
            category=(expense_data.category or "").strip() or COLLABORATION_EXPENSE_CATEGORY,
            description=description,
            expense_date=expense_data.date,
            for_user=trip.owner,
            is_collaboration_expense=True,
            is_paid=False
        )

        logger.info(
            f"User {current_user.id} logged collaboration expense {expense.id} of {expense.amount} "
            f"on trip {trip.id} for owner {trip.owner_id}"
        )
        return expense

    async def list_pending_reimbursements(
        self,
        db: AsyncSession,
        trip_id,
        current_user: User
    ) -> List[Expense]:
        trip = await fetch_trip(db, trip_id, populate=False)

        if not trip.is_owner(current_user.id):
            logger.warning(f"User {current_user.id} denied pending reimbursements of trip {trip_id}")
            raise ForbiddenError("Only the trip owner can view pending collaboration expenses")

        expenses = await expense_service.get_pending_reimbursements(db, trip.id, current_user.id)
        logger.info(f"Found {len(expenses)} pending collaboration expenses on trip {trip.id}")
        return expenses

    async def settle_reimbursement(
        self,
        db: AsyncSession,
        expense_id,
        current_user: User
    ) -> Expense:
        expense = await expense_service.get_expense(db, expense_id)
        if not expense:
            raise NotFoundError("Expense", resource_id=expense_id)

        if expense.for_user_id != current_user.id:
            logger.warning(f"User {current_user.id} tried to settle expense {expense_id}")
            raise ForbiddenError("You are not authorized to pay this expense")

        if expense.is_paid:
            raise AlreadyPaidError(
                "Expense has already been reimbursed",
                details={"payment_date": expense.payment_date.isoformat() if expense.payment_date else None}
            )

        expense = await expense_service.mark_expense_paid(db, expense)
        logger.info(f"User {current_user.id} reimbursed expense {expense.id}")
        return expense
