# Expense store: persistence helpers for trip expenses.
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from sqlalchemy.orm import selectinload
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from app.core.exceptions import InvalidInputError
from app.models.expense.expense_models import Expense
from app.models.user.user import User


# ----------------------
# Helper: eager load expense with relationships
# ----------------------
async def _fetch_expense_with_relations(session: AsyncSession, expense_id) -> Optional[Expense]:
    q = (
        select(Expense)
        .options(
            selectinload(Expense.payer),
            selectinload(Expense.for_user)
        )
        .where(Expense.id == expense_id)
    )
    res = await session.execute(q)
    return res.scalar_one_or_none()


# ----------------------
# CRUD Operations
# ----------------------
async def create_expense(
    session: AsyncSession,
    trip_id,
    payer: User,
    amount: Decimal,
    category: str,
    description: Optional[str] = None,
    expense_date: Optional[datetime] = None,
    for_user: Optional[User] = None,
    is_collaboration_expense: bool = False,
    is_paid: bool = False,
    payment_date: Optional[datetime] = None,
    commit: bool = True
) -> Expense:
    """Create an expense.

    With ``commit=False`` the expense is only added and flushed, leaving the
    transaction open so the caller can group it with other writes.
    """
    if amount < 0:
        raise InvalidInputError("Expense amount cannot be negative")
    if is_collaboration_expense:
        if for_user is None:
            raise InvalidInputError("A collaboration expense needs a user to reimburse it")
        if for_user.id == payer.id:
            raise InvalidInputError("A collaboration expense cannot be billed to its payer")

    new_expense = Expense(
        trip_id=trip_id,
        payer=payer,
        amount=amount,
        category=category,
        description=description,
        expense_date=expense_date or datetime.utcnow(),
        for_user=for_user,
        is_collaboration_expense=is_collaboration_expense,
        is_paid=is_paid,
        payment_date=payment_date,
    )
    session.add(new_expense)
    await session.flush()

    if commit:
        await session.commit()
    return new_expense


async def get_expense(
    session: AsyncSession,
    expense_id
) -> Optional[Expense]:
    """Get a single expense by ID with payer and reimbursing user."""
    return await _fetch_expense_with_relations(session, expense_id)


async def get_trip_expenses(
    session: AsyncSession,
    trip_id
) -> List[Expense]:
    """Get all expenses for a trip, newest first."""
    result = await session.execute(
        select(Expense)
        .options(selectinload(Expense.payer))
        .where(Expense.trip_id == trip_id)
        .order_by(Expense.expense_date.desc())
    )
    return result.scalars().all()


async def get_expenses_for_trips(
    session: AsyncSession,
    trip_ids
) -> List[Expense]:
    """Get the expenses of several trips at once, newest first."""
    if not trip_ids:
        return []
    result = await session.execute(
        select(Expense)
        .options(selectinload(Expense.payer))
        .where(Expense.trip_id.in_(trip_ids))
        .order_by(Expense.expense_date.desc())
    )
    return result.scalars().all()


async def get_pending_reimbursements(
    session: AsyncSession,
    trip_id,
    for_user_id
) -> List[Expense]:
    """Unpaid collaboration expenses on a trip that ``for_user_id`` has to reimburse."""
    result = await session.execute(
        select(Expense)
        .options(selectinload(Expense.payer))
        .where(
            Expense.trip_id == trip_id,
            Expense.for_user_id == for_user_id,
            Expense.is_collaboration_expense.is_(True),
            Expense.is_paid.is_(False)
        )
        .order_by(Expense.expense_date.desc())
    )
    return result.scalars().all()


async def mark_expense_paid(
    session: AsyncSession,
    expense: Expense,
    paid_at: Optional[datetime] = None
) -> Expense:
    expense.is_paid = True
    expense.payment_date = paid_at or datetime.utcnow()
    await session.commit()
    return expense


async def delete_trip_expenses(session: AsyncSession, trip_id) -> int:
    """Delete every expense of a trip. Does not commit."""
    result = await session.execute(
        delete(Expense).where(Expense.trip_id == trip_id)
    )
    return result.rowcount
