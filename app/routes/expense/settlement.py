from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
from uuid import UUID

from app.core.database import get_db
from app.core.redis_lifecyle import get_cache
from app.dependencies.auth import get_current_user
from app.models.user.user import User
from app.schemas.expense.expense import (
    CollaborationExpenseCreate, ExpenseResponse, ContributionPaymentResult, ReimbursementResult
)
from app.schemas.trip.collaborator import CollaboratorOut
from app.services.expense.settlement_service import SettlementService

router = APIRouter(prefix="/settlements", tags=["Settlements"])

async def get_settlement_service(
    cache=Depends(get_cache)
) -> SettlementService:
    return SettlementService(cache)

@router.post("/trips/{trip_id}/pay-contribution", response_model=ContributionPaymentResult)
async def pay_contribution(
    trip_id: UUID,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: SettlementService = Depends(get_settlement_service)
):
    """Pay the contribution the caller pledged to the trip owner."""
    collaborator, expense = await service.pay_contribution(session, trip_id, current_user)
    return ContributionPaymentResult(
        message="Payment recorded successfully",
        collaborator=CollaboratorOut.model_validate(collaborator),
        expense=ExpenseResponse.model_validate(expense)
    )

@router.post("/trips/{trip_id}/expenses", response_model=ExpenseResponse, status_code=201)
async def record_collaboration_expense(
    trip_id: UUID,
    expense_data: CollaborationExpenseCreate,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: SettlementService = Depends(get_settlement_service)
):
    """Log an expense the caller paid that the trip owner has to reimburse."""
    return await service.record_collaboration_expense(session, trip_id, expense_data, current_user)

@router.get("/trips/{trip_id}/pending", response_model=List[ExpenseResponse])
async def list_pending_reimbursements(
    trip_id: UUID,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: SettlementService = Depends(get_settlement_service)
):
    return await service.list_pending_reimbursements(session, trip_id, current_user)

@router.post("/expenses/{expense_id}/pay", response_model=ReimbursementResult)
async def settle_reimbursement(
    expense_id: UUID,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: SettlementService = Depends(get_settlement_service)
):
    """Mark a collaboration expense as reimbursed."""
    expense = await service.settle_reimbursement(session, expense_id, current_user)
    return ReimbursementResult(
        message="Expense marked as paid successfully",
        expense=ExpenseResponse.model_validate(expense)
    )
