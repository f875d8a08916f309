from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List

from eventbooking.database import get_db
from eventbooking.auth.dependencies import get_current_user
from eventbooking.auth.schemas import CurrentUser
from eventbooking.loyalty.schemas import LoyaltySummary, LoyaltyHistoryEntry
from eventbooking.loyalty.service import LoyaltyService

router = APIRouter()

@router.get("", response_model=LoyaltySummary)
def get_loyalty_summary(
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Current point balance"""
    return LoyaltyService(db).get_summary(current_user.id)

@router.get("/history", response_model=List[LoyaltyHistoryEntry])
def get_loyalty_history(
    limit: int = Query(100, ge=1, le=500, description="Maximum entries"),
    current_user: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Points earned and spent, newest first"""
    return LoyaltyService(db).get_history(current_user.id, limit)
