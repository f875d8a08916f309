from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from eventbooking.database import get_db
from eventbooking.auth.dependencies import require_capability
from eventbooking.auth.schemas import Capability, CurrentUser
from eventbooking.promotions.schemas import (
    PromotionValidation, PromotionQuoteRequest, PromotionQuote,
    PromotionCreate, Promotion, PromotionStatus
)
from eventbooking.promotions.service import PromotionService

router = APIRouter()

@router.get("/validate", response_model=PromotionValidation)
def validate_promotion(
    code: str = Query("", description="Promotion code as entered"),
    db: Session = Depends(get_db)
):
    """Check whether a promotion code can be redeemed right now"""
    return PromotionService(db).validate_code(code)

@router.post("/quote", response_model=PromotionQuote)
def quote_promotion(request: PromotionQuoteRequest, db: Session = Depends(get_db)):
    """Price a promotion code against an order subtotal"""
    return PromotionService(db).quote(request.code, request.subtotal)

@router.get("", response_model=List[Promotion])
def list_promotions(
    promotion_status: Optional[PromotionStatus] = Query(None, alias="status", description="Filter by status"),
    current_user: CurrentUser = Depends(require_capability(Capability.MANAGE_PROMOTIONS)),
    db: Session = Depends(get_db)
):
    """List promotions; past-window active promotions are reported as expired"""
    return PromotionService(db).list_promotions(promotion_status)

@router.post("", response_model=Promotion, status_code=status.HTTP_201_CREATED)
def create_promotion(
    request: PromotionCreate,
    current_user: CurrentUser = Depends(require_capability(Capability.MANAGE_PROMOTIONS)),
    db: Session = Depends(get_db)
):
    """Create a promotion; the code is stored upper-cased"""
    return PromotionService(db).create_promotion(request)

@router.post("/{promotion_id}/toggle", response_model=Promotion)
def toggle_promotion(
    promotion_id: int,
    current_user: CurrentUser = Depends(require_capability(Capability.MANAGE_PROMOTIONS)),
    db: Session = Depends(get_db)
):
    """Switch a promotion between active and inactive"""
    return PromotionService(db).toggle_status(promotion_id)
