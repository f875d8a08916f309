"""Promotion lookup and discount computation.

Redemption matches the stored code exactly, so a code created as ``SUMMER10``
must be redeemed as ``SUMMER10``. The admin path upper-cases codes before
storing them.
"""

from typing import List, Optional
from datetime import datetime
from decimal import Decimal
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError

from eventbooking.models import Promotion
from eventbooking.promotions.schemas import (
    DiscountType, PromotionStatus, PromotionValidation, PromotionQuote,
    PromotionCreate, Promotion as PromotionSchema
)
from eventbooking.errors import NotFoundError, ConflictError, ValidationFailedError
from eventbooking.logger import logger

class PromotionService:
    """Service for promotion validation and administration"""
    
    def __init__(self, db: Session):
        self.db = db
    
    def find_valid_promotion(self, code: Optional[str], now: Optional[datetime] = None) -> Optional[Promotion]:
        """Return the promotion if the code is active and inside its window"""
        
        if not code:
            return None
        
        now = now or datetime.utcnow()
        return self.db.query(Promotion).filter(
            Promotion.code == code,
            Promotion.status == PromotionStatus.ACTIVE.value,
            Promotion.start_date <= now,
            Promotion.end_date >= now
        ).first()
    
    @staticmethod
    def compute_discount(promotion: Promotion, subtotal: Decimal) -> Decimal:
        """Discount for a subtotal; fixed discounts never exceed the subtotal"""
        value = Decimal(promotion.discount_value)
        if promotion.discount_type == DiscountType.PERCENTAGE.value:
            return subtotal * (value / Decimal('100'))
        return min(value, subtotal)
    
    def evaluate(self, code: Optional[str], subtotal: Decimal, now: Optional[datetime] = None) -> Optional[Decimal]:
        """Discount for the code, or None when the code does not apply"""
        promotion = self.find_valid_promotion(code, now)
        if promotion is None:
            return None
        return self.compute_discount(promotion, subtotal)
    
    def validate_code(self, code: Optional[str]) -> PromotionValidation:
        promotion = self.find_valid_promotion(code)
        
        if promotion is None:
            return PromotionValidation(
                valid=False,
                message="Invalid or expired promotion code"
            )
        
        unit = "%" if promotion.discount_type == DiscountType.PERCENTAGE.value else " Rs"
        return PromotionValidation(
            valid=True,
            code=promotion.code,
            discount_type=promotion.discount_type,
            discount_value=promotion.discount_value,
            message=f"Promotion applied! {promotion.discount_value}{unit} discount"
        )
    
    def quote(self, code: str, subtotal: Decimal) -> PromotionQuote:
        if not code or not code.strip():
            return PromotionQuote(valid=False, message="Promo code is empty")
        
        promotion = self.find_valid_promotion(code)
        if promotion is None:
            return PromotionQuote(valid=False, message="Invalid promo code")
        
        return PromotionQuote(
            valid=True,
            discount=self.compute_discount(promotion, subtotal),
            discount_type=promotion.discount_type,
            message="Promo code applied!"
        )
    
    # Administration
    
    def create_promotion(self, data: PromotionCreate) -> Promotion:
        if data.end_date <= data.start_date:
            raise ValidationFailedError("End date must be after start date")
        
        if data.discount_type == DiscountType.PERCENTAGE and data.discount_value > 100:
            raise ValidationFailedError("Percentage discount cannot exceed 100")
        
        code = data.code.upper()
        if self.db.query(Promotion).filter(Promotion.code == code).first():
            raise ConflictError(f"Promotion code {code} already exists")
        
        promotion = Promotion(
            code=code,
            discount_type=data.discount_type.value,
            discount_value=data.discount_value,
            start_date=data.start_date,
            end_date=data.end_date,
            status=data.status.value
        )
        
        try:
            self.db.add(promotion)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(f"Promotion code {code} already exists")
        
        self.db.refresh(promotion)
        logger.info(f"Created promotion {promotion.code} ({promotion.discount_type} {promotion.discount_value})")
        return promotion
    
    def list_promotions(self, status: Optional[PromotionStatus] = None, now: Optional[datetime] = None) -> List[PromotionSchema]:
        """List promotions with expiry reported lazily"""
        
        now = now or datetime.utcnow()
        query = self.db.query(Promotion)
        
        if status == PromotionStatus.EXPIRED:
            query = query.filter(Promotion.end_date < now)
        elif status:
            query = query.filter(Promotion.status == status.value)
        
        promotions = []
        for promotion in query.order_by(Promotion.start_date.desc()).all():
            view = PromotionSchema.model_validate(promotion)
            if promotion.end_date < now and promotion.status == PromotionStatus.ACTIVE.value:
                view.status = PromotionStatus.EXPIRED
            promotions.append(view)
        
        return promotions
    
    def toggle_status(self, promotion_id: int) -> Promotion:
        promotion = self.db.query(Promotion).filter(Promotion.id == promotion_id).first()
        if not promotion:
            raise NotFoundError("Promotion", promotion_id)
        
        promotion.status = (
            PromotionStatus.INACTIVE.value
            if promotion.status == PromotionStatus.ACTIVE.value
            else PromotionStatus.ACTIVE.value
        )
        promotion.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(promotion)
        
        logger.info(f"Promotion {promotion.code} is now {promotion.status}")
        return promotion
