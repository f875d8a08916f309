from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime
from decimal import Decimal
from enum import Enum

class DiscountType(str, Enum):
    """Discount rule enumeration"""
    PERCENTAGE = "percentage"
    FIXED = "fixed"

class PromotionStatus(str, Enum):
    """Promotion status enumeration"""
    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"

class PromotionValidation(BaseModel):
    """Result of checking a promotion code"""
    valid: bool
    code: Optional[str] = None
    discount_type: Optional[DiscountType] = None
    discount_value: Optional[Decimal] = None
    message: str

class PromotionQuoteRequest(BaseModel):
    """Request to price a promotion against an order subtotal"""
    code: str
    subtotal: Decimal = Field(..., ge=0)

class PromotionQuote(BaseModel):
    """Discount a promotion would give on a subtotal"""
    valid: bool
    discount: Decimal = Decimal('0')
    discount_type: Optional[DiscountType] = None
    message: str

class PromotionCreate(BaseModel):
    """Request to create a promotion"""
    code: str = Field(..., min_length=1, max_length=50)
    discount_type: DiscountType
    discount_value: Decimal = Field(..., gt=0)
    start_date: datetime
    end_date: datetime
    status: PromotionStatus = PromotionStatus.ACTIVE
    
    @validator('code')
    def strip_code(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Promotion code cannot be blank')
        return v

class Promotion(BaseModel):
    """Promotion as shown to administrators"""
    id: int
    code: str
    discount_type: DiscountType
    discount_value: Decimal
    start_date: datetime
    end_date: datetime
    status: PromotionStatus
    
    class Config:
        from_attributes = True
