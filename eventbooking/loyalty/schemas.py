from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum

class ChangeType(str, Enum):
    """Loyalty ledger entry type"""
    EARN = "earn"
    USE = "use"

class LoyaltySummary(BaseModel):
    customer_id: int
    points: int
    updated_at: Optional[datetime] = None

class LoyaltyHistoryEntry(BaseModel):
    id: int
    booking_id: Optional[int] = None
    change_type: ChangeType
    points: int
    created_at: datetime
    
    class Config:
        from_attributes = True
