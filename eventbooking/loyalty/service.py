"""Per-customer loyalty balance with an append-only history.

Mutations only flush; the caller owns the transaction.
"""

from typing import List, Optional
from datetime import datetime
from decimal import Decimal, ROUND_FLOOR
from sqlalchemy.orm import Session

from eventbooking.models import LoyaltyPoint, LoyaltyHistory
from eventbooking.loyalty.schemas import ChangeType, LoyaltySummary
from eventbooking.errors import InsufficientPointsError, ValidationFailedError

POINT_VALUE = Decimal('0.10')
SPEND_PER_POINT = Decimal('10')

class LoyaltyService:
    """Service for loyalty balances and the points ledger"""
    
    def __init__(self, db: Session):
        self.db = db
    
    @staticmethod
    def points_earned(final_amount: Decimal) -> int:
        """One point per 10 currency units spent, rounded down"""
        if final_amount <= 0:
            return 0
        return int((Decimal(final_amount) / SPEND_PER_POINT).to_integral_value(rounding=ROUND_FLOOR))
    
    @staticmethod
    def loyalty_discount(points_used: int, subtotal: Decimal, promotion_discount: Decimal) -> Decimal:
        """Value of redeemed points, capped at what the promotion left of the subtotal"""
        return min(points_used * POINT_VALUE, subtotal - promotion_discount)
    
    def get_account(self, customer_id: int) -> Optional[LoyaltyPoint]:
        return self.db.query(LoyaltyPoint).filter(LoyaltyPoint.customer_id == customer_id).first()
    
    def get_balance(self, customer_id: int) -> int:
        account = self.get_account(customer_id)
        return account.points if account else 0
    
    def ensure_account(self, customer_id: int) -> LoyaltyPoint:
        account = self.get_account(customer_id)
        if account is None:
            account = LoyaltyPoint(customer_id=customer_id, points=0, updated_at=datetime.utcnow())
            self.db.add(account)
            self.db.flush()
        return account
    
    def debit(self, customer_id: int, points: int, booking_id: Optional[int] = None) -> LoyaltyHistory:
        """Spend points; fails when the balance is too low"""
        if points <= 0:
            raise ValidationFailedError("Points to use must be positive")
        
        account = self.ensure_account(customer_id)
        if points > account.points:
            raise InsufficientPointsError(requested=points, balance=account.points)
        
        account.points -= points
        return self._record(account, ChangeType.USE, points, booking_id)
    
    def credit(self, customer_id: int, points: int, booking_id: Optional[int] = None) -> LoyaltyHistory:
        """Grant points"""
        if points <= 0:
            raise ValidationFailedError("Points to earn must be positive")
        
        account = self.ensure_account(customer_id)
        account.points += points
        return self._record(account, ChangeType.EARN, points, booking_id)
    
    def get_summary(self, customer_id: int) -> LoyaltySummary:
        account = self.get_account(customer_id)
        return LoyaltySummary(
            customer_id=customer_id,
            points=account.points if account else 0,
            updated_at=account.updated_at if account else None
        )
    
    def get_history(self, customer_id: int, limit: int = 100) -> List[LoyaltyHistory]:
        """Ledger entries, newest first"""
        return (
            self.db.query(LoyaltyHistory)
            .filter(LoyaltyHistory.customer_id == customer_id)
            .order_by(LoyaltyHistory.created_at.desc(), LoyaltyHistory.id.desc())
            .limit(limit)
            .all()
        )
    
    def _record(self, account: LoyaltyPoint, change_type: ChangeType, points: int, booking_id: Optional[int]) -> LoyaltyHistory:
        now = datetime.utcnow()
        account.updated_at = now
        
        entry = LoyaltyHistory(
            customer_id=account.customer_id,
            booking_id=booking_id,
            change_type=change_type.value,
            points=points,
            created_at=now
        )
        self.db.add(entry)
        self.db.flush()
        return entry
