from .router import router
from .service import LoyaltyService

__all__ = ["router", "LoyaltyService"]
