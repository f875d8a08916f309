"""Promotion codes: validation, discount computation and administration."""

from .router import router
from .service import PromotionService

__all__ = ["router", "PromotionService"]
