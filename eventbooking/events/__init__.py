from .router import router
from .service import EventService

__all__ = ["router", "EventService"]
