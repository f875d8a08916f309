from .router import router
from .service import OrganizerService

__all__ = ["router", "OrganizerService"]
