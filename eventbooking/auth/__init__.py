from . import router, service, dependencies, permissions

__all__ = ["router", "service", "dependencies", "permissions"]
