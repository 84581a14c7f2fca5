from .auth import router as auth_router
from .feedback import router as feedback_router
from .health import router as health_router

__all__ = ["auth_router", "feedback_router", "health_router"]
