from .health import router as health_router
from .recommendations import router as recommendations_router
from .shops import router as shops_router
from .users import router as users_router

__all__ = ["health_router", "recommendations_router", "shops_router", "users_router"]
