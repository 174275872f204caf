"""FastAPI routers."""
from .cart import router as cart_router
from .session import router as session_router

__all__ = ["cart_router", "session_router"]
