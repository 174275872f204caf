"""
Pick'n'Go Cart Panel - FastAPI Application

Serves the cart panel JSON API to the storefront front end.
"""
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pickngo import __version__
from pickngo.routers import cart_router, session_router
from pickngo.routers.deps import close_content_api


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    yield
    # Shutdown
    await close_content_api()


def create_app() -> FastAPI:
    app = FastAPI(
        title="Pick'n'Go Cart Panel",
        description="Shopping cart panel over the storefront content API",
        version=__version__,
        lifespan=lifespan,
    )

    origins = os.environ.get("PICKNGO_CORS_ORIGINS", "http://localhost:5173").split(",")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in origins if origin.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(cart_router, prefix="/api/webapp")
    app.include_router(session_router, prefix="/api/webapp")

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "ok", "service": "pickngo-cart"}

    return app


app = create_app()
