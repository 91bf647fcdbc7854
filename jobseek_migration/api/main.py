"""FastAPI application entry point."""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import Settings
from .routes import migrate


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the API application."""
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="JobSeek Migration API",
        description="Moves anonymous session data under an authenticated user",
        version="1.0.0",
    )

    # CORS middleware for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(migrate.router, prefix="/api/auth", tags=["auth"])

    @app.get("/api/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
