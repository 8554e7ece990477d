"""
chatcore - Main Application Entry Point

Real-time messaging core: presence, friends, chats and call signaling.
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatcore.core.config import get_settings
from chatcore.core.logger import logger

_started_at = time.monotonic()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    settings = get_settings()
    logger.info(f"Starting chatcore in {settings.ENVIRONMENT} mode...")

    # Start background scheduler for periodic jobs
    from chatcore.services.background_scheduler import (
        start_background_scheduler,
        stop_background_scheduler,
    )

    await start_background_scheduler()

    yield

    # Shutdown
    logger.info("Shutting down chatcore...")
    await stop_background_scheduler()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="chatcore",
        description="Real-time messaging core with presence, friends, chats and call signaling",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    from chatcore.api import chats, friends, realtime, users
    from chatcore.api.deps import (
        CallRepo,
        ChatRepo,
        SessionRegistry,
        UserRepo,
    )

    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(friends.router, prefix="/api/friends", tags=["friends"])
    app.include_router(chats.router, prefix="/api/chats", tags=["chats"])
    app.include_router(realtime.router, prefix="/api/realtime", tags=["realtime"])

    @app.get("/health")
    async def health_check(
        user_repo: UserRepo,
        chat_repo: ChatRepo,
        call_repo: CallRepo,
        sessions: SessionRegistry,
    ):
        """Health check endpoint."""
        return {
            "status": "ok",
            "environment": settings.ENVIRONMENT,
            "version": "0.1.0",
            "users": await user_repo.count(),
            "chats": await chat_repo.count(),
            "activeCalls": await call_repo.count(),
            "onlineUsers": len(await sessions.online_user_ids()),
            "connections": await sessions.count(),
            "uptime": round(time.monotonic() - _started_at, 3),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
