from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from typing import Optional
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import structlog

from task_wizard.application.api.route import chat, session
from task_wizard.domain.session.session_controller import SessionController
from task_wizard.domain.session.session_id import SESSION_ID_HEADER
from task_wizard.infrastructure.config.settings import ServerSettings, get_settings
from task_wizard.infrastructure.observability.logging import setup_logging
from task_wizard.infrastructure.store.session_store import SessionStore, create_session_store

logger = structlog.get_logger(__name__)


def create_app(
    settings: Optional[ServerSettings] = None,
    store: Optional[SessionStore] = None
) -> FastAPI:
    """Build the task wizard HTTP application"""

    settings = settings or get_settings()

    setup_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        service_name=settings.service_name,
        version=settings.version
    )

    session_store = store or create_session_store(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Task wizard server started",
            store=type(session_store).__name__,
            version=settings.version
        )
        yield
        # Release the session store
        await session_store.close()
        logger.info("Task wizard server shutdown")

    app = FastAPI(title="Task Wizard Server", version=settings.version, lifespan=lifespan)
    app.state.settings = settings
    app.state.session_store = session_store
    app.state.session_controller = SessionController(session_store)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[SESSION_ID_HEADER],
    )

    app.include_router(chat.router)
    app.include_router(session.router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "store": type(session_store).__name__,
            "version": settings.version,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
