"""FastAPI application entry point."""

import logging
import os

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cyber_sensei.api.routes import router
from cyber_sensei.config import Settings, get_settings
from cyber_sensei.progression.daily_challenges import DailyChallengeBoard
from cyber_sensei.progression.store import ProgressStore
from cyber_sensei.progression.toast import AchievementToast
from cyber_sensei.storage.kv_store import JsonFileStore
from cyber_sensei.storage.progress import ProgressRepository


def configure_logging() -> None:
    """Configure structlog based on environment."""
    is_production = os.getenv("ENV", "development").lower() == "production"

    if is_production:
        # Production: JSON format for machine parsing
        renderer = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
        level = logging.INFO
    else:
        # Development: console format for human readability
        renderer = [structlog.dev.ConsoleRenderer()]
        level = logging.DEBUG

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            *renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the app with one progress store for the whole process.

    The streak is brought up to date before the first request is served.
    """
    settings = settings or get_settings()
    kv_store = JsonFileStore(settings.storage_dir)

    store = ProgressStore(ProgressRepository(kv_store, settings.progress_storage_key))
    store.update_streak()

    app = FastAPI(title="Cyber Sensei Progression", version="0.1.0")
    app.state.settings = settings
    app.state.store = store
    app.state.daily_challenges = DailyChallengeBoard(
        store, kv_store, settings.daily_challenges_storage_key
    )
    app.state.achievement_toast = AchievementToast(
        store, duration_seconds=settings.achievement_toast_seconds
    )

    _allowed_origins_env = os.getenv(
        "ALLOWED_ORIGINS", "http://localhost:8080,http://127.0.0.1:8080"
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in _allowed_origins_env.split(",")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


def main() -> None:
    """Run the application."""
    configure_logging()
    settings = get_settings()
    uvicorn.run(
        "cyber_sensei.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    main()
