# meeting_scheduler/main.py
from fastapi import FastAPI

from meeting_scheduler.api.routes import health, internal, meetings, notifications, rooms, users
from meeting_scheduler.core.config import StoreBackend, get_settings
from meeting_scheduler.core.logging import configure_logging, get_logger
from meeting_scheduler.db.session import init_db_for_startup

logger = get_logger(__name__)


def create_app() -> FastAPI:
    """
    Application factory for the meeting scheduling service.
    """
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Backend for booking meetings on a shared weekly calendar.\n"
            "Every save is checked against existing bookings for room and participant\n"
            "double-bookings, and participants' declared availability is reported\n"
            "as advisory warnings."
        ),
        version="0.1.0",
    )

    # Routers
    app.include_router(health.router)
    app.include_router(meetings.router)
    app.include_router(rooms.router)
    app.include_router(users.router)
    app.include_router(notifications.router)
    app.include_router(internal.router)

    @app.on_event("startup")
    async def on_startup() -> None:
        if settings.STORE_BACKEND == StoreBackend.SQL:
            await init_db_for_startup()
        logger.info(
            "%s started (env=%s, store=%s)",
            settings.APP_NAME,
            settings.APP_ENV,
            settings.STORE_BACKEND.value,
        )

    return app


app = create_app()
