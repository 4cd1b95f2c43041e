"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import timedelta
from uuid import uuid4

from fastapi import FastAPI

from viewings.api.errors import register_error_handlers
from viewings.api.router import api_router
from viewings.config import Settings, settings
from viewings.db.turso import TursoClient
from viewings.identity.provider import IdentityProvider
from viewings.models.identity import Identity, Role
from viewings.notifications.dispatcher import NotificationDispatcher
from viewings.notifications.email_notifier import EmailNotifier, Notifier
from viewings.repositories.meeting_repo import MeetingRepository
from viewings.repositories.property_repo import PropertyRepository
from viewings.repositories.user_repo import UserRepository
from viewings.scheduling.service import MeetingService

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def initialize_services(
    app: FastAPI,
    db: TursoClient,
    config: Settings = settings,
    notifier: Notifier | None = None,
) -> None:
    """Create repositories and services and register them in app state.

    Args:
        app: Application whose state receives the services
        db: Connected database client
        config: Settings to build services from
        notifier: Transport override; defaults to SMTP EmailNotifier
    """
    users = UserRepository(db)
    properties = PropertyRepository(db)
    meetings = MeetingRepository(db)
    for repo in (users, properties, meetings):
        await repo.initialize()
    logger.info("Repositories initialized")

    if config.seed_admin_email:
        existing = await users.get_by_email(config.seed_admin_email)
        if existing is None:
            await users.upsert(
                Identity(
                    id=str(uuid4()),
                    name=config.seed_admin_name,
                    email=config.seed_admin_email,
                    role=Role.ADMIN,
                )
            )
            logger.info("Seed admin account created")

    identity_provider = IdentityProvider(users)
    notifier = notifier or EmailNotifier(config)
    dispatcher = NotificationDispatcher(
        notifier=notifier,
        identities=identity_provider,
        dashboard_url=f"{config.client_url.rstrip('/')}/admin/meetings",
    )
    if not notifier.is_configured():
        logger.warning("Email transport not configured; notifications will fail")

    app.state.db = db
    app.state.users = users
    app.state.properties = properties
    app.state.meetings = meetings
    app.state.identity_provider = identity_provider
    app.state.notifier = notifier
    app.state.notification_dispatcher = dispatcher
    app.state.meeting_service = MeetingService(
        meetings=meetings,
        properties=properties,
        notifications=dispatcher,
        conflict_window=timedelta(minutes=config.conflict_window_minutes),
        timezone=config.timezone,
        upcoming_limit=config.upcoming_limit,
        notify_on_cancel=config.notify_on_cancel,
    )
    logger.info("MeetingService initialized")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan management.

    Startup:
    - Initialize database connection and schema
    - Seed admin account if configured
    - Wire identity, notification and meeting services

    Shutdown:
    - Close database connection
    """
    logger.info(f"Starting {settings.app_name}...")

    db = TursoClient()
    await db.connect()
    logger.info(f"Database connected: {db.url}")

    await initialize_services(app, db)
    yield

    logger.info(f"Shutting down {settings.app_name}...")
    await db.close()


def create_app() -> FastAPI:
    """Build the FastAPI application with routes and error handlers."""
    application = FastAPI(
        title=settings.app_name,
        description="Property viewing requests, admin decisions and notifications",
        version=settings.app_version,
        lifespan=lifespan,
    )
    register_error_handlers(application)
    application.include_router(api_router)
    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "viewings.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
