"""Pytest configuration and fixtures."""

from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from viewings.db.turso import TursoClient
from viewings.identity.provider import IdentityProvider
from viewings.identity.tokens import create_access_token
from viewings.main import create_app
from viewings.models.identity import Identity, Role
from viewings.models.property import PropertyRecord
from viewings.notifications.dispatcher import NotificationDispatcher
from viewings.notifications.schemas import NotificationResult, TemplateKind
from viewings.repositories.meeting_repo import MeetingRepository
from viewings.repositories.property_repo import PropertyRepository
from viewings.repositories.user_repo import UserRepository
from viewings.scheduling.service import MeetingService

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


class RecordingNotifier:
    """Notifier double that records every send.

    fail_all / fail_for make sends report failure; raise_error makes them raise.
    """

    def __init__(self) -> None:
        self.sent: list[tuple[TemplateKind, str, dict[str, Any]]] = []
        self.fail_all = False
        self.fail_for: set[str] = set()
        self.raise_error = False
        self.configured = True
        self.healthy = True

    def is_configured(self) -> bool:
        return self.configured

    async def health_check(self) -> bool:
        return self.healthy

    async def send(
        self, kind: TemplateKind, recipient_email: str, payload: dict[str, Any]
    ) -> NotificationResult:
        self.sent.append((kind, recipient_email, payload))
        if self.raise_error:
            raise ConnectionError("smtp unreachable")
        if self.fail_all or recipient_email in self.fail_for:
            return NotificationResult(
                success=False, recipient_email=recipient_email, error="rejected"
            )
        return NotificationResult(
            success=True,
            recipient_email=recipient_email,
            message_id=f"<{len(self.sent)}@test>",
        )

    def sent_with(self, kind: TemplateKind) -> list[tuple[TemplateKind, str, dict]]:
        return [s for s in self.sent if s[0] == kind]


class Clock:
    """Settable clock for time-dependent rules."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


@pytest.fixture
async def db_client(tmp_path: Path) -> AsyncIterator[TursoClient]:
    """Create a temp file database client for testing."""
    db_path = tmp_path / "test_viewings.db"
    client = TursoClient(url=f"file:{db_path}")
    await client.connect()
    yield client
    await client.close()


@pytest.fixture
async def user_repo(db_client: TursoClient) -> UserRepository:
    repo = UserRepository(db_client)
    await repo.initialize()
    return repo


@pytest.fixture
async def property_repo(db_client: TursoClient) -> PropertyRepository:
    repo = PropertyRepository(db_client)
    await repo.initialize()
    return repo


@pytest.fixture
async def meeting_repo(db_client: TursoClient) -> MeetingRepository:
    repo = MeetingRepository(db_client)
    await repo.initialize()
    return repo


@pytest.fixture
def client_user() -> Identity:
    return Identity(id="user-1", name="Jean Dupont", email="Jean.Dupont@example.com")


@pytest.fixture
def other_user() -> Identity:
    return Identity(id="user-2", name="Amira Trabelsi", email="amira@example.com")


@pytest.fixture
def admin_user() -> Identity:
    return Identity(id="admin-1", name="Sandra", email="sandra@agency.tn", role=Role.ADMIN)


@pytest.fixture
def second_admin() -> Identity:
    return Identity(id="admin-2", name="Karim", email="karim@agency.tn", role=Role.ADMIN)


@pytest.fixture
def villa() -> PropertyRecord:
    return PropertyRecord(
        id="prop-1",
        title="Villa Carthage",
        location="La Marsa",
        price=450000,
        status="For Sale",
        agent_name="Sami Ben Ali",
        images=["https://cdn.example.com/villa-1.jpg", "https://cdn.example.com/villa-2.jpg"],
    )


@pytest.fixture
def apartment() -> PropertyRecord:
    return PropertyRecord(id="prop-2", title="Appartement Lac 2", location="Tunis")


@pytest.fixture
async def seeded(
    user_repo: UserRepository,
    property_repo: PropertyRepository,
    client_user: Identity,
    other_user: Identity,
    admin_user: Identity,
    second_admin: Identity,
    villa: PropertyRecord,
    apartment: PropertyRecord,
) -> None:
    """Accounts and properties used across tests."""
    for identity in (client_user, other_user, admin_user, second_admin):
        await user_repo.upsert(identity)
    await property_repo.upsert(villa)
    await property_repo.upsert(apartment)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def identity_provider(user_repo: UserRepository) -> IdentityProvider:
    return IdentityProvider(user_repo)


@pytest.fixture
def dispatcher(
    notifier: RecordingNotifier, identity_provider: IdentityProvider
) -> NotificationDispatcher:
    return NotificationDispatcher(notifier=notifier, identities=identity_provider)


@pytest.fixture
def service(
    seeded: None,
    meeting_repo: MeetingRepository,
    property_repo: PropertyRepository,
    dispatcher: NotificationDispatcher,
    clock: Clock,
) -> MeetingService:
    return MeetingService(
        meetings=meeting_repo,
        properties=property_repo,
        notifications=dispatcher,
        clock=clock,
    )


@pytest.fixture
def app(
    db_client: TursoClient,
    service: MeetingService,
    identity_provider: IdentityProvider,
    notifier: RecordingNotifier,
) -> FastAPI:
    """Application with test services in state (lifespan is not run)."""
    test_app = create_app()
    test_app.state.db = db_client
    test_app.state.identity_provider = identity_provider
    test_app.state.notifier = notifier
    test_app.state.meeting_service = service
    return test_app


@pytest.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Create async test client for the FastAPI app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def auth_header(identity: Identity) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(identity.id)}"}


@pytest.fixture
def client_headers(client_user: Identity) -> dict[str, str]:
    return auth_header(client_user)


@pytest.fixture
def other_headers(other_user: Identity) -> dict[str, str]:
    return auth_header(other_user)


@pytest.fixture
def admin_headers(admin_user: Identity) -> dict[str, str]:
    return auth_header(admin_user)
