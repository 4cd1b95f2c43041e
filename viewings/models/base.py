"""Base entity class and time helpers shared by domain models."""

from datetime import UTC, datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class BaseEntity(BaseModel):
    """Base class for persisted entities.

    Provides:
    - Unique ID (UUID)
    - Created/updated timestamps (aware UTC)
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_default=True,
        from_attributes=True,
    )

    id: UUID = Field(default_factory=uuid4, description="Unique entity identifier")
    created_at: datetime = Field(
        default_factory=utcnow,
        description="When entity was created",
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        description="When entity was last updated",
    )

    def touch(self, now: datetime | None = None) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = now or utcnow()
