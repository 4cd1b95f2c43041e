"""Identity of an authenticated caller."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Role(str, Enum):
    """Account roles known to the identity provider."""

    USER = "user"
    ADMIN = "admin"


class Identity(BaseModel):
    """An authenticated account as exposed by the identity provider.

    Name and email are authoritative: meeting requests copy them instead
    of trusting contact details typed by the caller.
    """

    model_config = ConfigDict(str_strip_whitespace=True, from_attributes=True)

    id: str = Field(min_length=1, description="Account identifier")
    name: str = Field(min_length=1, description="Display name")
    email: str = Field(min_length=3, description="Account email")
    role: Role = Field(default=Role.USER)

    @field_validator("email")
    @classmethod
    def _lowercase_email(cls, value: str) -> str:
        return value.lower()

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
