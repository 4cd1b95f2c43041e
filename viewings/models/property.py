"""Read-side property projections used by the meeting workflow."""

from pydantic import BaseModel, ConfigDict, Field


class PropertyRecord(BaseModel):
    """A property as resolved from the property directory."""

    model_config = ConfigDict(str_strip_whitespace=True)

    id: str
    title: str = Field(min_length=1)
    location: str = ""
    price: float | None = None
    status: str | None = None
    agent_name: str | None = None
    images: list[str] = Field(default_factory=list, description="Image URLs in display order")

    def summary(self) -> "PropertySummary":
        """Project to the minimal card shown next to a meeting."""
        return PropertySummary(
            id=self.id,
            title=self.title,
            location=self.location,
            image=self.images[0] if self.images else None,
            price=self.price,
            status=self.status,
        )


class PropertySummary(BaseModel):
    """Minimal property card: title, location, first image, price, status."""

    id: str
    title: str
    location: str = ""
    image: str | None = None
    price: float | None = None
    status: str | None = None
