"""Property directory backed by the properties table.

The catalog itself is maintained elsewhere; the meeting workflow only
resolves a property id to its title, agent and display card.
"""

import json

from viewings.db.turso import TursoClient
from viewings.models.property import PropertyRecord


class PropertyRepository:
    """Read access to the property catalog by id."""

    def __init__(self, db_client: TursoClient):
        """Initialize repository with database client.

        Args:
            db_client: TursoClient instance for database operations
        """
        self._db = db_client

    async def initialize(self) -> None:
        """Create properties table if not exists."""
        await self._db.execute(
            """
            CREATE TABLE IF NOT EXISTS properties (
                id TEXT PRIMARY KEY,
                title TEXT NOT NULL,
                location TEXT NOT NULL DEFAULT '',
                price REAL,
                status TEXT,
                agent_name TEXT,
                images TEXT NOT NULL DEFAULT '[]'
            )
            """
        )

    async def upsert(self, record: PropertyRecord) -> None:
        """Insert or replace a property."""
        await self._db.execute(
            """
            INSERT INTO properties (id, title, location, price, status, agent_name, images)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id)
            DO UPDATE SET
                title = excluded.title,
                location = excluded.location,
                price = excluded.price,
                status = excluded.status,
                agent_name = excluded.agent_name,
                images = excluded.images
            """,
            [
                record.id,
                record.title,
                record.location,
                record.price,
                record.status,
                record.agent_name,
                json.dumps(record.images),
            ],
        )

    async def get_by_id(self, property_id: str) -> PropertyRecord | None:
        """Resolve a property id.

        Returns:
            PropertyRecord or None if the property does not exist
        """
        result = await self._db.execute(
            """
            SELECT id, title, location, price, status, agent_name, images
            FROM properties
            WHERE id = ?
            """,
            [property_id],
        )
        if not result.rows:
            return None
        row = result.rows[0]
        return PropertyRecord(
            id=row[0],
            title=row[1],
            location=row[2] or "",
            price=row[3],
            status=row[4],
            agent_name=row[5],
            images=json.loads(row[6] or "[]"),
        )
