"""Repository for accounts known to the identity provider.

The external auth service owns account creation; this table mirrors the
fields the meeting workflow needs: contact details for notifications and
the role used for admin gating.
"""

from viewings.db.turso import TursoClient
from viewings.models.identity import Identity, Role


class UserRepository:
    """Repository for identity lookups by id and by role."""

    def __init__(self, db_client: TursoClient):
        """Initialize repository with database client.

        Args:
            db_client: TursoClient instance for database operations
        """
        self._db = db_client

    async def initialize(self) -> None:
        """Create users table if not exists."""
        await self._db.execute_batch(
            [
                """
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                email TEXT NOT NULL UNIQUE,
                role TEXT NOT NULL DEFAULT 'user',
                created_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
            """,
                """
            CREATE INDEX IF NOT EXISTS idx_users_role
            ON users(role)
            """,
            ]
        )

    async def upsert(self, identity: Identity) -> None:
        """Insert or update an account by id."""
        await self._db.execute(
            """
            INSERT INTO users (id, name, email, role)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(id)
            DO UPDATE SET
                name = excluded.name,
                email = excluded.email,
                role = excluded.role
            """,
            [identity.id, identity.name, identity.email, identity.role.value],
        )

    async def get_by_id(self, user_id: str) -> Identity | None:
        """Get an account by id.

        Returns:
            Identity or None if not found
        """
        result = await self._db.execute(
            "SELECT id, name, email, role FROM users WHERE id = ?",
            [user_id],
        )
        if not result.rows:
            return None
        row = result.rows[0]
        return Identity(id=row[0], name=row[1], email=row[2], role=Role(row[3]))

    async def get_by_email(self, email: str) -> Identity | None:
        """Get an account by (case-insensitive) email."""
        result = await self._db.execute(
            "SELECT id, name, email, role FROM users WHERE email = ?",
            [email.strip().lower()],
        )
        if not result.rows:
            return None
        row = result.rows[0]
        return Identity(id=row[0], name=row[1], email=row[2], role=Role(row[3]))

    async def list_admins(self) -> list[Identity]:
        """All accounts holding the admin role."""
        result = await self._db.execute(
            "SELECT id, name, email, role FROM users WHERE role = ? ORDER BY email",
            [Role.ADMIN.value],
        )
        return [
            Identity(id=row[0], name=row[1], email=row[2], role=Role(row[3]))
            for row in result.rows
        ]
