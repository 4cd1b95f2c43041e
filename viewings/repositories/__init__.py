"""Repository layer for data persistence.

Provides repository classes for persisting domain data to the database.
Repositories encapsulate data access logic and provide a clean interface
for the service layer.
"""

from viewings.repositories.meeting_repo import MeetingRepository
from viewings.repositories.property_repo import PropertyRepository
from viewings.repositories.user_repo import UserRepository

__all__ = [
    "MeetingRepository",
    "PropertyRepository",
    "UserRepository",
]
