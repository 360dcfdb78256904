"""PostgreSQL repository implementations."""

from murmur.persistence.repository.comment import PostgresCommentRepository
from murmur.persistence.repository.notification import (
    PostgresNotificationPreferenceRepository,
)
from murmur.persistence.repository.user import PostgresUserRepository

__all__ = [
    "PostgresCommentRepository",
    "PostgresNotificationPreferenceRepository",
    "PostgresUserRepository",
]
