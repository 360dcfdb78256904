"""Repository interfaces for the murmur domain.

Repository interfaces are defined in the domain layer (dependency inversion).
Implementations live in the infrastructure layer.
"""

from murmur.domain.repository.comment import (
    CommentFilter,
    CommentInfoUpdate,
    CommentRepository,
    NewComment,
)
from murmur.domain.repository.notification import NotificationPreferenceRepository
from murmur.domain.repository.user import UserRepository

__all__ = [
    "CommentFilter",
    "CommentInfoUpdate",
    "CommentRepository",
    "NewComment",
    "NotificationPreferenceRepository",
    "UserRepository",
]
