"""Domain value objects for murmur."""

from murmur.domain.value.identifiers import CommentId, UserId
from murmur.domain.value.types import (
    AuthClaims,
    CommentStatus,
    ModerationAction,
    RiskLevel,
)

__all__ = [
    # Identifiers
    "CommentId",
    "UserId",
    # Types
    "AuthClaims",
    "CommentStatus",
    "ModerationAction",
    "RiskLevel",
]
