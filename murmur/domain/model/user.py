"""User aggregate root.

Only the parts of a user account the comment engine reads: group membership
(to recognise administrators), the registered email and the avatar.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field

from murmur.domain.model.common import DomainModel, utc_now
from murmur.domain.value import UserId


class User(DomainModel):
    """Registered user."""

    id: UserId
    nickname: str
    email: Optional[str] = None
    avatar_url: Optional[str] = None
    group_id: int
    created_at: datetime = Field(default_factory=utc_now)


class NotificationPreference(DomainModel):
    """Per-user notification switches."""

    user_id: UserId
    allow_comment_reply_notification: bool = True
