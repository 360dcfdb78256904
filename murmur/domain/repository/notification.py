"""Notification preference repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from murmur.domain.model.user import NotificationPreference
from murmur.domain.value import UserId


class NotificationPreferenceRepository(ABC):
    """Stores per-user notification switches."""

    @abstractmethod
    async def find_by_user_id(
        self, user_id: UserId
    ) -> Optional[NotificationPreference]:
        """Return the user's stored preference, or None if never set."""
        pass

    @abstractmethod
    async def save(self, preference: NotificationPreference) -> NotificationPreference:
        pass
