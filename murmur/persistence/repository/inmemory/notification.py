"""In-memory notification preference repository for testing."""

from typing import Optional

from murmur.domain.model.user import NotificationPreference
from murmur.domain.repository.notification import NotificationPreferenceRepository
from murmur.domain.value import UserId


class InMemoryNotificationPreferenceRepository(NotificationPreferenceRepository):
    def __init__(self) -> None:
        self._preferences: dict[UserId, NotificationPreference] = {}

    async def find_by_user_id(
        self, user_id: UserId
    ) -> Optional[NotificationPreference]:
        return self._preferences.get(user_id)

    async def save(self, preference: NotificationPreference) -> NotificationPreference:
        self._preferences[preference.user_id] = preference
        return preference
