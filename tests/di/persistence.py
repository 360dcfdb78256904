"""Mock persistence providers for testing."""

from dishka import Scope, provide

from murmur.domain.repository import (
    CommentRepository,
    NotificationPreferenceRepository,
    UserRepository,
)
from murmur.persistence.repository.inmemory import (
    InMemoryCommentRepository,
    InMemoryNotificationPreferenceRepository,
    InMemoryUserRepository,
)
from murmur.util.di.infrastructure.persistence import PersistenceProvider


class MockPersistenceProvider(PersistenceProvider):
    """Mock persistence provider using in-memory repositories.

    Uses APP scope so data written in one request is visible to the next;
    every test builds its own container, which keeps tests isolated.
    """

    __is_mock__ = True

    scope = Scope.APP

    @provide
    def get_user_repository(self) -> UserRepository:
        """Provide in-memory User repository."""
        return InMemoryUserRepository()

    @provide
    def get_comment_repository(
        self, user_repository: UserRepository
    ) -> CommentRepository:
        """Provide in-memory Comment repository."""
        return InMemoryCommentRepository(user_repository)

    @provide
    def get_notification_preference_repository(
        self,
    ) -> NotificationPreferenceRepository:
        return InMemoryNotificationPreferenceRepository()
