"""In-memory user repository for testing."""

from typing import Optional

from murmur.domain.model.user import User
from murmur.domain.repository.user import UserRepository
from murmur.domain.value import UserId


class InMemoryUserRepository(UserRepository):
    """In-memory implementation of UserRepository for testing."""

    def __init__(self) -> None:
        self._users: dict[UserId, User] = {}

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID."""
        return self._users.get(user_id)

    async def find_by_group_id(self, group_id: int) -> list[User]:
        return [u for u in self._users.values() if u.group_id == group_id]

    async def save(self, user: User) -> User:
        """Save or update a user."""
        self._users[user.id] = user
        return user
