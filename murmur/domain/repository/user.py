"""User repository interface."""

from abc import ABC, abstractmethod
from typing import Optional

from murmur.domain.model.user import User
from murmur.domain.value import UserId


class UserRepository(ABC):
    """Repository for User aggregate.

    Defines the contract for user persistence operations.
    Implementations live in the infrastructure layer.
    """

    @abstractmethod
    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        """Find a user by ID.

        Args:
            user_id: The user's unique identifier

        Returns:
            The user if found, None otherwise
        """
        pass

    @abstractmethod
    async def find_by_group_id(self, group_id: int) -> list[User]:
        """Find every member of a user group.

        Args:
            group_id: The group identifier

        Returns:
            Members of the group, possibly empty
        """
        pass

    @abstractmethod
    async def save(self, user: User) -> User:
        """Save a user (create or update).

        Args:
            user: The user to save

        Returns:
            The saved user
        """
        pass
