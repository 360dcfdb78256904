"""Administrator authorization use case."""

import logfire

from murmur.domain.error import NotAuthenticatedError, NotAuthorizedError
from murmur.domain.model import User
from murmur.domain.repository import UserRepository
from murmur.domain.service import JWTService


class AuthorizeAdminUseCase:
    """Use case resolving an access token to an administrator account."""

    def __init__(
        self,
        jwt_service: JWTService,
        user_repository: UserRepository,
        admin_group_id: int,
    ) -> None:
        self.jwt_service = jwt_service
        self.user_repository = user_repository
        self.admin_group_id = admin_group_id

    async def execute(self, token: str | None) -> User:
        """Execute authorization.

        Returns:
            The administrator the token belongs to

        Raises:
            NotAuthenticatedError: Missing, invalid or expired token
            NotAuthorizedError: The user is not an administrator
        """
        claims = self.jwt_service.get_claims(token)
        if claims is None:
            raise NotAuthenticatedError("Authentication required")

        user = await self.user_repository.find_by_id(claims.user_id)
        if user is None or user.group_id != self.admin_group_id:
            logfire.warn("Non-administrator on admin route", user_id=claims.user_id)
            raise NotAuthorizedError("Administrator access required")
        return user
