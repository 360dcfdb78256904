"""JWT token domain service."""

import logfire

from murmur.config import AuthSettings
from murmur.domain.value import AuthClaims, UserId
from murmur.util.error import InvalidPublicIdError
from murmur.util.ids import IdCodec
from murmur.util.jwt import TokenPayload, verify_token

from .base import Service


class JWTService(Service):
    """Domain service for JWT token operations."""

    def __init__(self, auth_settings: AuthSettings, id_codec: IdCodec) -> None:
        """Initialize JWT service.

        Args:
            auth_settings: Authentication settings
            id_codec: Decodes the public user id carried in tokens
        """
        self.auth_settings = auth_settings
        self.id_codec = id_codec

    def verify_token(self, token: str) -> TokenPayload:
        """Verify JWT token and extract payload.

        Raises:
            JWTError: If token is invalid or expired
        """
        with logfire.span("jwt_service.verify_token"):
            try:
                payload = verify_token(token, self.auth_settings)
                logfire.info("JWT token verified", user_id=payload.user_id)
                return payload
            except Exception as e:
                logfire.error("JWT token verification failed", error=str(e))
                raise

    def get_claims(self, token: str | None) -> AuthClaims | None:
        """Extract claims from a token without raising exceptions.

        Comment submission works for guests too, so an absent, expired or
        malformed token simply means "not signed in".

        Args:
            token: JWT token string (optional)

        Returns:
            Claims if the token is valid, None otherwise
        """
        if not token:
            return None

        try:
            payload = self.verify_token(token)
            user_id = self.id_codec.decode_user(payload.user_id)
        except InvalidPublicIdError as e:
            logfire.warn("Token carries an undecodable user id", error=str(e))
            return None
        except Exception as e:
            logfire.debug(
                "JWT verification failed, treating as unauthenticated", error=str(e)
            )
            return None
        return AuthClaims(user_id=UserId(user_id))
