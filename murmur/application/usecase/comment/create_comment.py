"""Create comment use case."""

from typing import Optional

from pydantic import AnyHttpUrl, BaseModel, EmailStr, Field, TypeAdapter, field_validator

from murmur.domain.service import CommentService, CommentSubmission, JWTService
from murmur.util.ids import IdCodec

from .common import CommentResponse, decode_optional_comment_id
from .presenter import CommentPresenter

_URL = TypeAdapter(AnyHttpUrl)


class CreateCommentRequest(BaseModel):
    """Create comment request."""

    target_path: str = Field(min_length=1, max_length=255)
    target_title: Optional[str] = Field(default=None, max_length=255)
    nickname: str = Field(min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    website: Optional[str] = None
    content: str = Field(min_length=1, max_length=1000)
    parent_id: Optional[str] = None  # Public id of the comment replied to
    reply_to_id: Optional[str] = None
    is_anonymous: bool = False

    @field_validator("email", "website", "target_title", mode="before")
    @classmethod
    def _blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("website")
    @classmethod
    def _check_website(cls, value: Optional[str]) -> Optional[str]:
        # Validated as a URL but stored exactly as typed
        if value is not None:
            _URL.validate_python(value)
        return value


class CreateCommentContext(BaseModel):
    """Where a submission came from."""

    ip: str
    user_agent: str = ""
    referer: str = ""
    auth_token: Optional[str] = None


class CreateCommentUseCase:
    """Use case for submitting a new comment or reply."""

    def __init__(
        self,
        comment_service: CommentService,
        jwt_service: JWTService,
        presenter: CommentPresenter,
        id_codec: IdCodec,
    ) -> None:
        """Initialize create comment use case.

        Args:
            comment_service: Comment domain service
            jwt_service: JWT service for the optional sign-in token
            presenter: Response assembly
            id_codec: Public id decoding
        """
        self.comment_service = comment_service
        self.jwt_service = jwt_service
        self.presenter = presenter
        self.id_codec = id_codec

    async def execute(
        self, request: CreateCommentRequest, context: CreateCommentContext
    ) -> CommentResponse:
        """Execute create comment flow.

        Args:
            request: The submitted comment
            context: Submitter address, user agent, referer and token

        Returns:
            The stored comment as visitors see it

        Raises:
            ValidationError: Malformed ids or an invalid reply target
            PolicyRejectionError: Rejected by moderation
        """
        submission = CommentSubmission(
            target_path=request.target_path,
            target_title=request.target_title,
            nickname=request.nickname.strip(),
            email=str(request.email) if request.email else None,
            website=request.website,
            content=request.content,
            parent_id=decode_optional_comment_id(self.id_codec, request.parent_id),
            reply_to_id=decode_optional_comment_id(self.id_codec, request.reply_to_id),
            is_anonymous=request.is_anonymous,
        )
        claims = self.jwt_service.get_claims(context.auth_token)

        item = await self.comment_service.create(
            submission,
            ip=context.ip,
            user_agent=context.user_agent,
            referer=context.referer,
            claims=claims,
        )
        return await self.presenter.present(item)
