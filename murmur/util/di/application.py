"""Application layer DI providers."""

from dishka import Scope, provide

from murmur.application.usecase.comment import (
    AdminListCommentsUseCase,
    AuthorizeAdminUseCase,
    CommentPresenter,
    CreateCommentUseCase,
    DeleteCommentsUseCase,
    ExportCommentsUseCase,
    FileService,
    GetQQInfoUseCase,
    ImportCommentsUseCase,
    LikeCommentUseCase,
    ListChildrenUseCase,
    ListCommentsUseCase,
    ListLatestUseCase,
    UpdateCommentUseCase,
    UpdatePathUseCase,
)
from murmur.config import AuthSettings
from murmur.domain.repository import UserRepository
from murmur.domain.service import (
    CommentService,
    CommentTransferService,
    JWTService,
    SettingService,
)
from murmur.render.renderer import MarkdownRenderer
from murmur.util.di.base import ProviderBase
from murmur.util.ids import IdCodec


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    scope = Scope.REQUEST

    @provide
    def get_presenter(
        self,
        id_codec: IdCodec,
        renderer: MarkdownRenderer,
        setting_service: SettingService,
        file_service: FileService,
    ) -> CommentPresenter:
        """Provide comment response presenter."""
        return CommentPresenter(
            id_codec=id_codec,
            renderer=renderer,
            setting_service=setting_service,
            file_service=file_service,
        )

    # Visitor use cases
    @provide
    def get_create_comment_use_case(
        self,
        comment_service: CommentService,
        jwt_service: JWTService,
        presenter: CommentPresenter,
        id_codec: IdCodec,
    ) -> CreateCommentUseCase:
        """Provide create comment use case."""
        return CreateCommentUseCase(
            comment_service=comment_service,
            jwt_service=jwt_service,
            presenter=presenter,
            id_codec=id_codec,
        )

    @provide
    def get_list_comments_use_case(
        self, comment_service: CommentService, presenter: CommentPresenter
    ) -> ListCommentsUseCase:
        return ListCommentsUseCase(comment_service, presenter)

    @provide
    def get_list_children_use_case(
        self,
        comment_service: CommentService,
        presenter: CommentPresenter,
        id_codec: IdCodec,
    ) -> ListChildrenUseCase:
        return ListChildrenUseCase(comment_service, presenter, id_codec)

    @provide
    def get_list_latest_use_case(
        self, comment_service: CommentService, presenter: CommentPresenter
    ) -> ListLatestUseCase:
        return ListLatestUseCase(comment_service, presenter)

    @provide
    def get_like_comment_use_case(
        self, comment_service: CommentService, id_codec: IdCodec
    ) -> LikeCommentUseCase:
        return LikeCommentUseCase(comment_service, id_codec)

    @provide
    def get_qq_info_use_case(
        self, comment_service: CommentService
    ) -> GetQQInfoUseCase:
        return GetQQInfoUseCase(comment_service)

    # Admin use cases
    @provide
    def get_authorize_admin_use_case(
        self,
        jwt_service: JWTService,
        user_repository: UserRepository,
        auth_settings: AuthSettings,
    ) -> AuthorizeAdminUseCase:
        """Provide admin authorization use case."""
        return AuthorizeAdminUseCase(
            jwt_service=jwt_service,
            user_repository=user_repository,
            admin_group_id=auth_settings.admin_group_id,
        )

    @provide
    def get_admin_list_use_case(
        self, comment_service: CommentService, presenter: CommentPresenter
    ) -> AdminListCommentsUseCase:
        return AdminListCommentsUseCase(comment_service, presenter)

    @provide
    def get_delete_comments_use_case(
        self, comment_service: CommentService, id_codec: IdCodec
    ) -> DeleteCommentsUseCase:
        return DeleteCommentsUseCase(comment_service, id_codec)

    @provide
    def get_update_comment_use_case(
        self,
        comment_service: CommentService,
        presenter: CommentPresenter,
        id_codec: IdCodec,
    ) -> UpdateCommentUseCase:
        return UpdateCommentUseCase(comment_service, presenter, id_codec)

    @provide
    def get_update_path_use_case(
        self, comment_service: CommentService
    ) -> UpdatePathUseCase:
        return UpdatePathUseCase(comment_service)

    @provide
    def get_export_use_case(
        self, transfer_service: CommentTransferService, id_codec: IdCodec
    ) -> ExportCommentsUseCase:
        return ExportCommentsUseCase(transfer_service, id_codec)

    @provide
    def get_import_use_case(
        self, transfer_service: CommentTransferService
    ) -> ImportCommentsUseCase:
        return ImportCommentsUseCase(transfer_service)
