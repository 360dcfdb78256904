"""Domain layer DI providers."""

from collections.abc import AsyncIterator

import logfire
from dishka import Scope, provide

from murmur.config import AuthSettings, Settings
from murmur.domain.repository import (
    CommentRepository,
    NotificationPreferenceRepository,
    UserRepository,
)
from murmur.domain.service import (
    CacheService,
    CommentService,
    CommentTransferService,
    ContentClassifier,
    JWTService,
    ModerationService,
    NotificationDispatcher,
    PushooService,
    QQProfileClient,
    SettingService,
    ThreadBuilder,
)
from murmur.render.renderer import MarkdownRenderer
from murmur.util.di.base import ProviderBase
from murmur.util.ids import IdCodec
from murmur.util.worker import WorkerPool


class ProdDomainProvider(ProviderBase):
    """Production domain services provider - concrete, no mocks needed.

    Services holding shared state (settings, notification pool and
    dispatcher) are APP-scoped. Services working on repositories are
    REQUEST-scoped to align with the session lifecycle.
    """

    scope = Scope.REQUEST

    @provide(scope=Scope.APP)
    def get_setting_service(self, settings: Settings) -> SettingService:
        """Provide runtime settings seeded from configuration."""
        return SettingService(settings.comment.to_setting_values())

    @provide(scope=Scope.APP)
    def get_thread_builder(self) -> ThreadBuilder:
        return ThreadBuilder()

    @provide(scope=Scope.APP)
    async def get_notification_pool(
        self, settings: Settings
    ) -> AsyncIterator[WorkerPool]:
        """Provide the notification worker pool, stopped on container close."""
        config = settings.notification
        pool = WorkerPool(
            "notifications", workers=config.workers, max_queue=config.max_queue
        )
        yield pool
        logfire.info(
            "Stopping notification pool",
            mode=config.shutdown_mode,
            pending=pool.pending,
        )
        await pool.stop(
            drain=config.shutdown_mode == "drain",
            timeout=config.drain_timeout_seconds,
        )

    @provide(scope=Scope.APP)
    def get_notification_dispatcher(
        self,
        setting_service: SettingService,
        preference_repository: NotificationPreferenceRepository,
        pushoo_service: PushooService,
        pool: WorkerPool,
    ) -> NotificationDispatcher:
        """Provide the notification dispatcher.

        Email and in-app hooks are installed with ``set_task_broker`` and
        ``set_in_app_callback`` by whoever owns those channels.
        """
        return NotificationDispatcher(
            setting_service=setting_service,
            preference_repository=preference_repository,
            pushoo_service=pushoo_service,
            pool=pool,
        )

    @provide
    def get_jwt_service(
        self, auth_settings: AuthSettings, id_codec: IdCodec
    ) -> JWTService:
        """Provide JWT token domain service."""
        return JWTService(auth_settings=auth_settings, id_codec=id_codec)

    @provide
    def get_moderation_service(
        self,
        comment_repository: CommentRepository,
        user_repository: UserRepository,
        setting_service: SettingService,
        classifier: ContentClassifier,
        cache: CacheService,
        auth_settings: AuthSettings,
    ) -> ModerationService:
        """Provide moderation domain service."""
        return ModerationService(
            comment_repository=comment_repository,
            user_repository=user_repository,
            setting_service=setting_service,
            classifier=classifier,
            cache=cache,
            admin_group_id=auth_settings.admin_group_id,
        )

    @provide
    def get_comment_service(
        self,
        comment_repository: CommentRepository,
        moderation_service: ModerationService,
        thread_builder: ThreadBuilder,
        dispatcher: NotificationDispatcher,
        renderer: MarkdownRenderer,
        setting_service: SettingService,
        qq_client: QQProfileClient,
    ) -> CommentService:
        """Provide comment domain service."""
        return CommentService(
            comment_repository=comment_repository,
            moderation_service=moderation_service,
            thread_builder=thread_builder,
            dispatcher=dispatcher,
            renderer=renderer,
            setting_service=setting_service,
            qq_client=qq_client,
        )

    @provide
    def get_transfer_service(
        self,
        comment_repository: CommentRepository,
        id_codec: IdCodec,
        renderer: MarkdownRenderer,
    ) -> CommentTransferService:
        """Provide comment export/import service."""
        return CommentTransferService(
            comment_repository=comment_repository,
            id_codec=id_codec,
            renderer=renderer,
        )
