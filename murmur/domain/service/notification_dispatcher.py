"""Comment notification fan-out.

A newly published comment may notify through three independent channels:

- email, handed to an external task broker by comment id
- in-app notifications, through an optional callback
- instant push (bark or webhook) to the site owner's device

Each delivery runs as its own job on a worker pool. Callers never wait for
delivery and never see its failures; those are logged by the pool.
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Optional

import logfire
from pydantic import BaseModel

from murmur.domain.model import Comment
from murmur.domain.repository import NotificationPreferenceRepository
from murmur.domain.value import CommentId, UserId
from murmur.util.worker import WorkerPool

from .base import Service
from .setting_service import SettingService


class TaskBroker(ABC):
    """External job queue that sends comment emails."""

    @abstractmethod
    async def dispatch_comment_notification(self, comment_id: CommentId) -> None:
        pass


class PushooService(ABC):
    """Instant push to the site owner's device."""

    @abstractmethod
    async def send_comment_notification(
        self, comment: Comment, parent: Optional[Comment] = None
    ) -> None:
        """Push a notice about ``comment``.

        Args:
            comment: The new comment
            parent: The comment replied to, when the notice is a reply notice
        """
        pass


class InAppNotification(BaseModel):
    """Payload handed to the in-app notification callback."""

    comment_id: CommentId
    article_title: str = ""
    article_path: str
    commenter_name: str
    commenter_email: str = ""
    comment_content: str
    is_reply: bool = False
    reply_to_user_id: Optional[UserId] = None
    reply_to_email: str = ""
    reply_to_name: str = ""
    is_reply_to_admin: bool = False
    is_anonymous: bool = False
    is_admin_comment: bool = False
    recipient_user_id: Optional[UserId] = None
    recipient_email: str = ""
    notify_admin: bool = False


InAppNotificationCallback = Callable[[InAppNotification], Awaitable[None]]


class NotificationDispatcher(Service):
    """Schedules notification jobs for published comments."""

    def __init__(
        self,
        setting_service: SettingService,
        preference_repository: NotificationPreferenceRepository,
        pushoo_service: PushooService,
        pool: WorkerPool,
    ) -> None:
        """Initialize notification dispatcher.

        Args:
            setting_service: Runtime settings (channel switches, admin email)
            preference_repository: Per-user notification preferences
            pushoo_service: Instant push client
            pool: Worker pool running the deliveries
        """
        self.setting_service = setting_service
        self.preference_repository = preference_repository
        self.pushoo_service = pushoo_service
        self.pool = pool
        self.task_broker: Optional[TaskBroker] = None
        self.in_app_callback: Optional[InAppNotificationCallback] = None

    def set_task_broker(self, broker: Optional[TaskBroker]) -> None:
        self.task_broker = broker

    def set_in_app_callback(
        self, callback: Optional[InAppNotificationCallback]
    ) -> None:
        """Install (or remove, with None) the in-app notification hook."""
        self.in_app_callback = callback

    def dispatch(self, comment: Comment, parent: Optional[Comment] = None) -> int:
        """Queue every applicable notification for ``comment``.

        Args:
            comment: The newly stored comment
            parent: Its structural parent, if it is a reply

        Returns:
            Number of jobs queued
        """
        if not comment.is_published:
            logfire.debug(
                "Comment not published, notifications skipped", comment_id=comment.id
            )
            return 0

        queued = 0
        if self.task_broker is not None:
            broker = self.task_broker
            queued += self.pool.submit(
                "comment.email",
                lambda: broker.dispatch_comment_notification(comment.id),
            )

        for notification in self.in_app_notifications(comment, parent):
            queued += self._submit_in_app(notification)

        queued += self.pool.submit(
            "comment.push", lambda: self.send_push(comment, parent)
        )

        logfire.info("Comment notifications queued", comment_id=comment.id, jobs=queued)
        return queued

    def in_app_notifications(
        self, comment: Comment, parent: Optional[Comment]
    ) -> list[InAppNotification]:
        """Build the in-app notifications a comment triggers.

        The site owner is told about comments from non-administrators,
        unless the comment replies to an administrator (the reply notice
        covers that). The parent's author is told about replies from
        someone else.
        """
        if self.in_app_callback is None:
            return []

        admin_email = self.setting_service.get("frontDesk.siteOwner.email")
        commenter_email = comment.author.email or ""
        base = dict(
            comment_id=comment.id,
            article_title=comment.target_title or "",
            article_path=comment.target_path,
            commenter_name=comment.author.nickname,
            commenter_email=commenter_email,
            comment_content=comment.content,
            is_anonymous=comment.is_anonymous,
            is_admin_comment=comment.is_admin_author,
        )

        notifications = []
        notify_admin = self.setting_service.get_bool("comment.notify_admin")
        if notify_admin and not comment.is_admin_author:
            replies_to_admin = parent is not None and parent.is_admin_author
            if not replies_to_admin and admin_email and admin_email != commenter_email:
                notifications.append(
                    InAppNotification(
                        **base, notify_admin=True, recipient_email=admin_email
                    )
                )

        notify_reply = self.setting_service.get_bool("comment.notify_reply")
        if notify_reply and parent is not None:
            parent_email = parent.author.email or ""
            if parent_email and parent_email != commenter_email:
                notifications.append(
                    InAppNotification(
                        **base,
                        is_reply=True,
                        reply_to_user_id=parent.user_id,
                        reply_to_email=parent_email,
                        reply_to_name=parent.author.nickname,
                        is_reply_to_admin=parent.is_admin_author,
                        recipient_user_id=parent.user_id,
                        recipient_email=parent_email,
                    )
                )
        return notifications

    def _submit_in_app(self, notification: InAppNotification) -> bool:
        callback = self.in_app_callback
        if callback is None:
            return False
        name = "comment.in_app.admin"
        if notification.is_reply:
            name = "comment.in_app.reply"
        return self.pool.submit(name, lambda: callback(notification))

    async def send_push(self, comment: Comment, parent: Optional[Comment]) -> None:
        """Instant push delivery for one comment.

        The receiving device belongs to the site owner, so comments written
        with the site owner's email are never pushed.
        """
        with logfire.span("notification_dispatcher.send_push", comment_id=comment.id):
            channel = self.setting_service.get("pushoo.channel")
            if not channel:
                return

            admin_email = self.setting_service.get("frontDesk.siteOwner.email")
            commenter_email = comment.author.email or ""
            if commenter_email and commenter_email == admin_email:
                logfire.debug("Push skipped, commenter is the device owner")
                return

            notify_admin = self.setting_service.get_bool("comment.notify_admin")
            mail_notify = self.setting_service.get_bool("sc.mail_notify")
            notify_reply = self.setting_service.get_bool("comment.notify_reply")
            parent_is_admin = parent is not None and parent.is_admin_author

            if (notify_admin or mail_notify) and not comment.is_admin_author:
                if not parent_is_admin:
                    await self.pushoo_service.send_comment_notification(comment, None)
                    logfire.info("Owner push sent", comment_id=comment.id)

            if notify_reply and parent is not None and parent_is_admin:
                parent_email = parent.author.email or ""
                if not parent_email or parent_email == commenter_email:
                    return
                if not await self.allows_reply_push(parent.user_id):
                    logfire.info(
                        "Reply push disabled by recipient", user_id=parent.user_id
                    )
                    return
                await self.pushoo_service.send_comment_notification(comment, parent)
                logfire.info("Reply push sent", comment_id=comment.id)

    async def allows_reply_push(self, user_id: Optional[UserId]) -> bool:
        """Recipient's reply notification switch (on when unknown)."""
        if user_id is None:
            return True
        try:
            preference = await self.preference_repository.find_by_user_id(user_id)
        except Exception as e:
            logfire.warn(
                "Notification preference lookup failed, assuming allowed",
                user_id=user_id,
                error=str(e),
            )
            return True
        if preference is None:
            return True
        return preference.allow_comment_reply_notification
