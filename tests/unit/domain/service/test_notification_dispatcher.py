"""Unit tests for NotificationDispatcher."""

import pytest
import pytest_asyncio

from murmur.config import CommentSettings
from murmur.domain.model import NotificationPreference
from murmur.domain.service import (
    InAppNotification,
    NotificationDispatcher,
    SettingService,
    TaskBroker,
)
from murmur.domain.value import CommentStatus, UserId
from murmur.persistence.repository.inmemory import (
    InMemoryNotificationPreferenceRepository,
)
from murmur.util.worker import WorkerPool
from tests.conftest import make_comment
from tests.di import RecordingPushooService

OWNER_EMAIL = "owner@example.com"


class RecordingTaskBroker(TaskBroker):
    def __init__(self) -> None:
        self.comment_ids = []

    async def dispatch_comment_notification(self, comment_id) -> None:
        self.comment_ids.append(comment_id)


class Harness:
    def __init__(self, **comment_settings) -> None:
        values = CommentSettings(
            pushoo_channel="bark", site_owner_email=OWNER_EMAIL, **comment_settings
        ).to_setting_values()
        self.settings = SettingService(values)
        self.preferences = InMemoryNotificationPreferenceRepository()
        self.pushoo = RecordingPushooService()
        self.pool = WorkerPool("test-notifications", workers=2)
        self.dispatcher = NotificationDispatcher(
            setting_service=self.settings,
            preference_repository=self.preferences,
            pushoo_service=self.pushoo,
            pool=self.pool,
        )
        self.in_app: list[InAppNotification] = []

    def capture_in_app(self) -> None:
        async def callback(notification: InAppNotification) -> None:
            self.in_app.append(notification)

        self.dispatcher.set_in_app_callback(callback)


@pytest_asyncio.fixture
async def harness():
    h = Harness()
    yield h
    await h.pool.stop(drain=False)


def visitor_comment(comment_id=2, **kwargs):
    return make_comment(comment_id, email="visitor@example.com", **kwargs)


def admin_comment(comment_id=1, **kwargs):
    return make_comment(
        comment_id, email=OWNER_EMAIL, is_admin_author=True, user_id=1, **kwargs
    )


class TestDispatch:
    """Tests for NotificationDispatcher.dispatch."""

    @pytest.mark.asyncio
    async def test_unpublished_comment_queues_nothing(self, harness):
        comment = visitor_comment(status=CommentStatus.PENDING)

        assert harness.dispatcher.dispatch(comment) == 0

    @pytest.mark.asyncio
    async def test_top_level_visitor_comment_pushes_to_owner(self, harness):
        # Arrange
        comment = visitor_comment()

        # Act
        queued = harness.dispatcher.dispatch(comment)
        await harness.pool.join()

        # Assert
        assert queued == 1
        assert harness.pushoo.sent == [(comment, None)]

    @pytest.mark.asyncio
    async def test_owner_comment_is_never_pushed(self, harness):
        harness.dispatcher.dispatch(admin_comment())
        await harness.pool.join()

        assert harness.pushoo.sent == []

    @pytest.mark.asyncio
    async def test_no_push_without_channel(self, harness):
        harness.settings.update({"pushoo.channel": ""})

        harness.dispatcher.dispatch(visitor_comment())
        await harness.pool.join()

        assert harness.pushoo.sent == []

    @pytest.mark.asyncio
    async def test_reply_to_admin_sends_reply_push_only(self, harness):
        # Arrange
        parent = admin_comment()
        reply = visitor_comment(parent_id=1)

        # Act
        harness.dispatcher.dispatch(reply, parent)
        await harness.pool.join()

        # Assert
        assert harness.pushoo.sent == [(reply, parent)]

    @pytest.mark.asyncio
    async def test_reply_push_respects_recipient_preference(self, harness):
        await harness.preferences.save(
            NotificationPreference(
                user_id=UserId(1), allow_comment_reply_notification=False
            )
        )

        harness.dispatcher.dispatch(visitor_comment(parent_id=1), admin_comment())
        await harness.pool.join()

        assert harness.pushoo.sent == []

    @pytest.mark.asyncio
    async def test_email_is_handed_to_task_broker(self, harness):
        broker = RecordingTaskBroker()
        harness.dispatcher.set_task_broker(broker)
        comment = visitor_comment()

        queued = harness.dispatcher.dispatch(comment)
        await harness.pool.join()

        assert queued == 2
        assert broker.comment_ids == [comment.id]


class TestInAppNotifications:
    @pytest.mark.asyncio
    async def test_reply_notifies_owner_and_parent_author(self, harness):
        # Arrange
        harness.capture_in_app()
        parent = make_comment(1, email="parent@example.com", user_id=7)
        reply = visitor_comment(parent_id=1)

        # Act
        queued = harness.dispatcher.dispatch(reply, parent)
        await harness.pool.join()

        # Assert
        assert queued == 3
        by_kind = {n.is_reply: n for n in harness.in_app}
        assert by_kind[False].notify_admin is True
        assert by_kind[False].recipient_email == OWNER_EMAIL
        assert by_kind[True].recipient_email == "parent@example.com"
        assert by_kind[True].recipient_user_id == 7
        assert by_kind[True].reply_to_name == "user1"

    def test_reply_to_admin_skips_owner_notice(self):
        h = Harness()
        h.capture_in_app()

        notifications = h.dispatcher.in_app_notifications(
            visitor_comment(parent_id=1), admin_comment()
        )

        assert [n.is_reply for n in notifications] == [True]
        assert notifications[0].is_reply_to_admin is True

    def test_replying_to_yourself_is_not_notified(self):
        h = Harness()
        h.capture_in_app()
        parent = visitor_comment(1)

        notifications = h.dispatcher.in_app_notifications(
            visitor_comment(2, parent_id=1), parent
        )

        assert [n.notify_admin for n in notifications] == [True]

    def test_switches_disable_in_app_notices(self):
        h = Harness(notify_admin=False, notify_reply=False)
        h.capture_in_app()

        notifications = h.dispatcher.in_app_notifications(
            visitor_comment(2, parent_id=1),
            make_comment(1, email="parent@example.com"),
        )

        assert notifications == []

    def test_no_callback_means_no_in_app_notices(self):
        notifications = Harness().dispatcher.in_app_notifications(
            visitor_comment(), None
        )

        assert notifications == []
