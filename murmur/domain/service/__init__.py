"""Domain services."""

from .base import Service
from .comment_service import (
    CommentService,
    CommentSubmission,
    GeoIPService,
    QQProfile,
    QQProfileClient,
)
from .jwt_service import JWTService
from .moderation_service import (
    CacheService,
    ContentClassifier,
    ContentVerdict,
    ModerationDecision,
    ModerationService,
)
from .notification_dispatcher import (
    InAppNotification,
    NotificationDispatcher,
    PushooService,
    TaskBroker,
)
from .setting_service import SettingService
from .thread_builder import ThreadBuilder, ThreadItem, ThreadPage
from .transfer_service import CommentTransferService

__all__ = [
    "CacheService",
    "CommentService",
    "CommentSubmission",
    "CommentTransferService",
    "ContentClassifier",
    "ContentVerdict",
    "GeoIPService",
    "InAppNotification",
    "JWTService",
    "ModerationDecision",
    "ModerationService",
    "NotificationDispatcher",
    "PushooService",
    "QQProfile",
    "QQProfileClient",
    "Service",
    "SettingService",
    "TaskBroker",
    "ThreadBuilder",
    "ThreadItem",
    "ThreadPage",
]
