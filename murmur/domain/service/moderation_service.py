"""Comment moderation.

Every submission passes these checks in order, stopping at the first
rejection:

1. per-IP rate limit for the current minute
2. anonymous email binding
3. administrator email impersonation by unauthenticated submitters
4. reply target validation (exists, same page, not anonymous)
5. forbidden word scan (hit means Pending)
6. AI content classification (only while still Published)
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from typing import Optional

import logfire
from pydantic import BaseModel

from murmur.domain.error import (
    PolicyRejectionError,
    RateLimitExceededError,
    ValidationError,
)
from murmur.domain.model import Comment, User
from murmur.domain.model.common import utc_now
from murmur.domain.repository import CommentRepository, UserRepository
from murmur.domain.value import (
    AuthClaims,
    CommentId,
    CommentStatus,
    ModerationAction,
    RiskLevel,
)

from .base import Service
from .setting_service import SettingService

RATE_LIMIT_WINDOW_SECONDS = 70
CLASSIFIER_MAX_CHARS = 500


class CacheService(ABC):
    """Shared counter store used for rate limiting."""

    @abstractmethod
    async def increment(self, key: str) -> int:
        """Atomically add one to ``key`` and return the new value."""
        pass

    @abstractmethod
    async def expire(self, key: str, seconds: int) -> None:
        pass


class ContentVerdict(BaseModel):
    """Classifier result for one piece of content."""

    is_violation: bool = False
    risk_level: str = ""
    categories: list[str] = []
    keywords: list[str] = []
    explanation: str = ""


class ContentClassifier(ABC):
    """External AI content classification."""

    @abstractmethod
    async def classify(
        self, api_url: str, content: str, referer: str
    ) -> ContentVerdict:
        """Classify ``content``.

        Raises:
            ProviderError: If the classifier cannot be reached or answers
                with an error
        """
        pass


class ModerationDecision(BaseModel):
    """Outcome of a successful review."""

    status: CommentStatus
    is_admin_author: bool = False
    is_anonymous: bool = False
    author_user: Optional[User] = None
    parent: Optional[Comment] = None
    reply_to: Optional[Comment] = None


def should_take_action(detected_level: str, configured_level: str) -> bool:
    """Whether a reported violation meets the configured risk threshold.

    Unrecognized labels on either side count as actionable.
    """
    detected = RiskLevel.parse(detected_level)
    configured = RiskLevel.parse(configured_level)
    if detected is None or configured is None:
        return True
    return detected >= configured


def find_forbidden_word(content: str, word_list: str) -> Optional[str]:
    """First entry of the comma separated ``word_list`` found in ``content``."""
    for word in word_list.split(","):
        word = word.strip()
        if word and word in content:
            return word
    return None


class ModerationService(Service):
    """Decides publish/pending/reject for incoming comments."""

    def __init__(
        self,
        comment_repository: CommentRepository,
        user_repository: UserRepository,
        setting_service: SettingService,
        classifier: ContentClassifier,
        cache: Optional[CacheService] = None,
        admin_group_id: int = 1,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        """Initialize moderation service.

        Args:
            comment_repository: Comment repository, for reply targets
            user_repository: User repository, for administrator lookups
            setting_service: Runtime settings
            classifier: AI content classifier
            cache: Counter store for rate limiting (no limiting when None)
            admin_group_id: Group whose members are administrators
            clock: Current time, for the rate limit window
        """
        self.comment_repository = comment_repository
        self.user_repository = user_repository
        self.setting_service = setting_service
        self.classifier = classifier
        self.cache = cache
        self.admin_group_id = admin_group_id
        self.clock = clock

    async def review(
        self,
        target_path: str,
        content: str,
        email: Optional[str],
        is_anonymous: bool,
        ip: str,
        claims: Optional[AuthClaims] = None,
        parent_id: Optional[CommentId] = None,
        reply_to_id: Optional[CommentId] = None,
        referer: str = "",
    ) -> ModerationDecision:
        """Run every moderation check on a submission.

        Returns:
            Final status, author flags and the resolved reply targets

        Raises:
            RateLimitExceededError: Too many submissions from ``ip``
            PolicyRejectionError: Anonymous email mismatch, administrator
                impersonation, or a rejected AI verdict
            ValidationError: Invalid reply target
        """
        with logfire.span(
            "moderation_service.review",
            target_path=target_path,
            ip=ip,
            authenticated=claims is not None,
        ):
            await self.check_rate_limit(ip)
            self.check_anonymous_binding(is_anonymous, email)
            author_user, is_admin = await self.resolve_author(email, claims)

            parent = await self.resolve_reply_target(parent_id, target_path, "parent")
            reply_to = await self.resolve_reply_target(
                reply_to_id, target_path, "reply target"
            )

            status = CommentStatus.PUBLISHED
            word = find_forbidden_word(
                content, self.setting_service.get("comment.forbidden_words")
            )
            if word is not None:
                logfire.info(
                    "Forbidden word found, comment held", target_path=target_path
                )
                status = CommentStatus.PENDING

            if status == CommentStatus.PUBLISHED:
                status = await self.classify(content, referer)

            logfire.info(
                "Submission reviewed",
                target_path=target_path,
                status=status.name,
                is_admin=is_admin,
            )
            return ModerationDecision(
                status=status,
                is_admin_author=is_admin,
                is_anonymous=is_anonymous,
                author_user=author_user,
                parent=parent,
                reply_to=reply_to,
            )

    async def check_rate_limit(self, ip: str) -> None:
        """Count this submission against ``ip``'s current minute.

        Raises:
            RateLimitExceededError: If the count exceeds the configured limit
        """
        limit = self.setting_service.get_int("comment.limit_per_minute")
        if limit <= 0 or self.cache is None:
            return

        key = f"comment:rate_limit:{ip}:{self.clock().strftime('%Y%m%d%H%M')}"
        try:
            count = await self.cache.increment(key)
            if count == 1:
                await self.cache.expire(key, RATE_LIMIT_WINDOW_SECONDS)
        except Exception as e:
            logfire.warn("Rate limit backend unavailable, not limiting", error=str(e))
            return

        if count > limit:
            logfire.warn("Rate limit exceeded", ip=ip, count=count, limit=limit)
            raise RateLimitExceededError()

    def check_anonymous_binding(self, is_anonymous: bool, email: Optional[str]) -> None:
        """Reject anonymous submissions that do not use the anonymous address."""
        if not is_anonymous:
            return
        anonymous_email = self.setting_service.get("comment.anonymous_email")
        if anonymous_email and email != anonymous_email:
            logfire.warn("Anonymous comment with mismatched email", email=email)
            raise PolicyRejectionError("Anonymous comment email verification failed")

    async def resolve_author(
        self, email: Optional[str], claims: Optional[AuthClaims]
    ) -> tuple[Optional[User], bool]:
        """Find the submitting user and whether they write as administrator.

        Authenticated users are administrators only when they belong to the
        administrator group and submit their registered email.

        Raises:
            PolicyRejectionError: An unauthenticated submission uses an
                administrator's email
        """
        if claims is not None:
            user = await self.user_repository.find_by_id(claims.user_id)
            if user is None:
                logfire.warn("Authenticated user not found", user_id=claims.user_id)
                return None, False
            is_admin = (
                user.group_id == self.admin_group_id
                and email is not None
                and user.email == email
            )
            return user, is_admin

        if email:
            try:
                admins = await self.user_repository.find_by_group_id(
                    self.admin_group_id
                )
            except Exception as e:
                logfire.warn("Administrator lookup failed", error=str(e))
                return None, False
            if any(admin.email == email for admin in admins):
                logfire.warn("Guest submission used an administrator email")
                raise PolicyRejectionError(
                    "This email belongs to an administrator, please sign in first"
                )
        return None, False

    async def resolve_reply_target(
        self, comment_id: Optional[CommentId], target_path: str, role: str
    ) -> Optional[Comment]:
        """Load and validate the comment being replied to.

        Raises:
            ValidationError: Missing target, different page, or anonymous target
        """
        if comment_id is None:
            return None
        target = await self.comment_repository.find_by_id(comment_id)
        if target is None:
            raise ValidationError(f"The {role} comment does not exist")
        if target.target_path != target_path:
            raise ValidationError(f"The {role} comment belongs to a different page")
        if target.is_anonymous:
            raise ValidationError("Anonymous comments cannot be replied to")
        return target

    async def classify(self, content: str, referer: str) -> CommentStatus:
        """Apply the AI classifier when enabled.

        Classifier failures are logged and the comment stays Published.

        Raises:
            PolicyRejectionError: If the verdict is actionable and the
                configured action is ``reject``
        """
        if not self.setting_service.get_bool("comment.ai_detect_enable"):
            return CommentStatus.PUBLISHED
        api_url = self.setting_service.get("comment.ai_detect_api_url")
        if not api_url:
            return CommentStatus.PUBLISHED

        try:
            verdict = await self.classifier.classify(
                api_url, content[:CLASSIFIER_MAX_CHARS], referer
            )
        except Exception as e:
            logfire.warn("AI classifier unavailable, check skipped", error=str(e))
            return CommentStatus.PUBLISHED

        threshold = self.setting_service.get("comment.ai_detect_risk_level")
        if not verdict.is_violation or not should_take_action(
            verdict.risk_level, threshold
        ):
            return CommentStatus.PUBLISHED

        logfire.warn(
            "AI classifier flagged content",
            risk_level=verdict.risk_level,
            categories=verdict.categories,
            keywords=verdict.keywords,
        )
        action = self.setting_service.get("comment.ai_detect_action")
        if action == ModerationAction.REJECT.value:
            raise PolicyRejectionError(
                "The comment contains prohibited content, please revise it"
            )
        return CommentStatus.PENDING
