"""Unit tests for ModerationService."""

from datetime import datetime, timedelta, timezone

import pytest

from murmur.domain.error import (
    PolicyRejectionError,
    RateLimitExceededError,
    ValidationError,
)
from murmur.domain.repository import CommentRepository, UserRepository
from murmur.domain.service import (
    CacheService,
    ContentClassifier,
    ContentVerdict,
    ModerationService,
    SettingService,
)
from murmur.domain.service.moderation_service import (
    find_forbidden_word,
    should_take_action,
)
from murmur.domain.value import AuthClaims, CommentStatus, UserId
from tests.conftest import make_admin, make_new_comment
from tests.harness import create_env_fixture

unit_env = create_env_fixture()

PATH = "/posts/hello"


async def review(service: ModerationService, **overrides):
    arguments = dict(
        target_path=PATH,
        content="Nice post",
        email="visitor@example.com",
        is_anonymous=False,
        ip="198.51.100.1",
    )
    arguments.update(overrides)
    return await service.review(**arguments)


async def enable_classifier(env, action: str, threshold: str = "medium"):
    settings = await env.get(SettingService)
    settings.update(
        {
            "comment.ai_detect_enable": "true",
            "comment.ai_detect_api_url": "https://ai.example/check",
            "comment.ai_detect_action": action,
            "comment.ai_detect_risk_level": threshold,
        }
    )
    return await env.get(ContentClassifier)


class MinuteClock:
    def __init__(self) -> None:
        self.now = datetime(2024, 5, 1, 12, 0, 10, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now


class BrokenCacheService(CacheService):
    async def increment(self, key: str) -> int:
        raise ConnectionError("cache down")

    async def expire(self, key: str, seconds: int) -> None:
        raise ConnectionError("cache down")


async def limited_service(env, clock=None, cache=...) -> ModerationService:
    """Moderation service with a pinned clock and a chosen counter store."""
    return ModerationService(
        comment_repository=await env.get(CommentRepository),
        user_repository=await env.get(UserRepository),
        setting_service=await env.get(SettingService),
        classifier=await env.get(ContentClassifier),
        cache=await env.get(CacheService) if cache is ... else cache,
        clock=clock or MinuteClock(),
    )


class TestRateLimit:
    """Per-IP submissions per minute."""

    @pytest.mark.asyncio
    async def test_sixth_submission_in_a_minute_is_rejected(self, unit_env):
        # Arrange
        service = await limited_service(unit_env)
        for _ in range(5):
            await review(service)

        # Act / Assert
        with pytest.raises(RateLimitExceededError):
            await review(service)

    @pytest.mark.asyncio
    async def test_next_minute_starts_a_new_window(self, unit_env):
        # Arrange
        clock = MinuteClock()
        service = await limited_service(unit_env, clock=clock)
        for _ in range(5):
            await review(service)

        # Act
        clock.now += timedelta(minutes=1)
        decision = await review(service)

        # Assert
        assert decision.status == CommentStatus.PUBLISHED

    @pytest.mark.asyncio
    async def test_other_addresses_are_counted_separately(self, unit_env):
        service = await limited_service(unit_env)
        for _ in range(5):
            await review(service)

        decision = await review(service, ip="198.51.100.2")

        assert decision.status == CommentStatus.PUBLISHED

    @pytest.mark.asyncio
    async def test_zero_limit_disables_limiting(self, unit_env):
        settings = await unit_env.get(SettingService)
        settings.update({"comment.limit_per_minute": "0"})
        service = await limited_service(unit_env)

        for _ in range(10):
            await review(service)

    @pytest.mark.asyncio
    async def test_missing_backend_disables_limiting(self, unit_env):
        service = await limited_service(unit_env, cache=None)

        for _ in range(10):
            decision = await review(service)

        assert decision.status == CommentStatus.PUBLISHED

    @pytest.mark.asyncio
    async def test_failing_backend_disables_limiting(self, unit_env):
        service = await limited_service(unit_env, cache=BrokenCacheService())

        for _ in range(10):
            decision = await review(service)

        assert decision.status == CommentStatus.PUBLISHED


class TestAuthorChecks:
    """Anonymous binding and administrator impersonation."""

    @pytest.mark.asyncio
    async def test_anonymous_comment_must_use_anonymous_email(self, unit_env):
        settings = await unit_env.get(SettingService)
        settings.update({"comment.anonymous_email": "anon@example.com"})
        service = await unit_env.get(ModerationService)

        with pytest.raises(PolicyRejectionError):
            await review(service, is_anonymous=True, email="me@example.com")

        decision = await review(service, is_anonymous=True, email="anon@example.com")
        assert decision.is_anonymous is True

    @pytest.mark.asyncio
    async def test_guest_using_admin_email_is_rejected(self, unit_env):
        # Arrange
        users = await unit_env.get(UserRepository)
        await users.save(make_admin())
        service = await unit_env.get(ModerationService)

        # Act / Assert
        with pytest.raises(PolicyRejectionError) as error:
            await review(service, email="owner@example.com")
        assert not isinstance(error.value, RateLimitExceededError)

    @pytest.mark.asyncio
    async def test_signed_in_admin_with_registered_email_is_admin(self, unit_env):
        users = await unit_env.get(UserRepository)
        admin = await users.save(make_admin())
        service = await unit_env.get(ModerationService)
        claims = AuthClaims(user_id=admin.id)

        as_admin = await review(service, email="owner@example.com", claims=claims)
        other_email = await review(service, email="alt@example.com", claims=claims)

        assert as_admin.is_admin_author is True
        assert as_admin.author_user.id == admin.id
        assert other_email.is_admin_author is False

    @pytest.mark.asyncio
    async def test_unknown_signed_in_user_is_a_guest(self, unit_env):
        service = await unit_env.get(ModerationService)

        decision = await review(service, claims=AuthClaims(user_id=UserId(404)))

        assert decision.author_user is None
        assert decision.is_admin_author is False


class TestReplyTargets:
    @pytest.mark.asyncio
    async def test_valid_parent_is_resolved(self, unit_env):
        comments = await unit_env.get(CommentRepository)
        parent = await comments.create(make_new_comment())
        service = await unit_env.get(ModerationService)

        decision = await review(service, parent_id=parent.id, reply_to_id=parent.id)

        assert decision.parent.id == parent.id
        assert decision.reply_to.id == parent.id

    @pytest.mark.asyncio
    async def test_missing_parent_is_rejected(self, unit_env):
        service = await unit_env.get(ModerationService)

        with pytest.raises(ValidationError):
            await review(service, parent_id=999)

    @pytest.mark.asyncio
    async def test_parent_on_another_page_is_rejected(self, unit_env):
        comments = await unit_env.get(CommentRepository)
        parent = await comments.create(make_new_comment(target_path="/elsewhere"))
        service = await unit_env.get(ModerationService)

        with pytest.raises(ValidationError):
            await review(service, parent_id=parent.id)

    @pytest.mark.asyncio
    async def test_anonymous_comments_cannot_be_replied_to(self, unit_env):
        comments = await unit_env.get(CommentRepository)
        parent = await comments.create(make_new_comment(is_anonymous=True))
        service = await unit_env.get(ModerationService)

        with pytest.raises(ValidationError):
            await review(service, reply_to_id=parent.id)


class TestContentChecks:
    """Forbidden words and AI classification."""

    @pytest.mark.asyncio
    async def test_forbidden_word_holds_comment(self, unit_env):
        # Arrange
        classifier = await enable_classifier(unit_env, "reject")
        settings = await unit_env.get(SettingService)
        settings.update({"comment.forbidden_words": "casino, lottery"})
        service = await unit_env.get(ModerationService)

        # Act
        decision = await review(service, content="Win the lottery today")

        # Assert
        assert decision.status == CommentStatus.PENDING
        assert classifier.calls == []

    @pytest.mark.asyncio
    async def test_ai_violation_is_rejected_when_configured(self, unit_env):
        classifier = await enable_classifier(unit_env, "reject")
        classifier.verdict = ContentVerdict(is_violation=True, risk_level="高")
        service = await unit_env.get(ModerationService)

        with pytest.raises(PolicyRejectionError):
            await review(service)

    @pytest.mark.asyncio
    async def test_ai_violation_is_held_when_configured(self, unit_env):
        classifier = await enable_classifier(unit_env, "pending")
        classifier.verdict = ContentVerdict(is_violation=True, risk_level="medium")
        service = await unit_env.get(ModerationService)

        decision = await review(service)

        assert decision.status == CommentStatus.PENDING

    @pytest.mark.asyncio
    async def test_violation_below_threshold_is_published(self, unit_env):
        classifier = await enable_classifier(unit_env, "reject", threshold="high")
        classifier.verdict = ContentVerdict(is_violation=True, risk_level="low")
        service = await unit_env.get(ModerationService)

        decision = await review(service)

        assert decision.status == CommentStatus.PUBLISHED

    @pytest.mark.asyncio
    async def test_classifier_failure_publishes(self, unit_env):
        classifier = await enable_classifier(unit_env, "reject")
        classifier.fail = True
        service = await unit_env.get(ModerationService)

        decision = await review(service)

        assert decision.status == CommentStatus.PUBLISHED
        assert len(classifier.calls) == 1

    @pytest.mark.asyncio
    async def test_classifier_not_called_when_disabled(self, unit_env):
        classifier = await unit_env.get(ContentClassifier)
        service = await unit_env.get(ModerationService)

        await review(service)

        assert classifier.calls == []


class TestPolicyHelpers:
    @pytest.mark.parametrize(
        "detected, configured, expected",
        [
            ("high", "medium", True),
            ("中", "medium", True),
            ("低", "medium", False),
            ("Low", "HIGH", False),
            ("unknown", "high", True),
            ("low", "", True),
        ],
    )
    def test_should_take_action(self, detected, configured, expected):
        assert should_take_action(detected, configured) is expected

    def test_find_forbidden_word_ignores_blank_entries(self):
        assert find_forbidden_word("buy now", " , ,") is None
        assert find_forbidden_word("buy now", "sell, buy") == "buy"
