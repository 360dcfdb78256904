"""Mock providers for testing."""

from .cache import MockCacheProvider
from .container import build_test_container
from .external import (
    FakeContentClassifier,
    FakeFileService,
    FakeQQProfileClient,
    MockExternalProvider,
    RecordingPushooService,
    StaticEmojiPackSource,
)
from .persistence import MockPersistenceProvider

__all__ = [
    "FakeContentClassifier",
    "FakeFileService",
    "FakeQQProfileClient",
    "MockCacheProvider",
    "MockExternalProvider",
    "MockPersistenceProvider",
    "RecordingPushooService",
    "StaticEmojiPackSource",
    "build_test_container",
]
