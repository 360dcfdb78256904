"""Unit tests for RenderCache."""

from murmur.render.cache import RenderCache, content_key


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


class TestRenderCache:
    """Tests for RenderCache."""

    def test_hit_returns_stored_value(self):
        cache = RenderCache(capacity=10)
        cache.set("**hi**", "<p><strong>hi</strong></p>")

        assert cache.get("**hi**") == "<p><strong>hi</strong></p>"
        assert cache.get("other") is None

    def test_least_recently_used_entry_is_evicted(self):
        """Reading an entry protects it from the next eviction."""
        # Arrange
        cache = RenderCache(capacity=2)
        cache.set("a", "A")
        cache.set("b", "B")
        cache.get("a")

        # Act
        cache.set("c", "C")

        # Assert
        assert len(cache) == 2
        assert cache.get("b") is None
        assert cache.get("a") == "A"
        assert cache.get("c") == "C"

    def test_expired_entry_is_a_miss_and_removed(self):
        clock = FakeClock()
        cache = RenderCache(capacity=10, ttl_seconds=60, clock=clock)
        cache.set("a", "A")

        clock.now += 59
        assert cache.get("a") == "A"

        clock.now += 2
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_clear_empties_cache(self):
        cache = RenderCache()
        cache.set("a", "A")
        cache.clear()
        assert len(cache) == 0

    def test_key_is_content_digest(self):
        assert content_key("x") == content_key("x")
        assert content_key("x") != content_key("y")
        assert len(content_key("x")) == 64
