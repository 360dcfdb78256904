"""Runtime site settings."""

import threading
from collections.abc import Callable, Mapping
from typing import Optional

import logfire

from .base import Service

SettingListener = Callable[[str, str], None]

_TRUE_VALUES = {"true", "1", "yes", "on"}


class SettingService(Service):
    """In-process key/value store for runtime site settings.

    Values are strings. Listeners subscribed with ``subscribe`` are called
    once per changed key, after the new value is visible to readers.
    """

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        """Initialize setting service.

        Args:
            initial: Starting values, usually ``Settings.comment.to_setting_values()``
        """
        self._values: dict[str, str] = dict(initial or {})
        self._listeners: list[SettingListener] = []
        self._lock = threading.Lock()

    def get(self, key: str, default: str = "") -> str:
        return self._values.get(key, default)

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self._values.get(key)
        if value is None:
            return default
        return value.strip().lower() in _TRUE_VALUES

    def get_int(self, key: str, default: int = 0) -> int:
        value = self._values.get(key)
        if value is None:
            return default
        try:
            return int(value.strip())
        except ValueError:
            logfire.warn("Setting is not an integer", key=key, value=value)
            return default

    def snapshot(self) -> dict[str, str]:
        return dict(self._values)

    def subscribe(self, listener: SettingListener) -> None:
        """Register ``listener(key, value)`` for future changes."""
        with self._lock:
            self._listeners.append(listener)

    def update(self, values: Mapping[str, str]) -> list[str]:
        """Store ``values`` and notify listeners of the keys that changed.

        Args:
            values: New values by key

        Returns:
            The keys whose value actually changed
        """
        with logfire.span("setting_service.update", keys=sorted(values)):
            with self._lock:
                changed = [
                    key
                    for key, value in values.items()
                    if self._values.get(key) != value
                ]
                # Readers always see a complete mapping
                self._values = {**self._values, **{key: values[key] for key in changed}}
                listeners = list(self._listeners)

            for key in changed:
                for listener in listeners:
                    try:
                        listener(key, values[key])
                    except Exception as e:
                        logfire.error(
                            "Setting listener failed", key=key, error=str(e)
                        )

            logfire.info("Settings updated", changed=changed)
            return changed
