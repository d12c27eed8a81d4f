"""
Testing utilities for modulary applications.
"""

from typing import Any, List, Mapping, Optional

from .config import AppConfig
from .observer import ModularEvent, ModularEventType, ModularObserver


class RecordingObserver(ModularObserver):
    """
    Observer that records every event it receives.

    Useful for asserting on lifecycle ordering in tests.
    """

    def __init__(self):
        self.events: List[ModularEvent] = []

    def on_event(self, event: ModularEvent) -> None:
        self.events.append(event)
        super().on_event(event)

    @property
    def types(self) -> List[ModularEventType]:
        return [event.type for event in self.events]

    def of_type(self, event_type: ModularEventType) -> List[ModularEvent]:
        return [event for event in self.events if event.type is event_type]

    def clear(self) -> None:
        self.events.clear()


class StaticAppConfig(AppConfig):
    """
    In-memory config for tests.

    Example:
        config = StaticAppConfig(values={"API_BASE_URL": "http://test"})
    """

    def __init__(
        self,
        values: Optional[Mapping[str, Any]] = None,
        feature_flags: Optional[Mapping[str, bool]] = None,
        *,
        api_base_url: str = "http://testserver",
        app_name: str = "test-app",
        debug: bool = True,
    ):
        super().__init__(feature_flags=feature_flags, values=values)
        self._api_base_url = api_base_url
        self._app_name = app_name
        self._debug = debug

    @property
    def api_base_url(self) -> str:
        return self.get_config_value("API_BASE_URL", self._api_base_url)

    @property
    def app_name(self) -> str:
        return self.get_config_value("APP_NAME", self._app_name)

    @property
    def is_debug_mode(self) -> bool:
        return self.get_bool("DEBUG", fallback=self._debug)
