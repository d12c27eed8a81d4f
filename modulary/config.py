"""
Application configuration - read-only typed settings for modules.

Values come from ``.env`` files (python-dotenv), YAML files and the
process environment. Later loads override earlier ones.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional, Type, TypeVar
import io
import logging
import os

from dotenv import dotenv_values

logger = logging.getLogger("modulary.config")

T = TypeVar("T")

_TRUE = frozenset(("true", "1", "yes", "on"))
_FALSE = frozenset(("false", "0", "no", "off"))


class ConfigError(Exception):
    """Raised when a required configuration value is missing or invalid."""
    pass


def parse_bool(value: str) -> Optional[bool]:
    """Parse a boolean string, returning None if it is not one."""
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    return None


class AppConfig(ABC):
    """
    Application configuration passed to every module.

    Subclasses provide ``api_base_url``, ``app_name`` and ``is_debug_mode``.
    Modules only read from it.

    Example:
        class MyConfig(AppConfig):
            @property
            def api_base_url(self):
                return self.get_config_value("API_BASE_URL", "https://api.example.com")

            @property
            def app_name(self):
                return self.get_config_value("APP_NAME", "My App")

            @property
            def is_debug_mode(self):
                return self.get_bool("DEBUG")
    """

    def __init__(
        self,
        feature_flags: Optional[Mapping[str, bool]] = None,
        values: Optional[Mapping[str, Any]] = None,
    ):
        self._feature_flags: Dict[str, bool] = dict(feature_flags or {})
        self._values: Dict[str, str] = {}
        if values:
            self._merge(values)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load_env_file(self, path: str, fallback: Optional[str] = ".env") -> bool:
        """
        Load variables from a ``.env`` file.

        Falls back to ``fallback`` if ``path`` does not exist, and continues
        without variables if neither does.

        Returns:
            True if a file was loaded
        """
        for candidate in (path, fallback):
            if candidate and Path(candidate).is_file():
                self._merge(dotenv_values(candidate))
                logger.debug("Loaded env file %s", candidate)
                return True

        logger.debug("No env file found at %s (fallback %s)", path, fallback)
        return False

    def load_test_environment(self, content: str) -> None:
        """Load variables from ``.env`` formatted text (for tests)."""
        self._merge(dotenv_values(stream=io.StringIO(content)))

    def load_yaml_file(self, path: str) -> None:
        """
        Load scalar values from a YAML mapping.

        Nested mappings are flattened with ``_`` and keys are upper-cased,
        so ``api: {base_url: ...}`` becomes ``API_BASE_URL``.
        """
        import yaml

        with open(path) as f:
            data = yaml.safe_load(f)

        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigError(f"YAML config {path} must contain a mapping")

        self._merge(_flatten(data))
        logger.debug("Loaded YAML config %s", path)

    def load_os_environ(self, prefix: str = "") -> None:
        """Load process environment variables, stripping ``prefix``."""
        self._merge({
            key[len(prefix):]: value
            for key, value in os.environ.items()
            if key.startswith(prefix) and len(key) > len(prefix)
        })

    def _merge(self, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, bool):
                value = "true" if value else "false"
            self._values[str(key)] = str(value)

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------

    def get_config_value(
        self,
        key: str,
        default: Optional[T] = None,
        cast: Optional[Type[T]] = None,
    ) -> Optional[T]:
        """
        Get a value converted to ``cast`` (defaults to the type of
        ``default``, or ``str``). Returns ``default`` when missing or
        not convertible.
        """
        raw = self._values.get(key)
        if raw is None:
            return default

        target = cast or (type(default) if default is not None else str)
        converter = _CONVERTERS.get(target)
        if converter is None:
            return default

        try:
            converted = converter(raw)
        except ValueError:
            return default
        return default if converted is None else converted

    def get_bool(self, key: str, fallback: bool = False) -> bool:
        return self.get_config_value(key, fallback, cast=bool)

    def get_int(self, key: str, fallback: int = 0) -> int:
        return self.get_config_value(key, fallback, cast=int)

    def get_float(self, key: str, fallback: float = 0.0) -> float:
        return self.get_config_value(key, fallback, cast=float)

    def get_required(self, key: str, fallback: Optional[str] = None) -> str:
        """Get a string value, raising ConfigError if missing and no fallback."""
        value = self._values.get(key, fallback)
        if value is None:
            raise ConfigError(f"Required configuration value '{key}' is not set")
        return value

    def get_maybe(self, key: str) -> Optional[str]:
        return self._values.get(key)

    @property
    def env_variables(self) -> Mapping[str, str]:
        """All loaded variables (read-only view)."""
        return MappingProxyType(self._values)

    @property
    def feature_flags(self) -> Mapping[str, bool]:
        return MappingProxyType(self._feature_flags)

    def is_feature_enabled(self, feature_name: str) -> bool:
        """
        Check a feature flag.

        Explicit flags win; otherwise ``FEATURE_<NAME>`` is read from the
        loaded variables.
        """
        if feature_name in self._feature_flags:
            return self._feature_flags[feature_name]
        return self.get_bool(f"FEATURE_{feature_name.upper()}", fallback=False)

    # ------------------------------------------------------------------
    # Required settings
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def api_base_url(self) -> str:
        ...

    @property
    @abstractmethod
    def app_name(self) -> str:
        ...

    @property
    @abstractmethod
    def is_debug_mode(self) -> bool:
        ...

    def to_dict(self) -> Dict[str, Any]:
        return {
            "api_base_url": self.api_base_url,
            "app_name": self.app_name,
            "is_debug_mode": self.is_debug_mode,
            "feature_flags": dict(self._feature_flags),
        }

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(api_base_url={self.api_base_url!r}, "
            f"app_name={self.app_name!r}, is_debug_mode={self.is_debug_mode}, "
            f"feature_flags={self._feature_flags})"
        )


class DefaultAppConfig(AppConfig):
    """Configuration read from ``API_BASE_URL``, ``APP_NAME`` and ``DEBUG``."""

    @property
    def api_base_url(self) -> str:
        return self.get_config_value("API_BASE_URL", "http://localhost:8000")

    @property
    def app_name(self) -> str:
        return self.get_config_value("APP_NAME", "Modulary App")

    @property
    def is_debug_mode(self) -> bool:
        return self.get_bool("DEBUG", fallback=False)


_CONVERTERS: Dict[type, Callable[[str], Any]] = {
    str: str,
    bool: parse_bool,
    int: int,
    float: float,
}


def _flatten(data: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        name = f"{prefix}_{key}" if prefix else str(key)
        if isinstance(value, dict):
            flat.update(_flatten(value, name))
        elif isinstance(value, (list, tuple)):
            flat[name.upper()] = ",".join(str(v) for v in value)
        else:
            flat[name.upper()] = value
    return flat
