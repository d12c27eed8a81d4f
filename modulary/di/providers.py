"""
Provider implementations for the registration modes.
"""

from typing import Any, Callable, Optional
from enum import Enum
from dataclasses import dataclass


class RegistrationMode(str, Enum):
    """How a registered service is instantiated."""

    EAGER = "eager"      # Built at registration time, one instance
    LAZY = "lazy"        # Built on first resolve, then cached
    FACTORY = "factory"  # Built on every resolve


@dataclass(frozen=True)
class ProviderMeta:
    """Provider metadata for diagnostics."""
    name: str
    token: str
    mode: RegistrationMode


class ValueProvider:
    """Provider holding a pre-built instance (eager registration)."""

    __slots__ = ("_meta", "_value")

    def __init__(self, token: str, value: Any, name: Optional[str] = None):
        self._value = value
        self._meta = ProviderMeta(
            name=name or type(value).__name__,
            token=token,
            mode=RegistrationMode.EAGER,
        )

    @property
    def meta(self) -> ProviderMeta:
        return self._meta

    @property
    def cacheable(self) -> bool:
        return True

    def instantiate(self) -> Any:
        return self._value


class FactoryProvider:
    """
    Provider that calls a zero-argument factory.

    With ``cache=True`` the first result is kept (lazy singleton),
    otherwise the factory runs on every resolve.
    """

    __slots__ = ("_meta", "_factory", "_cache")

    def __init__(
        self,
        token: str,
        factory: Callable[[], Any],
        *,
        cache: bool,
        name: Optional[str] = None,
    ):
        if not callable(factory):
            raise TypeError(f"Factory for {token} must be callable, got {type(factory).__name__}")
        self._factory = factory
        self._cache = cache
        self._meta = ProviderMeta(
            name=name or getattr(factory, "__qualname__", repr(factory)),
            token=token,
            mode=RegistrationMode.LAZY if cache else RegistrationMode.FACTORY,
        )

    @property
    def meta(self) -> ProviderMeta:
        return self._meta

    @property
    def cacheable(self) -> bool:
        return self._cache

    def instantiate(self) -> Any:
        return self._factory()
