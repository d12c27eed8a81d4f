"""
DI Container - type-keyed service store shared by all modules.
"""

from typing import Any, Callable, Dict, List, Optional, Type, TypeVar, Union
import difflib
import logging
import traceback

from ..observer import ModularEventType
from .errors import DependencyCycleError, DuplicateProviderError, ProviderNotFoundError
from .providers import FactoryProvider, RegistrationMode, ValueProvider

logger = logging.getLogger("modulary.di")

T = TypeVar("T")

Token = Union[Type[Any], str]

# Module-level cache: type -> "module.qualname" string
_type_key_cache: Dict[type, str] = {}


def token_to_key(token: Token) -> str:
    """Convert a type or string token to its registry key."""
    if isinstance(token, str):
        return token
    key = _type_key_cache.get(token)
    if key is None:
        key = f"{token.__module__}.{token.__qualname__}"
        _type_key_cache[token] = key
    return key


class Container:
    """
    DI Container - maps tokens to providers and cached instances.

    Tokens are classes (keyed by ``module.qualname``) or plain strings.
    Factories take no arguments; they close over the container when they
    need other services.
    """

    __slots__ = (
        "_providers",
        "_tokens",
        "_cache",
        "_resolving",
        "_observers",
        "allow_override",
    )

    def __init__(self, observers: Optional[Any] = None, *, allow_override: bool = False):
        """
        Args:
            observers: Optional ObserverBus notified of registrations and
                resolutions.
            allow_override: If True, registering an existing token replaces it.
        """
        self._providers: Dict[str, Any] = {}
        self._tokens: Dict[str, Token] = {}
        self._cache: Dict[str, Any] = {}
        self._resolving: List[str] = []
        self._observers = observers
        self.allow_override = allow_override

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(
        self,
        token: Token,
        factory: Callable[[], Any],
        mode: Union[RegistrationMode, str] = RegistrationMode.LAZY,
    ) -> None:
        """
        Register a service factory.

        Args:
            token: Type or string key
            factory: Zero-argument callable producing the service
            mode: ``eager`` builds now, ``lazy`` on first resolve,
                ``factory`` on every resolve
        """
        mode = RegistrationMode(mode)
        key = token_to_key(token)

        if mode is RegistrationMode.EAGER:
            provider = ValueProvider(key, factory())
        else:
            provider = FactoryProvider(key, factory, cache=mode is RegistrationMode.LAZY)

        self._add(token, key, provider)

    def register_singleton(self, token: Token, instance: Any) -> None:
        """Register a pre-built instance."""
        key = token_to_key(token)
        self._add(token, key, ValueProvider(key, instance))

    def register_lazy_singleton(self, token: Token, factory: Callable[[], Any]) -> None:
        """Register a factory whose first result is cached."""
        self.register(token, factory, RegistrationMode.LAZY)

    def register_factory(self, token: Token, factory: Callable[[], Any]) -> None:
        """Register a factory called on every resolve."""
        self.register(token, factory, RegistrationMode.FACTORY)

    def _add(self, token: Token, key: str, provider: Any) -> None:
        existing = self._providers.get(key)
        if existing is not None:
            if not self.allow_override:
                raise DuplicateProviderError(key, existing.meta.name)
            self._cache.pop(key, None)

        self._providers[key] = provider
        self._tokens[key] = token
        logger.debug("Registered %s (%s)", key, provider.meta.mode.value)

        if self._observers is not None:
            self._observers.emit(
                ModularEventType.DEPENDENCY_REGISTERED,
                service_type=token,
                registration_mode=provider.meta.mode.value,
            )

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, token: Type[T] | str, *, optional: bool = False) -> T:
        """
        Resolve a service.

        Args:
            token: Type or string key
            optional: If True, return None if not found instead of raising

        Raises:
            ProviderNotFoundError: If no provider is registered and not optional
            DependencyCycleError: If the factory chain resolves itself
        """
        key = token_to_key(token)

        if key in self._cache:
            instance = self._cache[key]
            self._notify_resolved(token)
            return instance

        provider = self._providers.get(key)
        if provider is None:
            if optional:
                return None
            error = ProviderNotFoundError(
                key, candidates=difflib.get_close_matches(key, self._providers, n=3)
            )
            self._notify_failed(token, error)
            raise error

        if key in self._resolving:
            cycle = self._resolving[self._resolving.index(key):] + [key]
            error = DependencyCycleError(cycle)
            self._notify_failed(token, error)
            raise error

        self._resolving.append(key)
        try:
            instance = provider.instantiate()
        except Exception as e:
            self._notify_failed(token, e)
            raise
        finally:
            self._resolving.pop()

        if provider.cacheable:
            self._cache[key] = instance

        self._notify_resolved(token)
        return instance

    def _notify_resolved(self, token: Token) -> None:
        if self._observers is not None:
            self._observers.emit(ModularEventType.SERVICE_RESOLVED, service_type=token)

    def _notify_failed(self, token: Token, error: BaseException) -> None:
        if self._observers is not None:
            self._observers.emit(
                ModularEventType.SERVICE_RESOLUTION_FAILED,
                service_type=token,
                error=error,
                stack_trace="".join(traceback.format_exception(error)),
            )

    # ------------------------------------------------------------------
    # Introspection & teardown
    # ------------------------------------------------------------------

    def is_registered(self, token: Token) -> bool:
        """Check if a provider is registered for the token."""
        return token_to_key(token) in self._providers

    def unregister(self, token: Token) -> bool:
        """Remove a provider and its cached instance. Returns True if removed."""
        key = token_to_key(token)
        self._cache.pop(key, None)
        self._tokens.pop(key, None)
        return self._providers.pop(key, None) is not None

    def reset(self) -> None:
        """Drop every provider and cached instance."""
        self._providers.clear()
        self._tokens.clear()
        self._cache.clear()
        self._resolving.clear()
        logger.debug("Container reset")

    def registered_tokens(self) -> List[Token]:
        """Tokens in registration order."""
        return list(self._tokens.values())

    @property
    def observer_bus(self) -> Optional[Any]:
        return self._observers

    def describe(self) -> List[Dict[str, Any]]:
        """Provider metadata for diagnostics."""
        return [
            {
                "token": key,
                "provider": provider.meta.name,
                "mode": provider.meta.mode.value,
                "cached": key in self._cache,
            }
            for key, provider in self._providers.items()
        ]

    def __contains__(self, token: Token) -> bool:
        return self.is_registered(token)

    def __len__(self) -> int:
        return len(self._providers)

    def __repr__(self) -> str:
        return f"<Container providers={len(self._providers)}>"
