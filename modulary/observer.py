"""
Observer bus - lifecycle events for diagnostics.

Observers are notified of registry, container and bootstrap events.
A faulty observer never affects the operation it observes.
"""

import time
from typing import Any, Dict, List, Optional, Tuple, Type
from enum import Enum
import dataclasses
import logging

logger = logging.getLogger("modulary.observer")


class ModularEventType(Enum):
    """Closed set of lifecycle events."""
    MODULE_REGISTERED = "module_registered"
    MODULE_REGISTRATION_FAILED = "module_registration_failed"
    MODULE_UNREGISTERED = "module_unregistered"
    DEPENDENCY_REGISTRATION_STARTED = "dependency_registration_started"
    DEPENDENCY_REGISTRATION_COMPLETED = "dependency_registration_completed"
    DEPENDENCY_REGISTRATION_FAILED = "dependency_registration_failed"
    DEPENDENCY_REGISTERED = "dependency_registered"
    ROUTES_COLLECTED = "routes_collected"
    ROUTE_COLLECTION_FAILED = "route_collection_failed"
    SYSTEM_INITIALIZED = "system_initialized"
    SYSTEM_INITIALIZATION_FAILED = "system_initialization_failed"
    SERVICE_RESOLVED = "service_resolved"
    SERVICE_RESOLUTION_FAILED = "service_resolution_failed"
    SYSTEM_RESET = "system_reset"


@dataclasses.dataclass
class ModularEvent:
    """A lifecycle event. Fields not relevant to ``type`` stay None."""
    type: ModularEventType
    timestamp: float = dataclasses.field(default_factory=time.time)
    module: Optional[Any] = None
    module_type: Optional[Type] = None
    routes: Optional[List[Any]] = None
    service_type: Optional[Any] = None
    registration_mode: Optional[str] = None
    error: Optional[BaseException] = None
    stack_trace: Optional[str] = None
    metadata: Dict[str, Any] = dataclasses.field(default_factory=dict)

    def __post_init__(self):
        if self.module_type is None and self.module is not None:
            self.module_type = type(self.module)


class ModularObserver:
    """
    Base class for lifecycle observers.

    Override the hooks you care about; every hook is a no-op by default.
    ``on_event`` receives the raw event first and dispatches to the hook.
    """

    def on_event(self, event: ModularEvent) -> None:
        handler = _DISPATCH[event.type]
        handler(self, event)

    def on_module_registered(self, module: Any) -> None:
        pass

    def on_module_registration_failed(
        self, module: Any, error: BaseException, stack_trace: Optional[str]
    ) -> None:
        pass

    def on_module_unregistered(self, module_type: Type) -> None:
        pass

    def on_dependency_registration_started(self, module: Any) -> None:
        pass

    def on_dependency_registration_completed(self, module: Any) -> None:
        pass

    def on_dependency_registration_failed(
        self, module: Any, error: BaseException, stack_trace: Optional[str]
    ) -> None:
        pass

    def on_dependency_registered(self, service_type: Any, registration_mode: str) -> None:
        pass

    def on_routes_collected(self, module: Any, routes: List[Any]) -> None:
        pass

    def on_route_collection_failed(
        self, module: Any, error: BaseException, stack_trace: Optional[str]
    ) -> None:
        pass

    def on_system_initialized(self) -> None:
        pass

    def on_system_initialization_failed(
        self, error: BaseException, stack_trace: Optional[str]
    ) -> None:
        pass

    def on_service_resolved(self, service_type: Any) -> None:
        pass

    def on_service_resolution_failed(
        self, service_type: Any, error: BaseException, stack_trace: Optional[str]
    ) -> None:
        pass

    def on_system_reset(self) -> None:
        pass


_DISPATCH = {
    ModularEventType.MODULE_REGISTERED:
        lambda o, e: o.on_module_registered(e.module),
    ModularEventType.MODULE_REGISTRATION_FAILED:
        lambda o, e: o.on_module_registration_failed(e.module, e.error, e.stack_trace),
    ModularEventType.MODULE_UNREGISTERED:
        lambda o, e: o.on_module_unregistered(e.module_type),
    ModularEventType.DEPENDENCY_REGISTRATION_STARTED:
        lambda o, e: o.on_dependency_registration_started(e.module),
    ModularEventType.DEPENDENCY_REGISTRATION_COMPLETED:
        lambda o, e: o.on_dependency_registration_completed(e.module),
    ModularEventType.DEPENDENCY_REGISTRATION_FAILED:
        lambda o, e: o.on_dependency_registration_failed(e.module, e.error, e.stack_trace),
    ModularEventType.DEPENDENCY_REGISTERED:
        lambda o, e: o.on_dependency_registered(e.service_type, e.registration_mode),
    ModularEventType.ROUTES_COLLECTED:
        lambda o, e: o.on_routes_collected(e.module, e.routes),
    ModularEventType.ROUTE_COLLECTION_FAILED:
        lambda o, e: o.on_route_collection_failed(e.module, e.error, e.stack_trace),
    ModularEventType.SYSTEM_INITIALIZED:
        lambda o, e: o.on_system_initialized(),
    ModularEventType.SYSTEM_INITIALIZATION_FAILED:
        lambda o, e: o.on_system_initialization_failed(e.error, e.stack_trace),
    ModularEventType.SERVICE_RESOLVED:
        lambda o, e: o.on_service_resolved(e.service_type),
    ModularEventType.SERVICE_RESOLUTION_FAILED:
        lambda o, e: o.on_service_resolution_failed(e.service_type, e.error, e.stack_trace),
    ModularEventType.SYSTEM_RESET:
        lambda o, e: o.on_system_reset(),
}


def _name(obj: Any) -> str:
    if obj is None:
        return "?"
    return getattr(obj, "__qualname__", None) or str(obj)


class LoggingModularObserver(ModularObserver):
    """Observer that writes every event to the ``modulary.observer`` logger."""

    def __init__(
        self,
        *,
        enable_debug_logs: bool = True,
        enable_verbose_logs: bool = False,
        log_prefix: str = "[MODULAR]",
        log: Optional[logging.Logger] = None,
    ):
        self.enable_debug_logs = enable_debug_logs
        self.enable_verbose_logs = enable_verbose_logs
        self.log_prefix = log_prefix
        self.logger = log or logger

    def _log(self, level: int, message: str, *, verbose: bool = False) -> None:
        if verbose:
            if not self.enable_verbose_logs:
                return
        elif level == logging.DEBUG and not self.enable_debug_logs:
            return
        self.logger.log(level, "%s %s", self.log_prefix, message)

    def on_module_registered(self, module):
        self._log(
            logging.INFO,
            f"Module registered: {_name(type(module))} ({module.module_name})",
        )

    def on_module_registration_failed(self, module, error, stack_trace):
        self._log(
            logging.ERROR,
            f"Module registration failed: {_name(type(module))} - {error}",
        )

    def on_module_unregistered(self, module_type):
        self._log(logging.INFO, f"Module unregistered: {_name(module_type)}")

    def on_dependency_registration_started(self, module):
        self._log(
            logging.DEBUG,
            f"Dependency registration started: {_name(type(module))}",
        )

    def on_dependency_registration_completed(self, module):
        self._log(
            logging.DEBUG,
            f"Dependency registration completed: {_name(type(module))}",
        )

    def on_dependency_registration_failed(self, module, error, stack_trace):
        self._log(
            logging.ERROR,
            f"Dependency registration failed: {_name(type(module))} - {error}",
        )

    def on_dependency_registered(self, service_type, registration_mode):
        self._log(
            logging.DEBUG,
            f"Dependency registered: {_name(service_type)} ({registration_mode})",
            verbose=True,
        )

    def on_routes_collected(self, module, routes):
        self._log(
            logging.DEBUG,
            f"Routes collected: {_name(type(module))} ({len(routes)} routes)",
        )

    def on_route_collection_failed(self, module, error, stack_trace):
        self._log(
            logging.ERROR,
            f"Route collection failed: {_name(type(module))} - {error}",
        )

    def on_system_initialized(self):
        self._log(logging.INFO, "Modular system initialized successfully")

    def on_system_initialization_failed(self, error, stack_trace):
        self._log(logging.ERROR, f"Modular system initialization failed: {error}")

    def on_service_resolved(self, service_type):
        self._log(
            logging.DEBUG,
            f"Service resolved: {_name(service_type)}",
            verbose=True,
        )

    def on_service_resolution_failed(self, service_type, error, stack_trace):
        self._log(
            logging.ERROR,
            f"Service resolution failed: {_name(service_type)} - {error}",
        )

    def on_system_reset(self):
        self._log(logging.INFO, "Modular system reset")


class ObserverBus:
    """Fan-out coordinator for modular observers."""

    def __init__(self, observers: Optional[List[ModularObserver]] = None):
        self._observers: List[ModularObserver] = []
        for observer in observers or ():
            self.add_observer(observer)

    def add_observer(self, observer: ModularObserver) -> None:
        """Add an observer. Adding the same observer twice is a no-op."""
        if observer not in self._observers:
            self._observers.append(observer)

    def remove_observer(self, observer: ModularObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    def clear_observers(self) -> None:
        self._observers.clear()

    @property
    def observers(self) -> Tuple[ModularObserver, ...]:
        return tuple(self._observers)

    def __len__(self) -> int:
        return len(self._observers)

    def emit(self, event_type: ModularEventType, **fields: Any) -> ModularEvent:
        """Emit an event to all observers and return it."""
        event = ModularEvent(type=event_type, **fields)
        # Snapshot so observers may add/remove observers while handling
        for observer in tuple(self._observers):
            try:
                observer.on_event(event)
            except Exception:
                # Observers must never crash the operation they observe
                logger.exception(
                    "Observer %s failed handling %s",
                    type(observer).__name__,
                    event_type.value,
                )
        return event
