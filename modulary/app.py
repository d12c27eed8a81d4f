"""
Headless application bootstrap.

Wires config, container, observers and registry together, runs the
register -> initialize -> collect routes sequence once, and exposes the
merged route table and service lookup to the host application.
"""

from typing import Any, Callable, Iterable, List, Optional, Type, TypeVar
import logging
import traceback

from .config import AppConfig, DefaultAppConfig
from .di import Container
from .errors import ModularError
from .module import Module
from .observer import LoggingModularObserver, ModularEventType, ModularObserver, ObserverBus
from .registry import ModuleRegistry

logger = logging.getLogger("modulary.app")

T = TypeVar("T")
M = TypeVar("M", bound=Module)


class ModularApp:
    """
    One-shot composition of a set of modules.

    Example:
        app = ModularApp([AuthModule(), PostModule()], config=MyConfig())
        app.pre_register(lambda c: c.register_singleton(Clock, SystemClock()))
        routes = app.start()
        posts = app.get(PostRepository)
    """

    def __init__(
        self,
        modules: Iterable[Module],
        *,
        config: Optional[AppConfig] = None,
        container: Optional[Container] = None,
        observers: Optional[Iterable[ModularObserver]] = None,
        log_events: bool = True,
    ):
        self._modules = list(modules)
        self._config = config if config is not None else DefaultAppConfig()

        self._bus = ObserverBus()
        if log_events:
            self._bus.add_observer(LoggingModularObserver())
        for observer in observers or ():
            self._bus.add_observer(observer)

        self._container = container if container is not None else Container(self._bus)
        self._registry = ModuleRegistry(
            self._config, container=self._container, observers=self._bus
        )
        self._routes: Optional[List[Any]] = None
        self._pre_registered = False

    def pre_register(self, registration: Callable[[Container], None]) -> None:
        """
        Register core services before any module runs.

        Can only be called once, and only before ``start()``. Observers get
        ``SYSTEM_INITIALIZED`` when the registration succeeds.
        """
        if self._pre_registered:
            raise ModularError("pre_register() can only be called once")
        if self._routes is not None:
            raise ModularError("pre_register() must be called before start()")

        self._pre_registered = True
        try:
            registration(self._container)
        except Exception as e:
            self._bus.emit(
                ModularEventType.SYSTEM_INITIALIZATION_FAILED,
                error=e,
                stack_trace=traceback.format_exc(),
            )
            raise
        self._bus.emit(ModularEventType.SYSTEM_INITIALIZED)

    def start(self) -> List[Any]:
        """
        Register and initialize all modules and collect their routes.

        Returns the merged route table. Calling it again returns the same
        table without re-running anything. After a failure, ``start()`` can
        be called again: modules already registered are kept and only the
        unfinished steps run. Services that earlier modules put in the
        container stay there.
        """
        if self._routes is not None:
            return self._routes

        try:
            for module in self._modules:
                if self._registry.get_module(type(module)) is not module:
                    self._registry.register_module(module)
            if not self._registry.is_initialized:
                self._registry.initialize_all()
            routes = self._registry.get_all_routes()
        except Exception as e:
            self._bus.emit(
                ModularEventType.SYSTEM_INITIALIZATION_FAILED,
                error=e,
                stack_trace=traceback.format_exc(),
            )
            raise

        self._routes = routes
        logger.info(
            "Started %d module(s) with %d route(s)",
            self._registry.module_count,
            len(routes),
        )
        self._bus.emit(ModularEventType.SYSTEM_INITIALIZED)
        return routes

    def reset(self) -> None:
        """
        Tear the app down so it can be started again.

        Clears the registry (observers get ``SYSTEM_RESET``), drops every
        service from the container, forgets the route table and allows
        ``pre_register`` again.
        """
        self._registry.reset()
        self._container.reset()
        self._routes = None
        self._pre_registered = False
        logger.info("Modular app reset")

    @property
    def routes(self) -> List[Any]:
        if self._routes is None:
            raise ModularError(
                "Modular app not started",
                suggestion="Call start() before reading routes.",
            )
        return self._routes

    @property
    def is_started(self) -> bool:
        return self._routes is not None

    def get(self, token: Type[T] | str) -> T:
        """
        Resolve a service from the container.

        Resolution events reach the app's observers even when the container
        was built without this app's bus.
        """
        if self._container.observer_bus is self._bus:
            return self._container.resolve(token)

        try:
            service = self._container.resolve(token)
        except Exception as e:
            self._bus.emit(
                ModularEventType.SERVICE_RESOLUTION_FAILED,
                service_type=token,
                error=e,
                stack_trace=traceback.format_exc(),
            )
            raise
        self._bus.emit(ModularEventType.SERVICE_RESOLVED, service_type=token)
        return service

    def is_registered(self, token: Type[Any] | str) -> bool:
        return self._container.is_registered(token)

    def get_module(self, module_type: Type[M]) -> Optional[M]:
        return self._registry.get_module(module_type)

    def add_observer(self, observer: ModularObserver) -> None:
        self._bus.add_observer(observer)

    def remove_observer(self, observer: ModularObserver) -> None:
        self._bus.remove_observer(observer)

    @property
    def registry(self) -> ModuleRegistry:
        return self._registry

    @property
    def container(self) -> Container:
        return self._container

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def observer_bus(self) -> ObserverBus:
        return self._bus
