"""
Module registry - collects modules, drives their dependency registration
and aggregates their routes.

Lifecycle:
    register_module(s) -> initialize_all() -> get_all_routes()

Registration order is preserved and is the order used for both
initialization and route collection.
"""

from typing import Any, Dict, Iterable, List, Optional, Tuple, Type, TypeVar
import logging
import traceback

from .config import AppConfig
from .di import Container
from .errors import (
    ModuleInitializationError,
    RegistrationConflictError,
    RouteCollectionError,
)
from .module import Module
from .observer import ModularEventType, ModularObserver, ObserverBus

logger = logging.getLogger("modulary.registry")

M = TypeVar("M", bound=Module)


def _format_stack(error: BaseException) -> str:
    return "".join(traceback.format_exception(type(error), error, error.__traceback__))


class ModuleRegistry:
    """
    Central registry for application modules.

    Modules are keyed by their class; at most one instance per class.
    The container is shared with (and owned by) the caller: the registry
    only writes into it through ``Module.register_dependencies`` and never
    removes what modules registered.

    Example:
        registry = ModuleRegistry(config, container=container)
        registry.register_module(AuthModule()).register_module(PostModule())
        registry.initialize_all()
        routes = registry.get_all_routes()
    """

    __slots__ = ("_modules", "_container", "_config", "_observers", "_initialized")

    def __init__(
        self,
        config: AppConfig,
        *,
        container: Optional[Container] = None,
        observers: Optional[ObserverBus] = None,
    ):
        self._modules: Dict[Type[Module], Module] = {}
        self._config = config
        self._observers = observers if observers is not None else ObserverBus()
        self._container = container if container is not None else Container()
        self._initialized = False

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def add_observer(self, observer: ModularObserver) -> None:
        self._observers.add_observer(observer)

    def remove_observer(self, observer: ModularObserver) -> None:
        self._observers.remove_observer(observer)

    def clear_observers(self) -> None:
        self._observers.clear_observers()

    @property
    def observers(self) -> Tuple[ModularObserver, ...]:
        return self._observers.observers

    @property
    def observer_bus(self) -> ObserverBus:
        return self._observers

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_module(self, module: Module) -> "ModuleRegistry":
        """
        Register a module.

        Returns:
            The registry, for chaining

        Raises:
            RegistrationConflictError: If the registry is initialized or a
                module of the same class is already registered
            TypeError: If ``module`` is not a Module
        """
        if not isinstance(module, Module):
            raise TypeError(f"Expected a Module instance, got {type(module).__name__}")

        module_type = type(module)

        if self._initialized:
            self._reject(
                module,
                RegistrationConflictError(
                    f"Cannot register module {module_type.__qualname__} after initialization",
                    module_type=module_type,
                    suggestion="Register every module before calling initialize_all(), "
                    "or call reset() first.",
                ),
            )

        if module_type in self._modules:
            self._reject(
                module,
                RegistrationConflictError(
                    f"Module of type {module_type.__qualname__} is already registered",
                    module_type=module_type,
                    suggestion="Register each module class once, or unregister the "
                    "existing instance first.",
                ),
            )

        self._modules[module_type] = module
        logger.debug("Registered module %s (%s)", module_type.__qualname__, module.module_name)
        self._observers.emit(ModularEventType.MODULE_REGISTERED, module=module)
        return self

    def _reject(self, module: Module, error: RegistrationConflictError) -> None:
        self._observers.emit(
            ModularEventType.MODULE_REGISTRATION_FAILED,
            module=module,
            error=error,
            stack_trace="".join(traceback.format_stack()[:-1]),
        )
        raise error

    def register_modules(self, modules: Iterable[Module]) -> "ModuleRegistry":
        """
        Register modules in order.

        The first failure aborts the remaining registrations; modules
        registered before it stay registered.
        """
        for module in modules:
            self.register_module(module)
        return self

    def unregister_module(self, module_type: Type[Module]) -> bool:
        """
        Remove a module by class.

        Returns:
            True if a module was removed

        Raises:
            RegistrationConflictError: If the registry is initialized
        """
        if self._initialized:
            raise RegistrationConflictError(
                f"Cannot unregister module {module_type.__qualname__} after initialization",
                module_type=module_type,
            )

        removed = self._modules.pop(module_type, None) is not None
        if removed:
            logger.debug("Unregistered module %s", module_type.__qualname__)
            self._observers.emit(ModularEventType.MODULE_UNREGISTERED, module_type=module_type)
        return removed

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def is_module_registered(self, module_type: Type[Module]) -> bool:
        return module_type in self._modules

    def get_module(self, module_type: Type[M]) -> Optional[M]:
        """Get the registered instance of ``module_type``, or None."""
        return self._modules.get(module_type)

    def get_all_modules(self) -> Tuple[Module, ...]:
        """Registered modules in registration order."""
        return tuple(self._modules.values())

    def get_registered_module_types(self) -> Tuple[Type[Module], ...]:
        return tuple(self._modules.keys())

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def initialize_all(self) -> None:
        """
        Run every module's ``register_dependencies`` in registration order.

        Fails fast: the first failing module stops initialization, and
        modules before it keep whatever they registered in the container.

        Raises:
            RegistrationConflictError: If already initialized
            ModuleInitializationError: If a module's registration raises
        """
        if self._initialized:
            raise RegistrationConflictError(
                "Module registry has already been initialized",
                suggestion="Call reset() before initializing again.",
            )

        logger.info("Initializing %d module(s)", len(self._modules))

        for module_type, module in list(self._modules.items()):
            self._observers.emit(ModularEventType.DEPENDENCY_REGISTRATION_STARTED, module=module)
            try:
                module.register_dependencies(self._container, self._config)
            except Exception as e:
                stack_trace = _format_stack(e)
                self._observers.emit(
                    ModularEventType.DEPENDENCY_REGISTRATION_FAILED,
                    module=module,
                    error=e,
                    stack_trace=stack_trace,
                )
                logger.error(
                    "Dependency registration failed for %s: %s",
                    module_type.__qualname__,
                    e,
                )
                raise ModuleInitializationError(
                    module_type, e, stack_trace=stack_trace
                ) from e
            self._observers.emit(
                ModularEventType.DEPENDENCY_REGISTRATION_COMPLETED, module=module
            )

        self._initialized = True
        logger.info("Module registry initialized")

    # ------------------------------------------------------------------
    # Routes
    # ------------------------------------------------------------------

    def get_all_routes(self) -> List[Any]:
        """
        Collect routes from every module in registration order.

        Can be called before or after initialization.

        Raises:
            RouteCollectionError: If a module's router raises
        """
        routes: List[Any] = []
        for module in list(self._modules.values()):
            routes.extend(self._collect(module))
        return routes

    def get_module_routes(self, module_type: Type[Module]) -> List[Any]:
        """Routes of one module; empty if the module is not registered."""
        module = self._modules.get(module_type)
        if module is None:
            return []
        return self._collect(module)

    def _collect(self, module: Module) -> List[Any]:
        try:
            module_routes = list(module.routes)
        except Exception as e:
            stack_trace = _format_stack(e)
            self._observers.emit(
                ModularEventType.ROUTE_COLLECTION_FAILED,
                module=module,
                error=e,
                stack_trace=stack_trace,
            )
            raise RouteCollectionError(type(module), e, stack_trace=stack_trace) from e

        self._observers.emit(
            ModularEventType.ROUTES_COLLECTED, module=module, routes=module_routes
        )
        return module_routes

    # ------------------------------------------------------------------
    # Reset & state
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """
        Clear all modules and the initialized flag.

        The container is not touched; reset it separately for a full teardown.
        """
        self._modules.clear()
        self._initialized = False
        logger.debug("Module registry reset")
        self._observers.emit(ModularEventType.SYSTEM_RESET)

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def module_count(self) -> int:
        return len(self._modules)

    @property
    def container(self) -> Container:
        return self._container

    @property
    def config(self) -> AppConfig:
        return self._config

    def inspect(self) -> Dict[str, Any]:
        """Diagnostics snapshot: modules in order and initialization state."""
        return {
            "initialized": self._initialized,
            "module_count": len(self._modules),
            "modules": [
                {
                    "order": index,
                    "name": module.module_name,
                    "type": f"{module_type.__module__}.{module_type.__qualname__}",
                }
                for index, (module_type, module) in enumerate(self._modules.items())
            ],
        }

    def __len__(self) -> int:
        return len(self._modules)

    def __contains__(self, module_type: Type[Module]) -> bool:
        return module_type in self._modules

    def __repr__(self) -> str:
        return (
            f"<ModuleRegistry modules={len(self._modules)} "
            f"initialized={self._initialized}>"
        )
