"""
Module manager - a Result-returning wrapper around the registry.

The registry raises; the manager converts those errors into ``Failure``
values for call sites that prefer explicit error handling. Managers are
cached per class in an explicitly constructed ``ManagerScope``.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, TypeVar
import logging

from .config import AppConfig
from .di import Container
from .errors import ModuleManagerError
from .module import Module
from .observer import ObserverBus
from .registry import ModuleRegistry
from .result import Failure, Result, Success

logger = logging.getLogger("modulary.manager")

MM = TypeVar("MM", bound="ModuleManager")
M = TypeVar("M", bound=Module)


class ManagerScope:
    """
    Type-keyed singleton table for module managers.

    One cached instance per manager class. Independent scopes share nothing,
    so tests can build as many as they need.
    """

    __slots__ = ("_instances",)

    def __init__(self):
        self._instances: Dict[type, "ModuleManager"] = {}

    def get_instance(
        self,
        manager_type: Type[MM],
        config: AppConfig,
        factory: Callable[[AppConfig], MM],
    ) -> MM:
        """Return the cached manager of ``manager_type``, building it on first request."""
        instance = self._instances.get(manager_type)
        if instance is None:
            instance = factory(config)
            if not isinstance(instance, manager_type):
                raise TypeError(
                    f"Factory for {manager_type.__qualname__} returned "
                    f"{type(instance).__name__}"
                )
            self._instances[manager_type] = instance
            logger.debug("Created manager %s", manager_type.__qualname__)
        return instance

    def reset_all(self) -> None:
        """
        Reset every cached manager and forget them.

        Services already placed in containers are not removed.
        """
        for instance in self._instances.values():
            instance.reset()
        self._instances.clear()

    def __contains__(self, manager_type: type) -> bool:
        return manager_type in self._instances

    def __len__(self) -> int:
        return len(self._instances)


class ModuleManager(ABC):
    """
    Base class for application module managers.

    Subclasses list their modules in ``create_modules``; everything else
    is provided.

    Example:
        class AppModuleManager(ModuleManager):
            def create_modules(self):
                return [AuthModule(), PostModule()]

        scope = ManagerScope()
        manager = AppModuleManager.get_instance(scope, config)
        result = manager.initialize_modules()
        routes = manager.get_all_routes().unwrap_or([])
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        container: Optional[Container] = None,
        observers: Optional[ObserverBus] = None,
    ):
        self._registry = ModuleRegistry(config, container=container, observers=observers)
        self._initialized = False

    @classmethod
    def get_instance(
        cls: Type[MM],
        scope: ManagerScope,
        config: AppConfig,
        factory: Optional[Callable[[AppConfig], MM]] = None,
    ) -> MM:
        """Get this manager's singleton from ``scope``."""
        return scope.get_instance(cls, config, factory or cls)

    @abstractmethod
    def create_modules(self) -> List[Module]:
        """Modules managed by this manager, in registration order."""

    def initialize_modules(self) -> Result[None, ModuleManagerError]:
        """
        Register and initialize all modules.

        Returns ``Success(None)`` immediately if already initialized.
        """
        if self._initialized:
            return Success(None)

        try:
            modules = self.create_modules()
        except Exception as e:
            return Failure(ModuleManagerError(f"Failed to create modules: {e}", cause=e))

        if not modules:
            return Failure(ModuleManagerError("No modules provided for initialization"))

        try:
            self._registry.register_modules(modules)
        except Exception as e:
            return Failure(ModuleManagerError(f"Failed to register modules: {e}", cause=e))

        try:
            self._registry.initialize_all()
        except Exception as e:
            return Failure(ModuleManagerError(f"Failed to initialize registry: {e}", cause=e))

        self._initialized = True
        return Success(None)

    def get_all_routes(self) -> Result[List[Any], ModuleManagerError]:
        try:
            return Success(self._registry.get_all_routes())
        except Exception as e:
            return Failure(ModuleManagerError(f"Failed to collect routes: {e}", cause=e))

    def is_module_registered(self, module_type: Type[Module]) -> bool:
        return self._registry.is_module_registered(module_type)

    def get_module(self, module_type: Type[M]) -> Result[M, ModuleManagerError]:
        module = self._registry.get_module(module_type)
        if module is None:
            return Failure(
                ModuleManagerError(f"Module of type {module_type.__qualname__} is not registered")
            )
        return Success(module)

    def get_all_modules(self) -> Result[Tuple[Module, ...], ModuleManagerError]:
        return Success(self._registry.get_all_modules())

    @property
    def module_count(self) -> int:
        return self._registry.module_count

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def registry(self) -> ModuleRegistry:
        return self._registry

    def reset(self) -> None:
        """
        Clear registered modules and the initialized state.

        The container keeps every service already registered.
        """
        self._registry.reset()
        self._initialized = False
