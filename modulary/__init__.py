"""
Modulary - Module Registry for Composable Applications

Registry system that:
- Collects independently developed feature modules (one per class)
- Drives their dependency registration into a shared container, in order
- Aggregates the routes they expose
- Broadcasts lifecycle events to observers for diagnostics
"""

__version__ = "1.0.0"

from .registry import ModuleRegistry

from .module import Module

from .router import ModuleRouter, Route

from .observer import (
    ModularEvent,
    ModularEventType,
    ModularObserver,
    LoggingModularObserver,
    ObserverBus,
)

from .errors import (
    ModularError,
    RegistrationConflictError,
    ModuleInitializationError,
    RouteCollectionError,
    ModuleManagerError,
)

from .result import Result, Success, Failure, Ok, Err, UnwrapError

from .manager import ManagerScope, ModuleManager

from .config import AppConfig, DefaultAppConfig, ConfigError

from .di import Container, RegistrationMode

from .app import ModularApp

__all__ = [
    # Core
    "ModuleRegistry",
    "Module",
    "ModuleRouter",
    "Route",

    # Observers
    "ModularEvent",
    "ModularEventType",
    "ModularObserver",
    "LoggingModularObserver",
    "ObserverBus",

    # Errors
    "ModularError",
    "RegistrationConflictError",
    "ModuleInitializationError",
    "RouteCollectionError",
    "ModuleManagerError",

    # Result
    "Result",
    "Success",
    "Failure",
    "Ok",
    "Err",
    "UnwrapError",

    # Manager
    "ManagerScope",
    "ModuleManager",

    # Config
    "AppConfig",
    "DefaultAppConfig",
    "ConfigError",

    # DI
    "Container",
    "RegistrationMode",

    # Bootstrap
    "ModularApp",
]
