"""
Module contract - the unit of registration.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, List, Optional

from .router import ModuleRouter

if TYPE_CHECKING:
    from .config import AppConfig
    from .di import Container


class Module(ABC):
    """
    Base class for feature modules.

    A module exposes a name for diagnostics, a lazily created router and a
    single hook that registers its services into the shared container.
    Uniqueness inside a registry is by class, not by ``module_name``.

    Example:
        class AuthModule(Module):
            module_name = "auth"

            def create_router(self):
                return AuthRouter()

            def register_dependencies(self, container, config):
                container.register_lazy_singleton(
                    AuthRepository,
                    lambda: AuthRepository(base_url=config.api_base_url),
                )
    """

    _router: Optional[ModuleRouter] = None

    @property
    @abstractmethod
    def module_name(self) -> str:
        """Module name used in diagnostics."""

    @abstractmethod
    def create_router(self) -> ModuleRouter:
        """
        Create the router for this module.

        Called at most once per instance, on first access of ``router``.
        """

    @abstractmethod
    def register_dependencies(self, container: "Container", config: "AppConfig") -> None:
        """
        Register this module's services into ``container``.

        ``config`` is read-only. Services of other modules are only
        guaranteed to be present if they were registered earlier.
        """

    @property
    def router(self) -> ModuleRouter:
        if self._router is None:
            self._router = self.create_router()
        return self._router

    @property
    def routes(self) -> List[Any]:
        return list(self.router.routes)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.module_name!r}>"
