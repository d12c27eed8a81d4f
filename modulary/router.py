"""
Route descriptors and the module router base class.

The registry only collects routes; it never looks inside them.
Any object may serve as a route, ``Route`` is a convenient default.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Route:
    """Navigable route descriptor."""

    path: str
    name: Optional[str] = None
    handler: Optional[Callable[..., Any]] = None
    children: Tuple["Route", ...] = field(default_factory=tuple)
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    def __post_init__(self):
        if not isinstance(self.path, str) or not self.path:
            raise ValueError("Route must have a path")
        if not isinstance(self.children, tuple):
            object.__setattr__(self, "children", tuple(self.children))

    def walk(self) -> Iterator["Route"]:
        """Yield this route and all nested routes, depth first."""
        yield self
        for child in self.children:
            yield from child.walk()


class ModuleRouter(ABC):
    """
    Base class for module routers.

    Example:
        class PostRouter(ModuleRouter):
            base_path = "/posts"

            @property
            def routes(self):
                return [
                    Route(self.base_path, name="post-list"),
                    Route(f"{self.base_path}/:post_id", name="post-details"),
                ]
    """

    @property
    @abstractmethod
    def base_path(self) -> str:
        """Base path for this module (e.g. '/posts')."""

    @property
    @abstractmethod
    def routes(self) -> List[Any]:
        """Routes provided by this module."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(base_path={self.base_path!r})"
