"""
Shared test fixtures and sample modules for the modulary test suite.
"""

from typing import Any, Callable, List, Optional

import pytest

from modulary import Module, ModuleRouter, ModuleRegistry, ObserverBus, Route
from modulary.di import Container
from modulary.testing import RecordingObserver, StaticAppConfig


# ============================================================================
# Sample Services
# ============================================================================


class AuthService:
    def __init__(self, base_url: str):
        self.base_url = base_url


class PostRepository:
    def __init__(self, auth: AuthService):
        self.auth = auth


# ============================================================================
# Sample Routers & Modules
# ============================================================================


class AuthRouter(ModuleRouter):
    base_path = "/auth"

    @property
    def routes(self):
        return [
            Route(f"{self.base_path}/login", name="login"),
            Route(f"{self.base_path}/logout", name="logout"),
        ]


class PostRouter(ModuleRouter):
    base_path = "/posts"

    @property
    def routes(self):
        return [
            Route(
                self.base_path,
                name="post-list",
                children=(Route(f"{self.base_path}/:post_id", name="post-details"),),
            ),
        ]


class AuthModule(Module):
    module_name = "auth"

    def __init__(self):
        self.router_builds = 0
        self.register_calls = 0

    def create_router(self):
        self.router_builds += 1
        return AuthRouter()

    def register_dependencies(self, container, config):
        self.register_calls += 1
        container.register_lazy_singleton(
            AuthService, lambda: AuthService(config.api_base_url)
        )


class PostsModule(Module):
    module_name = "posts"

    def __init__(self):
        self.register_calls = 0

    def create_router(self):
        return PostRouter()

    def register_dependencies(self, container, config):
        self.register_calls += 1
        container.register_lazy_singleton(
            PostRepository, lambda: PostRepository(container.resolve(AuthService))
        )


class _ListRouter(ModuleRouter):
    def __init__(self, base_path: str, routes: List[Any]):
        self._base_path = base_path
        self._routes = routes

    @property
    def base_path(self):
        return self._base_path

    @property
    def routes(self):
        return list(self._routes)


def make_module_class(
    name: str,
    routes: Optional[List[Any]] = None,
    *,
    on_register: Optional[Callable[[Container, Any], None]] = None,
    router_error: Optional[Exception] = None,
    calls: Optional[List[str]] = None,
) -> type:
    """Build a distinct Module subclass (uniqueness is per class)."""

    def create_router(self):
        if router_error is not None:
            raise router_error
        return _ListRouter(f"/{name}", routes if routes is not None else [Route(f"/{name}")])

    def register_dependencies(self, container, config):
        if calls is not None:
            calls.append(name)
        if on_register is not None:
            on_register(container, config)

    return type(
        f"{name.title().replace('-', '')}Module",
        (Module,),
        {
            "module_name": name,
            "create_router": create_router,
            "register_dependencies": register_dependencies,
        },
    )


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def config():
    return StaticAppConfig(values={"API_BASE_URL": "https://api.test"})


@pytest.fixture
def recorder():
    return RecordingObserver()


@pytest.fixture
def bus(recorder):
    return ObserverBus([recorder])


@pytest.fixture
def container(bus):
    return Container(bus)


@pytest.fixture
def registry(config, container, bus):
    return ModuleRegistry(config, container=container, observers=bus)
