"""
Module Manager (manager.py)

Tests ManagerScope singleton table and Result-returning ModuleManager.
"""

import pytest

from modulary import (
    Failure,
    ManagerScope,
    ModuleInitializationError,
    ModuleManager,
    ModuleManagerError,
    RegistrationConflictError,
    RouteCollectionError,
    Success,
)
from modulary.di import Container

from conftest import AuthModule, AuthService, PostsModule, make_module_class


class AppModuleManager(ModuleManager):
    def create_modules(self):
        return [AuthModule(), PostsModule()]


class EmptyManager(ModuleManager):
    def create_modules(self):
        return []


class DuplicateManager(ModuleManager):
    def create_modules(self):
        return [AuthModule(), AuthModule()]


def _boom(container, config):
    raise RuntimeError("broken module")


FailingModule = make_module_class("failing", on_register=_boom)
BrokenRouterModule = make_module_class("broken-router", router_error=RuntimeError("no routes"))


class FailingManager(ModuleManager):
    def create_modules(self):
        return [AuthModule(), FailingModule()]


class BrokenRoutesManager(ModuleManager):
    def create_modules(self):
        return [BrokenRouterModule()]


# ============================================================================
# ManagerScope
# ============================================================================

class TestManagerScope:

    def test_singleton_per_type(self, config):
        scope = ManagerScope()
        first = AppModuleManager.get_instance(scope, config)
        assert AppModuleManager.get_instance(scope, config) is first
        assert AppModuleManager in scope
        assert len(scope) == 1

    def test_distinct_types_distinct_instances(self, config):
        scope = ManagerScope()
        app = AppModuleManager.get_instance(scope, config)
        empty = EmptyManager.get_instance(scope, config)
        assert app is not empty
        assert len(scope) == 2

    def test_factory_called_once(self, config):
        built = []

        def factory(cfg):
            built.append(cfg)
            return AppModuleManager(cfg)

        scope = ManagerScope()
        AppModuleManager.get_instance(scope, config, factory)
        AppModuleManager.get_instance(scope, config, factory)
        assert built == [config]

    def test_factory_wrong_type(self, config):
        scope = ManagerScope()
        with pytest.raises(TypeError):
            AppModuleManager.get_instance(scope, config, lambda cfg: EmptyManager(cfg))

    def test_independent_scopes(self, config):
        assert (
            AppModuleManager.get_instance(ManagerScope(), config)
            is not AppModuleManager.get_instance(ManagerScope(), config)
        )

    def test_reset_all(self, config):
        container = Container()
        scope = ManagerScope()
        manager = scope.get_instance(
            AppModuleManager, config, lambda cfg: AppModuleManager(cfg, container=container)
        )
        assert manager.initialize_modules().is_ok()

        scope.reset_all()

        assert len(scope) == 0
        assert manager.module_count == 0
        assert not manager.is_initialized
        assert container.is_registered(AuthService)
        assert AppModuleManager.get_instance(scope, config) is not manager


# ============================================================================
# ModuleManager
# ============================================================================

class TestModuleManager:

    def test_initialize(self, config):
        manager = AppModuleManager(config)
        result = manager.initialize_modules()
        assert result == Success(None)
        assert manager.is_initialized
        assert manager.module_count == 2
        assert manager.registry.is_initialized

    def test_initialize_idempotent(self, config):
        manager = AppModuleManager(config)
        manager.initialize_modules()
        assert manager.initialize_modules().is_ok()
        assert manager.module_count == 2

    def test_empty_modules(self, config):
        result = EmptyManager(config).initialize_modules()
        assert isinstance(result, Failure)
        assert "No modules provided" in str(result.unwrap_err())

    def test_registration_failure_as_value(self, config):
        result = DuplicateManager(config).initialize_modules()
        error = result.unwrap_err()
        assert isinstance(error, ModuleManagerError)
        assert isinstance(error.cause, RegistrationConflictError)
        assert str(error).startswith("Failed to register modules")

    def test_initialization_failure_as_value(self, config):
        manager = FailingManager(config)
        result = manager.initialize_modules()
        error = result.unwrap_err()
        assert isinstance(error.cause, ModuleInitializationError)
        assert error.cause.module_type is FailingModule
        assert not manager.is_initialized

    def test_create_modules_error_as_value(self, config):
        class Raising(ModuleManager):
            def create_modules(self):
                raise RuntimeError("cannot build")

        result = Raising(config).initialize_modules()
        assert isinstance(result.unwrap_err().cause, RuntimeError)

    def test_routes(self, config):
        manager = AppModuleManager(config)
        manager.initialize_modules()
        routes = manager.get_all_routes().unwrap()
        assert [r.name for r in routes] == ["login", "logout", "post-list"]

    def test_routes_failure_as_value(self, config):
        manager = BrokenRoutesManager(config)
        manager.initialize_modules()
        result = manager.get_all_routes()
        assert result.is_err()
        assert isinstance(result.unwrap_err().cause, RouteCollectionError)
        assert result.unwrap_or([]) == []

    def test_get_module(self, config):
        manager = AppModuleManager(config)
        manager.initialize_modules()
        assert isinstance(manager.get_module(AuthModule).unwrap(), AuthModule)
        assert manager.is_module_registered(PostsModule)

    def test_get_missing_module(self, config):
        manager = AppModuleManager(config)
        result = manager.get_module(AuthModule)
        assert result.is_err()
        assert "not registered" in str(result.unwrap_err())

    def test_get_all_modules(self, config):
        manager = AppModuleManager(config)
        manager.initialize_modules()
        names = manager.get_all_modules().map(lambda ms: [m.module_name for m in ms])
        assert names == Success(["auth", "posts"])

    def test_reset_then_reinitialize_with_fresh_container(self, config):
        manager = AppModuleManager(config, container=Container())
        manager.initialize_modules()
        manager.reset()
        manager.registry.container.reset()
        assert manager.initialize_modules().is_ok()
