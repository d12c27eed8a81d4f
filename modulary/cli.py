"""
Modulary CLI - ``modulary inspect``.

Loads a module list from ``package.module:attribute`` and prints the
registration order and merged route table.
"""

from __future__ import annotations

import importlib
import inspect as pyinspect
import json
import sys
from typing import Any, List

import click

from . import __version__
from .config import AppConfig, DefaultAppConfig
from .errors import ModularError
from .manager import ModuleManager
from .module import Module
from .registry import ModuleRegistry
from .router import Route


def load_target(target: str) -> Any:
    """Import ``package.module:attribute``."""
    if ":" not in target:
        raise click.BadParameter(
            "expected 'package.module:attribute'", param_hint="TARGET"
        )
    module_path, _, attr_path = target.partition(":")

    if "." not in sys.path:
        sys.path.insert(0, ".")

    try:
        obj: Any = importlib.import_module(module_path)
    except ImportError as e:
        raise click.BadParameter(f"cannot import '{module_path}': {e}", param_hint="TARGET") from e

    for part in attr_path.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise click.BadParameter(
                f"'{module_path}' has no attribute '{attr_path}'", param_hint="TARGET"
            ) from e
    return obj


def resolve_modules(obj: Any, config: AppConfig) -> List[Module]:
    """Turn a loaded target into a list of module instances."""
    if pyinspect.isclass(obj) and issubclass(obj, ModuleManager):
        return list(obj(config).create_modules())
    if callable(obj) and not isinstance(obj, (list, tuple)):
        obj = obj()

    modules = list(obj)
    for module in modules:
        if not isinstance(module, Module):
            raise click.BadParameter(
                f"target yielded {type(module).__name__}, expected Module instances",
                param_hint="TARGET",
            )
    return modules


def describe_route(route: Any) -> dict:
    if isinstance(route, Route):
        return {
            "path": route.path,
            "name": route.name,
            "children": [describe_route(child) for child in route.children],
        }
    return {"path": getattr(route, "path", None), "repr": repr(route)}


@click.group()
@click.version_option(version=__version__, prog_name="modulary")
def cli():
    """Modulary - compose applications from independent modules."""
    pass


@cli.command("inspect")
@click.argument("target")
@click.option("--env-file", "-e", default=None, help="Path to .env file")
@click.option("--init", "run_init", is_flag=True, help="Run initialize_all() too")
@click.option("--json-output", "-j", is_flag=True, help="Output as JSON")
def inspect_command(target: str, env_file: str | None, run_init: bool, json_output: bool):
    """
    Show modules and routes for TARGET.

    TARGET is 'package.module:attribute' naming a list of modules, a
    callable returning one, or a ModuleManager subclass.

    Examples:
      modulary inspect myapp.modules:MODULES
      modulary inspect myapp.manager:AppModuleManager --init --json-output
    """
    config = DefaultAppConfig()
    if env_file:
        config.load_env_file(env_file, fallback=None)

    modules = resolve_modules(load_target(target), config)
    registry = ModuleRegistry(config)

    try:
        registry.register_modules(modules)
        if run_init:
            registry.initialize_all()
        routes = registry.get_all_routes()
    except ModularError as e:
        click.secho(e.format_error(), fg="red", err=True)
        sys.exit(1)

    report = registry.inspect()
    report["routes"] = [describe_route(route) for route in routes]
    if run_init:
        report["services"] = registry.container.describe()

    if json_output:
        click.echo(json.dumps(report, indent=2, default=str))
        return

    click.secho(f"Modules ({report['module_count']}):", fg="cyan", bold=True)
    for entry in report["modules"]:
        click.echo(f"  {entry['order'] + 1}. {entry['name']}  [{entry['type']}]")

    click.secho(f"Routes ({len(routes)}):", fg="cyan", bold=True)
    for route in routes:
        _echo_route(describe_route(route), indent=2)

    if run_init:
        click.secho(f"Services ({len(report['services'])}):", fg="cyan", bold=True)
        for service in report["services"]:
            click.echo(f"  {service['token']} ({service['mode']})")


def _echo_route(info: dict, indent: int) -> None:
    label = info.get("path") or info.get("repr")
    name = info.get("name")
    click.echo(" " * indent + (f"{label}  ({name})" if name else str(label)))
    for child in info.get("children", ()):
        _echo_route(child, indent + 2)


def main():
    cli()


if __name__ == "__main__":
    main()
