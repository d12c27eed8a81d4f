"""
Modulary DI - the shared service container modules register into.

Supports eager, lazy-singleton and factory registrations keyed by type.
"""

from .container import Container, Token, token_to_key
from .providers import FactoryProvider, ProviderMeta, RegistrationMode, ValueProvider
from .errors import (
    DIError,
    ProviderNotFoundError,
    DuplicateProviderError,
    DependencyCycleError,
)

__all__ = [
    # Container
    "Container",
    "Token",
    "token_to_key",

    # Providers
    "RegistrationMode",
    "ProviderMeta",
    "ValueProvider",
    "FactoryProvider",

    # Errors
    "DIError",
    "ProviderNotFoundError",
    "DuplicateProviderError",
    "DependencyCycleError",
]
