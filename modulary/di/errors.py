"""
DI-specific error types with rich diagnostics.
"""

from typing import List, Optional


class DIError(Exception):
    """Base exception for DI errors."""
    pass


class ProviderNotFoundError(DIError):
    """Provider not found for requested token."""

    def __init__(self, token: str, candidates: Optional[List[str]] = None):
        self.token = token
        self.candidates = candidates or []

        msg = f"No provider found for token={token}"
        if self.candidates:
            msg += "\n\nSimilar tokens registered:"
            for candidate in self.candidates:
                msg += f"\n  - {candidate}"
        msg += "\n\nSuggested fixes:"
        msg += f"\n  - Register a provider for {token} in a module's register_dependencies()"
        msg += "\n  - Check that the providing module is registered before initialize_all()"

        super().__init__(msg)


class DuplicateProviderError(DIError):
    """A provider is already registered for the token."""

    def __init__(self, token: str, existing: str):
        self.token = token
        self.existing = existing
        super().__init__(
            f"Provider for {token} already registered: {existing}"
            f"\n\nSuggested fixes:"
            f"\n  - Register each service from exactly one module"
            f"\n  - Pass allow_override=True when replacing a provider on purpose"
        )


class DependencyCycleError(DIError):
    """Circular dependency detected while resolving."""

    def __init__(self, cycle: List[str]):
        self.cycle = cycle

        msg = "Detected dependency cycle:"
        for i, token in enumerate(cycle):
            arrow = " -> " if i < len(cycle) - 1 else ""
            msg += f"\n  {token}{arrow}"

        msg += "\n\nSuggested fixes:"
        msg += "\n  - Resolve one side lazily inside a method instead of the factory"
        msg += "\n  - Extract an interface to decouple directionally"

        super().__init__(msg)
