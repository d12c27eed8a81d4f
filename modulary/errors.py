"""
Modulary error types with rich diagnostics.
"""

from typing import Any, Dict, Optional, Type
import traceback


class ModularError(Exception):
    """Base error for all modulary errors."""

    def __init__(
        self,
        message: str,
        *,
        suggestion: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def format_error(self) -> str:
        """Format error with rich diagnostics."""
        lines = [f"{self.__class__.__name__}: {self.message}"]

        if self.details:
            lines.append("\n   Details:")
            for key, value in self.details.items():
                lines.append(f"   - {key}: {value}")

        if self.suggestion:
            lines.append(f"\n   Suggestion: {self.suggestion}")

        return "\n".join(lines)

    def __str__(self) -> str:
        return self.message


class RegistrationConflictError(ModularError):
    """
    Module registration rejected.

    Raised for a duplicate module type, or for any mutation of the
    registry after ``initialize_all()`` has run. Always a programmer error.
    """

    def __init__(
        self,
        message: str,
        *,
        module_type: Optional[Type] = None,
        suggestion: Optional[str] = None,
    ):
        self.module_type = module_type
        details = {}
        if module_type is not None:
            details["module_type"] = _type_name(module_type)
        super().__init__(message, suggestion=suggestion, details=details)


class _ModuleStepError(ModularError):
    """Shared shape for errors wrapping a module-supplied failure."""

    step = "module step"

    def __init__(
        self,
        module_type: Type,
        original_error: BaseException,
        *,
        stack_trace: Optional[str] = None,
        message: Optional[str] = None,
    ):
        self.module_type = module_type
        self.original_error = original_error
        if stack_trace is None:
            stack_trace = "".join(
                traceback.format_exception(
                    type(original_error), original_error, original_error.__traceback__
                )
            )
        self.stack_trace = stack_trace

        if message is None:
            message = f"Failed {self.step} for module {_type_name(module_type)}: {original_error}"

        super().__init__(
            message,
            details={
                "module_type": _type_name(module_type),
                "error_type": type(original_error).__name__,
            },
        )


class ModuleInitializationError(_ModuleStepError):
    """
    A module's ``register_dependencies`` raised during ``initialize_all()``.

    Modules initialized before the failing one are left in the container.
    """

    step = "dependency registration"


class RouteCollectionError(_ModuleStepError):
    """A module's router raised while its routes were being collected."""

    step = "route collection"


class ModuleManagerError(ModularError):
    """
    Error value carried inside a ``Failure`` by the module manager.

    ``cause`` holds the registry error that was converted, if any.
    """

    def __init__(self, message: str, *, cause: Optional[BaseException] = None):
        self.cause = cause
        details = {}
        if cause is not None:
            details["cause"] = type(cause).__name__
        super().__init__(message, details=details)


def _type_name(tp: Type) -> str:
    return getattr(tp, "__qualname__", None) or repr(tp)
