"""
Result type - explicit success/failure values.

Used by the module manager layer to surface registry errors as values
instead of exceptions. The registry itself always raises.
"""

from typing import Any, Callable, Generic, TypeVar
from dataclasses import dataclass


T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")
R = TypeVar("R")


class UnwrapError(Exception):
    """Raised when a Result is unwrapped as the wrong variant."""

    def __init__(self, message: str, payload: Any = None):
        super().__init__(message)
        self.payload = payload


class Result(Generic[T, E]):
    """
    Either ``Success(value)`` or ``Failure(error)``.

    Only the two subclasses below are valid variants.
    """

    __slots__ = ()

    @staticmethod
    def ok(value: Any) -> "Success":
        """Create a success result."""
        return Success(value)

    @staticmethod
    def err(error: Any) -> "Failure":
        """Create an error result."""
        return Failure(error)

    def is_ok(self) -> bool:
        raise NotImplementedError

    def is_err(self) -> bool:
        return not self.is_ok()

    def unwrap(self) -> T:
        raise NotImplementedError

    def unwrap_err(self) -> E:
        raise NotImplementedError

    def unwrap_or(self, default: T) -> T:
        raise NotImplementedError

    def map(self, fn: Callable[[T], U]) -> "Result[U, E]":
        raise NotImplementedError

    def map_err(self, fn: Callable[[E], F]) -> "Result[T, F]":
        raise NotImplementedError

    def map_or(self, default: U, fn: Callable[[T], U]) -> U:
        raise NotImplementedError

    def flat_map(self, fn: Callable[[T], "Result[U, E]"]) -> "Result[U, E]":
        raise NotImplementedError

    def if_ok(self, fn: Callable[[T], None]) -> "Result[T, E]":
        raise NotImplementedError

    def if_err(self, fn: Callable[[E], None]) -> "Result[T, E]":
        raise NotImplementedError

    def match(
        self,
        *,
        on_ok: Callable[[T], R],
        on_err: Callable[[E], R],
    ) -> R:
        """
        Exhaustive two-branch handling.

        Example:
            >>> Success(2).match(on_ok=lambda v: v * 10, on_err=str)
            20
        """
        raise NotImplementedError


@dataclass(frozen=True)
class Success(Result[T, E]):
    """Success variant."""

    value: T

    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self) -> E:
        raise UnwrapError("Called unwrap_err() on a Success value", self.value)

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> "Result[U, E]":
        return Success(fn(self.value))

    def map_err(self, fn: Callable[[E], F]) -> "Result[T, F]":
        return Success(self.value)

    def map_or(self, default: U, fn: Callable[[T], U]) -> U:
        return fn(self.value)

    def flat_map(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return fn(self.value)

    def if_ok(self, fn: Callable[[T], None]) -> Result[T, E]:
        fn(self.value)
        return self

    def if_err(self, fn: Callable[[E], None]) -> Result[T, E]:
        return self

    def match(self, *, on_ok, on_err):
        return on_ok(self.value)

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True)
class Failure(Result[T, E]):
    """Error variant."""

    error: E

    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> T:
        raise UnwrapError(f"Called unwrap() on a Failure value: {self.error}", self.error)

    def unwrap_err(self) -> E:
        return self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, fn: Callable[[T], U]) -> "Result[U, E]":
        return Failure(self.error)

    def map_err(self, fn: Callable[[E], F]) -> "Result[T, F]":
        return Failure(fn(self.error))

    def map_or(self, default: U, fn: Callable[[T], U]) -> U:
        return default

    def flat_map(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return Failure(self.error)

    def if_ok(self, fn: Callable[[T], None]) -> Result[T, E]:
        return self

    def if_err(self, fn: Callable[[E], None]) -> Result[T, E]:
        fn(self.error)
        return self

    def match(self, *, on_ok, on_err):
        return on_err(self.error)

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Rust-style aliases
Ok = Success
Err = Failure
