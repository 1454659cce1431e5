"""
Ok/Err result values for document loading.

Reading user-supplied files fails routinely (missing path, bad JSON, wrong
shape), so loaders return ``Ok(value)`` or ``Err(error)`` and let the
caller decide whether to print, exit or fall back. Steps are chained with
``and_then`` so the first failure short-circuits the rest.
"""

from dataclasses import dataclass
from typing import Callable, Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, func: Callable[[T], U]) -> "Ok[U]":
        return Ok(func(self.value))

    def and_then(self, func: Callable[[T], "Result[U, E]"]) -> "Result[U, E]":
        return func(self.value)


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self):
        raise ValueError(f"unwrap() on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def map(self, func: Callable) -> "Err[E]":
        return self

    def and_then(self, func: Callable) -> "Err[E]":
        return self


Result = Union[Ok[T], Err[E]]
