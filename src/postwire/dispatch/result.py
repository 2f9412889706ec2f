"""Result type for two-output methods: Ok(value) or Err(error)."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    def split(self) -> tuple[Any, None]:
        return self.value, None


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E

    def split(self) -> tuple[None, Any]:
        return None, self.error


Result = Union[Ok[T], Err[Any]]
