"""Explicit success/failure values returned by the workflow services."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Ok:
    value: Any

    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    error: Exception

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def kind(self) -> str:
        return type(self.error).__name__


Result = Ok | Err
