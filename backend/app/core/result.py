"""Success-or-failure value for operations whose failure is a normal outcome.

Stock adjustment and invoice creation report "not enough stock" as data, so
callers can compose them without try/except around every step.
"""
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from app.core.exceptions import ClinicError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[ClinicError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ClinicError) -> "Result[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        """Return the value or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value
