"""
Result envelope returned by every ledger operation.

Writes return ``Ok(new_id)`` or ``Err(code)``; lookups return ``Ok(record)`` or
the ``NONE`` sentinel. A lookup miss is an empty result, not an error, so it
never carries an ``ErrorCode``.

Usage:
    from equipment_ledger.result import Err, ErrorCode, Ok

    result = registry.create_requirement(..., caller="ST1...")
    match result:
        case Ok(requirement_id):
            ...
        case Err(ErrorCode.UNAUTHORIZED):
            ...
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar, Union

T = TypeVar("T")


class ErrorCode(str, Enum):
    """Distinct, inspectable failure codes for ledger writes."""

    UNAUTHORIZED = "unauthorized"
    UNKNOWN_REQUIREMENT = "unknown-requirement"
    UNKNOWN_SCHEDULE = "unknown-schedule"
    INVALID_FREQUENCY = "invalid-frequency"


class ResultError(Exception):
    """Raised by ``unwrap()`` when the result holds no value."""

    def __init__(self, message: str, code: ErrorCode | None = None) -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful outcome wrapping a value."""

    value: T

    @property
    def type(self) -> str:
        return "ok"

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def is_none(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: Any) -> T:
        return self.value


@dataclass(frozen=True, slots=True)
class Err:
    """Failed write carrying its error code."""

    code: ErrorCode
    message: str = ""

    @property
    def type(self) -> str:
        return "err"

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def is_none(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise ResultError(f"called unwrap() on Err({self.code.value}): {self.message}", self.code)

    def unwrap_or(self, default: T) -> T:
        return default


@dataclass(frozen=True, slots=True)
class Absent:
    """Lookup miss. Use the module-level ``NONE`` instance."""

    @property
    def type(self) -> str:
        return "none"

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return False

    def is_none(self) -> bool:
        return True

    def unwrap(self) -> Any:
        raise ResultError("called unwrap() on an absent lookup")

    def unwrap_or(self, default: T) -> T:
        return default


NONE = Absent()

Result = Union[Ok[T], Err]
Lookup = Union[Ok[T], Absent]


__all__ = [
    "Absent",
    "Err",
    "ErrorCode",
    "Lookup",
    "NONE",
    "Ok",
    "Result",
    "ResultError",
]
