"""Tagged results returned by every service operation.

Pages must be able to tell "no data" apart from "you are not logged in",
"that input was invalid" and "the database failed", so services never
collapse errors into empty lists or zero totals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class ResultStatus(str, Enum):
    OK = "ok"
    UNAUTHORIZED = "unauthorized"
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"
    STORE_ERROR = "store_error"


class ResultError(Exception):
    """Raised by :meth:`Result.unwrap` on a non-OK result."""

    def __init__(self, status: ResultStatus, message: str):
        super().__init__(f"{status.value}: {message}")
        self.status = status
        self.message = message


@dataclass(frozen=True)
class Result(Generic[T]):
    status: ResultStatus
    data: Optional[T] = None
    message: str = ""
    errors: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def ok(cls, data: Any = None, message: str = "") -> "Result":
        return cls(ResultStatus.OK, data, message)

    @classmethod
    def unauthorized(cls, message: str = "Authentication Error: Please log in.", data: Any = None) -> "Result":
        return cls(ResultStatus.UNAUTHORIZED, data, message)

    @classmethod
    def invalid(
        cls,
        message: str,
        errors: Optional[Dict[str, List[str]]] = None,
        data: Any = None,
    ) -> "Result":
        return cls(ResultStatus.INVALID_INPUT, data, message, dict(errors or {}))

    @classmethod
    def not_found(cls, message: str = "Not found or access denied.") -> "Result":
        return cls(ResultStatus.NOT_FOUND, None, message)

    @classmethod
    def store_error(cls, message: str) -> "Result":
        return cls(ResultStatus.STORE_ERROR, None, message)

    @property
    def is_ok(self) -> bool:
        return self.status == ResultStatus.OK

    def unwrap(self) -> T:
        if not self.is_ok:
            raise ResultError(self.status, self.message)
        return self.data  # type: ignore[return-value]
