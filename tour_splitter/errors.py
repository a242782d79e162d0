"""
Error Kinds & Tagged Results

Every ledger operation returns a Result instead of raising. A failed Result
carries one of the stable numeric error kinds below; callers inspect it and
decide for themselves whether to retry with different arguments.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Optional


class ErrorKind(IntEnum):
    """Numeric error kinds, stable across releases"""
    INVALID_TOTAL = 1000        # reserved, never raised
    INVALID_PARTICIPANT = 1001
    INVALID_ROLE = 1002         # reserved, never raised
    TOUR_NOT_FOUND = 1003
    TOUR_CLOSED = 1004
    INVALID_AMOUNT = 1005
    ALREADY_REGISTERED = 1006
    AUTHORITY_NOT_SET = 1007
    NOT_AUTHORIZED = 1008
    INVALID_WEIGHT = 1009


class SplitError(Exception):
    """Raised by Result.unwrap() when the result is a failure"""

    def __init__(self, kind: ErrorKind, message: Optional[str] = None):
        self.kind = kind
        super().__init__(message or f"{kind.name} ({int(kind)})")


@dataclass(frozen=True)
class Result:
    """
    Outcome of a ledger operation.

    ok=True  -> value is the operation's typed return value
    ok=False -> value is the ErrorKind explaining the rejection
    """
    ok: bool
    value: Any

    @classmethod
    def success(cls, value: Any) -> 'Result':
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, kind: ErrorKind) -> 'Result':
        return cls(ok=False, value=ErrorKind(kind))

    @property
    def error(self) -> Optional[ErrorKind]:
        """The error kind for a failure, None for a success"""
        if self.ok:
            return None
        return self.value

    def unwrap(self) -> Any:
        """Return the success value or raise SplitError"""
        if not self.ok:
            raise SplitError(self.value)
        return self.value

    def to_dict(self) -> dict:
        """Serialize with the numeric code for failures"""
        if self.ok:
            return {"ok": True, "value": self.value}
        return {"ok": False, "value": int(self.value), "error": self.value.name}
