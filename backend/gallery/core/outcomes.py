# gallery/core/outcomes.py
"""Tagged results passed between the guards, the access controller and the routes.

Guards report every deliberate refusal as a ``GuardResult`` instead of raising,
and the controller turns those into an ``Outcome`` the transport layer can map
onto a status code with a single exhaustive match.
"""
import enum
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class GuardStatus(str, enum.Enum):
    OK = "ok"
    INVALID_INPUT = "invalid_input"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    QUOTA_EXCEEDED = "quota_exceeded"


class Outcome(str, enum.Enum):
    OK = "ok"
    AUTH_FAILED = "auth_failed"
    CONFLICT = "conflict"
    BAD_REQUEST = "bad_request"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    INTERNAL = "internal"


@dataclass(frozen=True)
class GuardResult(Generic[T]):
    status: GuardStatus
    value: Optional[T] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is GuardStatus.OK

    @classmethod
    def success(cls, value: T) -> "GuardResult[T]":
        return cls(GuardStatus.OK, value)

    @classmethod
    def invalid(cls, message: str) -> "GuardResult[T]":
        return cls(GuardStatus.INVALID_INPUT, message=message)

    @classmethod
    def conflict(cls, message: str) -> "GuardResult[T]":
        return cls(GuardStatus.CONFLICT, message=message)

    @classmethod
    def not_found(cls, message: str = "") -> "GuardResult[T]":
        return cls(GuardStatus.NOT_FOUND, message=message)

    @classmethod
    def quota_exceeded(cls, message: str) -> "GuardResult[T]":
        return cls(GuardStatus.QUOTA_EXCEEDED, message=message)


@dataclass(frozen=True)
class ControllerResult(Generic[T]):
    outcome: Outcome
    payload: Optional[T] = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.OK

    @classmethod
    def success(cls, payload: T = None) -> "ControllerResult[T]":
        return cls(Outcome.OK, payload)

    @classmethod
    def failure(cls, outcome: Outcome, message: str) -> "ControllerResult[T]":
        return cls(outcome, message=message)
