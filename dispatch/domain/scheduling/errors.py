"""Scheduling outcomes - typed error kinds and the Result wrapper returned by services"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class ErrorKind(str, Enum):
    MISSING_FIELD = "MISSING_FIELD"
    NOT_FOUND = "NOT_FOUND"
    INACTIVE = "INACTIVE"
    OUTSIDE_WORKING_HOURS = "OUTSIDE_WORKING_HOURS"
    DOUBLE_BOOKED = "DOUBLE_BOOKED"
    PAST_DATE_REQUESTED = "PAST_DATE_REQUESTED"
    INVALID_TIME_FORMAT = "INVALID_TIME_FORMAT"
    PERSISTENCE_FAILURE = "PERSISTENCE_FAILURE"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    SLOT_STILL_ACTIVE = "SLOT_STILL_ACTIVE"
    SLOT_IN_USE = "SLOT_IN_USE"
    CONFLICT = "CONFLICT"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# HTTP status for each kind when surfaced through the API
HTTP_STATUS_BY_KIND = {
    ErrorKind.MISSING_FIELD: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INACTIVE: 400,
    ErrorKind.OUTSIDE_WORKING_HOURS: 409,
    ErrorKind.DOUBLE_BOOKED: 409,
    ErrorKind.PAST_DATE_REQUESTED: 400,
    ErrorKind.INVALID_TIME_FORMAT: 400,
    ErrorKind.PERSISTENCE_FAILURE: 500,
    ErrorKind.INVALID_STATUS_TRANSITION: 400,
    ErrorKind.SLOT_STILL_ACTIVE: 409,
    ErrorKind.SLOT_IN_USE: 409,
    ErrorKind.CONFLICT: 409,
    ErrorKind.VALIDATION_ERROR: 400,
}


@dataclass(frozen=True)
class SchedulingError:
    """A failed scheduling outcome with enough context to explain it to the caller"""

    kind: ErrorKind
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def http_status(self) -> int:
        return HTTP_STATUS_BY_KIND[self.kind]

    def to_payload(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.kind.value, **self.details}

    @classmethod
    def missing_fields(cls, fields: list[str]) -> "SchedulingError":
        return cls(
            ErrorKind.MISSING_FIELD,
            f"Missing required fields: {', '.join(fields)}",
            {"fields": fields},
        )

    @classmethod
    def not_found(cls, entity: str, entity_id: str) -> "SchedulingError":
        return cls(
            ErrorKind.NOT_FOUND,
            f"{entity} with ID {entity_id} not found",
            {"entity": entity, "id": entity_id},
        )

    @classmethod
    def inactive(cls, entity: str, entity_id: str) -> "SchedulingError":
        return cls(
            ErrorKind.INACTIVE,
            f"{entity} with ID {entity_id} is not active",
            {"entity": entity, "id": entity_id},
        )

    @classmethod
    def past_date(cls, requested) -> "SchedulingError":
        return cls(
            ErrorKind.PAST_DATE_REQUESTED,
            f"Cannot look up availability for past date {requested.isoformat()}",
            {"scheduledDate": requested.isoformat()},
        )


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or a SchedulingError, never both"""

    value: Optional[T] = None
    error: Optional[SchedulingError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: SchedulingError) -> "Result[T]":
        return cls(error=error)
