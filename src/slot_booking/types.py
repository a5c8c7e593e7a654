"""Shared types: Booking, BookingRequest, AllocationFailure and errors."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

_COUNTRY_SPLIT = re.compile(r"[_,\s]+")


def split_countries(raw: str | None) -> list[str]:
    """Split a country string on commas, underscores and whitespace.

    Slashes are kept inside tokens ("KR/JP" stays one token).
    """
    if not raw:
        return []
    return [t for t in _COUNTRY_SPLIT.split(raw.strip()) if t]


@dataclass(frozen=True)
class Booking:
    """A committed reservation of one concrete slot for one day.

    Invariant (enforced by the store): at most one Booking per
    (date, slot_id).
    """

    date: date
    slot_id: str
    target_countries: str | None = None
    guaranteed_exposure: int | None = None
    advertiser_name: str | None = None

    def __post_init__(self) -> None:
        # Keys must hash like plain dates and trimmed ids
        if isinstance(self.date, datetime):
            object.__setattr__(self, "date", self.date.date())
        if isinstance(self.slot_id, str):
            object.__setattr__(self, "slot_id", self.slot_id.strip())

    @property
    def key(self) -> tuple[date, str]:
        """Uniqueness key in the persisted store."""
        return (self.date, self.slot_id)

    @property
    def countries(self) -> list[str]:
        return split_countries(self.target_countries)


@dataclass(frozen=True)
class BookingRequest:
    """Transient input to the allocation engine.

    Either pinned to a concrete ``slot_id`` or left to the engine with a
    ``family_key``. Exactly one of the two must be set.
    """

    date: date
    slot_id: str | None = None
    family_key: str | None = None
    target_countries: str | None = None
    guaranteed_exposure: int | None = None
    advertiser_name: str | None = None

    def __post_init__(self) -> None:
        errors: list[str] = []
        if not isinstance(self.date, date):
            errors.append(f"date must be a date, got {self.date!r}")
        if (self.slot_id is None) == (self.family_key is None):
            errors.append("exactly one of slot_id / family_key is required")
        for name in ("slot_id", "family_key"):
            value = getattr(self, name)
            if value is not None and not value.strip():
                errors.append(f"{name} must not be blank")
        if self.guaranteed_exposure is not None and self.guaranteed_exposure < 0:
            errors.append(
                f"guaranteed_exposure must be >= 0, got {self.guaranteed_exposure}"
            )
        if errors:
            raise ValidationError(errors)

        if isinstance(self.date, datetime):
            object.__setattr__(self, "date", self.date.date())
        for name in ("slot_id", "family_key"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, value.strip())

    @property
    def is_pinned(self) -> bool:
        return self.slot_id is not None

    def resolved(self, slot_id: str) -> Booking:
        """The Booking this request becomes once assigned to ``slot_id``."""
        return Booking(
            date=self.date,
            slot_id=slot_id,
            target_countries=self.target_countries,
            guaranteed_exposure=self.guaranteed_exposure,
            advertiser_name=self.advertiser_name,
        )


class FailureReason(Enum):
    """Why one request could not be allocated."""

    ALREADY_OCCUPIED = "already-occupied"
    NO_CAPACITY_LIST = "no-capacity-list-available"
    CAPACITY_EXCEEDED = "capacity-exceeded"

    @property
    def message(self) -> str:
        return _REASON_MESSAGES[self]


_REASON_MESSAGES = {
    FailureReason.ALREADY_OCCUPIED: "slot is already occupied on this date",
    FailureReason.NO_CAPACITY_LIST: "no slot list is registered for this family",
    FailureReason.CAPACITY_EXCEEDED: "every slot in this family is taken",
}


@dataclass(frozen=True)
class AllocationFailure:
    """Structured record of one rejected request."""

    date: date
    family_key: str
    reason: FailureReason
    capacity: int | None = None
    occupied: int | None = None
    request_index: int | None = None

    def describe(self) -> str:
        text = f"{self.date.isoformat()} {self.family_key}: {self.reason.message}"
        if self.capacity is not None:
            text += f" ({self.occupied}/{self.capacity} taken)"
        return text


@dataclass(frozen=True)
class AllocationResult:
    """Either every request resolved to a Booking, or a list of failures.

    Invariants:
        - bookings and failures are never both non-empty
        - bookings preserve the order of the input requests
    """

    bookings: tuple[Booking, ...] = ()
    failures: tuple[AllocationFailure, ...] = ()

    def __post_init__(self) -> None:
        if self.bookings and self.failures:
            raise ValueError("AllocationResult cannot carry bookings and failures")

    @property
    def ok(self) -> bool:
        return not self.failures

    def unwrap(self) -> list[Booking]:
        """Return the bookings. Raises AllocationError if allocation failed."""
        if self.failures:
            raise AllocationError(list(self.failures))
        return list(self.bookings)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
class BookingError(Exception):
    """Base class for booking errors."""


class AllocationError(BookingError):
    """Raised when a batch could not be allocated. Nothing was committed."""

    def __init__(self, failures: list[AllocationFailure]) -> None:
        self.failures = failures
        reasons = sorted({f.reason.value for f in failures})
        super().__init__(
            f"Allocation failed: {len(failures)} request(s) rejected "
            f"(reasons: {', '.join(reasons)})"
        )


class BookingConflictError(BookingError):
    """Raised by a store when a commit hits an existing (date, slot_id) row.

    Another writer got there first; the caller may re-read occupancy and
    retry.
    """

    retryable = True

    def __init__(self, conflicts: list[tuple[date, str]]) -> None:
        self.conflicts = conflicts
        shown = ", ".join(f"{d.isoformat()}/{s}" for d, s in conflicts[:5])
        more = f" (+{len(conflicts) - 5} more)" if len(conflicts) > 5 else ""
        super().__init__(f"Booking conflict on {shown}{more}")


class ValidationError(BookingError, ValueError):
    """Raised when request fields are missing or invalid."""

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors
        super().__init__(
            "Invalid booking request:\n" + "\n".join(f"  - {e}" for e in errors)
        )


class LayoutError(BookingError, ValueError):
    """Raised when a slot layout configuration is invalid."""

    def __init__(self, source: str, errors: list[str]) -> None:
        self.source = source
        self.errors = errors
        super().__init__(
            f"Validation errors in {source}:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


