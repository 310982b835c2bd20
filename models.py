from __future__ import annotations

import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field


MINUTE_MS = 60_000

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MS = timedelta(milliseconds=1)


# YYYY-MM-DDTHH:MM:SS[.frac](Z|+HH:MM|-HH:MM)
_RFC3339 = re.compile(
    r"(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})",
    re.ASCII,
)


# -----------------------------
# Shared time helpers
# -----------------------------
def parse_to_instant(text: Any) -> Optional[int]:
    """
    Parse an RFC 3339 timestamp into milliseconds since the Unix epoch.
    Returns None when the value is not a string, is not an RFC 3339 date-time,
    or falls outside the range a UTC datetime can represent.
    """
    if not isinstance(text, str):
        return None

    match = _RFC3339.fullmatch(text.strip())
    if match is None:
        return None

    date_part, time_part, fraction, offset = match.groups()
    if offset in ("Z", "z"):
        offset = "+00:00"
    s = f"{date_part}T{time_part}"
    if fraction:
        # datetime keeps microseconds only
        s += "." + fraction[:6].ljust(6, "0")
    s += offset

    try:
        dt = datetime.fromisoformat(s).astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None
    return (dt - EPOCH) // _ONE_MS


def truncate_to_minute(instant: int) -> int:
    return instant - instant % MINUTE_MS


def instant_to_display(instant: int) -> str:
    # Always UTC with millisecond precision, e.g. 2030-01-01T10:00:00.000Z
    dt = EPOCH + timedelta(milliseconds=instant)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_instant() -> int:
    return time.time_ns() // 1_000_000


def intervals_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    """
    Half-open interval overlap: [start, end)
    Overlap iff a_start < b_end AND b_start < a_end.
    Back-to-back is allowed (end == other.start is NOT overlap).
    """
    return a_start < b_end and b_start < a_end


def parse_int_id(value: Any) -> Optional[int]:
    """Return value as an int id, or None if it is not an integer."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


# -----------------------------
# Domain model
# -----------------------------
@dataclass(frozen=True)
class Reservation:
    id: int
    start_instant: int  # ms since epoch, minute aligned
    end_instant: int
    start_display: str
    end_display: str
    created_at: str


@dataclass
class Room:
    id: int
    name: str
    reservations: List[Reservation] = field(default_factory=list)


def create_reservation(
    reservation_id: int,
    start_instant: int,
    end_instant: int,
    now: Optional[int] = None,
) -> Reservation:
    # Callers validate the interval first; nothing is checked here.
    created = now_instant() if now is None else now
    return Reservation(
        id=reservation_id,
        start_instant=start_instant,
        end_instant=end_instant,
        start_display=instant_to_display(start_instant),
        end_display=instant_to_display(end_instant),
        created_at=instant_to_display(created),
    )


def find_conflict(
    start_instant: int,
    end_instant: int,
    existing: Iterable[Reservation],
) -> Optional[Reservation]:
    """
    Return the first reservation in stored order that overlaps [start, end).
    A candidate can overlap several existing reservations; only the first is reported.
    """
    for reservation in existing:
        if intervals_overlap(
            start_instant,
            end_instant,
            reservation.start_instant,
            reservation.end_instant,
        ):
            return reservation
    return None


# -----------------------------
# API models (transport layer)
# -----------------------------
class CreateReservationIn(BaseModel):
    # Left untyped so the service can tell a missing value from a malformed one.
    start: Optional[Any] = None
    end: Optional[Any] = None


class ReservationOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    start: str  # RFC 3339, UTC with Z
    end: str
    created_at: str = Field(..., alias="createdAt")

    @classmethod
    def from_entity(cls, reservation: Reservation) -> "ReservationOut":
        return cls(
            id=reservation.id,
            start=reservation.start_display,
            end=reservation.end_display,
            created_at=reservation.created_at,
        )


class ConflictOut(BaseModel):
    id: int
    start: str
    end: str


class RoomReservationsOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    room_id: int = Field(..., alias="roomId")
    reservations: List[ReservationOut]


class ReservationChangeOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    room_id: int = Field(..., alias="roomId")
    reservation: ReservationOut


class RoomOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    name: str
    reservation_count: int = Field(..., alias="reservationCount")
