from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional, Tuple

from config import Settings, get_settings
from models import (
    Reservation,
    Room,
    now_instant,
    parse_int_id,
    parse_to_instant,
    truncate_to_minute,
)
from repository import InMemoryRoomRepository


logger = logging.getLogger(__name__)


class ReservationError(Exception):
    """Base class for domain/service errors."""

    code = "reservation_error"
    message = "Reservation request failed."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)
        self.message = message or self.message


class RoomNotFoundError(ReservationError):
    code = "room_not_found"
    message = "Room not found."


class MissingFieldError(ReservationError):
    code = "missing_field"
    message = 'Request body must include "start" and "end" RFC 3339 strings.'


class MalformedTimeError(ReservationError):
    code = "malformed_time"
    message = 'Invalid times: "start" and "end" must be valid RFC 3339 datetimes.'


class InvalidIntervalError(ReservationError):
    code = "invalid_interval"
    message = "Invalid interval: end must be after start."


class PastStartError(ReservationError):
    code = "past_start"
    message = "Reservation start time is in the past."


class TooLongError(ReservationError):
    code = "too_long"
    message = "Reservation exceeds the maximum duration."


class ConflictError(ReservationError):
    code = "conflict"
    message = "Time conflict with existing reservation."

    def __init__(self, conflict: Reservation) -> None:
        super().__init__()
        self.conflict = conflict


class ReservationNotFoundError(ReservationError):
    code = "reservation_not_found"
    message = "Reservation not found."


class InvalidReservationIdError(ReservationError):
    code = "invalid_reservation_id"
    message = "Invalid reservation id."


# -----------------------------
# Interval rules
# -----------------------------
def is_well_formed(start: Optional[int], end: Optional[int]) -> bool:
    return start is not None and end is not None and end > start


def is_future(start: int, now: int) -> bool:
    # Starting in the current minute is allowed
    return start >= truncate_to_minute(now)


def is_within_max_duration(start: int, end: int, max_duration_ms: int) -> bool:
    return end - start <= max_duration_ms


def validate_interval(
    raw_start: Optional[int],
    raw_end: Optional[int],
    now: int,
    max_duration_ms: int,
) -> Tuple[int, int]:
    """
    Apply the interval rules in order and return the minute-truncated pair.

    Well-formedness is checked twice: truncation can collapse an interval that
    lies inside a single minute (e.g. :30 to :45 seconds) to zero length.
    """
    if not is_well_formed(raw_start, raw_end):
        raise InvalidIntervalError()

    start = truncate_to_minute(raw_start)
    end = truncate_to_minute(raw_end)

    if not is_well_formed(start, end):
        raise InvalidIntervalError(
            "Invalid interval after normalization: end must be after start (at minute precision)."
        )

    if not is_future(start, now):
        raise PastStartError()

    if not is_within_max_duration(start, end, max_duration_ms):
        raise TooLongError(
            f"Reservation exceeds the maximum duration of {max_duration_ms // 60_000} minutes."
        )

    return start, end


# -----------------------------
# Service layer (business rules)
# -----------------------------
class ReservationService:
    def __init__(
        self,
        repo: InMemoryRoomRepository,
        settings: Optional[Settings] = None,
        clock: Callable[[], int] = now_instant,
    ) -> None:
        self._repo = repo
        self._settings = settings or get_settings()
        self._clock = clock

    def _get_room(self, room_id: Any) -> Room:
        room = self._repo.find_room(room_id)
        if room is None:
            raise RoomNotFoundError()
        return room

    def create_reservation(self, room_id: Any, start: Any, end: Any) -> Tuple[Room, Reservation]:
        try:
            room = self._get_room(room_id)

            if not start or not end:
                raise MissingFieldError()

            raw_start = parse_to_instant(start)
            raw_end = parse_to_instant(end)
            if raw_start is None or raw_end is None:
                raise MalformedTimeError()

            now = self._clock()
            start_instant, end_instant = validate_interval(
                raw_start, raw_end, now, self._settings.max_duration_ms
            )

            created, conflict = self._repo.insert_if_no_conflict(
                room, start_instant, end_instant, now=now
            )
            if conflict is not None:
                raise ConflictError(conflict)
        except ReservationError as exc:
            logger.info("Rejected reservation for room %r: %s", room_id, exc.code)
            raise

        logger.info(
            "Created reservation %d in room %d (%s - %s)",
            created.id,
            room.id,
            created.start_display,
            created.end_display,
        )
        return room, created

    def list_reservations(self, room_id: Any) -> Tuple[Room, List[Reservation]]:
        room = self._get_room(room_id)
        return room, self._repo.list(room)

    def delete_reservation(self, room_id: Any, reservation_id: Any) -> Tuple[Room, Reservation]:
        room = self._get_room(room_id)

        parsed_id = parse_int_id(reservation_id)
        if parsed_id is None:
            raise InvalidReservationIdError()

        # Cancellation is a hard delete.
        deleted = self._repo.remove(room, parsed_id)
        if deleted is None:
            raise ReservationNotFoundError()

        logger.info("Deleted reservation %d from room %d", deleted.id, room.id)
        return room, deleted

    def list_rooms(self) -> List[Room]:
        return self._repo.rooms()

    def reset(self) -> None:
        self._repo.reset()
        logger.info("Reservation store reset")
