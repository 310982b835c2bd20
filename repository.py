from __future__ import annotations

from threading import RLock
from typing import Any, Dict, List, Optional, Tuple

from models import Reservation, Room, create_reservation, find_conflict, parse_int_id


DEFAULT_ROOM_COUNT = 10


class InMemoryRoomRepository:
    def __init__(self, room_count: int = DEFAULT_ROOM_COUNT) -> None:
        self._room_count = room_count
        self._rooms: Dict[int, Room] = {}
        self._next_id = 1
        self._lock = RLock()
        self.initialize()

    def initialize(self, count: Optional[int] = None) -> None:
        """Recreate `count` empty rooms with ids 1..count and restart the id counter."""
        if count is None:
            count = self._room_count
        with self._lock:
            self._rooms = {
                room_id: Room(id=room_id, name=f"Room {room_id}")
                for room_id in range(1, count + 1)
            }
            self._next_id = 1

    def reset(self) -> None:
        """Drop all reservations. For testing only."""
        self.initialize()

    def rooms(self) -> List[Room]:
        with self._lock:
            return [self._rooms[room_id] for room_id in sorted(self._rooms)]

    def find_room(self, room_id: Any) -> Optional[Room]:
        parsed = parse_int_id(room_id)
        if parsed is None:
            return None
        with self._lock:
            return self._rooms.get(parsed)

    def next_reservation_id(self) -> int:
        with self._lock:
            reservation_id = self._next_id
            self._next_id += 1
            return reservation_id

    def insert(self, room: Room, reservation: Reservation) -> None:
        # The caller has already checked for conflicts.
        with self._lock:
            room.reservations.append(reservation)

    def insert_if_no_conflict(
        self,
        room: Room,
        start_instant: int,
        end_instant: int,
        now: Optional[int] = None,
    ) -> Tuple[Optional[Reservation], Optional[Reservation]]:
        """
        Atomically checks overlap and inserts a new reservation if possible.
        Returns (created, None) on success or (None, conflicting) otherwise.
        """
        with self._lock:
            conflict = find_conflict(start_instant, end_instant, room.reservations)
            if conflict is not None:
                return None, conflict

            # The id is consumed only once the record exists
            reservation = create_reservation(
                self._next_id,
                start_instant,
                end_instant,
                now=now,
            )
            self.next_reservation_id()
            self.insert(room, reservation)
            return reservation, None

    def remove(self, room: Room, reservation_id: int) -> Optional[Reservation]:
        with self._lock:
            for index, reservation in enumerate(room.reservations):
                if reservation.id == reservation_id:
                    return room.reservations.pop(index)
            return None

    def list(self, room: Room) -> List[Reservation]:
        with self._lock:
            return sorted(room.reservations, key=lambda r: r.start_instant)
