from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Path, status

from models import (
    ConflictOut,
    CreateReservationIn,
    ReservationChangeOut,
    ReservationOut,
    RoomOut,
    RoomReservationsOut,
)
from services import (
    ConflictError,
    InvalidIntervalError,
    InvalidReservationIdError,
    MalformedTimeError,
    MissingFieldError,
    PastStartError,
    ReservationNotFoundError,
    ReservationService,
    RoomNotFoundError,
    TooLongError,
)


def create_router(service: ReservationService) -> APIRouter:
    router = APIRouter()

    @router.get("/rooms", response_model=List[RoomOut])
    def list_rooms() -> List[RoomOut]:
        return [
            RoomOut(id=room.id, name=room.name, reservation_count=len(room.reservations))
            for room in service.list_rooms()
        ]

    @router.get("/rooms/{room_id}/reservations", response_model=RoomReservationsOut)
    def list_reservations(room_id: str = Path(..., min_length=1)) -> RoomReservationsOut:
        try:
            room, reservations = service.list_reservations(room_id)
        except RoomNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)

        return RoomReservationsOut(
            room_id=room.id,
            reservations=[ReservationOut.from_entity(r) for r in reservations],
        )

    @router.post(
        "/rooms/{room_id}/reservations",
        response_model=ReservationChangeOut,
        status_code=status.HTTP_201_CREATED,
    )
    def create_reservation(
        payload: Optional[CreateReservationIn] = None,
        room_id: str = Path(..., min_length=1),
    ) -> ReservationChangeOut:
        payload = payload or CreateReservationIn()
        try:
            room, reservation = service.create_reservation(room_id, payload.start, payload.end)
        except RoomNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
        except (
            MissingFieldError,
            MalformedTimeError,
            InvalidIntervalError,
            PastStartError,
            TooLongError,
        ) as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
        except ConflictError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={
                    "message": exc.message,
                    "conflict": ConflictOut(
                        id=exc.conflict.id,
                        start=exc.conflict.start_display,
                        end=exc.conflict.end_display,
                    ).model_dump(),
                },
            )

        return ReservationChangeOut(
            message="Reservation created",
            room_id=room.id,
            reservation=ReservationOut.from_entity(reservation),
        )

    @router.delete(
        "/rooms/{room_id}/reservations/{reservation_id}",
        response_model=ReservationChangeOut,
    )
    def delete_reservation(
        room_id: str = Path(..., min_length=1),
        reservation_id: str = Path(..., min_length=1),
    ) -> ReservationChangeOut:
        try:
            room, deleted = service.delete_reservation(room_id, reservation_id)
        except (RoomNotFoundError, ReservationNotFoundError) as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.message)
        except InvalidReservationIdError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)

        return ReservationChangeOut(
            message="Reservation deleted",
            room_id=room.id,
            reservation=ReservationOut.from_entity(deleted),
        )

    return router
