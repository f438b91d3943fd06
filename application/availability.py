"""Availability Checker - free inventory of a room type for a date range"""
import logging
from datetime import date
from typing import Optional

from application.errors import translate_store_errors
from application.pricing import PricingPolicy
from domain.entities import RoomType
from domain.enums import ACTIVE_BOOKING_STATUSES
from domain.errors import InvalidArgumentError, NotFoundError
from domain.repositories import InventoryStore
from domain.value_objects import AvailabilityResult

logger = logging.getLogger("hotel_booking.availability")

NO_ROOMS_MESSAGE = "No rooms available for selected dates"


class AvailabilityChecker:
    """Counts rooms committed by pending and confirmed reservations.

    Callers that act on a positive answer must hold the room type's lock
    (see RoomTypeLocks) from the check until the reservation is stored.
    """

    def __init__(self, store: InventoryStore, pricing: PricingPolicy):
        self.store = store
        self.pricing = pricing

    async def check_availability(
        self,
        room_type_id: str,
        check_in: date,
        check_out: date,
        rooms_requested: int,
        hotel_id: Optional[str] = None,
    ) -> AvailabilityResult:
        """Check whether rooms_requested rooms are free for every night of the stay"""
        validate_stay(check_in, check_out, rooms_requested)

        with translate_store_errors("check availability", room_type_id=room_type_id):
            room_type = await self.load_room_type(room_type_id, hotel_id)
            return await self.evaluate(room_type, check_in, check_out, rooms_requested)

    async def load_room_type(self, room_type_id: str, hotel_id: Optional[str] = None) -> RoomType:
        """Fetch a room type and make sure its hotel exists"""
        room_type = await self.store.get_room_type(room_type_id)
        if room_type is None or (hotel_id is not None and room_type.hotel_id != hotel_id):
            raise NotFoundError.for_resource("Room")

        hotel = await self.store.get_hotel(room_type.hotel_id)
        if hotel is None:
            raise NotFoundError.for_resource("Hotel")
        return room_type

    async def evaluate(
        self,
        room_type: RoomType,
        check_in: date,
        check_out: date,
        rooms_requested: int,
    ) -> AvailabilityResult:
        """Availability and price of an already loaded room type"""
        overlapping = await self.store.find_overlapping_reservations(
            room_type.room_type_id, check_in, check_out, ACTIVE_BOOKING_STATUSES
        )
        # Recount with the half-open test; a store may match inclusively at the edges
        committed_rooms = sum(
            r.rooms_booked for r in overlapping
            if r.holds_inventory() and r.date_range.overlaps(check_in, check_out)
        )
        available_rooms = max(0, room_type.total_inventory - committed_rooms)
        is_available = available_rooms >= rooms_requested

        pricing = self.pricing.price(room_type.base_price, check_in, check_out, rooms_requested)

        restrictions = []
        if not is_available:
            if available_rooms == 0:
                restrictions.append(NO_ROOMS_MESSAGE)
            else:
                restrictions.append(
                    f"Only {available_rooms} of {rooms_requested} requested rooms available for selected dates"
                )

        logger.info(
            "Availability check completed: room_type=%s available=%s available_rooms=%d requested=%d",
            room_type.room_type_id, is_available, available_rooms, rooms_requested,
        )

        return AvailabilityResult(
            is_available=is_available,
            available_rooms=available_rooms,
            rate=pricing.room_rate,
            total=pricing.total,
            restrictions=restrictions,
            pricing=pricing,
        )


def validate_stay(check_in: date, check_out: date, rooms_requested: int) -> None:
    """Reject malformed stays before any store access"""
    if check_in is None or check_out is None:
        raise InvalidArgumentError("Check-in and check-out dates are required")
    if check_out <= check_in:
        raise InvalidArgumentError("Check-out date must be after check-in date")
    if rooms_requested is None or rooms_requested < 1:
        raise InvalidArgumentError("At least 1 room must be requested")
