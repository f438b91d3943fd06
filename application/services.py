"""Application Services - Booking lifecycle use cases"""
import logging
from uuid import UUID
from typing import List, Optional, Tuple

from pydantic import ValidationError

from application.availability import AvailabilityChecker, validate_stay
from application.commands import AvailabilityQuery, BookingPatch, BookingRequest
from application.errors import translate_store_errors
from application.locks import RoomTypeLocks
from domain.entities import Reservation
from domain.enums import BookingStatus
from domain.errors import ConflictError, InvalidArgumentError, NotFoundError, StoreConflictError
from domain.repositories import InventoryStore
from domain.value_objects import AvailabilityResult, BookingFilters, DateRange, PageMeta

logger = logging.getLogger("hotel_booking.bookings")

MAX_PAGE_SIZE = 100


class BookingService:
    """Owns the booking state machine and the check-then-reserve critical section"""

    def __init__(
        self,
        store: InventoryStore,
        checker: AvailabilityChecker,
        locks: Optional[RoomTypeLocks] = None,
        max_insert_attempts: int = 2,
    ):
        self.store = store
        self.checker = checker
        self.locks = locks or RoomTypeLocks()
        self.max_insert_attempts = max_insert_attempts

    async def check_availability(self, query: AvailabilityQuery) -> AvailabilityResult:
        """Check room availability"""
        return await self.checker.check_availability(
            room_type_id=query.room_type_id,
            check_in=query.check_in_date,
            check_out=query.check_out_date,
            rooms_requested=query.rooms_requested,
            hotel_id=query.hotel_id,
        )

    async def create_booking(self, user_id: UUID, request: BookingRequest) -> Reservation:
        """Reserve rooms and persist a pending booking with a locked-in price"""
        validate_stay(request.check_in_date, request.check_out_date, request.rooms_booked)
        if not request.guest_info:
            raise InvalidArgumentError("At least 1 guest must be listed")

        logger.info(
            "Creating booking: user=%s hotel=%s room_type=%s rooms=%d",
            user_id, request.hotel_id, request.room_type_id, request.rooms_booked,
        )

        with translate_store_errors("create booking", user_id=str(user_id), room_type_id=request.room_type_id):
            for attempt in range(1, self.max_insert_attempts + 1):
                try:
                    reservation = await self._reserve(user_id, request)
                except StoreConflictError as e:
                    if attempt >= self.max_insert_attempts:
                        logger.warning(
                            "Booking insert conflicted %d times: user=%s room_type=%s",
                            attempt, user_id, request.room_type_id,
                        )
                        raise ConflictError(
                            "Requested rooms could not be reserved, please try again"
                        ) from e
                    logger.info("Booking insert conflicted, retrying: room_type=%s", request.room_type_id)
                    continue

                logger.info(
                    "Booking created successfully: booking=%s reference=%s",
                    reservation.reservation_id, reservation.booking_reference,
                )
                return reservation

    async def _reserve(self, user_id: UUID, request: BookingRequest) -> Reservation:
        async with self.locks.hold(request.room_type_id):
            room_type = await self.checker.load_room_type(request.room_type_id, request.hotel_id)
            availability = await self.checker.evaluate(
                room_type, request.check_in_date, request.check_out_date, request.rooms_booked
            )
            if not availability.is_available:
                raise ConflictError("Requested rooms are not available for the selected dates")

            try:
                reservation = Reservation.create(
                    user_id=user_id,
                    hotel_id=room_type.hotel_id,
                    room_type_id=room_type.room_type_id,
                    date_range=DateRange(check_in=request.check_in_date, check_out=request.check_out_date),
                    guests=request.guests,
                    guest_info=request.guest_info,
                    rooms_booked=request.rooms_booked,
                    pricing=availability.pricing,
                    payment_method=request.payment_method,
                    special_requests=request.special_requests,
                )
            except ValidationError as e:
                raise InvalidArgumentError(str(e)) from e

            return await self.store.insert_reservation(reservation)

    async def get_booking(self, booking_id: UUID, user_id: UUID) -> Reservation:
        """Get a booking owned by user_id"""
        with translate_store_errors("retrieve booking", booking_id=str(booking_id), user_id=str(user_id)):
            return await self._load_owned(booking_id, user_id)

    async def list_user_bookings(
        self,
        user_id: UUID,
        filters: Optional[BookingFilters] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Reservation], PageMeta]:
        """Filtered, sorted page of a user's bookings"""
        if page < 1:
            raise InvalidArgumentError("Page must be at least 1")
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise InvalidArgumentError(f"Limit must be between 1 and {MAX_PAGE_SIZE}")
        filters = filters or BookingFilters()

        with translate_store_errors("retrieve bookings", user_id=str(user_id)):
            bookings, total = await self.store.list_reservations(user_id, filters, page, limit)

        logger.info("User bookings retrieved: user=%s count=%d total=%d", user_id, len(bookings), total)
        return bookings, PageMeta.build(total, page, limit)

    async def update_booking(self, booking_id: UUID, user_id: UUID, patch: BookingPatch) -> Reservation:
        """Apply a patch to a non-terminal booking"""
        with translate_store_errors("update booking", booking_id=str(booking_id), user_id=str(user_id)):
            reservation = await self._load_owned(booking_id, user_id)

            expected_version = patch.expected_version
            if expected_version is None:
                expected_version = reservation.version
            elif expected_version != reservation.version:
                raise ConflictError("Booking was modified by another request")

            reservation.apply_changes(
                status=patch.status,
                guest_info=patch.guest_info,
                special_requests=patch.special_requests,
                payment_status=patch.payment_status,
                payment_transaction_id=patch.payment_transaction_id,
                cancellation_reason=patch.cancellation_reason,
            )
            updated = await self.store.update_reservation(reservation, expected_version)

        logger.info(
            "Booking updated successfully: booking=%s user=%s status=%s",
            booking_id, user_id, updated.status.value,
        )
        return updated

    async def cancel_booking(self, booking_id: UUID, user_id: UUID, reason: Optional[str] = None) -> Reservation:
        """Cancel a booking, recording the reason"""
        return await self.update_booking(
            booking_id,
            user_id,
            BookingPatch(status=BookingStatus.CANCELLED, cancellation_reason=reason),
        )

    async def _load_owned(self, booking_id: UUID, user_id: UUID) -> Reservation:
        reservation = await self.store.get_reservation(booking_id)
        # Foreign bookings look exactly like missing ones
        if reservation is None or reservation.user_id != user_id:
            raise NotFoundError.for_resource("Booking")
        return reservation
