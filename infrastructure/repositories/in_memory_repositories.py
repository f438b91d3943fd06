"""In-Memory Repository Implementations"""
import asyncio
from typing import Optional, List, Dict, Sequence, Tuple
from uuid import UUID
from datetime import date

from domain.repositories import HotelRepository, InventoryStore
from domain.entities import Hotel, Reservation, RoomType
from domain.enums import BookingSortField, BookingStatus, SortOrder
from domain.errors import NotFoundError, StoreConflictError
from domain.value_objects import BookingFilters


class InMemoryInventoryStore(InventoryStore):
    """In-memory implementation of InventoryStore.

    Records are copied on the way in and out so callers never share state
    with the store. A non-zero latency yields to the event loop at every
    call, which lets concurrent callers interleave as they would against a
    remote database.
    """

    def __init__(self, latency: float = 0.0):
        self.latency = latency
        self._hotels: Dict[str, Hotel] = {}
        self._room_types: Dict[str, RoomType] = {}
        self._reservations: Dict[UUID, Reservation] = {}

    async def _pause(self) -> None:
        if self.latency:
            await asyncio.sleep(self.latency)

    # Catalog seeding
    def add_hotel(self, hotel: Hotel) -> Hotel:
        self._hotels[hotel.hotel_id] = hotel.model_copy(deep=True)
        return hotel

    def add_room_type(self, room_type: RoomType) -> RoomType:
        self._room_types[room_type.room_type_id] = room_type.model_copy(deep=True)
        return room_type

    def all_hotels(self) -> List[Hotel]:
        return [h.model_copy(deep=True) for h in self._hotels.values()]

    async def get_room_type(self, room_type_id: str) -> Optional[RoomType]:
        """Find room type by ID"""
        await self._pause()
        room_type = self._room_types.get(room_type_id)
        return room_type.model_copy(deep=True) if room_type else None

    async def get_hotel(self, hotel_id: str) -> Optional[Hotel]:
        """Find hotel by ID"""
        await self._pause()
        hotel = self._hotels.get(hotel_id)
        return hotel.model_copy(deep=True) if hotel else None

    async def list_room_types(self, hotel_id: str) -> List[RoomType]:
        """Find all room types of a hotel"""
        await self._pause()
        return [
            rt.model_copy(deep=True) for rt in self._room_types.values()
            if rt.hotel_id == hotel_id
        ]

    async def find_overlapping_reservations(
        self,
        room_type_id: str,
        check_in: date,
        check_out: date,
        statuses: Sequence[BookingStatus],
    ) -> List[Reservation]:
        """Find reservations overlapping [check_in, check_out)"""
        await self._pause()
        return [
            r.model_copy(deep=True) for r in self._reservations.values()
            if r.room_type_id == room_type_id
            and r.status in statuses
            and r.date_range.overlaps(check_in, check_out)
        ]

    async def insert_reservation(self, reservation: Reservation) -> Reservation:
        """Save a new reservation to memory"""
        await self._pause()
        if reservation.reservation_id in self._reservations:
            raise StoreConflictError(f"Duplicate reservation id {reservation.reservation_id}")
        if any(r.booking_reference == reservation.booking_reference for r in self._reservations.values()):
            raise StoreConflictError(f"Duplicate booking reference {reservation.booking_reference}")
        self._reservations[reservation.reservation_id] = reservation.model_copy(deep=True)
        return reservation.model_copy(deep=True)

    async def update_reservation(self, reservation: Reservation, expected_version: int) -> Reservation:
        """Update reservation if nobody changed it since expected_version"""
        await self._pause()
        stored = self._reservations.get(reservation.reservation_id)
        if stored is None:
            raise NotFoundError.for_resource("Booking")
        if stored.version != expected_version:
            raise StoreConflictError(
                f"Reservation {reservation.reservation_id} is at version {stored.version}, "
                f"expected {expected_version}"
            )
        self._reservations[reservation.reservation_id] = reservation.model_copy(deep=True)
        return reservation.model_copy(deep=True)

    async def get_reservation(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        await self._pause()
        reservation = self._reservations.get(reservation_id)
        return reservation.model_copy(deep=True) if reservation else None

    async def list_reservations(
        self,
        user_id: UUID,
        filters: BookingFilters,
        page: int,
        limit: int,
    ) -> Tuple[List[Reservation], int]:
        """Find one page of a user's reservations"""
        await self._pause()
        matches = [
            r for r in self._reservations.values()
            if r.user_id == user_id and _matches(r, filters)
        ]
        matches.sort(key=_sort_key(filters.sort_by), reverse=filters.sort_order == SortOrder.DESC)

        start = (page - 1) * limit
        return [r.model_copy(deep=True) for r in matches[start:start + limit]], len(matches)


class InMemoryHotelRepository(HotelRepository):
    """Hotel catalog backed by the hotels of an InMemoryInventoryStore"""

    def __init__(self, store: InMemoryInventoryStore):
        self._store = store

    async def find_by_id(self, hotel_id: str) -> Optional[Hotel]:
        return await self._store.get_hotel(hotel_id)

    async def find_by_ids(self, hotel_ids: Sequence[str]) -> List[Hotel]:
        hotels = []
        for hotel_id in hotel_ids:
            hotel = await self._store.get_hotel(hotel_id)
            if hotel is not None:
                hotels.append(hotel)
        return hotels

    async def search(
        self,
        city: Optional[str] = None,
        star_ratings: Optional[Sequence[int]] = None,
        amenities: Optional[Sequence[str]] = None,
    ) -> List[Hotel]:
        results = []
        for hotel in self._store.all_hotels():
            if city and city.lower() not in hotel.location.city.lower():
                continue
            if star_ratings and hotel.star_rating not in star_ratings:
                continue
            if amenities and not set(amenities) & set(hotel.amenities):
                continue
            results.append(hotel)
        return results


def _matches(reservation: Reservation, filters: BookingFilters) -> bool:
    if filters.statuses and reservation.status not in filters.statuses:
        return False
    check_in = reservation.date_range.check_in
    if filters.check_in_from and check_in < filters.check_in_from:
        return False
    if filters.check_in_to and check_in > filters.check_in_to:
        return False
    if filters.booking_date_from and reservation.booking_date < filters.booking_date_from:
        return False
    if filters.booking_date_to and reservation.booking_date > filters.booking_date_to:
        return False
    return True


def _sort_key(sort_by: BookingSortField):
    if sort_by == BookingSortField.BOOKING_DATE:
        return lambda r: r.booking_date
    if sort_by == BookingSortField.TOTAL:
        return lambda r: r.pricing.total
    return lambda r: r.date_range.check_in
