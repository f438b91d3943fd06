"""Domain Repository Interfaces"""
from abc import ABC, abstractmethod
from typing import Optional, List, Sequence, Tuple
from uuid import UUID
from datetime import date

from domain.entities import Hotel, Reservation, RoomType
from domain.enums import BookingStatus
from domain.value_objects import BookingFilters


class InventoryStore(ABC):
    """Room inventory and reservations; the only shared mutable resource.

    Implementations raise StoreConflictError when their concurrency control
    rejects a write, StoreTimeoutError on client timeouts and StoreError for
    any other transport failure.
    """

    @abstractmethod
    async def get_room_type(self, room_type_id: str) -> Optional[RoomType]:
        """Find room type by ID"""
        pass

    @abstractmethod
    async def get_hotel(self, hotel_id: str) -> Optional[Hotel]:
        """Find owning hotel by ID"""
        pass

    @abstractmethod
    async def list_room_types(self, hotel_id: str) -> List[RoomType]:
        """Find all room types of a hotel"""
        pass

    @abstractmethod
    async def find_overlapping_reservations(
        self,
        room_type_id: str,
        check_in: date,
        check_out: date,
        statuses: Sequence[BookingStatus],
    ) -> List[Reservation]:
        """Reservations of a room type in the given statuses overlapping [check_in, check_out)"""
        pass

    @abstractmethod
    async def insert_reservation(self, reservation: Reservation) -> Reservation:
        """Persist a new reservation"""
        pass

    @abstractmethod
    async def update_reservation(self, reservation: Reservation, expected_version: int) -> Reservation:
        """Replace a reservation if its stored version still equals expected_version"""
        pass

    @abstractmethod
    async def get_reservation(self, reservation_id: UUID) -> Optional[Reservation]:
        """Find reservation by ID"""
        pass

    @abstractmethod
    async def list_reservations(
        self,
        user_id: UUID,
        filters: BookingFilters,
        page: int,
        limit: int,
    ) -> Tuple[List[Reservation], int]:
        """Filtered, sorted page of a user's reservations plus the unpaged total"""
        pass


class HotelRepository(ABC):
    """Hotel catalog used to produce search candidates"""

    @abstractmethod
    async def find_by_id(self, hotel_id: str) -> Optional[Hotel]:
        pass

    @abstractmethod
    async def find_by_ids(self, hotel_ids: Sequence[str]) -> List[Hotel]:
        """Hotels in the order of hotel_ids; unknown IDs are left out"""
        pass

    @abstractmethod
    async def search(
        self,
        city: Optional[str] = None,
        star_ratings: Optional[Sequence[int]] = None,
        amenities: Optional[Sequence[str]] = None,
    ) -> List[Hotel]:
        """Cheap catalog filter: city substring, star ratings, any amenity in common"""
        pass
