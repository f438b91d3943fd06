"""Domain Entities - Aggregates"""
from pydantic import BaseModel, Field
from uuid import UUID, uuid4
from datetime import datetime, timezone
from typing import Optional, List
from decimal import Decimal
import random
import string
import time

from domain.enums import (
    BookingStatus, PaymentStatus, RoomCategory,
    BOOKING_STATUS_FLOW, PAYMENT_STATUS_FLOW, TERMINAL_BOOKING_STATUSES,
)
from domain.errors import ConflictError, InvalidArgumentError
from domain.value_objects import (
    DateRange, GuestCount, GuestInfo, Location, MaxOccupancy, PricingBreakdown,
)

BOOKING_REFERENCE_PREFIX = "HTL"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Hotel(BaseModel):
    """Hotel Entity"""
    hotel_id: str
    name: str
    description: str = ""
    star_rating: int = Field(ge=1, le=5)
    location: Location
    amenities: List[str] = []
    images: List[str] = []
    check_in_time: str = "15:00"
    check_out_time: str = "11:00"

    class Config:
        from_attributes = True


class RoomType(BaseModel):
    """Bookable room category within a hotel; inventory is fixed per room type"""
    room_type_id: str
    hotel_id: str
    name: str
    room_category: RoomCategory = RoomCategory.STANDARD
    description: str = ""
    base_price: Decimal = Field(gt=0)
    max_occupancy: MaxOccupancy
    total_inventory: int = Field(ge=0)
    amenities: List[str] = []

    class Config:
        from_attributes = True


class Reservation(BaseModel):
    """Reservation Aggregate Root Entity"""

    # Identity
    reservation_id: UUID = Field(default_factory=uuid4)
    booking_reference: str

    # References to other contexts
    user_id: UUID
    hotel_id: str
    room_type_id: str

    # Value Objects
    date_range: DateRange
    guests: GuestCount
    guest_info: List[GuestInfo] = Field(min_length=1)
    rooms_booked: int = Field(ge=1)
    pricing: PricingBreakdown

    # Status
    status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: Optional[str] = None
    payment_transaction_id: Optional[str] = None

    special_requests: Optional[str] = None
    cancellation_reason: Optional[str] = None

    # Metadata
    booking_date: datetime = Field(default_factory=_utcnow)
    last_modified: datetime = Field(default_factory=_utcnow)
    cancellation_date: Optional[datetime] = None
    version: int = 1

    class Config:
        from_attributes = True

    # ==================== FACTORY METHOD ====================
    @staticmethod
    def create(
        user_id: UUID,
        hotel_id: str,
        room_type_id: str,
        date_range: DateRange,
        guests: GuestCount,
        guest_info: List[GuestInfo],
        rooms_booked: int,
        pricing: PricingBreakdown,
        payment_method: Optional[str] = None,
        special_requests: Optional[str] = None,
    ) -> "Reservation":
        """Create a pending reservation with a fresh booking reference"""
        if rooms_booked < 1:
            raise InvalidArgumentError("At least 1 room must be booked")
        if not guest_info:
            raise InvalidArgumentError("At least 1 guest must be listed")

        now = _utcnow()
        return Reservation(
            booking_reference=Reservation.generate_booking_reference(),
            user_id=user_id,
            hotel_id=hotel_id,
            room_type_id=room_type_id,
            date_range=date_range,
            guests=guests,
            guest_info=guest_info,
            rooms_booked=rooms_booked,
            pricing=pricing,
            payment_method=payment_method,
            special_requests=special_requests,
            status=BookingStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            booking_date=now,
            last_modified=now,
        )

    @staticmethod
    def generate_booking_reference() -> str:
        """Prefix + last 6 digits of the millisecond clock + 4 random alphanumerics"""
        timestamp = str(int(time.time() * 1000))[-6:]
        suffix = ''.join(random.choices(string.ascii_uppercase + string.digits, k=4))
        return f"{BOOKING_REFERENCE_PREFIX}{timestamp}{suffix}"

    # ==================== STATE TRANSITION METHODS ====================
    def transition_to(self, new_status: BookingStatus) -> None:
        """Move along a legal status edge"""
        if new_status == self.status:
            return
        if new_status not in BOOKING_STATUS_FLOW[self.status]:
            raise ConflictError(
                f"Cannot change booking status from {self.status.value} to {new_status.value}"
            )
        self.status = new_status
        if new_status == BookingStatus.CANCELLED:
            self.cancellation_date = _utcnow()

    def change_payment_status(self, new_status: PaymentStatus) -> None:
        if new_status == self.payment_status:
            return
        if new_status not in PAYMENT_STATUS_FLOW[self.payment_status]:
            raise ConflictError(
                f"Cannot change payment status from {self.payment_status.value} to {new_status.value}"
            )
        self.payment_status = new_status

    def apply_changes(
        self,
        status: Optional[BookingStatus] = None,
        guest_info: Optional[List[GuestInfo]] = None,
        special_requests: Optional[str] = None,
        payment_status: Optional[PaymentStatus] = None,
        payment_transaction_id: Optional[str] = None,
        cancellation_reason: Optional[str] = None,
    ) -> None:
        """Apply a patch; terminal bookings are immutable"""
        if self.is_terminal():
            raise ConflictError(f"Cannot modify a {self.status.value} booking")

        if guest_info is not None:
            if not guest_info:
                raise InvalidArgumentError("At least 1 guest must be listed")
            self.guest_info = list(guest_info)
        if special_requests is not None:
            self.special_requests = special_requests
        if payment_status is not None:
            self.change_payment_status(payment_status)
        if payment_transaction_id is not None:
            self.payment_transaction_id = payment_transaction_id
        if cancellation_reason is not None:
            self.cancellation_reason = cancellation_reason
        if status is not None:
            self.transition_to(status)

        self.last_modified = _utcnow()
        self.version += 1

    # ==================== QUERY METHODS ====================
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_BOOKING_STATUSES

    def holds_inventory(self) -> bool:
        return self.status in (BookingStatus.PENDING, BookingStatus.CONFIRMED)

    def get_nights(self) -> int:
        return self.date_range.nights()


class RoomWithAvailability(RoomType):
    """Room type annotated with live availability for a search"""
    is_available: bool
    available_count: int = Field(ge=0)
    current_price: Decimal
    discount_percentage: Optional[int] = None


class HotelWithAvailability(Hotel):
    """Hotel annotated with its bookable room types for a search"""
    available_rooms: List[RoomWithAvailability] = []
    min_price: Decimal = Decimal("0")
    max_price: Decimal = Decimal("0")
