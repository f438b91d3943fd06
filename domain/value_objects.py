"""Domain Value Objects"""
import json
import math
from pydantic import BaseModel, Field, ValidationError, field_validator
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, List, Optional

from domain.enums import BookingSortField, BookingStatus, SortOrder
from domain.errors import InvalidArgumentError

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"
PHONE_PATTERN = r"^\+?[\d\s\-\(\)]+$"


class DateRange(BaseModel):
    """Value Object for a stay; check-out night is exclusive"""
    check_in: date
    check_out: date

    @field_validator('check_out')
    @classmethod
    def check_out_after_check_in(cls, v, info):
        check_in = info.data.get('check_in')
        if check_in is not None and v <= check_in:
            raise ValueError('Check-out must be after check-in')
        return v

    def nights(self) -> int:
        """Calculate number of nights"""
        return max(1, (self.check_out - self.check_in).days)

    def overlaps(self, check_in: date, check_out: date) -> bool:
        """Half-open interval overlap test"""
        return self.check_in < check_out and self.check_out > check_in

    class Config:
        frozen = True


class GuestCount(BaseModel):
    """Value Object for guest count"""
    adults: int = Field(ge=1, le=20)
    children: int = Field(ge=0, le=20, default=0)

    @property
    def total(self) -> int:
        return self.adults + self.children

    class Config:
        frozen = True


class MaxOccupancy(BaseModel):
    """Value Object for the occupancy limit of a room type"""
    adults: int = Field(ge=0)
    children: int = Field(ge=0, default=0)

    @property
    def total(self) -> int:
        return self.adults + self.children

    def accommodates(self, adults: int, children: int) -> bool:
        return adults + children <= self.total

    @classmethod
    def parse(cls, raw: Any) -> "MaxOccupancy":
        """Parse a stored occupancy blob (dict or JSON string), failing on malformed data"""
        if isinstance(raw, MaxOccupancy):
            return raw
        try:
            if isinstance(raw, str):
                raw = json.loads(raw)
            return cls.model_validate(raw)
        except (ValueError, ValidationError) as e:
            raise InvalidArgumentError(f"Malformed max occupancy: {raw!r}") from e

    class Config:
        frozen = True


class GuestInfo(BaseModel):
    """Value Object for one guest on the roster"""
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    email: str = Field(pattern=EMAIL_PATTERN)
    phone_number: str = Field(pattern=PHONE_PATTERN)
    date_of_birth: Optional[date] = None
    special_requests: Optional[str] = Field(default=None, max_length=500)

    class Config:
        frozen = True


class Location(BaseModel):
    """Value Object for a hotel address"""
    address: str = ""
    city: str
    state: str = ""
    country: str = ""
    postal_code: str = ""
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    class Config:
        frozen = True


class PricingBreakdown(BaseModel):
    """Value Object for the price snapshot of a stay"""
    room_rate: Decimal
    total_nights: int = Field(ge=1)
    subtotal: Decimal
    taxes: Decimal
    fees: Decimal
    total: Decimal
    currency: str = "USD"

    @classmethod
    def parse(cls, raw: Any) -> "PricingBreakdown":
        """Parse a stored pricing blob, failing on malformed data"""
        if isinstance(raw, PricingBreakdown):
            return raw
        try:
            if isinstance(raw, str):
                raw = json.loads(raw)
            return cls.model_validate(raw)
        except (ValueError, ValidationError) as e:
            raise InvalidArgumentError(f"Malformed pricing snapshot: {raw!r}") from e

    class Config:
        frozen = True


class AvailabilityResult(BaseModel):
    """Outcome of an availability query; a negative answer is not an error"""
    is_available: bool
    available_rooms: int = Field(ge=0)
    rate: Decimal
    total: Decimal
    restrictions: List[str] = []
    pricing: Optional[PricingBreakdown] = None

    class Config:
        frozen = True


class BookingFilters(BaseModel):
    """Filter and sort options for listing a user's bookings"""
    statuses: List[BookingStatus] = []
    check_in_from: Optional[date] = None
    check_in_to: Optional[date] = None
    booking_date_from: Optional[datetime] = None
    booking_date_to: Optional[datetime] = None
    sort_by: BookingSortField = BookingSortField.CHECK_IN_DATE
    sort_order: SortOrder = SortOrder.ASC

    @field_validator('booking_date_from', 'booking_date_to')
    @classmethod
    def assume_utc(cls, v):
        # Booking dates are stored in UTC; naive bounds are read the same way
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    class Config:
        frozen = True


class PageMeta(BaseModel):
    """Pagination metadata"""
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PageMeta":
        total_pages = math.ceil(total / limit) if limit else 0
        return cls(
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_prev=page > 1,
        )
