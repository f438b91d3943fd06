"""Application Commands - inputs to the booking and search use cases

These carry shape only; business validation (date order, positive counts)
happens in the services so it surfaces as InvalidArgumentError.
"""
from pydantic import BaseModel
from datetime import date
from decimal import Decimal
from typing import List, Optional

from domain.enums import BookingStatus, HotelSortField, PaymentStatus, SortOrder
from domain.value_objects import GuestCount, GuestInfo


class BookingRequest(BaseModel):
    hotel_id: str
    room_type_id: str
    check_in_date: date
    check_out_date: date
    guests: GuestCount
    guest_info: List[GuestInfo] = []
    rooms_booked: int = 1
    special_requests: Optional[str] = None
    payment_method: Optional[str] = None


class BookingPatch(BaseModel):
    status: Optional[BookingStatus] = None
    guest_info: Optional[List[GuestInfo]] = None
    special_requests: Optional[str] = None
    payment_status: Optional[PaymentStatus] = None
    payment_transaction_id: Optional[str] = None
    cancellation_reason: Optional[str] = None
    # Version the client last read; the stored version must still match
    expected_version: Optional[int] = None


class AvailabilityQuery(BaseModel):
    hotel_id: Optional[str] = None
    room_type_id: str
    check_in_date: date
    check_out_date: date
    rooms_requested: int = 1


class SearchCriteria(BaseModel):
    """Dates, occupancy, price bounds and ordering for a hotel search"""
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    adults: int = 1
    children: int = 0
    rooms: int = 1
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    sort_by: Optional[HotelSortField] = None
    sort_order: SortOrder = SortOrder.ASC

    @property
    def has_dates(self) -> bool:
        return self.check_in is not None and self.check_out is not None


class HotelSearchFilters(SearchCriteria):
    """Keyword search: catalog filters on top of the search criteria"""
    city: Optional[str] = None
    star_ratings: List[int] = []
    amenities: List[str] = []
