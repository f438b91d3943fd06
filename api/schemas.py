"""API Schemas - Request and Response DTOs"""
from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from typing import List, Optional

from domain.enums import BookingStatus, HotelSortField, PaymentStatus, SortOrder
from domain.value_objects import GuestCount, GuestInfo, PageMeta, PricingBreakdown


# ============================================================================
# BOOKING SCHEMAS
# ============================================================================

class CreateBookingRequest(BaseModel):
    """Create booking request DTO"""
    hotel_id: str
    room_type_id: str
    check_in_date: date
    check_out_date: date
    guests: GuestCount
    guest_info: List[GuestInfo] = []
    rooms_booked: int = Field(default=1, ge=1, le=10)
    special_requests: Optional[str] = Field(default=None, max_length=1000)
    payment_method: Optional[str] = None


class UpdateBookingRequest(BaseModel):
    """Update booking request DTO"""
    status: Optional[BookingStatus] = None
    guest_info: Optional[List[GuestInfo]] = None
    special_requests: Optional[str] = Field(default=None, max_length=1000)
    payment_status: Optional[PaymentStatus] = None
    payment_transaction_id: Optional[str] = None
    cancellation_reason: Optional[str] = Field(default=None, max_length=500)
    expected_version: Optional[int] = Field(default=None, ge=1)


class CancelBookingRequest(BaseModel):
    """Cancel booking request DTO"""
    reason: Optional[str] = Field(default=None, max_length=500)


class BookingResponse(BaseModel):
    """Booking response DTO"""
    booking_id: UUID
    booking_reference: str
    user_id: UUID
    hotel_id: str
    room_type_id: str
    check_in_date: date
    check_out_date: date
    nights: int
    guests: GuestCount
    guest_info: List[GuestInfo]
    rooms_booked: int
    pricing: PricingBreakdown
    status: str
    payment_status: str
    payment_method: Optional[str] = None
    payment_transaction_id: Optional[str] = None
    special_requests: Optional[str] = None
    cancellation_reason: Optional[str] = None
    booking_date: datetime
    last_modified: datetime
    cancellation_date: Optional[datetime] = None
    version: int


class BookingListResponse(BaseModel):
    """Paged bookings response DTO"""
    bookings: List[BookingResponse]
    meta: PageMeta


# ============================================================================
# AVAILABILITY SCHEMAS
# ============================================================================

class CheckAvailabilityRequest(BaseModel):
    """Check availability request DTO"""
    hotel_id: Optional[str] = None
    room_type_id: str
    check_in_date: date
    check_out_date: date
    rooms_requested: int = Field(default=1, ge=1)


class AvailabilityResponse(BaseModel):
    """Availability response DTO"""
    is_available: bool
    available_rooms: int
    rate: Decimal
    total: Decimal
    restrictions: List[str] = []
    pricing: Optional[PricingBreakdown] = None


# ============================================================================
# HOTEL SEARCH SCHEMAS
# ============================================================================

class RoomAvailabilityResponse(BaseModel):
    """Room type with availability response DTO"""
    room_type_id: str
    name: str
    room_category: str
    base_price: Decimal
    current_price: Decimal
    discount_percentage: Optional[int] = None
    is_available: bool
    available_count: int
    max_adults: int
    max_children: int
    amenities: List[str] = []


class HotelResponse(BaseModel):
    """Hotel with availability response DTO"""
    hotel_id: str
    name: str
    description: str
    star_rating: int
    city: str
    country: str
    amenities: List[str] = []
    images: List[str] = []
    min_price: Decimal
    max_price: Decimal
    available_rooms: List[RoomAvailabilityResponse] = []


class HotelSearchResponse(BaseModel):
    """Paged hotel search response DTO"""
    hotels: List[HotelResponse]
    meta: PageMeta


class EnhanceCandidatesRequest(BaseModel):
    """Semantic search candidates to annotate with availability"""
    hotel_ids: List[str] = Field(min_length=1, max_length=100)
    check_in: Optional[date] = None
    check_out: Optional[date] = None
    adults: int = Field(default=1, ge=1, le=20)
    children: int = Field(default=0, ge=0, le=20)
    rooms: int = Field(default=1, ge=1, le=10)
    min_price: Optional[Decimal] = Field(default=None, ge=0)
    max_price: Optional[Decimal] = Field(default=None, ge=0)
    sort_by: Optional[HotelSortField] = None
    sort_order: SortOrder = SortOrder.ASC


# ============================================================================
# AUTH SCHEMAS
# ============================================================================

class Token(BaseModel):
    """Token response DTO"""
    access_token: str
    token_type: str

class TokenData(BaseModel):
    """Token payload DTO"""
    username: Optional[str] = None
    user_id: Optional[UUID] = None

class UserResponse(BaseModel):
    """User response DTO"""
    user_id: UUID
    username: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    disabled: bool
