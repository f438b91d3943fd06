import logging
import time
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from fastapi import FastAPI, HTTPException, Depends, Query, Request
from fastapi.responses import JSONResponse
from fastapi.security import OAuth2PasswordRequestForm

from api.schemas import (
    # Bookings
    CreateBookingRequest, UpdateBookingRequest, CancelBookingRequest,
    BookingResponse, BookingListResponse,
    # Availability
    CheckAvailabilityRequest, AvailabilityResponse,
    # Hotels
    HotelResponse, HotelSearchResponse, RoomAvailabilityResponse, EnhanceCandidatesRequest,
    # Auth
    Token, UserResponse
)

from api.dependencies import get_current_active_user, fake_users_db, get_user
from infrastructure.config import Settings, get_settings
from infrastructure.security import verify_password, create_access_token
from domain.auth import User

from application.availability import AvailabilityChecker
from application.commands import (
    AvailabilityQuery, BookingPatch, BookingRequest, HotelSearchFilters, SearchCriteria,
)
from application.locks import RoomTypeLocks
from application.pricing import PricingPolicy
from application.search import HotelSearchService
from application.services import BookingService
from domain.entities import HotelWithAvailability, Reservation
from domain.enums import BookingSortField, BookingStatus, HotelSortField, PaymentStatus, SortOrder
from domain.errors import BookingError, InternalError
from domain.value_objects import BookingFilters
from infrastructure.repositories.in_memory_repositories import InMemoryHotelRepository, InMemoryInventoryStore
from infrastructure.repositories.supabase_repositories import (
    SupabaseHotelRepository, SupabaseInventoryStore, create_supabase_client,
)
from infrastructure.seed import seed_demo_catalog

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger("hotel_booking.api")

app = FastAPI(
    title="Hotel Booking API",
    description="Availability, pricing and booking lifecycle for hotel room inventory",
    version="1.0.0"
)


def build_repositories(settings: Settings):
    """Inventory store and hotel catalog for the configured backend"""
    if settings.store_backend == "supabase":
        client = create_supabase_client(settings.supabase_url, settings.supabase_key)
        return SupabaseInventoryStore(client), SupabaseHotelRepository(client)
    if settings.store_backend != "memory":
        raise ValueError(f"Unknown STORE_BACKEND {settings.store_backend!r}")

    store = InMemoryInventoryStore()
    if settings.seed_demo_data:
        seed_demo_catalog(store)
    return store, InMemoryHotelRepository(store)


# Initialize repositories
inventory_store, hotel_repo = build_repositories(settings)
pricing_policy = PricingPolicy(
    currency=settings.default_currency,
    tax_rate=settings.tax_rate,
    booking_fee=settings.booking_fee,
)
availability_checker = AvailabilityChecker(inventory_store, pricing_policy)
# Shared by every BookingService so all writers serialize on the same locks
room_type_locks = RoomTypeLocks()

# Dependency injection
def get_booking_service() -> BookingService:
    return BookingService(inventory_store, availability_checker, room_type_locks)

def get_search_service() -> HotelSearchService:
    return HotelSearchService(hotel_repo, inventory_store, availability_checker)

# ============================================================================
# MIDDLEWARE & ERROR HANDLING
# ============================================================================

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    logger.info(
        "%s %s -> %d (%.1f ms)",
        request.method, request.url.path, response.status_code, process_time * 1000,
    )
    return response

@app.exception_handler(BookingError)
async def booking_error_handler(request: Request, exc: BookingError):
    if isinstance(exc, InternalError):
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        detail = "Internal server error"
    else:
        detail = exc.message
    return JSONResponse(status_code=exc.status_code, content={"detail": detail, "code": exc.code})

# ============================================================================
# HEALTH & ENUM REFERENCE ENDPOINTS
# ============================================================================

@app.get("/api/health", tags=["Health"])
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "API is running", "store": settings.store_backend}

@app.get("/api/enums/booking-status", tags=["Enum Reference"])
async def get_booking_statuses():
    """Get all BookingStatus enum values"""
    return {
        "values": [item.value for item in BookingStatus],
        "description": "Booking status values: pending, confirmed, cancelled, completed, no_show"
    }

@app.get("/api/enums/payment-status", tags=["Enum Reference"])
async def get_payment_statuses():
    """Get all PaymentStatus enum values"""
    return {
        "values": [item.value for item in PaymentStatus],
        "description": "Payment status values: pending, paid, failed, refunded, partially_refunded"
    }

# ============================================================================
# AUTH ENDPOINTS
# ============================================================================

@app.post("/token", response_model=Token, tags=["Auth"])
async def login_for_access_token(form_data: OAuth2PasswordRequestForm = Depends()):
    user = get_user(fake_users_db, form_data.username)
    if not user or not verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=401,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    access_token = create_access_token(user.username, user.user_id)
    return {"access_token": access_token, "token_type": "bearer"}

@app.get("/users/me", response_model=UserResponse, tags=["Auth"])
async def read_users_me(current_user: User = Depends(get_current_active_user)):
    return UserResponse(
        user_id=current_user.user_id,
        username=current_user.username,
        email=current_user.email,
        full_name=current_user.full_name or None,
        disabled=current_user.disabled,
    )

# ============================================================================
# AVAILABILITY ENDPOINTS
# ============================================================================

@app.post("/api/availability/check", response_model=AvailabilityResponse, tags=["Availability"])
async def check_availability(
    request: CheckAvailabilityRequest,
    service: BookingService = Depends(get_booking_service),
):
    """Check room availability and price for a stay"""
    result = await service.check_availability(AvailabilityQuery(**request.model_dump()))
    return AvailabilityResponse(**result.model_dump())

# ============================================================================
# BOOKING ENDPOINTS
# ============================================================================

@app.post("/api/bookings", response_model=BookingResponse, status_code=201, tags=["Bookings"])
async def create_booking(
    request: CreateBookingRequest,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Create new booking"""
    booking = await service.create_booking(
        current_user.user_id,
        BookingRequest(**request.model_dump()),
    )
    return _booking_to_response(booking)

@app.get("/api/bookings", response_model=BookingListResponse, tags=["Bookings"])
async def get_user_bookings(
    status: List[BookingStatus] = Query(default=[]),
    check_in_from: Optional[date] = None,
    check_in_to: Optional[date] = None,
    booking_date_from: Optional[datetime] = None,
    booking_date_to: Optional[datetime] = None,
    sort_by: BookingSortField = BookingSortField.CHECK_IN_DATE,
    sort_order: SortOrder = SortOrder.ASC,
    page: int = 1,
    limit: int = 10,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get the current user's bookings"""
    filters = BookingFilters(
        statuses=status,
        check_in_from=check_in_from,
        check_in_to=check_in_to,
        booking_date_from=booking_date_from,
        booking_date_to=booking_date_to,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    bookings, meta = await service.list_user_bookings(current_user.user_id, filters, page, limit)
    return BookingListResponse(bookings=[_booking_to_response(b) for b in bookings], meta=meta)

@app.get("/api/bookings/{booking_id}", response_model=BookingResponse, tags=["Bookings"])
async def get_booking(
    booking_id: UUID,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Get booking by ID"""
    booking = await service.get_booking(booking_id, current_user.user_id)
    return _booking_to_response(booking)

@app.put("/api/bookings/{booking_id}", response_model=BookingResponse, tags=["Bookings"])
async def update_booking(
    booking_id: UUID,
    request: UpdateBookingRequest,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Update booking status, payment or guest details"""
    booking = await service.update_booking(
        booking_id,
        current_user.user_id,
        BookingPatch(**request.model_dump()),
    )
    return _booking_to_response(booking)

@app.post("/api/bookings/{booking_id}/cancel", response_model=BookingResponse, tags=["Bookings"])
async def cancel_booking(
    booking_id: UUID,
    request: Optional[CancelBookingRequest] = None,
    service: BookingService = Depends(get_booking_service),
    current_user: User = Depends(get_current_active_user)
):
    """Cancel booking"""
    reason = request.reason if request else None
    booking = await service.cancel_booking(booking_id, current_user.user_id, reason)
    return _booking_to_response(booking)

# ============================================================================
# HOTEL ENDPOINTS
# ============================================================================

@app.get("/api/hotels/search", response_model=HotelSearchResponse, tags=["Hotels"])
async def search_hotels(
    city: Optional[str] = None,
    star_ratings: List[int] = Query(default=[]),
    amenities: List[str] = Query(default=[]),
    check_in: Optional[date] = None,
    check_out: Optional[date] = None,
    adults: int = 1,
    children: int = 0,
    rooms: int = 1,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    sort_by: Optional[HotelSortField] = None,
    sort_order: SortOrder = SortOrder.ASC,
    page: int = 1,
    limit: int = 10,
    service: HotelSearchService = Depends(get_search_service),
):
    """Keyword hotel search with live availability"""
    filters = HotelSearchFilters(
        city=city,
        star_ratings=star_ratings,
        amenities=amenities,
        check_in=check_in,
        check_out=check_out,
        adults=adults,
        children=children,
        rooms=rooms,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    hotels, meta = await service.search_hotels(filters, page, limit)
    return HotelSearchResponse(hotels=[_hotel_to_response(h) for h in hotels], meta=meta)

@app.get("/api/hotels/{hotel_id}", response_model=HotelResponse, tags=["Hotels"])
async def get_hotel(
    hotel_id: str,
    check_in: Optional[date] = None,
    check_out: Optional[date] = None,
    adults: int = 1,
    children: int = 0,
    rooms: int = 1,
    service: HotelSearchService = Depends(get_search_service),
):
    """Get hotel with availability of each room type"""
    criteria = SearchCriteria(
        check_in=check_in, check_out=check_out, adults=adults, children=children, rooms=rooms,
    )
    hotel = await service.get_hotel_with_availability(hotel_id, criteria)
    return _hotel_to_response(hotel)

@app.post("/api/hotels/enhance", response_model=List[HotelResponse], tags=["Hotels"])
async def enhance_hotels(
    request: EnhanceCandidatesRequest,
    service: HotelSearchService = Depends(get_search_service),
):
    """Annotate semantic search candidates with availability, keeping their order unless sort_by is given"""
    criteria = SearchCriteria(**request.model_dump(exclude={"hotel_ids"}))
    hotels = await service.enhance_candidates(request.hotel_ids, criteria)
    return [_hotel_to_response(h) for h in hotels]

# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _booking_to_response(booking: Reservation) -> BookingResponse:
    """Convert Reservation entity to BookingResponse"""
    return BookingResponse(
        booking_id=booking.reservation_id,
        booking_reference=booking.booking_reference,
        user_id=booking.user_id,
        hotel_id=booking.hotel_id,
        room_type_id=booking.room_type_id,
        check_in_date=booking.date_range.check_in,
        check_out_date=booking.date_range.check_out,
        nights=booking.get_nights(),
        guests=booking.guests,
        guest_info=booking.guest_info,
        rooms_booked=booking.rooms_booked,
        pricing=booking.pricing,
        status=booking.status.value,
        payment_status=booking.payment_status.value,
        payment_method=booking.payment_method,
        payment_transaction_id=booking.payment_transaction_id,
        special_requests=booking.special_requests,
        cancellation_reason=booking.cancellation_reason,
        booking_date=booking.booking_date,
        last_modified=booking.last_modified,
        cancellation_date=booking.cancellation_date,
        version=booking.version
    )

def _hotel_to_response(hotel: HotelWithAvailability) -> HotelResponse:
    """Convert HotelWithAvailability to HotelResponse"""
    return HotelResponse(
        hotel_id=hotel.hotel_id,
        name=hotel.name,
        description=hotel.description,
        star_rating=hotel.star_rating,
        city=hotel.location.city,
        country=hotel.location.country,
        amenities=hotel.amenities,
        images=hotel.images,
        min_price=hotel.min_price,
        max_price=hotel.max_price,
        available_rooms=[
            RoomAvailabilityResponse(
                room_type_id=room.room_type_id,
                name=room.name,
                room_category=room.room_category.value,
                base_price=room.base_price,
                current_price=room.current_price,
                discount_percentage=room.discount_percentage,
                is_available=room.is_available,
                available_count=room.available_count,
                max_adults=room.max_occupancy.adults,
                max_children=room.max_occupancy.children,
                amenities=room.amenities,
            )
            for room in hotel.available_rooms
        ],
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
