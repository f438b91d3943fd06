"""Supabase Repository Implementations

supabase-py is synchronous; every query runs in the threadpool so the event
loop keeps serving requests while PostgREST answers.
"""
import logging
from datetime import date
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple
from uuid import UUID

import httpx
from fastapi.concurrency import run_in_threadpool
from postgrest.exceptions import APIError
from pydantic import ValidationError
from supabase import Client, create_client

from domain.entities import Hotel, Reservation, RoomType
from domain.enums import BookingSortField, BookingStatus, SortOrder
from domain.errors import (
    InternalError, InvalidArgumentError, NotFoundError,
    StoreConflictError, StoreError, StoreTimeoutError,
)
from domain.repositories import HotelRepository, InventoryStore
from domain.value_objects import (
    BookingFilters, DateRange, GuestCount, GuestInfo, Location, MaxOccupancy, PricingBreakdown,
)

logger = logging.getLogger("hotel_booking.supabase")

HOTELS_TABLE = "hotels"
ROOMS_TABLE = "rooms"
BOOKINGS_TABLE = "bookings"

# Defined in infrastructure/sql/reserve_booking.sql
RESERVE_BOOKING_FUNCTION = "reserve_booking"

# unique_violation, exclusion_violation (raised by reserve_booking when the
# rooms were taken by another process), serialization_failure, deadlock_detected
CONFLICT_SQLSTATES = {"23505", "23P01", "40001", "40P01"}

BOOKING_SORT_COLUMNS = {
    BookingSortField.CHECK_IN_DATE: "check_in_date",
    BookingSortField.BOOKING_DATE: "booking_date",
    BookingSortField.TOTAL: "total_amount",
}


def create_supabase_client(url: Optional[str], key: Optional[str]) -> Client:
    if not url or not key:
        raise InternalError("SUPABASE_URL and SUPABASE_KEY must be set for the supabase store")
    return create_client(url, key)


async def _execute(query: Callable[[], Any], operation: str):
    """Run a PostgREST query off the event loop, mapping failures to store errors"""
    try:
        return await run_in_threadpool(query)
    except APIError as e:
        if e.code in CONFLICT_SQLSTATES:
            raise StoreConflictError(f"{operation}: {e.message}") from e
        raise StoreError(f"{operation}: {e.message}") from e
    except httpx.TimeoutException as e:
        raise StoreTimeoutError(f"{operation} timed out") from e
    except httpx.HTTPError as e:
        raise StoreError(f"{operation}: {e}") from e


# ==================== RECORD MAPPING ====================

def hotel_from_record(record: Dict[str, Any]) -> Hotel:
    try:
        return Hotel(
            hotel_id=str(record["id"]),
            name=record["name"],
            description=record.get("description") or "",
            star_rating=record["star_rating"],
            location=Location.model_validate(record.get("location") or {}),
            amenities=record.get("amenities") or [],
            images=record.get("images") or [],
            check_in_time=record.get("check_in_time") or "15:00",
            check_out_time=record.get("check_out_time") or "11:00",
        )
    except (KeyError, ValidationError) as e:
        raise InvalidArgumentError(f"Malformed hotel record {record.get('id')!r}") from e


def room_type_from_record(record: Dict[str, Any]) -> RoomType:
    if record.get("total_inventory") is None:
        logger.error("Room type %s has no total_inventory", record.get("id"))
        raise InternalError("Room inventory is not configured")
    try:
        return RoomType(
            room_type_id=str(record["id"]),
            hotel_id=str(record["hotel_id"]),
            name=record["name"],
            room_category=record.get("type") or "standard",
            description=record.get("description") or "",
            base_price=record["base_price"],
            max_occupancy=MaxOccupancy.parse(record.get("max_occupancy")),
            total_inventory=record["total_inventory"],
            amenities=record.get("amenities") or [],
        )
    except (KeyError, ValidationError) as e:
        raise InvalidArgumentError(f"Malformed room record {record.get('id')!r}") from e


def reservation_from_record(record: Dict[str, Any]) -> Reservation:
    try:
        return Reservation(
            reservation_id=record["id"],
            booking_reference=record["booking_reference"],
            user_id=record["user_id"],
            hotel_id=str(record["hotel_id"]),
            room_type_id=str(record["room_id"]),
            date_range=DateRange(check_in=record["check_in_date"], check_out=record["check_out_date"]),
            guests=GuestCount.model_validate(record["guests"]),
            guest_info=[GuestInfo.model_validate(g) for g in record["guest_info"]],
            rooms_booked=record["rooms_booked"],
            pricing=PricingBreakdown.parse(record["pricing"]),
            status=record["status"],
            payment_status=record["payment_status"],
            payment_method=record.get("payment_method"),
            payment_transaction_id=record.get("payment_transaction_id"),
            special_requests=record.get("special_requests"),
            cancellation_reason=record.get("cancellation_reason"),
            booking_date=record["booking_date"],
            last_modified=record["last_modified"],
            cancellation_date=record.get("cancellation_date"),
            version=record.get("version") or 1,
        )
    except (KeyError, TypeError, ValidationError) as e:
        raise InvalidArgumentError(f"Malformed booking record {record.get('id')!r}") from e


def reservation_to_record(reservation: Reservation) -> Dict[str, Any]:
    return {
        "id": str(reservation.reservation_id),
        "booking_reference": reservation.booking_reference,
        "user_id": str(reservation.user_id),
        "hotel_id": reservation.hotel_id,
        "room_id": reservation.room_type_id,
        "check_in_date": reservation.date_range.check_in.isoformat(),
        "check_out_date": reservation.date_range.check_out.isoformat(),
        "guests": reservation.guests.model_dump(mode="json"),
        "guest_info": [g.model_dump(mode="json") for g in reservation.guest_info],
        "rooms_booked": reservation.rooms_booked,
        "pricing": reservation.pricing.model_dump(mode="json"),
        "total_amount": str(reservation.pricing.total),
        "status": reservation.status.value,
        "payment_status": reservation.payment_status.value,
        "payment_method": reservation.payment_method,
        "payment_transaction_id": reservation.payment_transaction_id,
        "special_requests": reservation.special_requests,
        "cancellation_reason": reservation.cancellation_reason,
        "booking_date": reservation.booking_date.isoformat(),
        "last_modified": reservation.last_modified.isoformat(),
        "cancellation_date": reservation.cancellation_date.isoformat() if reservation.cancellation_date else None,
        "version": reservation.version,
    }


# ==================== REPOSITORIES ====================

class SupabaseInventoryStore(InventoryStore):
    """InventoryStore over the hotels, rooms and bookings tables"""

    def __init__(self, client: Client):
        self.client = client

    async def get_room_type(self, room_type_id: str) -> Optional[RoomType]:
        response = await _execute(
            lambda: self.client.table(ROOMS_TABLE).select("*").eq("id", room_type_id).limit(1).execute(),
            "get room type",
        )
        return room_type_from_record(response.data[0]) if response.data else None

    async def get_hotel(self, hotel_id: str) -> Optional[Hotel]:
        response = await _execute(
            lambda: self.client.table(HOTELS_TABLE).select("*").eq("id", hotel_id).limit(1).execute(),
            "get hotel",
        )
        return hotel_from_record(response.data[0]) if response.data else None

    async def list_room_types(self, hotel_id: str) -> List[RoomType]:
        response = await _execute(
            lambda: self.client.table(ROOMS_TABLE).select("*").eq("hotel_id", hotel_id).execute(),
            "list room types",
        )
        return [room_type_from_record(r) for r in response.data]

    async def find_overlapping_reservations(
        self,
        room_type_id: str,
        check_in: date,
        check_out: date,
        statuses: Sequence[BookingStatus],
    ) -> List[Reservation]:
        response = await _execute(
            lambda: (
                self.client.table(BOOKINGS_TABLE)
                .select("*")
                .eq("room_id", room_type_id)
                .in_("status", [s.value for s in statuses])
                .lt("check_in_date", check_out.isoformat())
                .gt("check_out_date", check_in.isoformat())
                .execute()
            ),
            "find overlapping bookings",
        )
        return [reservation_from_record(r) for r in response.data]

    async def insert_reservation(self, reservation: Reservation) -> Reservation:
        """Insert through reserve_booking, which recounts overlapping bookings
        under a per-room advisory lock so separate API processes cannot oversell"""
        record = reservation_to_record(reservation)
        response = await _execute(
            lambda: self.client.rpc(RESERVE_BOOKING_FUNCTION, {"booking": record}).execute(),
            "insert booking",
        )
        if not response.data:
            raise StoreError("insert booking returned no row")
        return reservation_from_record(response.data[0])

    async def update_reservation(self, reservation: Reservation, expected_version: int) -> Reservation:
        record = reservation_to_record(reservation)
        booking_id = record.pop("id")
        response = await _execute(
            lambda: (
                self.client.table(BOOKINGS_TABLE)
                .update(record)
                .eq("id", booking_id)
                .eq("version", expected_version)
                .execute()
            ),
            "update booking",
        )
        if response.data:
            return reservation_from_record(response.data[0])

        # No row matched: either the booking is gone or its version moved on
        if await self.get_reservation(reservation.reservation_id) is None:
            raise NotFoundError.for_resource("Booking")
        raise StoreConflictError(f"Booking {booking_id} changed since version {expected_version}")

    async def get_reservation(self, reservation_id: UUID) -> Optional[Reservation]:
        response = await _execute(
            lambda: (
                self.client.table(BOOKINGS_TABLE).select("*").eq("id", str(reservation_id)).limit(1).execute()
            ),
            "get booking",
        )
        return reservation_from_record(response.data[0]) if response.data else None

    async def list_reservations(
        self,
        user_id: UUID,
        filters: BookingFilters,
        page: int,
        limit: int,
    ) -> Tuple[List[Reservation], int]:
        def query():
            q = self.client.table(BOOKINGS_TABLE).select("*", count="exact").eq("user_id", str(user_id))
            if filters.statuses:
                q = q.in_("status", [s.value for s in filters.statuses])
            if filters.check_in_from:
                q = q.gte("check_in_date", filters.check_in_from.isoformat())
            if filters.check_in_to:
                q = q.lte("check_in_date", filters.check_in_to.isoformat())
            if filters.booking_date_from:
                q = q.gte("booking_date", filters.booking_date_from.isoformat())
            if filters.booking_date_to:
                q = q.lte("booking_date", filters.booking_date_to.isoformat())
            start = (page - 1) * limit
            return (
                q.order(BOOKING_SORT_COLUMNS[filters.sort_by], desc=filters.sort_order == SortOrder.DESC)
                .range(start, start + limit - 1)
                .execute()
            )

        response = await _execute(query, "list bookings")
        bookings = [reservation_from_record(r) for r in response.data]
        total = response.count if response.count is not None else len(bookings)
        return bookings, total


class SupabaseHotelRepository(HotelRepository):
    """Hotel catalog over the hotels table"""

    def __init__(self, client: Client):
        self.client = client

    async def find_by_id(self, hotel_id: str) -> Optional[Hotel]:
        response = await _execute(
            lambda: self.client.table(HOTELS_TABLE).select("*").eq("id", hotel_id).limit(1).execute(),
            "get hotel",
        )
        return hotel_from_record(response.data[0]) if response.data else None

    async def find_by_ids(self, hotel_ids: Sequence[str]) -> List[Hotel]:
        if not hotel_ids:
            return []
        response = await _execute(
            lambda: self.client.table(HOTELS_TABLE).select("*").in_("id", list(hotel_ids)).execute(),
            "get hotels",
        )
        by_id = {str(r["id"]): hotel_from_record(r) for r in response.data}
        return [by_id[hotel_id] for hotel_id in hotel_ids if hotel_id in by_id]

    async def search(
        self,
        city: Optional[str] = None,
        star_ratings: Optional[Sequence[int]] = None,
        amenities: Optional[Sequence[str]] = None,
    ) -> List[Hotel]:
        def query():
            q = self.client.table(HOTELS_TABLE).select("*")
            if city:
                q = q.ilike("location->>city", f"%{city}%")
            if star_ratings:
                q = q.in_("star_rating", list(star_ratings))
            if amenities:
                q = q.overlaps("amenities", list(amenities))
            return q.execute()

        response = await _execute(query, "search hotels")
        return [hotel_from_record(r) for r in response.data]
