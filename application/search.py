"""Search Enhancement - annotate hotel candidates with live availability"""
import asyncio
import logging
from typing import List, Optional, Sequence, Tuple

from application.availability import AvailabilityChecker, validate_stay
from application.commands import HotelSearchFilters, SearchCriteria
from application.errors import translate_store_errors
from application.pricing import PricingPolicy
from domain.entities import Hotel, HotelWithAvailability, RoomType, RoomWithAvailability
from domain.enums import HotelSortField, SortOrder
from domain.errors import InvalidArgumentError, NotFoundError
from domain.repositories import HotelRepository, InventoryStore
from domain.value_objects import PageMeta

logger = logging.getLogger("hotel_booking.search")

MAX_PAGE_SIZE = 100


class HotelSearchService:
    """Turns catalog candidates into bookable results.

    Availability is computed for every candidate before paging, so a search
    costs one availability check per (candidate, room type) pair.
    """

    def __init__(self, hotels: HotelRepository, store: InventoryStore, checker: AvailabilityChecker):
        self.hotels = hotels
        self.store = store
        self.checker = checker

    @property
    def pricing(self) -> PricingPolicy:
        return self.checker.pricing

    async def search_hotels(
        self,
        filters: HotelSearchFilters,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[HotelWithAvailability], PageMeta]:
        """Keyword search: catalog filter, enhance, then paginate"""
        _validate_page(page, limit)
        _validate_criteria(filters)

        candidates = await self.hotels.search(
            city=filters.city,
            star_ratings=filters.star_ratings,
            amenities=filters.amenities,
        )
        logger.info("Hotel search: city=%s candidates=%d", filters.city, len(candidates))

        results = await self.enhance(candidates, filters)
        start = (page - 1) * limit
        return results[start:start + limit], PageMeta.build(len(results), page, limit)

    async def enhance_candidates(
        self,
        hotel_ids: Sequence[str],
        criteria: SearchCriteria,
    ) -> List[HotelWithAvailability]:
        """Enhance hotels chosen by the semantic search provider, keeping its order"""
        _validate_criteria(criteria)
        candidates = await self.hotels.find_by_ids(hotel_ids)
        if len(candidates) < len(hotel_ids):
            known = {h.hotel_id for h in candidates}
            logger.warning(
                "Skipping candidates missing from catalog: %s",
                [hotel_id for hotel_id in hotel_ids if hotel_id not in known],
            )
        return await self.enhance(candidates, criteria)

    async def get_hotel_with_availability(
        self,
        hotel_id: str,
        criteria: Optional[SearchCriteria] = None,
    ) -> HotelWithAvailability:
        """One hotel with all its room types annotated, available or not"""
        criteria = criteria or SearchCriteria()
        _validate_criteria(criteria)

        hotel = await self.hotels.find_by_id(hotel_id)
        if hotel is None:
            raise NotFoundError.for_resource("Hotel")
        return await self._annotate(hotel, criteria, only_available=False)

    async def enhance(
        self,
        candidates: Sequence[Hotel],
        criteria: SearchCriteria,
    ) -> List[HotelWithAvailability]:
        """Annotate candidates, drop hotels with nothing bookable, filter by price and sort"""
        _validate_criteria(criteria)

        annotated = await asyncio.gather(
            *(self._annotate(hotel, criteria) for hotel in candidates)
        )
        results = [h for h in annotated if h.available_rooms]

        if criteria.min_price is not None:
            results = [h for h in results if h.min_price >= criteria.min_price]
        if criteria.max_price is not None:
            results = [h for h in results if h.max_price <= criteria.max_price]

        if criteria.sort_by is not None:
            results = sort_hotels(results, criteria.sort_by, criteria.sort_order)

        logger.info(
            "Enhanced %d candidates: %d with availability", len(candidates), len(results)
        )
        return results

    async def _annotate(
        self,
        hotel: Hotel,
        criteria: SearchCriteria,
        only_available: bool = True,
    ) -> HotelWithAvailability:
        with translate_store_errors("search hotels", hotel_id=hotel.hotel_id):
            room_types = await self.store.list_room_types(hotel.hotel_id)
            rooms = []
            for room_type in room_types:
                if not room_type.max_occupancy.accommodates(criteria.adults, criteria.children):
                    continue
                room = await self._annotate_room(room_type, criteria)
                if room.is_available or not only_available:
                    rooms.append(room)

        bookable = [r.current_price for r in rooms if r.is_available]
        return HotelWithAvailability(
            **hotel.model_dump(),
            available_rooms=rooms,
            min_price=min(bookable, default=0),
            max_price=max(bookable, default=0),
        )

    async def _annotate_room(self, room_type: RoomType, criteria: SearchCriteria) -> RoomWithAvailability:
        if criteria.has_dates:
            availability = await self.checker.evaluate(
                room_type, criteria.check_in, criteria.check_out, criteria.rooms
            )
            is_available = availability.is_available
            available_count = availability.available_rooms
            current_price = availability.rate
        else:
            is_available = room_type.total_inventory > 0
            available_count = room_type.total_inventory
            current_price = room_type.base_price

        return RoomWithAvailability(
            **room_type.model_dump(),
            is_available=is_available,
            available_count=available_count,
            current_price=current_price,
            discount_percentage=self.pricing.discount_percentage(room_type.base_price, current_price),
        )


def sort_hotels(
    hotels: List[HotelWithAvailability],
    sort_by: HotelSortField,
    sort_order: SortOrder = SortOrder.ASC,
) -> List[HotelWithAvailability]:
    """Stable sort by lowest price, star rating or name.

    The rating sort ranks by the hotel's star_rating, not by guest review
    scores. It is ranked best-first, so ascending order lists five stars first.
    """
    descending = sort_order == SortOrder.DESC
    if sort_by == HotelSortField.PRICE:
        return sorted(hotels, key=lambda h: h.min_price, reverse=descending)
    if sort_by == HotelSortField.RATING:
        return sorted(hotels, key=lambda h: h.star_rating, reverse=not descending)
    if sort_by == HotelSortField.NAME:
        return sorted(hotels, key=lambda h: h.name.lower(), reverse=descending)
    return list(hotels)


def _validate_criteria(criteria: SearchCriteria) -> None:
    if (criteria.check_in is None) != (criteria.check_out is None):
        raise InvalidArgumentError("Check-in and check-out dates must be given together")
    if criteria.has_dates:
        validate_stay(criteria.check_in, criteria.check_out, criteria.rooms)
    elif criteria.rooms < 1:
        raise InvalidArgumentError("At least 1 room must be requested")
    if criteria.adults < 1:
        raise InvalidArgumentError("At least 1 adult is required")
    if criteria.children < 0:
        raise InvalidArgumentError("Children cannot be negative")
    if (
        criteria.min_price is not None
        and criteria.max_price is not None
        and criteria.min_price > criteria.max_price
    ):
        raise InvalidArgumentError("Minimum price cannot exceed maximum price")


def _validate_page(page: int, limit: int) -> None:
    if page < 1:
        raise InvalidArgumentError("Page must be at least 1")
    if not 1 <= limit <= MAX_PAGE_SIZE:
        raise InvalidArgumentError(f"Limit must be between 1 and {MAX_PAGE_SIZE}")
