"""Demo catalog for the in-memory store"""
import logging
from decimal import Decimal

from domain.entities import Hotel, RoomType
from domain.enums import RoomCategory
from domain.value_objects import Location, MaxOccupancy
from infrastructure.repositories.in_memory_repositories import InMemoryInventoryStore

logger = logging.getLogger("hotel_booking.seed")

DEMO_HOTELS = [
    Hotel(
        hotel_id="hotel-grand-plaza",
        name="Grand Plaza Hotel",
        description="Business hotel in the financial district",
        star_rating=5,
        location=Location(address="1 Market Street", city="San Francisco", state="CA", country="USA"),
        amenities=["wifi", "pool", "spa", "gym", "restaurant"],
    ),
    Hotel(
        hotel_id="hotel-harbor-inn",
        name="Harbor Inn",
        description="Small inn by the waterfront",
        star_rating=3,
        location=Location(address="200 Pier Road", city="San Diego", state="CA", country="USA"),
        amenities=["wifi", "parking"],
    ),
    Hotel(
        hotel_id="hotel-mountain-lodge",
        name="Mountain Lodge",
        description="Family lodge close to the ski lifts",
        star_rating=4,
        location=Location(address="12 Alpine Way", city="Denver", state="CO", country="USA"),
        amenities=["wifi", "parking", "restaurant", "fireplace"],
    ),
]

DEMO_ROOM_TYPES = [
    RoomType(
        room_type_id="room-plaza-deluxe",
        hotel_id="hotel-grand-plaza",
        name="Deluxe King",
        room_category=RoomCategory.DELUXE,
        base_price=Decimal("250.00"),
        max_occupancy=MaxOccupancy(adults=2, children=1),
        total_inventory=10,
        amenities=["city view", "minibar"],
    ),
    RoomType(
        room_type_id="room-plaza-suite",
        hotel_id="hotel-grand-plaza",
        name="Executive Suite",
        room_category=RoomCategory.SUITE,
        base_price=Decimal("480.00"),
        max_occupancy=MaxOccupancy(adults=4, children=2),
        total_inventory=3,
        amenities=["lounge access", "bathtub"],
    ),
    RoomType(
        room_type_id="room-harbor-standard",
        hotel_id="hotel-harbor-inn",
        name="Standard Queen",
        room_category=RoomCategory.STANDARD,
        base_price=Decimal("100.00"),
        max_occupancy=MaxOccupancy(adults=2, children=0),
        total_inventory=5,
    ),
    RoomType(
        room_type_id="room-lodge-family",
        hotel_id="hotel-mountain-lodge",
        name="Family Room",
        room_category=RoomCategory.FAMILY,
        base_price=Decimal("180.00"),
        max_occupancy=MaxOccupancy(adults=2, children=3),
        total_inventory=6,
        amenities=["bunk beds"],
    ),
]


def seed_demo_catalog(store: InMemoryInventoryStore) -> None:
    for hotel in DEMO_HOTELS:
        store.add_hotel(hotel)
    for room_type in DEMO_ROOM_TYPES:
        store.add_room_type(room_type)
    logger.info("Seeded %d demo hotels with %d room types", len(DEMO_HOTELS), len(DEMO_ROOM_TYPES))
