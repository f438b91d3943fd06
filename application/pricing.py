"""Pricing Policy - nightly rate and price breakdown for a stay

Single computation path for nightly rates: booking creation, availability
checks and search results all quote through PricingPolicy.
"""
import math
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Optional, Union

from domain.errors import InvalidArgumentError
from domain.value_objects import PricingBreakdown

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")

WEEKEND_SURCHARGE = Decimal("1.20")
ADVANCE_BOOKING_DISCOUNT = Decimal("0.90")
LAST_MINUTE_SURCHARGE = Decimal("1.10")
LONG_STAY_DISCOUNT = Decimal("0.95")

ADVANCE_BOOKING_DAYS = 30
LAST_MINUTE_DAYS = 7
LONG_STAY_NIGHTS = 7

# date.weekday(): Friday == 4, Saturday == 5
WEEKEND_CHECK_IN_DAYS = (4, 5)


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def _as_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


def _as_decimal(value: Number) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


class PricingPolicy:
    """Deterministic dynamic pricing; "today" comes from the injected clock"""

    def __init__(
        self,
        currency: str = "USD",
        tax_rate: Number = Decimal("0.12"),
        booking_fee: Number = Decimal("25.00"),
        today: Optional[Callable[[], date]] = None,
    ):
        self.currency = currency
        self.tax_rate = _as_decimal(tax_rate)
        self.booking_fee = _money(_as_decimal(booking_fee))
        self._today = today or date.today

    @staticmethod
    def total_nights(check_in: date, check_out: date) -> int:
        """Whole nights, rounded up, at least one"""
        delta = check_out - check_in
        return max(1, math.ceil(delta.total_seconds() / 86400))

    def nightly_rate(self, base_price: Number, check_in: date, check_out: date) -> Decimal:
        """Base price with weekend, advance/last-minute and long-stay adjustments"""
        self._validate_dates(check_in, check_out)
        rate = _as_decimal(base_price)

        if _as_date(check_in).weekday() in WEEKEND_CHECK_IN_DAYS:
            rate *= WEEKEND_SURCHARGE

        days_until_check_in = (_as_date(check_in) - self._today()).days
        if days_until_check_in > ADVANCE_BOOKING_DAYS:
            rate *= ADVANCE_BOOKING_DISCOUNT
        elif days_until_check_in < LAST_MINUTE_DAYS:
            rate *= LAST_MINUTE_SURCHARGE

        if self.total_nights(check_in, check_out) >= LONG_STAY_NIGHTS:
            rate *= LONG_STAY_DISCOUNT

        return _money(rate)

    def price(
        self,
        base_price: Number,
        check_in: date,
        check_out: date,
        rooms_requested: int,
    ) -> PricingBreakdown:
        """Price a stay of rooms_requested rooms"""
        if rooms_requested is None or rooms_requested <= 0:
            raise InvalidArgumentError("Rooms requested must be a positive number")

        room_rate = self.nightly_rate(base_price, check_in, check_out)
        nights = self.total_nights(check_in, check_out)
        subtotal = _money(room_rate * nights * rooms_requested)
        taxes = _money(subtotal * self.tax_rate)

        return PricingBreakdown(
            room_rate=room_rate,
            total_nights=nights,
            subtotal=subtotal,
            taxes=taxes,
            fees=self.booking_fee,
            total=subtotal + taxes + self.booking_fee,
            currency=self.currency,
        )

    @staticmethod
    def discount_percentage(base_price: Number, current_price: Number) -> Optional[int]:
        """Whole-percent discount of current_price against base_price, None if not discounted"""
        base = _as_decimal(base_price)
        current = _as_decimal(current_price)
        if base <= 0 or current >= base:
            return None
        percentage = (base - current) / base * 100
        return int(percentage.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    @staticmethod
    def _validate_dates(check_in: date, check_out: date) -> None:
        if check_in is None or check_out is None:
            raise InvalidArgumentError("Check-in and check-out dates are required")
        if check_out <= check_in:
            raise InvalidArgumentError("Check-out date must be after check-in date")
