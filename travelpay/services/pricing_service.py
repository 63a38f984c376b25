"""
Authoritative booking price computation.

The client never sends prices we trust: every referenced item is looked up
in the catalog and summed from server-known prices. The computation is run
once when the payment intent is created and again, fresh, on confirmation.
"""
from decimal import Decimal
from typing import Optional

import structlog

from travelpay.catalog import CatalogStore
from travelpay.config import settings
from travelpay.currency import normalize_currency
from travelpay.errors import (
    CurrencyMismatch,
    InvalidQuantity,
    NonPositiveTotal,
    ReferenceNotFound,
)
from travelpay.models import BookingIntent, ComputedTotal

logger = structlog.get_logger(__name__)

MIN_TRAVELERS = 1
MIN_NIGHTS = 1


class _CurrencyGuard:
    """First resolved item fixes the currency; every later one must match."""

    def __init__(self):
        self.currency: Optional[str] = None

    def check(self, currency: str, item_id: str) -> None:
        code = normalize_currency(currency)
        if self.currency is None:
            self.currency = code
        elif code != self.currency:
            raise CurrencyMismatch(self.currency, code, item_id=item_id)


class PriceCalculator:
    def __init__(
        self,
        catalog: CatalogStore,
        max_travelers: Optional[int] = None,
        max_nights: Optional[int] = None,
    ):
        self.catalog = catalog
        self.max_travelers = max_travelers or settings.MAX_TRAVELERS
        self.max_nights = max_nights or settings.MAX_NIGHTS

    def compute_total(self, intent: BookingIntent) -> ComputedTotal:
        """
        Re-derive the total price of a booking from catalog data.

        Args:
            intent: Canonical booking intent (ids and quantities only)

        Returns:
            ComputedTotal with the amount, its single currency and the
            flight/hotel/activity subtotals

        Raises:
            InvalidQuantity: travelers or nights outside accepted bounds
            ReferenceNotFound: a referenced id does not resolve
            CurrencyMismatch: resolved items do not share one currency
            NonPositiveTotal: nothing billable, or the sum is <= 0
        """
        if not MIN_TRAVELERS <= intent.travelers <= self.max_travelers:
            raise InvalidQuantity(
                f"travelers must be between {MIN_TRAVELERS} and {self.max_travelers}",
                travelers=intent.travelers,
            )

        guard = _CurrencyGuard()

        flights = Decimal("0")
        refs = intent.flight_refs
        for kind, flight_id in (("outbound flight", refs.outbound_id), ("return flight", refs.return_id)):
            if not flight_id:
                continue
            flight = self.catalog.get_flight(flight_id)
            if flight is None:
                raise ReferenceNotFound(kind, flight_id)
            guard.check(flight.currency, flight.id)
            flights += flight.price

        hotels = Decimal("0")
        for ref in intent.hotel_refs:
            if not MIN_NIGHTS <= ref.nights <= self.max_nights:
                raise InvalidQuantity(
                    f"nights must be between {MIN_NIGHTS} and {self.max_nights}",
                    hotel_id=ref.id,
                    nights=ref.nights,
                )
            hotel = self.catalog.get_hotel(ref.id)
            if hotel is None:
                raise ReferenceNotFound("hotel", ref.id)
            guard.check(hotel.currency, hotel.id)
            hotels += hotel.price_per_night * ref.nights

        activities = Decimal("0")
        for activity_id in intent.activity_refs:
            activity = self.catalog.get_activity(activity_id)
            if activity is None:
                raise ReferenceNotFound("activity", activity_id)
            guard.check(activity.currency, activity.id)
            activities += activity.price

        total = flights + hotels + activities
        if guard.currency is None or total <= 0:
            raise NonPositiveTotal("Booking total must be greater than zero", total=str(total))

        logger.debug(
            "booking_total_computed",
            amount=str(total),
            currency=guard.currency,
            flights=str(flights),
            hotels=str(hotels),
            activities=str(activities),
        )
        return ComputedTotal(
            amount=total,
            currency=guard.currency,
            flights_subtotal=flights,
            hotels_subtotal=hotels,
            activities_subtotal=activities,
        )
