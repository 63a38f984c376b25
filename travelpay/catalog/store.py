"""
Read-only catalog of flights, hotels and activities.

The payment core only depends on the point lookups; a lookup miss is a
normal outcome (the client may hold a stale id) and returns ``None``.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional, Protocol


@dataclass(frozen=True)
class Flight:
    id: str
    airline: str
    flight_number: str
    origin: str
    destination: str
    departure_date: str
    departure_time: str
    arrival_time: str
    price: Decimal
    currency: str
    stops: str = "Direct"


@dataclass(frozen=True)
class Hotel:
    id: str
    name: str
    city: str
    location: str
    price_per_night: Decimal
    currency: str
    rating: Decimal = Decimal("0")

    @property
    def price(self) -> Decimal:
        return self.price_per_night


@dataclass(frozen=True)
class Activity:
    id: str
    name: str
    city: str
    category: str
    duration: str
    price: Decimal
    currency: str


class CatalogStore(Protocol):
    def get_flight(self, flight_id: str) -> Optional[Flight]:
        ...

    def get_hotel(self, hotel_id: str) -> Optional[Hotel]:
        ...

    def get_activity(self, activity_id: str) -> Optional[Activity]:
        ...


class InMemoryCatalogStore:
    """Catalog kept in process memory, keyed by id."""

    def __init__(self):
        self._flights: Dict[str, Flight] = {}
        self._hotels: Dict[str, Hotel] = {}
        self._activities: Dict[str, Activity] = {}

    def add_flight(self, flight: Flight) -> Flight:
        self._flights[flight.id] = flight
        return flight

    def add_hotel(self, hotel: Hotel) -> Hotel:
        self._hotels[hotel.id] = hotel
        return hotel

    def add_activity(self, activity: Activity) -> Activity:
        self._activities[activity.id] = activity
        return activity

    def get_flight(self, flight_id: str) -> Optional[Flight]:
        return self._flights.get(flight_id)

    def get_hotel(self, hotel_id: str) -> Optional[Hotel]:
        return self._hotels.get(hotel_id)

    def get_activity(self, activity_id: str) -> Optional[Activity]:
        return self._activities.get(activity_id)

    def search_flights(
        self,
        origin: Optional[str] = None,
        destination: Optional[str] = None,
        departure_date: Optional[str] = None,
        currency: Optional[str] = None,
    ) -> List[Flight]:
        flights = [
            f for f in self._flights.values()
            if (not origin or f.origin == origin.upper())
            and (not destination or f.destination == destination.upper())
            and (not departure_date or f.departure_date == departure_date)
            and (not currency or f.currency == currency.upper())
        ]
        return sorted(flights, key=lambda f: f.price)

    def search_hotels(self, city: Optional[str] = None, currency: Optional[str] = None) -> List[Hotel]:
        hotels = [
            h for h in self._hotels.values()
            if (not city or h.city.lower() == city.lower())
            and (not currency or h.currency == currency.upper())
        ]
        return sorted(hotels, key=lambda h: h.price_per_night)

    def search_activities(self, city: Optional[str] = None, category: Optional[str] = None) -> List[Activity]:
        return [
            a for a in self._activities.values()
            if (not city or a.city.lower() == city.lower())
            and (not category or a.category.lower() == category.lower())
        ]
