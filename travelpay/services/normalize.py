"""
Normalize client booking payloads into one canonical BookingIntent.

Two client shapes are accepted: the canonical one (``flightRefs``,
``hotelRefs``, ``activityRefs``) and the checkout wizard's nested one
(``flights.outbound.id``, ``hotels.selectedHotels[]``,
``itinerary.selectedActivities[]``). Any price or total fields the client
sends are dropped here and never reach the price calculator.
"""
from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from travelpay.errors import InvalidBookingDetails
from travelpay.models import BookingIntent, DateRange, FlightRefs, HotelRef


class _Shape(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class _Ref(_Shape):
    id: str = Field(..., min_length=1)


class _DateRangeIn(_Shape):
    start_date: str = Field(..., alias="startDate")
    end_date: str = Field(..., alias="endDate")
    duration: Optional[int] = None


class _FlightRefsIn(_Shape):
    outbound_id: Optional[str] = Field(None, alias="outboundId")
    return_id: Optional[str] = Field(None, alias="returnId")


class _HotelRefIn(_Shape):
    id: str = Field(..., min_length=1)
    nights: Optional[int] = None


class CanonicalBookingDetails(_Shape):
    destination: str
    travelers: int
    date_range: _DateRangeIn = Field(..., alias="dateRange")
    flight_refs: _FlightRefsIn = Field(default_factory=_FlightRefsIn, alias="flightRefs")
    hotel_refs: List[_HotelRefIn] = Field(default_factory=list, alias="hotelRefs")
    activity_refs: List[str] = Field(default_factory=list, alias="activityRefs")


class _WizardFlights(_Shape):
    outbound: Optional[_Ref] = None
    return_: Optional[_Ref] = Field(None, alias="return")


class _WizardHotels(_Shape):
    selected_hotels: List[_HotelRefIn] = Field(default_factory=list, alias="selectedHotels")


class _WizardItinerary(_Shape):
    selected_activities: List[_Ref] = Field(default_factory=list, alias="selectedActivities")


class WizardBookingDetails(_Shape):
    destination: str
    travelers: int
    dates: _DateRangeIn
    flights: Optional[_WizardFlights] = None
    hotels: Optional[_WizardHotels] = None
    itinerary: Optional[_WizardItinerary] = None


CANONICAL_KEYS = ("flightRefs", "hotelRefs", "activityRefs", "dateRange")


def _stay_length(dates: _DateRangeIn) -> Optional[int]:
    if dates.duration:
        return dates.duration
    try:
        return (date.fromisoformat(dates.end_date) - date.fromisoformat(dates.start_date)).days
    except ValueError:
        return None


def _hotel_refs(hotels: List[_HotelRefIn], dates: _DateRangeIn) -> tuple:
    refs = []
    for hotel in hotels:
        nights = hotel.nights if hotel.nights is not None else _stay_length(dates)
        if nights is None:
            raise InvalidBookingDetails(f"Cannot determine nights for hotel {hotel.id}")
        refs.append(HotelRef(id=hotel.id, nights=nights))
    return tuple(refs)


def normalize_booking_details(raw: Dict[str, Any]) -> BookingIntent:
    """
    Convert an accepted client payload into a canonical BookingIntent.

    Raises:
        InvalidBookingDetails: payload matches neither accepted shape
    """
    if not isinstance(raw, dict):
        raise InvalidBookingDetails("bookingDetails must be an object")

    try:
        if any(key in raw for key in CANONICAL_KEYS):
            details = CanonicalBookingDetails.model_validate(raw)
            return BookingIntent(
                destination=details.destination,
                travelers=details.travelers,
                date_range=DateRange(details.date_range.start_date, details.date_range.end_date),
                flight_refs=FlightRefs(details.flight_refs.outbound_id, details.flight_refs.return_id),
                hotel_refs=_hotel_refs(details.hotel_refs, details.date_range),
                activity_refs=tuple(details.activity_refs),
            )

        details = WizardBookingDetails.model_validate(raw)
    except ValidationError as e:
        raise InvalidBookingDetails(f"Invalid booking data: {e.error_count()} validation error(s)", errors=e.errors())

    flights = details.flights or _WizardFlights()
    hotels = details.hotels.selected_hotels if details.hotels else []
    activities = details.itinerary.selected_activities if details.itinerary else []
    return BookingIntent(
        destination=details.destination,
        travelers=details.travelers,
        date_range=DateRange(details.dates.start_date, details.dates.end_date),
        flight_refs=FlightRefs(
            flights.outbound.id if flights.outbound else None,
            flights.return_.id if flights.return_ else None,
        ),
        hotel_refs=_hotel_refs(hotels, details.dates),
        activity_refs=tuple(a.id for a in activities),
    )
