import unittest

from travelpay.errors import InvalidBookingDetails
from travelpay.models import FlightRefs, HotelRef
from travelpay.services.normalize import normalize_booking_details

WIZARD_DETAILS = {
    "destination": "Da Nang",
    "travelers": 2,
    "dates": {"startDate": "2025-10-25", "endDate": "2025-10-30", "duration": 5},
    "flights": {
        "outbound": {"id": "FL-AK6150", "price": 1},
        "return": {"id": "FL-AK6149", "price": 1},
    },
    "hotels": {"selectedHotels": [{"id": "HT-RIVERSIDE", "nights": 2, "price": 1}]},
    "itinerary": {"selectedActivities": [{"id": "AC-BA-NA", "price": 0}]},
    "totalAmount": 3,
}


class TestNormalize(unittest.TestCase):
    def test_canonical_shape(self):
        intent = normalize_booking_details({
            "destination": "Da Nang",
            "travelers": 2,
            "dateRange": {"startDate": "2025-10-25", "endDate": "2025-10-30"},
            "flightRefs": {"outboundId": "FL-AK6150", "returnId": "FL-AK6149"},
            "hotelRefs": [{"id": "HT-RIVERSIDE", "nights": 2}],
            "activityRefs": ["AC-BA-NA"],
        })
        self.assertEqual(intent.flight_refs, FlightRefs("FL-AK6150", "FL-AK6149"))
        self.assertEqual(intent.hotel_refs, (HotelRef("HT-RIVERSIDE", 2),))
        self.assertEqual(intent.activity_refs, ("AC-BA-NA",))
        self.assertEqual(intent.date_range.start_date, "2025-10-25")

    def test_wizard_shape_drops_prices(self):
        intent = normalize_booking_details(WIZARD_DETAILS)
        self.assertEqual(intent.destination, "Da Nang")
        self.assertEqual(intent.travelers, 2)
        self.assertEqual(intent.flight_refs, FlightRefs("FL-AK6150", "FL-AK6149"))
        self.assertEqual(intent.hotel_refs, (HotelRef("HT-RIVERSIDE", 2),))
        self.assertEqual(intent.activity_refs, ("AC-BA-NA",))
        self.assertFalse(hasattr(intent, "total_amount"))

    def test_wizard_and_canonical_agree(self):
        canonical = normalize_booking_details({
            "destination": "Da Nang",
            "travelers": 2,
            "dateRange": {"startDate": "2025-10-25", "endDate": "2025-10-30"},
            "flightRefs": {"outboundId": "FL-AK6150", "returnId": "FL-AK6149"},
            "hotelRefs": [{"id": "HT-RIVERSIDE", "nights": 2}],
            "activityRefs": ["AC-BA-NA"],
        })
        self.assertEqual(normalize_booking_details(WIZARD_DETAILS), canonical)

    def test_nights_default_to_duration(self):
        details = dict(WIZARD_DETAILS, hotels={"selectedHotels": [{"id": "HT-RIVERSIDE"}]})
        intent = normalize_booking_details(details)
        self.assertEqual(intent.hotel_refs, (HotelRef("HT-RIVERSIDE", 5),))

    def test_nights_default_to_date_span(self):
        details = dict(
            WIZARD_DETAILS,
            dates={"startDate": "2025-10-25", "endDate": "2025-10-28"},
            hotels={"selectedHotels": [{"id": "HT-RIVERSIDE"}]},
        )
        intent = normalize_booking_details(details)
        self.assertEqual(intent.hotel_refs, (HotelRef("HT-RIVERSIDE", 3),))

    def test_one_way_trip(self):
        details = dict(WIZARD_DETAILS, flights={"outbound": {"id": "FL-AK6150"}})
        intent = normalize_booking_details(details)
        self.assertEqual(intent.flight_refs, FlightRefs("FL-AK6150", None))

    def test_placeholder_ids_pass_through(self):
        # Resolved (and rejected) by the price calculator, not here.
        details = dict(WIZARD_DETAILS, flights={"outbound": {"id": "selected-flight"}})
        self.assertEqual(normalize_booking_details(details).flight_refs.outbound_id, "selected-flight")

    def test_invalid_payloads(self):
        for raw in (
            "not an object",
            {},
            {"destination": "Da Nang", "travelers": "many", "dates": {"startDate": "a", "endDate": "b"}},
            {"destination": "Da Nang", "travelers": 2, "dateRange": {"startDate": "2025-10-25"}},
        ):
            with self.assertRaises(InvalidBookingDetails):
                normalize_booking_details(raw)

    def test_undeterminable_nights(self):
        details = dict(
            WIZARD_DETAILS,
            dates={"startDate": "soon", "endDate": "later"},
            hotels={"selectedHotels": [{"id": "HT-RIVERSIDE"}]},
        )
        with self.assertRaises(InvalidBookingDetails):
            normalize_booking_details(details)


if __name__ == "__main__":
    unittest.main()
