"""Sample catalog: Penang to Central Vietnam trips."""
from decimal import Decimal

from .store import Activity, Flight, Hotel, InMemoryCatalogStore

SAMPLE_FLIGHTS = [
    Flight("FL-MH780", "Malaysia Airlines", "MH780 + VN1547", "PEN", "DAD", "2025-10-25",
           "08:30", "15:45", Decimal("1045.00"), "MYR", "1 stop in KUL"),
    Flight("FL-VN634", "Vietnam Airlines", "VN634 + VN1203", "PEN", "DAD", "2025-10-25",
           "10:15", "18:20", Decimal("1105.00"), "MYR", "1 stop in SGN"),
    Flight("FL-AK6148", "AirAsia", "AK6148 + VN1456", "PEN", "DAD", "2025-10-25",
           "06:45", "16:30", Decimal("965.00"), "MYR", "1 stop in KUL"),
    Flight("FL-TR409", "Scoot", "TR409 + VN1289", "PEN", "DAD", "2025-10-25",
           "14:20", "22:15", Decimal("1025.00"), "MYR", "1 stop in SIN"),
    Flight("FL-AK6149", "AirAsia", "AK6149", "DAD", "PEN", "2025-10-30",
           "17:10", "21:05", Decimal("435.00"), "MYR"),
    Flight("FL-AK6150", "AirAsia", "AK6150", "PEN", "DAD", "2025-10-25",
           "07:20", "09:15", Decimal("420.00"), "MYR"),
    Flight("FL-SQ183", "Singapore Airlines", "SQ183", "SIN", "DAD", "2025-10-25",
           "09:40", "11:05", Decimal("310.00"), "SGD"),
]

SAMPLE_HOTELS = [
    Hotel("HT-THUAN-TINH", "Thuan Tinh Island Tour Eco Home", "Hoi An", "Ancient Town",
          Decimal("120.00"), "MYR", Decimal("4.2")),
    Hotel("HT-SUNFLOWER", "Sunflower Village Hotel", "Hoi An", "Ancient Town",
          Decimal("150.00"), "MYR", Decimal("4.5")),
    Hotel("HT-MY-KHE", "My Khe Beach Hotel", "Da Nang", "My Khe Beach",
          Decimal("180.00"), "MYR", Decimal("4.3")),
    Hotel("HT-OCEAN-BAY", "Ocean Bay Hotel", "Da Nang", "My Khe Beach",
          Decimal("165.00"), "MYR", Decimal("4.6")),
    Hotel("HT-RIVERSIDE", "Riverside Boutique Resort", "Hoi An", "Thu Bon River",
          Decimal("320.00"), "MYR", Decimal("4.7")),
    Hotel("HT-HOIAN-VND", "Hoi An Homestay", "Hoi An", "Cam Thanh",
          Decimal("650000"), "VND", Decimal("4.4")),
]

SAMPLE_ACTIVITIES = [
    Activity("AC-BA-NA", "Ba Na Hills Day Trip", "Da Nang", "Must-Visit",
             "Full day (8 hours)", Decimal("390.00"), "MYR"),
    Activity("AC-MARBLE", "Marble Mountains", "Da Nang", "Cultural",
             "Half day (4 hours)", Decimal("115.00"), "MYR"),
    Activity("AC-COOKING", "Cooking Class", "Hoi An", "Interactive",
             "Half day (3 hours)", Decimal("205.00"), "MYR"),
    Activity("AC-BASKET", "Basket Boat Tour", "Hoi An", "Nature",
             "Half day (3 hours)", Decimal("1850.00"), "INR"),
    Activity("AC-DRAGON", "Dragon Bridge Fire Show", "Da Nang", "Free",
             "Evening (1 hour)", Decimal("0.00"), "MYR"),
    Activity("AC-LANTERN", "Lantern Making Workshop", "Hoi An", "Interactive",
             "2 hours", Decimal("250000"), "VND"),
]


def build_sample_catalog() -> InMemoryCatalogStore:
    store = InMemoryCatalogStore()
    for flight in SAMPLE_FLIGHTS:
        store.add_flight(flight)
    for hotel in SAMPLE_HOTELS:
        store.add_hotel(hotel)
    for activity in SAMPLE_ACTIVITIES:
        store.add_activity(activity)
    return store
