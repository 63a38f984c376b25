from .store import Activity, CatalogStore, Flight, Hotel, InMemoryCatalogStore
from .seed import build_sample_catalog

__all__ = [
    "Activity",
    "CatalogStore",
    "Flight",
    "Hotel",
    "InMemoryCatalogStore",
    "build_sample_catalog",
]
