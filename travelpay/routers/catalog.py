"""Read-only catalog lookups backing the search screens."""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException

from travelpay.catalog import InMemoryCatalogStore
from travelpay.deps import get_catalog

router = APIRouter(tags=["Catalog"])


@router.get("/flights")
def search_flights(
    origin: Optional[str] = None,
    destination: Optional[str] = None,
    date: Optional[str] = None,
    currency: Optional[str] = None,
    catalog: InMemoryCatalogStore = Depends(get_catalog),
):
    return catalog.search_flights(origin, destination, date, currency)


@router.get("/hotels")
def search_hotels(
    city: Optional[str] = None,
    currency: Optional[str] = None,
    catalog: InMemoryCatalogStore = Depends(get_catalog),
):
    return catalog.search_hotels(city, currency)


@router.get("/activities")
def search_activities(
    city: Optional[str] = None,
    category: Optional[str] = None,
    catalog: InMemoryCatalogStore = Depends(get_catalog),
):
    return catalog.search_activities(city, category)


@router.get("/{kind}/{item_id}")
def get_item(kind: str, item_id: str, catalog: InMemoryCatalogStore = Depends(get_catalog)):
    lookups = {
        "flights": ("Flight", catalog.get_flight),
        "hotels": ("Hotel", catalog.get_hotel),
        "activities": ("Activity", catalog.get_activity),
    }
    if kind not in lookups:
        raise HTTPException(status_code=404, detail=f"Unknown catalog section: {kind}")
    label, lookup = lookups[kind]
    item = lookup(item_id)
    if item is None:
        raise HTTPException(status_code=404, detail=f"{label} {item_id} not found")
    return item
