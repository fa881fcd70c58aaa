"""
Domain models (Pydantic).

These types represent the stable "contract" between layers:
- search input (`SearchRequest`, wire form `{lat, lng, radius, category?}`)
- candidate/catalog entities (`POI`, `CatalogEntry`, `POICreate`)
- search output (`POIResult`, wire form `{id, name, category, lat, lng, distance}`)
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from poiproxy.core.geo import Coordinate

# Categories the synthetic source draws from.
SYNTHETIC_CATEGORIES: tuple[str, ...] = (
    "Hospital",
    "Police",
    "Pharmacy",
    "Park",
    "Library",
    "School",
    "Restaurant",
    "Grocery",
)
POI_CATEGORIES: tuple[str, ...] = (*SYNTHETIC_CATEGORIES, "Other")

# Category values that mean "no filtering".
ALL_CATEGORIES_SENTINELS = frozenset({"", "all"})


def normalize_category(category: str | None) -> str | None:
    """Return the category filter to apply, or None for "all"."""
    if category is None:
        return None
    value = category.strip()
    if value.lower() in ALL_CATEGORIES_SENTINELS:
        return None
    return value


class SearchRequest(BaseModel):
    """One proximity search, validated at the boundary."""

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    radius: float = Field(..., gt=0, description="Search radius in kilometers")
    category: str | None = None

    @field_validator("lat", "lng", "radius", mode="before")
    @classmethod
    def _reject_non_numbers(cls, value: Any) -> Any:
        # bool is an int subclass; "true" is not a coordinate.
        if isinstance(value, bool):
            raise ValueError("must be a number")
        return value

    @field_validator("lat", "lng", "radius")
    @classmethod
    def _finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError("must be a finite number")
        return value

    @field_validator("category")
    @classmethod
    def _normalize_category(cls, value: str | None) -> str | None:
        return normalize_category(value)

    @property
    def origin(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)

    @property
    def radius_km(self) -> float:
        return self.radius


class POI(BaseModel):
    """A point of interest candidate."""

    id: str
    name: str
    category: str
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    description: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, value: Any) -> Any:
        # Remote tables may use integer or UUID primary keys.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @property
    def location(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)


class POICreate(BaseModel):
    """Admin input for a new catalog entry."""

    name: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    description: str | None = None

    @field_validator("name", "category")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class CatalogEntry(POI):
    """A POI stored in the admin-managed catalog."""

    created_at: datetime | None = None


class POIResult(BaseModel):
    """A POI with its distance from the caller's true origin."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    category: str
    lat: float
    lng: float
    distance_km: float = Field(..., ge=0, serialization_alias="distance", validation_alias="distance")
    description: str | None = None

    @classmethod
    def from_poi(cls, poi: POI, *, distance_km: float) -> "POIResult":
        return cls(
            id=poi.id,
            name=poi.name,
            category=poi.category,
            lat=poi.lat,
            lng=poi.lng,
            distance_km=distance_km,
            description=poi.description,
        )


class ErrorResponse(BaseModel):
    error: str
    retryable: bool | None = None
