"""
Itinerary data models.
"""

import math
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator


class ItineraryStatus(str, Enum):
    """Itinerary lifecycle status."""
    DRAFT = "draft"
    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Public sort names -> document fields
SORT_FIELDS = {
    "createdAt": "created_at",
    "startDate": "start_date",
    "title": "title",
}


def trip_duration(start_date: Optional[date], end_date: Optional[date]) -> int:
    """Inclusive trip length in days, 0 when either date is missing."""
    if not start_date or not end_date:
        return 0
    return abs((end_date - start_date).days) + 1


class Activity(BaseModel):
    """Single activity inside an itinerary."""
    title: str = Field(..., min_length=1, max_length=100)
    time: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("title", "time", "location", "description", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value


class ItineraryCreate(BaseModel):
    """Request model for creating an itinerary."""
    title: str = Field(..., min_length=1, max_length=100)
    destination: str = Field(..., min_length=1)
    start_date: date
    end_date: date
    activities: List[Activity] = Field(default_factory=list)
    status: ItineraryStatus = ItineraryStatus.DRAFT
    is_public: bool = False

    @field_validator("title", "destination", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> Any:
        return value.strip() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _check_dates(self) -> "ItineraryCreate":
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class ItineraryUpdate(BaseModel):
    """Partial update; omitted fields keep their current value."""
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    destination: Optional[str] = Field(None, min_length=1)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    activities: Optional[List[Activity]] = None
    status: Optional[ItineraryStatus] = None
    is_public: Optional[bool] = None

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class Itinerary(BaseModel):
    """Stored itinerary document."""
    id: str
    user_id: str
    title: str
    destination: str
    start_date: date
    end_date: date
    activities: List[Activity] = Field(default_factory=list)
    status: ItineraryStatus = ItineraryStatus.DRAFT
    is_public: bool = False
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def duration(self) -> int:
        return trip_duration(self.start_date, self.end_date)


class ListQuery(BaseModel):
    """Query parameters shared by every itinerary listing."""
    page: int = Field(1, ge=1, description="Page number")
    limit: int = Field(10, ge=1, le=100, description="Items per page")
    sort: str = Field("-createdAt", description="Sort field, '-' prefix for descending")
    search: Optional[str] = Field(None, description="Text search over title and destination")
    destination: Optional[str] = Field(None, description="Case-insensitive destination filter")

    @field_validator("sort")
    @classmethod
    def _check_sort(cls, value: str) -> str:
        if value.lstrip("-") not in SORT_FIELDS:
            raise ValueError("Invalid sort field")
        return value

    @property
    def sort_field(self) -> str:
        return SORT_FIELDS[self.sort.lstrip("-")]

    @property
    def descending(self) -> bool:
        return self.sort.startswith("-")

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    def cache_filters(self) -> Dict[str, Any]:
        """Every parameter that affects result content or order."""
        return self.model_dump(mode="json")

    def matches(self, document: Dict[str, Any]) -> bool:
        if self.destination:
            if self.destination.lower() not in document.get("destination", "").lower():
                return False
        if self.search:
            haystack = f"{document.get('title', '')} {document.get('destination', '')}".lower()
            if not any(term in haystack for term in self.search.lower().split()):
                return False
        return True


class PublicItineraryQuery(ListQuery):
    """Query parameters for the public listing."""


class ItineraryQuery(ListQuery):
    """Query parameters for a user's own itineraries."""
    status: Optional[ItineraryStatus] = None
    is_public: Optional[bool] = None

    def matches(self, document: Dict[str, Any]) -> bool:
        if self.status is not None and document.get("status") != self.status.value:
            return False
        if self.is_public is not None and document.get("is_public") != self.is_public:
            return False
        return super().matches(document)


class Pagination(BaseModel):
    current: int
    pages: int
    total: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(current=page, pages=math.ceil(total / limit), total=total)


class ItineraryPage(BaseModel):
    """List response envelope, cached as a whole."""
    itineraries: List[Itinerary]
    pagination: Pagination


class SharedSummary(BaseModel):
    title: str
    destination: str
    start_date: date
    end_date: date
    activities_count: int


class ShareLink(BaseModel):
    shareable_id: str
    share_path: str
    shared_data: SharedSummary


class SharedItinerary(BaseModel):
    """Public view of a shared itinerary, without owner details."""
    id: str
    title: str
    destination: str
    start_date: date
    end_date: date
    activities: List[Activity]
    created_at: datetime
    updated_at: datetime
    duration: int
    created_by: str
