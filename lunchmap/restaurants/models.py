from __future__ import annotations

from typing import Any

from pydantic import Field

from ..store.models import Record, Restaurant, Timestamp


class RestaurantCreate(Record):
    # Fields are checked by the service so every bad field is reported at once.
    name: Any = None
    address: Any = None
    lat: Any = None
    lng: Any = None
    category: Any = None
    description: Any = None


class ReviewCreate(Record):
    rating: Any = None
    short_comment: Any = None
    comment: Any = None


class ReviewView(Record):
    id: str
    rating: int
    short_comment: str
    comment: str
    created_at: Timestamp
    author_id: str
    author_name: str
    department: str


class DepartmentBucket(Record):
    department: str
    review_count: int = 0
    average_rating: float = 0
    latest_review: ReviewView | None = None


class RestaurantSummary(Restaurant):
    review_count: int = 0
    average_rating: float = 0
    departments: dict[str, DepartmentBucket] = Field(default_factory=dict)
    latest_review: ReviewView | None = None


class RestaurantList(Record):
    restaurants: list[RestaurantSummary]


class RestaurantEnvelope(Record):
    restaurant: RestaurantSummary


class RestaurantDetail(Record):
    restaurant: RestaurantSummary
    reviews: list[ReviewView]


class ReviewCreated(Record):
    review: ReviewView
    restaurant: RestaurantSummary
