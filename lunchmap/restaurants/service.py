from __future__ import annotations

import logging
import math
import uuid
from typing import Any

from pydantic.alias_generators import to_camel

from ..errors import Forbidden, NotFound, ValidationError
from ..store.json_store import Store
from ..store.models import Dataset, Restaurant, Review, utc_now
from .aggregator import enrich_review, newest_first, summarize
from .models import (
    RestaurantCreate,
    RestaurantDetail,
    RestaurantSummary,
    ReviewCreate,
    ReviewCreated,
)

logger = logging.getLogger(__name__)

SHORT_COMMENT_MAX = 120
COMMENT_MAX = 2000


def _parse_number(value: Any) -> float | None:
    """Return a finite float for numbers or numeric strings, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def _parse_coordinate(value: Any, limit: float) -> float | None:
    number = _parse_number(value)
    if number is None or not -limit <= number <= limit:
        return None
    return number


def _parse_rating(value: Any) -> int | None:
    number = _parse_number(value)
    if number is None or not number.is_integer():
        return None
    rating = int(number)
    return rating if 1 <= rating <= 5 else None


def _text(value: Any) -> str | None:
    """Coerce scalar input to text; None for objects, lists and booleans."""
    if value is None:
        return ""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        return None
    return str(value)


def _check_text(payload: Any, fields: tuple[str, ...], invalid: list[str]) -> dict[str, str]:
    values = {}
    for field in fields:
        text = _text(getattr(payload, field))
        if text is None:
            invalid.append(to_camel(field))
        else:
            values[field] = text
    return values


class RestaurantService:
    """Create/read/delete restaurants and reviews inside a single team.

    Every operation loads the whole dataset, applies its change in memory
    and saves the whole dataset back.
    """

    def __init__(self, store: Store) -> None:
        self._store = store

    def _summarize(self, db: Dataset, restaurant: Restaurant) -> RestaurantSummary:
        return summarize(restaurant, db.reviews, db.users)

    def _require_restaurant(self, db: Dataset, team_id: str, restaurant_id: str) -> Restaurant:
        restaurant = db.find_restaurant(team_id, restaurant_id)
        if restaurant is None:
            raise NotFound("Restaurant not found")
        return restaurant

    def list_restaurants(self, team_id: str) -> list[RestaurantSummary]:
        db = self._store.load()
        return [self._summarize(db, r) for r in db.restaurants if r.team_id == team_id]

    def create_restaurant(
        self,
        team_id: str,
        creator_id: str,
        payload: RestaurantCreate,
    ) -> RestaurantSummary:
        invalid: list[str] = []
        name = (_text(payload.name) or "").strip()
        if not name:
            invalid.append("name")
        lat = _parse_coordinate(payload.lat, 90)
        if lat is None:
            invalid.append("lat")
        lng = _parse_coordinate(payload.lng, 180)
        if lng is None:
            invalid.append("lng")
        text = _check_text(payload, ("address", "category", "description"), invalid)
        if invalid:
            raise ValidationError("Check the highlighted restaurant fields", fields=invalid)

        db = self._store.load()
        restaurant = Restaurant(
            id=str(uuid.uuid4()),
            team_id=team_id,
            name=name,
            address=text["address"].strip(),
            lat=lat,
            lng=lng,
            category=text["category"].strip(),
            description=text["description"].strip(),
            created_by=creator_id,
            created_at=utc_now(),
        )
        db.restaurants.append(restaurant)
        self._store.save(db)
        logger.info("Restaurant %s created in team %s", restaurant.id, team_id)
        return self._summarize(db, restaurant)

    def get_restaurant_detail(self, team_id: str, restaurant_id: str) -> RestaurantDetail:
        db = self._store.load()
        restaurant = self._require_restaurant(db, team_id, restaurant_id)
        users_by_id = {u.id: u for u in db.users}
        reviews = [
            enrich_review(r, users_by_id)
            for r in db.reviews
            if r.restaurant_id == restaurant.id
        ]
        return RestaurantDetail(
            restaurant=self._summarize(db, restaurant),
            reviews=newest_first(reviews),
        )

    def delete_restaurant(self, team_id: str, requester_id: str, restaurant_id: str) -> None:
        db = self._store.load()
        restaurant = self._require_restaurant(db, team_id, restaurant_id)
        if restaurant.created_by != requester_id:
            raise Forbidden("Only the member who added this restaurant can delete it")

        db.restaurants = [r for r in db.restaurants if r.id != restaurant.id]
        before = len(db.reviews)
        db.reviews = [r for r in db.reviews if r.restaurant_id != restaurant.id]
        self._store.save(db)
        logger.info(
            "Restaurant %s deleted with %d review(s)", restaurant.id, before - len(db.reviews)
        )

    def add_review(
        self,
        team_id: str,
        author_id: str,
        restaurant_id: str,
        payload: ReviewCreate,
    ) -> ReviewCreated:
        db = self._store.load()
        restaurant = self._require_restaurant(db, team_id, restaurant_id)

        invalid: list[str] = []
        rating = _parse_rating(payload.rating)
        if rating is None:
            invalid.append("rating")
        text = _check_text(payload, ("short_comment", "comment"), invalid)
        if invalid:
            raise ValidationError(
                "Rating must be a whole number from 1 to 5 and comments must be text",
                fields=invalid,
            )

        review = Review(
            id=str(uuid.uuid4()),
            restaurant_id=restaurant.id,
            author_id=author_id,
            rating=rating,
            short_comment=text["short_comment"][:SHORT_COMMENT_MAX],
            comment=text["comment"][:COMMENT_MAX],
            created_at=utc_now(),
        )
        db.reviews.append(review)
        self._store.save(db)
        logger.info("Review %s added to restaurant %s", review.id, restaurant.id)

        users_by_id = {u.id: u for u in db.users}
        return ReviewCreated(
            review=enrich_review(review, users_by_id),
            restaurant=self._summarize(db, restaurant),
        )

    def delete_review(
        self,
        team_id: str,
        requester_id: str,
        restaurant_id: str,
        review_id: str,
    ) -> RestaurantSummary:
        db = self._store.load()
        restaurant = self._require_restaurant(db, team_id, restaurant_id)
        review = next(
            (r for r in db.reviews if r.id == review_id and r.restaurant_id == restaurant.id),
            None,
        )
        if review is None:
            raise NotFound("Review not found")
        if review.author_id != requester_id:
            raise Forbidden("Only the author can delete this review")

        db.reviews = [r for r in db.reviews if r.id != review.id]
        self._store.save(db)
        logger.info("Review %s deleted from restaurant %s", review.id, restaurant.id)
        return self._summarize(db, restaurant)
