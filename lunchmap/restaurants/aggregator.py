from __future__ import annotations

from collections.abc import Iterable

from ..store.models import Restaurant, Review, User
from .models import DepartmentBucket, RestaurantSummary, ReviewView

UNKNOWN_AUTHOR = "Unknown"
OTHER_DEPARTMENT = "Other"


def enrich_review(review: Review, users_by_id: dict[str, User]) -> ReviewView:
    author = users_by_id.get(review.author_id)
    return ReviewView(
        id=review.id,
        rating=review.rating,
        short_comment=review.short_comment,
        comment=review.comment,
        created_at=review.created_at,
        author_id=review.author_id,
        author_name=author.display_name if author else UNKNOWN_AUTHOR,
        department=(author.department if author else "") or OTHER_DEPARTMENT,
    )


def newest_first(reviews: list[ReviewView]) -> list[ReviewView]:
    """Order by creation time, newest first; equal instants keep the later-stored review first."""
    indexed = list(enumerate(reviews))
    indexed.sort(key=lambda pair: (pair[1].created_at, pair[0]), reverse=True)
    return [view for _, view in indexed]


def summarize(
    restaurant: Restaurant,
    reviews: Iterable[Review],
    users: Iterable[User],
) -> RestaurantSummary:
    """Aggregate the reviews of ``restaurant`` into its public representation.

    Reviews are scanned in store order. "Latest" compares ``created_at``
    instants; on a tie the review encountered last wins, both per department
    and overall.
    """
    users_by_id = {u.id: u for u in users}
    own = [enrich_review(r, users_by_id) for r in reviews if r.restaurant_id == restaurant.id]

    rating_sums: dict[str, int] = {}
    buckets: dict[str, DepartmentBucket] = {}
    latest: ReviewView | None = None

    for view in own:
        bucket = buckets.get(view.department)
        if bucket is None:
            bucket = buckets[view.department] = DepartmentBucket(department=view.department)
            rating_sums[view.department] = 0
        bucket.review_count += 1
        rating_sums[view.department] += view.rating
        if bucket.latest_review is None or view.created_at >= bucket.latest_review.created_at:
            bucket.latest_review = view
        if latest is None or view.created_at >= latest.created_at:
            latest = view

    for name, bucket in buckets.items():
        bucket.average_rating = round(rating_sums[name] / bucket.review_count, 2)

    total = sum(v.rating for v in own)
    return RestaurantSummary(
        **restaurant.model_dump(),
        review_count=len(own),
        average_rating=round(total / len(own), 2) if own else 0,
        departments=buckets,
        latest_review=latest,
    )
