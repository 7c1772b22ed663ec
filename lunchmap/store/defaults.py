from __future__ import annotations

from typing import Any

DEFAULT_TEAM_ID = "team-default"
DEFAULT_TEAM_NAME = "Vibe Coding Lab"
DEFAULT_TEAM_DESCRIPTION = "Default team. Change the join code through LUNCHMAP_TEAM_CODE."

# (department name, registration code)
DEFAULT_DEPARTMENTS: list[tuple[str, str]] = [
    ("경영기획", "PLAN"),
    ("고객사업", "CUST"),
    ("브랜드상품전략", "BRAND"),
    ("마케팅", "MKT"),
    ("경영지원", "SUPPORT"),
]

SEED_RESTAURANT_ID = "seed-restaurant-1"
SEED_REVIEW_ID = "seed-review-1"
SEED_AUTHOR_ID = "system"
SEED_CREATED_AT = "2024-01-02T03:00:00+00:00"


def default_team(join_code: str) -> dict[str, Any]:
    return {
        "id": DEFAULT_TEAM_ID,
        "name": DEFAULT_TEAM_NAME,
        "code": join_code,
        "description": DEFAULT_TEAM_DESCRIPTION,
        "departments": [{"name": n, "code": c} for n, c in DEFAULT_DEPARTMENTS],
    }


def empty_document(join_code: str) -> dict[str, Any]:
    return {
        "teams": [default_team(join_code)],
        "users": [],
        "restaurants": [],
        "reviews": [],
    }


def seed_restaurant() -> dict[str, Any]:
    return {
        "id": SEED_RESTAURANT_ID,
        "teamId": DEFAULT_TEAM_ID,
        "name": "을지로 골목식당",
        "address": "서울특별시 중구 을지로 100",
        "lat": 37.5662,
        "lng": 126.9910,
        "category": "한식",
        "description": "Example entry added on first start. Add your own team's places next to it.",
        "createdBy": SEED_AUTHOR_ID,
        "createdAt": SEED_CREATED_AT,
    }


def seed_review() -> dict[str, Any]:
    return {
        "id": SEED_REVIEW_ID,
        "restaurantId": SEED_RESTAURANT_ID,
        "authorId": SEED_AUTHOR_ID,
        "rating": 4,
        "shortComment": "Quick lunch, generous portions",
        "comment": "Gets busy after noon, so head out a little early.",
        "createdAt": SEED_CREATED_AT,
    }
