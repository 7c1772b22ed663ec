from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _as_utc(value: datetime) -> datetime:
    # Legacy documents may hold naive timestamps; treat them as UTC so
    # every comparison is between aware instants.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


Timestamp = Annotated[datetime, AfterValidator(_as_utc)]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Record(BaseModel):
    """Base for persisted records: snake_case in Python, camelCase in JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Department(Record):
    name: str
    code: str


class Team(Record):
    id: str
    name: str
    code: str
    description: str = ""
    departments: list[Department] = Field(default_factory=list)


class User(Record):
    id: str
    username: str
    display_name: str
    department: str = ""
    department_code: str = ""
    team_id: str
    created_at: Timestamp
    password_hash: str = ""


class Restaurant(Record):
    id: str
    team_id: str
    name: str
    address: str = ""
    lat: float | None = None
    lng: float | None = None
    category: str = ""
    description: str = ""
    created_by: str
    created_at: Timestamp


class Review(Record):
    id: str
    restaurant_id: str
    author_id: str
    rating: int = Field(..., ge=1, le=5)
    short_comment: str = ""
    comment: str = ""
    created_at: Timestamp


class Dataset(Record):
    teams: list[Team] = Field(default_factory=list)
    users: list[User] = Field(default_factory=list)
    restaurants: list[Restaurant] = Field(default_factory=list)
    reviews: list[Review] = Field(default_factory=list)

    def find_user(self, user_id: str) -> User | None:
        return next((u for u in self.users if u.id == user_id), None)

    def find_restaurant(self, team_id: str, restaurant_id: str) -> Restaurant | None:
        """Return the restaurant only when it belongs to ``team_id``."""
        return next(
            (r for r in self.restaurants if r.id == restaurant_id and r.team_id == team_id),
            None,
        )
