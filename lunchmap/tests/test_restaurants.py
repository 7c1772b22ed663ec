from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from lunchmap.app import app
from lunchmap.auth.models import RegisterRequest
from lunchmap.auth.users import register
from lunchmap.errors import Forbidden, NotFound, ValidationError
from lunchmap.restaurants.models import RestaurantCreate, ReviewCreate
from lunchmap.restaurants.service import RestaurantService
from lunchmap.store import set_store
from lunchmap.store.defaults import DEFAULT_TEAM_ID, default_team
from lunchmap.store.json_store import InMemoryStore

# Too large for a float.
HUGE_NUMBER = 10 ** 400

OTHER_TEAM = {
    "id": "team-b",
    "name": "Branch",
    "code": "BRANCH",
    "departments": [{"name": "Sales", "code": "SALES"}],
}


def _fresh_store() -> InMemoryStore:
    store = InMemoryStore({"teams": [default_team("VIBE-TEAM"), OTHER_TEAM]}, seed_example=False)
    set_store(store)
    return store


def _member(username: str, department_code: str = "MKT") -> TestClient:
    c = TestClient(app)
    resp = c.post("/api/auth/register", json={
        "username": username,
        "password": "pw1234",
        "departmentCode": department_code,
    })
    assert resp.status_code == 201
    return c


def _add_restaurant(c, name="Kimchi House", lat=37.5, lng=127.0, **extra):
    body = {"name": name, "lat": lat, "lng": lng}
    body.update(extra)
    return c.post("/api/restaurants", json=body)


# ── Create / list ────────────────────────────────────────────────────────


def test_create_restaurant_returns_summary():
    _fresh_store()
    alice = _member("alice")
    resp = _add_restaurant(alice, name="  Kimchi House ", address=" 1 Main St ", category="Korean")
    assert resp.status_code == 201
    body = resp.json()["restaurant"]
    assert body["name"] == "Kimchi House"
    assert body["address"] == "1 Main St"
    assert body["teamId"] == DEFAULT_TEAM_ID
    assert body["lat"] == 37.5 and body["lng"] == 127.0
    assert body["reviewCount"] == 0
    assert body["averageRating"] == 0
    assert body["departments"] == {}
    assert body["latestReview"] is None
    assert body["id"] and body["createdAt"]


def test_create_restaurant_coerces_scalar_text():
    _fresh_store()
    resp = _add_restaurant(_member("alice"), name=123, category=7.5)
    assert resp.status_code == 201
    assert resp.json()["restaurant"]["name"] == "123"
    assert resp.json()["restaurant"]["category"] == "7.5"


def test_create_restaurant_accepts_numeric_strings():
    _fresh_store()
    resp = _add_restaurant(_member("alice"), lat="37.51", lng="127.02")
    assert resp.status_code == 201
    assert resp.json()["restaurant"]["lat"] == 37.51


def test_list_restaurants():
    _fresh_store()
    alice = _member("alice")
    _add_restaurant(alice, name="A")
    _add_restaurant(alice, name="B")
    resp = alice.get("/api/restaurants")
    assert resp.status_code == 200
    assert [r["name"] for r in resp.json()["restaurants"]] == ["A", "B"]


@pytest.mark.parametrize("lat,lng", [(-90, -180), (90, 180), (0, 0)])
def test_coordinate_bounds_are_inclusive(lat, lng):
    _fresh_store()
    assert _add_restaurant(_member("alice"), lat=lat, lng=lng).status_code == 201


@pytest.mark.parametrize(
    "body,fields",
    [
        ({"name": "X", "lat": 91, "lng": 0}, ["lat"]),
        ({"name": "X", "lat": 0, "lng": 181}, ["lng"]),
        ({"name": "X", "lat": -90.5, "lng": -180.5}, ["lat", "lng"]),
        ({"name": "   ", "lat": 0, "lng": 0}, ["name"]),
        ({"lat": "abc", "lng": None}, ["name", "lat", "lng"]),
        ({"name": "X", "lat": True, "lng": 0}, ["lat"]),
        ({"name": "X", "lat": "NaN", "lng": "inf"}, ["lat", "lng"]),
        ({"name": "X", "lat": HUGE_NUMBER, "lng": -HUGE_NUMBER}, ["lat", "lng"]),
        ({"name": {"ko": "X"}, "lat": 0, "lng": 0}, ["name"]),
        ({"name": "X", "lat": 0, "lng": 0, "address": ["a"], "category": False}, ["address", "category"]),
    ],
)
def test_create_restaurant_validation(body, fields):
    _fresh_store()
    resp = _member("alice").post("/api/restaurants", json=body)
    assert resp.status_code == 400
    assert resp.json()["fields"] == fields


def test_rejected_restaurant_is_not_stored():
    store = _fresh_store()
    _add_restaurant(_member("alice"), lat=91)
    assert store.load().restaurants == []


# ── Team isolation ───────────────────────────────────────────────────────


def test_restaurants_are_visible_only_inside_team():
    _fresh_store()
    alice = _member("alice")
    sam = _member("sam", "SALES")
    rid = _add_restaurant(alice).json()["restaurant"]["id"]

    assert sam.get("/api/restaurants").json()["restaurants"] == []
    assert sam.get(f"/api/restaurants/{rid}").status_code == 404
    assert sam.post(f"/api/restaurants/{rid}/reviews", json={"rating": 5}).status_code == 404
    assert sam.delete(f"/api/restaurants/{rid}").status_code == 404


# ── Detail ───────────────────────────────────────────────────────────────


def test_detail_unknown_restaurant():
    _fresh_store()
    resp = _member("alice").get("/api/restaurants/missing")
    assert resp.status_code == 404
    assert resp.json()["message"]


def test_detail_lists_reviews_newest_first():
    _fresh_store()
    alice = _member("alice")
    bob = _member("bob", "PLAN")
    rid = _add_restaurant(alice).json()["restaurant"]["id"]
    alice.post(f"/api/restaurants/{rid}/reviews", json={"rating": 5, "shortComment": "first"})
    bob.post(f"/api/restaurants/{rid}/reviews", json={"rating": 3, "shortComment": "second"})

    resp = alice.get(f"/api/restaurants/{rid}")
    assert resp.status_code == 200
    body = resp.json()
    assert [r["shortComment"] for r in body["reviews"]] == ["second", "first"]
    assert body["reviews"][0]["authorName"] == "bob"
    assert body["reviews"][0]["department"] == "경영기획"
    assert body["restaurant"]["reviewCount"] == 2


# ── Delete ───────────────────────────────────────────────────────────────


def test_only_creator_can_delete_restaurant():
    _fresh_store()
    alice = _member("alice")
    bob = _member("bob", "PLAN")
    rid = _add_restaurant(alice).json()["restaurant"]["id"]

    assert bob.delete(f"/api/restaurants/{rid}").status_code == 403
    assert alice.delete(f"/api/restaurants/{rid}").status_code == 204
    assert alice.get(f"/api/restaurants/{rid}").status_code == 404


def test_delete_restaurant_cascades_reviews():
    store = _fresh_store()
    alice = _member("alice")
    bob = _member("bob", "PLAN")
    rid = _add_restaurant(alice).json()["restaurant"]["id"]
    keep = _add_restaurant(alice, name="Other").json()["restaurant"]["id"]
    alice.post(f"/api/restaurants/{rid}/reviews", json={"rating": 4})
    bob.post(f"/api/restaurants/{rid}/reviews", json={"rating": 2})
    bob.post(f"/api/restaurants/{keep}/reviews", json={"rating": 5})

    alice.delete(f"/api/restaurants/{rid}")

    reviews = store.load().reviews
    assert [r for r in reviews if r.restaurant_id == rid] == []
    assert [r.restaurant_id for r in reviews] == [keep]


def test_delete_missing_restaurant():
    _fresh_store()
    assert _member("alice").delete("/api/restaurants/missing").status_code == 404


# ── Service used directly ────────────────────────────────────────────────


class TestServiceScenario:
    def setup_method(self):
        self.store = InMemoryStore(seed_example=False)
        self.service = RestaurantService(self.store)

    def test_kimchi_house(self):
        user_a = register(self.store, RegisterRequest(username="a", password="pw", department_code="MKT"))
        user_b = register(self.store, RegisterRequest(username="b", password="pw", department_code="PLAN"))
        created = self.service.create_restaurant(
            DEFAULT_TEAM_ID, user_a.id, RestaurantCreate(name="Kimchi House", lat=37.5, lng=127.0)
        )
        self.service.add_review(DEFAULT_TEAM_ID, user_a.id, created.id, ReviewCreate(rating=5))
        second = self.service.add_review(DEFAULT_TEAM_ID, user_b.id, created.id, ReviewCreate(rating=3))

        summary = second.restaurant
        assert summary.review_count == 2
        assert summary.average_rating == 4.0
        assert sorted(summary.departments) == ["경영기획", "마케팅"]
        assert all(b.review_count == 1 for b in summary.departments.values())
        # B reviewed last, so B's review is the latest.
        assert summary.latest_review.id == second.review.id

    def test_validation_error_lists_fields(self):
        with pytest.raises(ValidationError) as excinfo:
            self.service.create_restaurant(
                DEFAULT_TEAM_ID, "user-a", RestaurantCreate(name="", lat=91, lng=181)
            )
        assert excinfo.value.fields == ["name", "lat", "lng"]

    def test_delete_by_non_creator_is_forbidden(self):
        created = self.service.create_restaurant(
            DEFAULT_TEAM_ID, "user-a", RestaurantCreate(name="X", lat=0, lng=0)
        )
        with pytest.raises(Forbidden):
            self.service.delete_restaurant(DEFAULT_TEAM_ID, "user-b", created.id)

    def test_wrong_team_is_not_found(self):
        created = self.service.create_restaurant(
            DEFAULT_TEAM_ID, "user-a", RestaurantCreate(name="X", lat=0, lng=0)
        )
        with pytest.raises(NotFound):
            self.service.get_restaurant_detail("team-b", created.id)
