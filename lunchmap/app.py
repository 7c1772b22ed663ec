from __future__ import annotations

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from .auth.dependencies import SESSION_USER_KEY, get_current_user, require_user
from .auth.models import LoginRequest, RegisterRequest, SessionResponse, UserOut
from .auth.users import authenticate, register
from .config import DEFAULT_APP_CONFIG
from .errors import LunchMapError
from .restaurants.models import (
    RestaurantCreate,
    RestaurantDetail,
    RestaurantEnvelope,
    RestaurantList,
    ReviewCreate,
    ReviewCreated,
)
from .restaurants.service import RestaurantService
from .store import get_store
from .store.json_store import Store
from .store.models import User

app = FastAPI(title="Team Lunch Map API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=DEFAULT_APP_CONFIG.session_secret,
    max_age=DEFAULT_APP_CONFIG.session_max_age,
)


@app.exception_handler(LunchMapError)
async def lunchmap_error_handler(request: Request, exc: LunchMapError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def get_restaurant_service(store: Store = Depends(get_store)) -> RestaurantService:
    return RestaurantService(store)


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/meta/departments")
def departments(store: Store = Depends(get_store)) -> dict:
    names: list[str] = []
    for team in store.load().teams:
        for d in team.departments:
            if d.name not in names:
                names.append(d.name)
    return {"departments": names}


@app.get("/api/meta/teams")
def teams(store: Store = Depends(get_store)) -> dict:
    # Join codes and department codes stay private.
    return {
        "teams": [
            {
                "id": t.id,
                "name": t.name,
                "description": t.description,
                "departments": [d.name for d in t.departments],
            }
            for t in store.load().teams
        ]
    }


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/api/auth/register", response_model=SessionResponse, status_code=201)
def register_user(
    body: RegisterRequest,
    request: Request,
    store: Store = Depends(get_store),
) -> SessionResponse:
    user = register(store, body)
    request.session[SESSION_USER_KEY] = user.id
    return SessionResponse(user=UserOut.from_user(user))


@app.post("/api/auth/login", response_model=SessionResponse)
def login(
    body: LoginRequest,
    request: Request,
    store: Store = Depends(get_store),
) -> SessionResponse:
    user = authenticate(store, body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session[SESSION_USER_KEY] = user.id
    return SessionResponse(user=UserOut.from_user(user))


@app.post("/api/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"status": "logged_out"}


@app.get("/api/auth/me", response_model=UserOut)
def auth_me(user: User | None = Depends(get_current_user)) -> UserOut:
    if user is None:
        raise HTTPException(status_code=401, detail="Session expired")
    return UserOut.from_user(user)


# ── Restaurant endpoints ─────────────────────────────────────────────────


@app.get("/api/restaurants", response_model=RestaurantList)
def list_restaurants(
    user: User = Depends(require_user),
    service: RestaurantService = Depends(get_restaurant_service),
) -> RestaurantList:
    return RestaurantList(restaurants=service.list_restaurants(user.team_id))


@app.post("/api/restaurants", response_model=RestaurantEnvelope, status_code=201)
def create_restaurant(
    body: RestaurantCreate,
    user: User = Depends(require_user),
    service: RestaurantService = Depends(get_restaurant_service),
) -> RestaurantEnvelope:
    restaurant = service.create_restaurant(user.team_id, user.id, body)
    return RestaurantEnvelope(restaurant=restaurant)


@app.get("/api/restaurants/{restaurant_id}", response_model=RestaurantDetail)
def restaurant_detail(
    restaurant_id: str,
    user: User = Depends(require_user),
    service: RestaurantService = Depends(get_restaurant_service),
) -> RestaurantDetail:
    return service.get_restaurant_detail(user.team_id, restaurant_id)


@app.delete("/api/restaurants/{restaurant_id}", status_code=204)
def delete_restaurant(
    restaurant_id: str,
    user: User = Depends(require_user),
    service: RestaurantService = Depends(get_restaurant_service),
) -> Response:
    service.delete_restaurant(user.team_id, user.id, restaurant_id)
    return Response(status_code=204)


# ── Review endpoints ─────────────────────────────────────────────────────


@app.post(
    "/api/restaurants/{restaurant_id}/reviews",
    response_model=ReviewCreated,
    status_code=201,
)
def add_review(
    restaurant_id: str,
    body: ReviewCreate,
    user: User = Depends(require_user),
    service: RestaurantService = Depends(get_restaurant_service),
) -> ReviewCreated:
    return service.add_review(user.team_id, user.id, restaurant_id, body)


@app.delete(
    "/api/restaurants/{restaurant_id}/reviews/{review_id}",
    response_model=RestaurantEnvelope,
)
def delete_review(
    restaurant_id: str,
    review_id: str,
    user: User = Depends(require_user),
    service: RestaurantService = Depends(get_restaurant_service),
) -> RestaurantEnvelope:
    restaurant = service.delete_review(user.team_id, user.id, restaurant_id, review_id)
    return RestaurantEnvelope(restaurant=restaurant)
