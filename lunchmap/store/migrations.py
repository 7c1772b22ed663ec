"""
Upgrades for documents written by earlier deployments.

Every step works on the raw JSON document (before model validation) and
reports whether it changed anything, so the store only rewrites the file
when an upgrade actually happened.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from .defaults import (
    DEFAULT_DEPARTMENTS,
    DEFAULT_TEAM_ID,
    SEED_RESTAURANT_ID,
    default_team,
    seed_restaurant,
    seed_review,
)

logger = logging.getLogger(__name__)

_COLLECTIONS = ("teams", "users", "restaurants", "reviews")

# Placeholder department the earlier server stored for users who gave none.
LEGACY_OTHER_DEPARTMENT = "기타"


def _ensure_collections(doc: dict[str, Any]) -> bool:
    changed = False
    for name in _COLLECTIONS:
        if not isinstance(doc.get(name), list):
            doc[name] = []
            changed = True
    return changed


def _reconcile_default_team(doc: dict[str, Any], join_code: str) -> bool:
    team = next((t for t in doc["teams"] if t.get("id") == DEFAULT_TEAM_ID), None)
    if team is None:
        doc["teams"].insert(0, default_team(join_code))
        logger.info("Default team missing, recreated it")
        return True

    changed = False
    default_codes = dict(DEFAULT_DEPARTMENTS)
    departments: list[dict[str, str]] = []
    for entry in team.get("departments") or []:
        if isinstance(entry, str):
            # Older documents listed department names only.
            departments.append({"name": entry, "code": default_codes.get(entry, "")})
            changed = True
        else:
            departments.append(entry)

    known = {d.get("name") for d in departments}
    for name, code in DEFAULT_DEPARTMENTS:
        if name not in known:
            departments.append({"name": name, "code": code})
            changed = True

    # Fill codes that are still blank for default department names.
    for d in departments:
        if not d.get("code") and d.get("name") in default_codes:
            d["code"] = default_codes[d["name"]]
            changed = True

    team["departments"] = departments
    if not team.get("code"):
        team["code"] = join_code
        changed = True
    if changed:
        logger.info("Reconciled default team departments (%d total)", len(departments))
    return changed


def _upgrade_users(doc: dict[str, Any]) -> bool:
    changed = False
    codes_by_team: dict[str, dict[str, str]] = {}
    for team in doc["teams"]:
        codes_by_team[team.get("id")] = {
            d.get("name"): d.get("code", "")
            for d in team.get("departments") or []
            if isinstance(d, dict)
        }

    for user in doc["users"]:
        codes = codes_by_team.get(user.get("teamId"), {})
        if user.get("department") == LEGACY_OTHER_DEPARTMENT and LEGACY_OTHER_DEPARTMENT not in codes:
            user["department"] = ""
            changed = True
        if "departmentCode" not in user:
            user["departmentCode"] = codes.get(user.get("department"), "")
            changed = True
        if "password" in user:
            # Credentials from the old PBKDF2 scheme cannot be verified with bcrypt.
            user.pop("password")
            user.setdefault("passwordHash", "")
            changed = True
    return changed


def _normalize_rating(value: Any) -> int | None:
    """Round half up and clamp to 1..5; None when the value is not a number."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value):
        return None
    return max(1, min(5, math.floor(value + 0.5)))


def _upgrade_reviews(doc: dict[str, Any]) -> bool:
    changed = False
    kept = []
    for review in doc["reviews"]:
        if "authorId" not in review and "userId" in review:
            review["authorId"] = review.pop("userId")
            changed = True
        rating = review.get("rating")
        normalized = _normalize_rating(rating)
        if normalized is None:
            logger.warning("Dropping review %s with unusable rating %r", review.get("id"), rating)
            changed = True
            continue
        if normalized != rating or not isinstance(rating, int):
            # The earlier server accepted fractional ratings such as 4.5.
            review["rating"] = normalized
            changed = True
        kept.append(review)
    doc["reviews"] = kept
    return changed


def _has_valid_coordinates(restaurant: dict[str, Any]) -> bool:
    lat, lng = restaurant.get("lat"), restaurant.get("lng")
    if isinstance(lat, bool) or isinstance(lng, bool):
        return False
    if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
        return False
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return False
    return -90 <= lat <= 90 and -180 <= lng <= 180


def _seed_example(doc: dict[str, Any]) -> bool:
    if any(_has_valid_coordinates(r) for r in doc["restaurants"]):
        return False
    if any(r.get("id") == SEED_RESTAURANT_ID for r in doc["restaurants"]):
        return False
    doc["restaurants"].append(seed_restaurant())
    doc["reviews"].append(seed_review())
    logger.info("No restaurant with coordinates yet, seeded example restaurant")
    return True


def upgrade(doc: dict[str, Any], join_code: str, seed_example: bool = True) -> bool:
    """Bring ``doc`` up to the current schema in place. Returns True if it changed."""
    changed = _ensure_collections(doc)
    changed = _reconcile_default_team(doc, join_code) or changed
    changed = _upgrade_users(doc) or changed
    changed = _upgrade_reviews(doc) or changed
    if seed_example:
        changed = _seed_example(doc) or changed
    return changed
