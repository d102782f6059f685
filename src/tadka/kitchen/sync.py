"""
Tadka - Cloud Sync.

Persists the per-user state document (`users/<uid>`) through a DocumentStore
with field-level merge writes, and reconciles a guest session into an
account when the user signs in.
"""

import logging
from typing import Any

from tadka.core.capabilities import DocumentStore
from tadka.kitchen.pantry import migrate_pantry
from tadka.models.entities import PantryItem, UserState

logger = logging.getLogger(__name__)

USER_COLLECTION = "users"


def sanitize_document(value: Any) -> Any:
    """
    Recursively drop None values so a document only carries set fields.

    Dict keys holding None are removed; None items inside lists are removed.
    """
    if isinstance(value, dict):
        return {k: sanitize_document(v) for k, v in value.items() if v is not None}
    if isinstance(value, (list, tuple)):
        return [sanitize_document(v) for v in value if v is not None]
    return value


def user_key(uid: str) -> str:
    return f"{USER_COLLECTION}/{uid}"


class UserStateRepository:
    """Read and write UserState documents."""

    def __init__(self, store: DocumentStore):
        self._store = store

    async def load(self, uid: str) -> UserState | None:
        """
        Load a user's state, or None when the user has no document.

        A legacy pantry stored as a list of plain names is migrated to
        PantryItems on read.
        """
        doc = await self._store.get(user_key(uid))
        if doc is None:
            return None

        pantry = doc.get("pantry_stock") or []
        if pantry and all(isinstance(p, str) for p in pantry):
            logger.info(f"[Sync] Migrating legacy pantry for {uid} ({len(pantry)} names)")
            doc = {**doc, "pantry_stock": [p.model_dump() for p in migrate_pantry(pantry)]}

        return UserState.model_validate(doc)

    async def save(self, uid: str, state: UserState | dict[str, Any]) -> None:
        """
        Merge-write the user document.

        Passing a dict writes only those fields; passing a UserState writes
        every field.
        """
        if isinstance(state, UserState):
            data = state.model_dump(mode="json", by_alias=True)
        else:
            data = UserState.model_validate(state).model_dump(
                mode="json", by_alias=True, include=set(state)
            )
        await self._store.set(user_key(uid), sanitize_document(data), merge=True)
        logger.debug(f"[Sync] Saved {sorted(data)} for {uid}")


def _merge_pantry(cloud: list[PantryItem], guest: list[PantryItem]) -> list[PantryItem]:
    seen = {item.name.strip().lower() for item in cloud}
    merged = list(cloud)
    for item in guest:
        key = item.name.strip().lower()
        if key not in seen:
            seen.add(key)
            merged.append(item)
    return merged


def reconcile_guest_to_user(guest: UserState, cloud: UserState | None) -> UserState:
    """
    Combine a guest session with the account's stored state.

    - profile: cloud wins when present
    - approved dishes: union by id, cloud order first
    - weekly plan: cloud wins when it holds any dish
    - pantry: union by case-insensitive name, cloud record wins
    """
    if cloud is None:
        return guest

    approved = list(cloud.approved_dishes)
    known_ids = {d.id for d in approved}
    for dish in guest.approved_dishes:
        if dish.id not in known_ids:
            known_ids.add(dish.id)
            approved.append(dish)

    cloud_has_plan = any(day.dishes() for day in cloud.weekly_plan)

    return UserState(
        profile=cloud.profile or guest.profile,
        approved_dishes=approved,
        weekly_plan=cloud.weekly_plan if cloud_has_plan else guest.weekly_plan,
        pantry_stock=_merge_pantry(cloud.pantry_stock, guest.pantry_stock),
    )
