from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import AsyncClient

from ..domain.model import Profile, Role
from ..services.typing import to_datetime, to_iso, utcnow
from .base import is_unique_violation, run_read, run_write

TABLE = "profiles"


def profile_from_row(row: dict) -> Profile:
    return Profile(
        user_id=str(row["id"]),
        email=row.get("email"),
        name=row.get("name") or "",
        role=Role(row["role"]),
        class_label=row.get("class_label"),
        created_at=to_datetime(row.get("created_at")),
    )


class ProfileRepository:
    """Principal directory: maps a verified user id to its role and class."""

    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def get(self, user_id: str) -> Optional[Profile]:
        res = await run_read(
            self.client.table(TABLE).select("*").eq("id", user_id).limit(1),
            what="profile",
        )
        return profile_from_row(res.data[0]) if res.data else None

    async def create(self, profile: Profile) -> Optional[Profile]:
        """Insert a new profile; returns None if one already exists for the user."""
        now = to_iso(utcnow())
        row = {
            "id": profile.user_id,
            "email": profile.email,
            "name": profile.name,
            "role": profile.role.value,
            "class_label": profile.class_label,
            "created_at": now,
            "updated_at": now,
        }
        try:
            res = await run_write(self.client.table(TABLE).insert(row), what="profile")
        except APIError as exc:
            if is_unique_violation(exc):
                return None
            raise
        return profile_from_row(res.data[0]) if res.data else profile

    async def update(self, user_id: str, changes: Dict[str, Any]) -> Optional[Profile]:
        row = dict(changes)
        row["updated_at"] = to_iso(utcnow())
        res = await run_write(self.client.table(TABLE).update(row).eq("id", user_id), what="profile")
        return profile_from_row(res.data[0]) if res.data else None

    async def list_all(self) -> List[Profile]:
        res = await run_read(self.client.table(TABLE).select("*").order("name"), what="profiles")
        return [profile_from_row(r) for r in res.data or []]
