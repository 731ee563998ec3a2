import logging
from typing import List, Optional, Tuple

from ..core.errors import NotFoundError, ValidationError
from ..domain.model import Identity, Profile, Role
from ..repositories.profile_repository import ProfileRepository

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, profiles: ProfileRepository) -> None:
        self.profiles = profiles

    async def get(self, user_id: str) -> Optional[Profile]:
        return await self.profiles.get(user_id)

    async def register(
        self,
        identity: Identity,
        *,
        name: str,
        role: Role,
        class_label: Optional[str],
    ) -> Tuple[Profile, bool]:
        """
        Create the caller's profile.

        Returns the profile and whether it was newly created. Registering again
        with the same role is harmless; the role of an existing profile never
        changes.
        """
        if not name or not name.strip():
            raise ValidationError("Missing required fields: name")
        if role is Role.STUDENT and not (class_label and class_label.strip()):
            raise ValidationError("Class is required for students")

        existing = await self.profiles.get(identity.user_id)
        if existing is None:
            created = await self.profiles.create(
                Profile(
                    user_id=identity.user_id,
                    email=identity.email,
                    name=name.strip(),
                    role=role,
                    class_label=class_label.strip() if role is Role.STUDENT else None,
                )
            )
            if created is not None:
                logger.info("Profile created for %s with role %s", identity.user_id, role.value)
                return created, True
            # lost a registration race, fall through to the stored row
            existing = await self.profiles.get(identity.user_id)
            if existing is None:
                raise NotFoundError("User not found")

        if existing.role is not role:
            raise ValidationError(
                f"User already exists with role: {existing.role.value}. Cannot change role."
            )
        return existing, False

    async def update(
        self, profile: Profile, *, name: Optional[str], class_label: Optional[str]
    ) -> Profile:
        changes = {}
        if name is not None and name.strip():
            changes["name"] = name.strip()
        if class_label is not None and class_label.strip() and profile.is_student:
            changes["class_label"] = class_label.strip()
        if not changes:
            return profile
        updated = await self.profiles.update(profile.user_id, changes)
        if updated is None:
            raise NotFoundError("User not found")
        return updated

    async def list_all(self) -> List[Profile]:
        return await self.profiles.list_all()
