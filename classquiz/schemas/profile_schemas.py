from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..domain.model import Profile, Role


class ProfileCreateIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    role: Role
    classLabel: Optional[str] = Field(None, validation_alias=AliasChoices("classLabel", "class"))


class ProfileUpdateIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = None
    classLabel: Optional[str] = Field(None, validation_alias=AliasChoices("classLabel", "class"))


class ProfileOut(BaseModel):
    id: str
    email: Optional[str]
    name: str
    role: Role
    classLabel: Optional[str]

    @classmethod
    def from_domain(cls, profile: Profile) -> "ProfileOut":
        return cls(
            id=profile.user_id,
            email=profile.email,
            name=profile.name,
            role=profile.role,
            classLabel=profile.class_label,
        )


class ProfileEnvelope(BaseModel):
    message: Optional[str] = None
    user: ProfileOut


class ProfileListOut(BaseModel):
    users: List[ProfileOut]
