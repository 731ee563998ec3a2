from fastapi import APIRouter, Response, status

from ....schemas.profile_schemas import (
    ProfileCreateIn,
    ProfileEnvelope,
    ProfileListOut,
    ProfileOut,
    ProfileUpdateIn,
)
from ...deps import IdentityDep, PrincipalDep, ProfileServiceDep, TeacherDep

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=ProfileEnvelope, status_code=status.HTTP_201_CREATED)
async def register(payload: ProfileCreateIn, identity: IdentityDep, svc: ProfileServiceDep, response: Response):
    profile, created = await svc.register(
        identity, name=payload.name, role=payload.role, class_label=payload.classLabel
    )
    if not created:
        response.status_code = status.HTTP_200_OK
        return ProfileEnvelope(message="User already exists", user=ProfileOut.from_domain(profile))
    return ProfileEnvelope(message="User created successfully", user=ProfileOut.from_domain(profile))


@router.get("/profile", response_model=ProfileOut)
async def get_profile(principal: PrincipalDep):
    return ProfileOut.from_domain(principal)


@router.put("/profile", response_model=ProfileEnvelope)
async def update_profile(payload: ProfileUpdateIn, principal: PrincipalDep, svc: ProfileServiceDep):
    profile = await svc.update(principal, name=payload.name, class_label=payload.classLabel)
    return ProfileEnvelope(message="Profile updated successfully", user=ProfileOut.from_domain(profile))


@router.get("", response_model=ProfileListOut)
async def list_users(teacher: TeacherDep, svc: ProfileServiceDep):
    profiles = await svc.list_all()
    return ProfileListOut(users=[ProfileOut.from_domain(p) for p in profiles])
