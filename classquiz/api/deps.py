from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..core.errors import AuthenticationError, AuthorizationError, ProfileNotFoundError
from ..core.resources import Resources
from ..domain.model import Identity, Profile
from ..services.profile_service import ProfileService
from ..services.quiz_service import QuizService
from ..ws.dispatcher import EventDispatcher

bearer_scheme = HTTPBearer(auto_error=False)


def get_resources(request: Request) -> Resources:
    return request.app.state.resources


ResourcesDep = Annotated[Resources, Depends(get_resources)]


def get_quiz_service(resources: ResourcesDep) -> QuizService:
    return resources.quiz_service


def get_profile_service(resources: ResourcesDep) -> ProfileService:
    return resources.profile_service


def get_dispatcher(resources: ResourcesDep) -> EventDispatcher:
    return resources.dispatcher


QuizServiceDep = Annotated[QuizService, Depends(get_quiz_service)]
ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
DispatcherDep = Annotated[EventDispatcher, Depends(get_dispatcher)]


async def get_identity(
    resources: ResourcesDep,
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)],
) -> Identity:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise AuthenticationError("No token provided")
    return await resources.identity.verify(credentials.credentials)


IdentityDep = Annotated[Identity, Depends(get_identity)]


async def get_principal(identity: IdentityDep, profiles: ProfileServiceDep) -> Profile:
    profile = await profiles.get(identity.user_id)
    if profile is None:
        raise ProfileNotFoundError("User not found. Please complete registration.")
    return profile


PrincipalDep = Annotated[Profile, Depends(get_principal)]


def require_teacher(principal: PrincipalDep) -> Profile:
    if not principal.is_teacher:
        raise AuthorizationError("Access denied. Teacher role required.")
    return principal


def require_student(principal: PrincipalDep) -> Profile:
    if not principal.is_student:
        raise AuthorizationError("Access denied. Student role required.")
    return principal


TeacherDep = Annotated[Profile, Depends(require_teacher)]
StudentDep = Annotated[Profile, Depends(require_student)]
