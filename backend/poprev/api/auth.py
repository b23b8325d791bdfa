"""
Auth API endpoints.
"""

from fastapi import APIRouter, Depends

from poprev.dependencies import authenticate, get_store
from poprev.schemas.auth import (
    AuthPayload,
    ChangePasswordRequest,
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    UserRead,
)
from poprev.schemas.common import Envelope, MessageResponse
from poprev.services import auth_service
from poprev.store import ContentStore

router = APIRouter()


@router.post("/register", response_model=Envelope[AuthPayload], status_code=201)
def register(
    data: RegisterRequest,
    store: ContentStore = Depends(get_store)
):
    """Create a viewer account and return a token for it."""
    return Envelope[AuthPayload](data=auth_service.register(store, data))


@router.post("/login", response_model=Envelope[AuthPayload])
def login(
    data: LoginRequest,
    store: ContentStore = Depends(get_store)
):
    """Exchange email and password for a token."""
    return Envelope[AuthPayload](data=auth_service.login(store, data))


@router.get("/profile", response_model=Envelope[UserRead])
def get_profile(user: UserRead = Depends(authenticate)):
    return Envelope[UserRead](data=user)


@router.put("/profile", response_model=Envelope[UserRead])
def update_profile(
    data: ProfileUpdate,
    user: UserRead = Depends(authenticate),
    store: ContentStore = Depends(get_store)
):
    return Envelope[UserRead](data=auth_service.update_profile(store, user, data))


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    data: ChangePasswordRequest,
    user: UserRead = Depends(authenticate),
    store: ContentStore = Depends(get_store)
):
    auth_service.change_password(store, user, data)
    return MessageResponse(message="Password updated successfully")
