"""Auth API routes — register, login, profile."""

from typing import Optional

from fastapi import APIRouter, Depends, status

from stepwise.application.services.auth_service import AuthService
from stepwise.core.results import ActionResult
from stepwise.domain.schemas.auth import LoginRequest, TokenResponse, UserCreate, UserRead, UserUpdate
from stepwise.interfaces.api.deps import get_token, respond
from stepwise.interfaces.deps import get_auth_service

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post(
    "/register", response_model=ActionResult[TokenResponse], status_code=status.HTTP_201_CREATED
)
def register(body: UserCreate, service: AuthService = Depends(get_auth_service)):
    return respond(service.register_user(body))


@router.post("/login", response_model=ActionResult[TokenResponse])
def login(body: LoginRequest, service: AuthService = Depends(get_auth_service)):
    return respond(service.login_user(body.email, body.password))


@router.get("/me", response_model=ActionResult[UserRead])
def get_me(
    token: Optional[str] = Depends(get_token),
    service: AuthService = Depends(get_auth_service),
):
    return respond(service.get_profile(token))


@router.patch("/me", response_model=ActionResult[UserRead])
def update_me(
    body: UserUpdate,
    token: Optional[str] = Depends(get_token),
    service: AuthService = Depends(get_auth_service),
):
    return respond(service.update_profile(token, body))
