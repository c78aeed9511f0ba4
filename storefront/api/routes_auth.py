from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from storefront.container import StorefrontContainer, Visitor
from storefront.services.session import SessionGate

from .common import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    UserResponse,
    get_container,
    get_visitor,
    raise_for_auth,
)

router = APIRouter(prefix="/auth")


def _issued(session: SessionGate) -> AuthResponse:
    return AuthResponse(token=session.token, user=UserResponse.from_user(session.current_user))


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, container: StorefrontContainer = Depends(get_container)):
    """Exchange credentials for a bearer token to send on later requests."""
    session = SessionGate(container.auth)
    raise_for_auth(await session.sign_in(request.email, request.password))
    return _issued(session)


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register(
    request: RegisterRequest, container: StorefrontContainer = Depends(get_container)
):
    session = SessionGate(container.auth)
    raise_for_auth(
        await session.sign_up(
            request.email, request.password, request.first_name, request.last_name
        )
    )
    return _issued(session)


@router.post("/logout")
async def logout(visitor: Visitor = Depends(get_visitor)):
    await visitor.session.sign_out()
    return {"status": "ok"}


@router.get("/me", response_model=UserResponse)
async def me(visitor: Visitor = Depends(get_visitor)):
    user = visitor.session.current_user
    if user is None:
        raise HTTPException(status_code=401, detail="Not signed in")
    return UserResponse.from_user(user)
