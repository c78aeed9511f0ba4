"""Authenticated identity of the current storefront visitor."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

from storefront.core.constants import TOKEN_STORAGE_KEY
from storefront.core.exceptions import AuthRequiredException
from storefront.core.sentry_integration import set_user_context
from storefront.domain.results import ErrorKey, StoreResult
from storefront.domain.user import User
from storefront.integrations.backend import AuthProvider, AuthSession
from storefront.integrations.local_storage import LocalStorage

logger = logging.getLogger(__name__)

IdentityListener = Callable[["User | None"], Awaitable[None]]


@dataclass(frozen=True)
class AuthResult:
    ok: bool
    error: str | None = None
    error_key: str | None = None


class SessionGate:
    """Holds the signed-in user and bearer token.

    With a storage, the token survives restarts under ``token``. Listeners
    registered with :meth:`subscribe` are awaited whenever the identity
    changes (sign-in, sign-up, sign-out or a restored session).
    """

    def __init__(self, auth: AuthProvider, storage: LocalStorage | None = None):
        self._auth = auth
        self._storage = storage
        self._user: User | None = None
        self._token: str | None = None
        self._loading = False
        self._listeners: list[IdentityListener] = []

    @property
    def current_user(self) -> User | None:
        return self._user

    @property
    def token(self) -> str | None:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    @property
    def is_admin(self) -> bool:
        return self._user is not None and self._user.is_admin

    @property
    def is_loading(self) -> bool:
        return self._loading

    def subscribe(self, listener: IdentityListener) -> None:
        self._listeners.append(listener)

    def require_user(self, action: str = "this action") -> User:
        if self._user is None:
            raise AuthRequiredException(action)
        return self._user

    async def initialize(self) -> None:
        """Restore the session from the stored token, dropping it if rejected."""
        if self._storage is None:
            return
        token = self._storage.get(TOKEN_STORAGE_KEY)
        if not token:
            return

        result = await self.resume(token)
        if result.ok and result.value is not None:
            return

        if result.is_unauthorized or result.is_not_found:
            logger.info("Stored token rejected, clearing it")
            self._storage.remove(TOKEN_STORAGE_KEY)
        else:
            logger.warning(f"Could not restore session: {result.detail}")

    async def resume(self, token: str) -> StoreResult[User]:
        """Adopt ``token`` if the auth provider still accepts it."""
        self._loading = True
        try:
            result = await self._auth.get_current_user(token)
        finally:
            self._loading = False

        if result.ok and result.value is not None:
            self._token = token
            await self._set_user(result.value)
        return result

    async def sign_in(self, email: str, password: str) -> AuthResult:
        self._loading = True
        try:
            result = await self._auth.sign_in(email.strip(), password)
        finally:
            self._loading = False
        return await self._accept(result)

    async def sign_up(
        self, email: str, password: str, first_name: str, last_name: str
    ) -> AuthResult:
        self._loading = True
        try:
            result = await self._auth.sign_up(
                email.strip(), password, first_name.strip(), last_name.strip()
            )
        finally:
            self._loading = False
        return await self._accept(result)

    async def sign_out(self) -> AuthResult:
        if self._storage is not None:
            self._storage.remove(TOKEN_STORAGE_KEY)
        self._token = None
        if self._user is not None:
            logger.info(f"User {self._user.id} signed out")
            await self._set_user(None)
        return AuthResult(ok=True)

    async def _accept(self, result: StoreResult[AuthSession]) -> AuthResult:
        if not result.ok or result.value is None:
            if result.is_duplicate:
                return AuthResult(
                    ok=False,
                    error="An account with this email already exists.",
                    error_key=ErrorKey.DUPLICATE,
                )
            if result.is_unauthorized:
                return AuthResult(
                    ok=False, error="Invalid email or password.", error_key=ErrorKey.AUTH_REQUIRED
                )
            logger.warning(f"Auth provider unavailable: {result.detail}")
            return AuthResult(
                ok=False,
                error=result.detail or "Authentication failed.",
                error_key=ErrorKey.FAILED,
            )

        session = result.value
        self._token = session.token
        if self._storage is not None:
            self._storage.set(TOKEN_STORAGE_KEY, session.token)
        logger.info(f"User {session.user.id} signed in")
        await self._set_user(session.user)
        return AuthResult(ok=True)

    async def _set_user(self, user: User | None) -> None:
        self._user = user
        set_user_context(user.id if user else None)
        for listener in list(self._listeners):
            await listener(user)
