from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from storefront.core.exceptions import AuthRequiredException
from storefront.domain.results import ErrorKey, StoreResult
from storefront.services.session import SessionGate


@pytest.mark.asyncio
async def test_sign_in_stores_token_and_user(session, storage) -> None:
    result = await session.sign_in("ada@example.com", "secret")

    assert result.ok
    assert session.is_authenticated
    assert session.current_user.email == "ada@example.com"
    assert storage.get("token") == session.token


@pytest.mark.asyncio
async def test_wrong_password_returns_error(session, storage) -> None:
    result = await session.sign_in("ada@example.com", "nope")

    assert not result.ok
    assert result.error == "Invalid email or password."
    assert not session.is_authenticated
    assert storage.get("token") is None


@pytest.mark.asyncio
async def test_sign_up_existing_email_is_rejected(session) -> None:
    result = await session.sign_up("ada@example.com", "x", "Ada", "Obi")

    assert not result.ok
    assert "already exists" in result.error


@pytest.mark.asyncio
async def test_sign_up_signs_in(session) -> None:
    result = await session.sign_up(" new@example.com ", "pw", "Ngozi", "Eze")

    assert result.ok
    assert session.current_user.full_name == "Ngozi Eze"


@pytest.mark.asyncio
async def test_sign_out_clears_token(signed_in, storage) -> None:
    await signed_in.sign_out()

    assert signed_in.current_user is None
    assert signed_in.token is None
    assert storage.get("token") is None


@pytest.mark.asyncio
async def test_initialize_restores_session(auth, storage, signed_in) -> None:
    restored = SessionGate(auth, storage)

    await restored.initialize()

    assert restored.current_user == signed_in.current_user
    assert restored.token == signed_in.token
    assert not restored.is_loading


@pytest.mark.asyncio
async def test_initialize_drops_rejected_token(auth, storage) -> None:
    storage.set("token", "stale")
    gate = SessionGate(auth, storage)

    await gate.initialize()

    assert not gate.is_authenticated
    assert storage.get("token") is None


@pytest.mark.asyncio
async def test_initialize_without_token_makes_no_calls(auth, storage) -> None:
    await SessionGate(auth, storage).initialize()

    assert auth.calls == []


@pytest.mark.asyncio
async def test_listeners_see_identity_changes(session) -> None:
    seen = []

    async def listener(user):
        seen.append(user.id if user else None)

    session.subscribe(listener)
    await session.sign_in("ada@example.com", "secret")
    await session.sign_out()

    assert seen == ["user-1", None]


@pytest.mark.asyncio
async def test_require_user_and_admin_flag(auth, session) -> None:
    with pytest.raises(AuthRequiredException):
        session.require_user("checkout")

    auth.register("boss@example.com", "pw", role="admin")
    await session.sign_in("boss@example.com", "pw")

    assert session.require_user().email == "boss@example.com"
    assert session.is_admin


@pytest.mark.asyncio
async def test_resume_adopts_valid_token_without_storage(auth, signed_in) -> None:
    gate = SessionGate(auth)

    result = await gate.resume(signed_in.token)

    assert result.ok
    assert gate.current_user == signed_in.current_user
    assert gate.token == signed_in.token


@pytest.mark.asyncio
async def test_resume_rejects_unknown_token(auth) -> None:
    gate = SessionGate(auth)

    result = await gate.resume("forged")

    assert result.is_unauthorized
    assert not gate.is_authenticated
    assert gate.token is None


@pytest.mark.asyncio
async def test_storage_less_gate_signs_in_and_out(auth) -> None:
    gate = SessionGate(auth)

    assert (await gate.sign_in("ada@example.com", "secret")).ok
    await gate.sign_out()

    assert not gate.is_authenticated


@pytest.mark.asyncio
async def test_auth_failures_carry_error_keys(session, auth) -> None:
    wrong = await session.sign_in("ada@example.com", "nope")
    taken = await session.sign_up("ada@example.com", "x", "Ada", "Obi")
    auth.sign_in = AsyncMock(return_value=StoreResult.transient("Request timed out"))
    down = await session.sign_in("ada@example.com", "secret")

    assert wrong.error_key == ErrorKey.AUTH_REQUIRED
    assert taken.error_key == ErrorKey.DUPLICATE
    assert down.error_key == ErrorKey.FAILED
