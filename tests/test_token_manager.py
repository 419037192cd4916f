import asyncio
from urllib.parse import parse_qs

import httpx
import pytest

from codex_oauth.constants import CLIENT_ID, JWT_AUTH_CLAIM
from tests.helpers import expires_in, make_jwt


def _refresh_handler(payload, calls=None, status=200):
    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append({k: v[0] for k, v in parse_qs(request.content.decode()).items()})
        return httpx.Response(status, json=payload)

    return handler


@pytest.mark.asyncio
async def test_no_record_returns_none_without_network(make_manager) -> None:
    manager = make_manager()
    assert await manager.get_access_token() is None
    assert manager.is_configured() is False


@pytest.mark.asyncio
async def test_fresh_token_returned_without_refresh(make_manager, store) -> None:
    store.store(access_token="at", refresh_token="rt", expires_at=expires_in(3600))
    manager = make_manager()
    assert await manager.get_access_token() == "at"


@pytest.mark.asyncio
async def test_token_inside_buffer_is_refreshed(make_manager, store) -> None:
    store.store(access_token="old", refresh_token="rt", expires_at=expires_in(30), account_id="acct-old")
    calls = []
    manager = make_manager(_refresh_handler({"access_token": "new", "refresh_token": "rt-2", "expires_in": 3600}, calls))

    assert await manager.get_access_token() == "new"

    assert calls == [{"grant_type": "refresh_token", "refresh_token": "rt", "client_id": CLIENT_ID}]
    record = store.current()
    assert record.refresh_token == "rt-2"
    assert record.account_id == "acct-old"
    assert not record.is_expiring_soon()


@pytest.mark.asyncio
async def test_refresh_failure_returns_none_not_stale_token(make_manager, store) -> None:
    store.store(access_token="stale", refresh_token="rt", expires_at=expires_in(30))
    manager = make_manager(_refresh_handler({"error": "invalid_grant"}, status=400))

    assert await manager.get_access_token() is None
    assert store.current().access_token == "stale"


@pytest.mark.asyncio
async def test_missing_refresh_token_returns_none(make_manager, store) -> None:
    store.store(access_token="stale", expires_at=expires_in(-10))
    manager = make_manager()

    assert await manager.get_access_token() is None
    assert await manager.refresh_token() is False


@pytest.mark.asyncio
async def test_refresh_keeps_old_refresh_token_when_not_rotated(make_manager, store) -> None:
    store.store(access_token="old", refresh_token="rt", expires_at=expires_in(-10))
    manager = make_manager(_refresh_handler({"access_token": "new", "expires_in": 3600}))

    assert await manager.refresh_token() is True
    assert store.current().refresh_token == "rt"


@pytest.mark.asyncio
async def test_refresh_still_expired_returns_none(make_manager, store) -> None:
    store.store(access_token="old", refresh_token="rt", expires_at=expires_in(-10))
    manager = make_manager(_refresh_handler({"access_token": "new", "expires_in": -60}))

    assert await manager.get_access_token() is None


@pytest.mark.asyncio
async def test_refresh_account_id_from_access_token(make_manager, store) -> None:
    store.store(access_token="old", refresh_token="rt", expires_at=expires_in(-10), account_id="acct-old")
    access = make_jwt({JWT_AUTH_CLAIM: {"chatgpt_account_id": "acct-jwt"}})
    manager = make_manager(_refresh_handler({"access_token": access, "expires_in": 3600}))

    assert await manager.refresh_token() is True
    assert store.current().account_id == "acct-jwt"


@pytest.mark.asyncio
async def test_refresh_account_id_from_id_token(make_manager, store) -> None:
    store.store(access_token="old", refresh_token="rt", expires_at=expires_in(-10))
    id_token = make_jwt({"organizations": [{"id": "org-1"}]})
    manager = make_manager(_refresh_handler({"access_token": "opaque", "id_token": id_token, "expires_in": 3600}))

    assert await manager.refresh_token() is True
    record = store.current()
    assert record.account_id == "org-1"
    assert record.id_token == id_token


@pytest.mark.asyncio
async def test_refresh_prefers_explicit_account_id(make_manager, store) -> None:
    store.store(access_token="old", refresh_token="rt", expires_at=expires_in(-10))
    access = make_jwt({"chatgpt_account_id": "acct-jwt"})
    manager = make_manager(_refresh_handler({"access_token": access, "account_id": "acct-field", "expires_in": 3600}))

    await manager.refresh_token()
    assert store.current().account_id == "acct-field"


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_refresh(make_manager, store) -> None:
    store.store(access_token="old", refresh_token="rt", expires_at=expires_in(-10))
    calls = []
    manager = make_manager(_refresh_handler({"access_token": "new", "expires_in": 3600}, calls))

    tokens = await asyncio.gather(*(manager.get_access_token() for _ in range(5)))

    assert tokens == ["new"] * 5
    assert len(calls) == 1


def test_store_tokens_extracts_claims(make_manager, store) -> None:
    manager = make_manager()
    id_token = make_jwt({"email": "me@example.com", "chatgpt_account_id": "acct"})

    record = manager.store_tokens({
        "access_token": "at",
        "refresh_token": "rt",
        "id_token": id_token,
        "expires_in": 3600,
    })

    assert record.email == "me@example.com"
    assert record.account_id == "acct"
    assert manager.get_email() == "me@example.com"
    assert manager.get_account_id() == "acct"
    assert not record.is_expiring_soon()


def test_logout_clears_store(make_manager, store) -> None:
    store.store(access_token="at", expires_at=expires_in(3600))
    manager = make_manager()

    manager.logout()

    assert manager.is_configured() is False
    assert store.current() is None


@pytest.mark.asyncio
async def test_get_auth_credentials(make_manager, store) -> None:
    store.store(access_token="at", expires_at=expires_in(3600), account_id="acct")
    assert await make_manager().get_auth_credentials() == ("at", "acct")


@pytest.mark.asyncio
async def test_refreshed_token_inside_buffer_is_not_returned(make_manager, store) -> None:
    store.store(access_token="old", refresh_token="rt", expires_at=expires_in(-10))
    manager = make_manager(_refresh_handler({"access_token": "new", "expires_in": 30}))

    assert await manager.get_access_token() is None
    assert store.current().is_expiring_soon()


@pytest.mark.asyncio
async def test_refresh_with_zero_expires_in_is_already_expired(make_manager, store) -> None:
    store.store(access_token="old", refresh_token="rt", expires_at=expires_in(-10))
    manager = make_manager(_refresh_handler({"access_token": "new", "expires_in": 0}))

    assert await manager.get_access_token() is None
    assert store.current().is_expired()


def test_store_tokens_zero_expires_in(make_manager) -> None:
    record = make_manager().store_tokens({"access_token": "at", "expires_in": 0})
    assert record.is_expired()


def test_store_tokens_default_expiry_when_absent(make_manager) -> None:
    record = make_manager().store_tokens({"access_token": "at"})
    assert not record.is_expiring_soon(buffer_seconds=3500)
