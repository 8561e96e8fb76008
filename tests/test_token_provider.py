"""토큰 제공자 테스트"""

import asyncio

import pytest

from core.domain.exceptions import TokenAcquisitionError


async def test_token_is_cached_after_first_exchange(token_provider, graph_client):
    first = await token_provider.get_token()
    second = await token_provider.get_token()

    assert first == "Bearer access-1"
    assert second == first
    assert graph_client.token_calls == 1


async def test_invalidate_forces_new_exchange(token_provider, graph_client):
    await token_provider.get_token()
    await token_provider.invalidate()

    assert not token_provider.has_token
    assert await token_provider.get_token() == "Bearer access-2"
    assert graph_client.token_calls == 2


async def test_invalidate_on_empty_cache_is_noop(token_provider, graph_client):
    await token_provider.invalidate()
    await token_provider.invalidate()

    assert graph_client.token_calls == 0


async def test_concurrent_callers_share_one_exchange(token_provider, graph_client):
    original = graph_client.request_token

    async def slow_request_token(credentials):
        await asyncio.sleep(0.01)
        return await original(credentials)

    graph_client.request_token = slow_request_token

    tokens = await asyncio.gather(*(token_provider.get_token() for _ in range(5)))

    assert set(tokens) == {"Bearer access-1"}
    assert graph_client.token_calls == 1


async def test_failed_exchange_leaves_cache_empty(token_provider, graph_client):
    graph_client.token_responses = [
        TokenAcquisitionError("401 - invalid_client", status_code=401),
        {"token_type": "Bearer", "access_token": "recovered"},
    ]

    with pytest.raises(TokenAcquisitionError):
        await token_provider.get_token()
    assert not token_provider.has_token

    assert await token_provider.get_token() == "Bearer recovered"


async def test_response_without_access_token_is_rejected(token_provider, graph_client):
    graph_client.token_responses = [{"token_type": "Bearer"}]

    with pytest.raises(TokenAcquisitionError):
        await token_provider.get_token()
    assert not token_provider.has_token


async def test_credentials_are_loaded_once(token_provider, credential_source):
    await token_provider.get_token()
    await token_provider.invalidate()
    await token_provider.get_token()

    assert credential_source.load_count == 1
