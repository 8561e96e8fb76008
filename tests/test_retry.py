"""재시도 래퍼 테스트"""

import pytest

from core.domain.exceptions import GraphApiError


async def test_success_on_first_attempt_does_not_invalidate(retry_wrapper, token_provider, graph_client):
    await token_provider.get_token()

    async def operation():
        return "ok"

    assert await retry_wrapper.with_retry(operation) == "ok"
    assert graph_client.token_calls == 1


async def test_single_retry_after_invalidating_token(retry_wrapper, token_provider, graph_client):
    seen_tokens = []

    async def operation():
        token = await token_provider.get_token()
        seen_tokens.append(token)
        if len(seen_tokens) == 1:
            raise GraphApiError(401, "InvalidAuthenticationToken")
        return "ok"

    assert await retry_wrapper.with_retry(operation, description="users") == "ok"
    assert seen_tokens == ["Bearer access-1", "Bearer access-2"]
    assert await token_provider.get_token() == "Bearer access-2"


async def test_second_failure_propagates(retry_wrapper, logger):
    attempts = []

    async def operation():
        attempts.append(1)
        raise GraphApiError(500, f"failure {len(attempts)}")

    with pytest.raises(GraphApiError, match="failure 2"):
        await retry_wrapper.with_retry(operation)

    assert len(attempts) == 2
    assert len(logger.messages["warning"]) == 1
