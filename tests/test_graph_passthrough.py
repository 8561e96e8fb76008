"""Graph API 단발 호출 유즈케이스 테스트"""

import pytest

from core.domain.exceptions import GraphApiError
from core.usecases.graph_passthrough import GraphPassthroughUseCase, split_addresses


@pytest.fixture
def passthrough(graph_client, token_provider, retry_wrapper, logger):
    return GraphPassthroughUseCase(graph_client, token_provider, retry_wrapper, logger)


async def test_call_endpoint_adds_select_and_authorization(passthrough, graph_client):
    graph_client.add_pages("/users/u1/messages", {"value": [{"id": "m1"}]})

    result = await passthrough.call_endpoint(
        "get",
        "/users/u1/messages",
        params={"$top": "5"},
        headers={"Prefer": 'outlook.body-content-type="text"'},
        select="id,subject",
    )

    assert result == {"value": [{"id": "m1"}]}
    authorization, method, url, params, headers, body = graph_client.requests[0]
    assert authorization == "Bearer access-1"
    assert method == "GET"
    assert params == {"$top": "5", "$select": "id,subject"}
    assert headers == {"Prefer": 'outlook.body-content-type="text"'}
    assert body is None


async def test_call_endpoint_rejects_unknown_method(passthrough):
    with pytest.raises(ValueError):
        await passthrough.call_endpoint("HEAD", "/me")


async def test_call_endpoint_retries_once_with_new_token(passthrough, graph_client):
    graph_client.add_pages("/me", GraphApiError(401, "expired"), {"id": "me"})

    assert await passthrough.call_endpoint("GET", "/me") == {"id": "me"}
    assert [r[0] for r in graph_client.requests] == ["Bearer access-1", "Bearer access-2"]


async def test_send_mail_builds_message(passthrough, graph_client):
    await passthrough.send_mail(
        subject="Hello",
        body="<p>hi</p>",
        to_recipients="a@example.com, b@example.com",
        cc_recipients="c@example.com",
    )

    authorization, user_id, message_data = graph_client.sent_mail[0]
    assert user_id == "me"
    assert message_data["saveToSentItems"] is True
    message = message_data["message"]
    assert message["body"] == {"contentType": "HTML", "content": "<p>hi</p>"}
    assert [r["emailAddress"]["address"] for r in message["toRecipients"]] == ["a@example.com", "b@example.com"]
    assert message["ccRecipients"] == [{"emailAddress": {"address": "c@example.com"}}]
    assert "bccRecipients" not in message


async def test_send_mail_requires_recipient(passthrough, graph_client):
    with pytest.raises(ValueError):
        await passthrough.send_mail(subject="s", body="b", to_recipients=" , ")
    assert graph_client.sent_mail == []


def test_split_addresses():
    assert split_addresses(None) == []
    assert split_addresses("a@x.com,, b@x.com ") == ["a@x.com", "b@x.com"]
