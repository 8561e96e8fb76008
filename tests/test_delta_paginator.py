"""델타 페이지네이터 테스트"""

import json

import pytest

from core.domain.entities import RAW_VALUES, Scope
from core.domain.exceptions import PageStreamError
from tests.fakes import page

NEXT_USERS = "https://graph.microsoft.com/v1.0/users/delta?$skiptoken=p2"
USERS_DELTA = "https://graph.microsoft.com/v1.0/users/delta?$deltatoken=tokU1"


async def collect(stream):
    return [item async for item in stream]


async def test_follows_next_links_until_delta_link(paginator, graph_client):
    graph_client.add_pages("/users/delta", page([{"id": "u1"}, {"id": "u2"}], next_link=NEXT_USERS))
    graph_client.add_pages(NEXT_USERS, page([{"id": "u3"}], delta_link=USERS_DELTA))

    stream = paginator.fetch(Scope.all_users())
    items = await collect(stream)

    assert [item.item_id for item in items] == ["u1", "u2", "u3"]
    assert stream.delta_link == USERS_DELTA
    assert stream.page_count == 2

    first_call, second_call = graph_client.page_calls
    assert first_call[0] == "Bearer access-1"
    assert first_call[2] == {"$select": "id,displayName"}
    assert second_call[1:] == (NEXT_USERS, None)


async def test_stored_delta_link_is_requested_as_is(paginator, graph_client):
    graph_client.add_pages(USERS_DELTA, page([], delta_link=USERS_DELTA))

    stream = paginator.fetch(Scope.all_users(), USERS_DELTA)
    assert await collect(stream) == []
    assert stream.delta_link == USERS_DELTA
    assert graph_client.page_calls[0][1:] == (USERS_DELTA, None)


async def test_bare_token_is_sent_as_deltatoken(paginator, graph_client):
    graph_client.add_pages("/users/u1/mailFolders/delta", page([], delta_link="tokF2"))

    stream = paginator.fetch(Scope.user_folders("u1"), "tokF1")
    await collect(stream)

    assert graph_client.page_calls[0][2] == {"$select": "id,displayName", "$deltatoken": "tokF1"}


async def test_message_request_carries_page_size_and_escaped_ids(paginator, graph_client):
    path = "/users/u1/mailFolders/AAMk%2Fx%3D/messages/delta"
    graph_client.add_pages(path, page([{"id": "m1"}], delta_link="tokM1"))

    items = await collect(paginator.fetch(Scope.user_folder_messages("u1", "AAMk/x=")))

    assert items[0].attributes() == {
        "office365_user_id": "u1",
        "office365_folder_id": "AAMk/x=",
        "office365_message_id": "m1",
    }
    assert graph_client.page_calls[0][2]["$top"] == 10


async def test_items_without_id_are_skipped(paginator, graph_client, logger):
    graph_client.add_pages("/users/delta", page([{"displayName": "no id"}, {"id": "u1"}], delta_link="tokU1"))

    items = await collect(paginator.fetch(Scope.all_users()))

    assert [item.item_id for item in items] == ["u1"]
    assert logger.messages["warning"]


async def test_stream_cannot_be_iterated_twice(paginator, graph_client):
    graph_client.add_pages("/users/delta", page([], delta_link="tokU1"))
    stream = paginator.fetch(Scope.all_users())
    await collect(stream)

    with pytest.raises(PageStreamError):
        await collect(stream)


async def test_delta_link_unavailable_before_exhaustion(paginator, graph_client):
    graph_client.add_pages("/users/delta", page([{"id": "u1"}], delta_link="tokU1"))
    stream = paginator.fetch(Scope.all_users())

    with pytest.raises(PageStreamError):
        stream.delta_link

    async for _ in stream:
        assert not stream.exhausted
    assert stream.exhausted


async def test_last_page_without_delta_link_fails(paginator, graph_client):
    graph_client.add_pages("/users/delta", page([{"id": "u1"}]))

    with pytest.raises(PageStreamError):
        await collect(paginator.fetch(Scope.all_users()))


async def test_list_attachments_follows_next_links(paginator, graph_client):
    next_link = "https://graph.microsoft.com/v1.0/users/u1/messages/m1/attachments?$skip=1"
    graph_client.add_pages("/users/u1/messages/m1/attachments", page([{"id": "a1"}], next_link=next_link))
    graph_client.add_pages(next_link, page([{"id": "a2"}]))

    attachments = [a async for a, _ in paginator.list_attachments("u1", "m1")]

    assert [a["id"] for a in attachments] == ["a1", "a2"]


async def test_items_keep_raw_text_when_page_carries_it(paginator, graph_client):
    response = page([{"id": "u1", "age": 1.5}, {"id": "u2"}], delta_link="tokU1")
    response[RAW_VALUES] = ['{"id": "u1", "age": 1.50}', '{"id":"u2"}']
    graph_client.add_pages("/users/delta", response)

    items = await collect(paginator.fetch(Scope.all_users()))

    assert [item.raw for item in items] == ['{"id": "u1", "age": 1.50}', '{"id":"u2"}']


async def test_items_fall_back_to_serialized_payload_without_raw_text(paginator, graph_client):
    response = page([{"id": "u1"}], delta_link="tokU1")
    response[RAW_VALUES] = ['{"id":"u1"}', '{"id":"u2"}']
    graph_client.add_pages("/users/delta", response)

    items = await collect(paginator.fetch(Scope.all_users()))

    assert items[0].raw_text is None
    assert json.loads(items[0].raw) == {"id": "u1"}
