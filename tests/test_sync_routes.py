"""동기화 HTTP 라우터 테스트"""

import httpx
import pytest
from fastapi import FastAPI

from config import adapters as config_adapters
from adapters.external.memory_checkpoint_store import InMemoryCheckpointStoreAdapter
from adapters.factory import AdapterFactory, get_adapter_factory
from adapters.output.record_sinks import InMemoryRecordSink
from adapters.web.sync_routes import get_checkpoint_store, router
from tests.fakes import FakeGraphApiClient, RecordingLogger, StaticCredentialSource, page


@pytest.fixture
def web_graph_client():
    return FakeGraphApiClient()


@pytest.fixture
def web_store():
    return InMemoryCheckpointStoreAdapter(RecordingLogger())


@pytest.fixture
def web_sink():
    return InMemoryRecordSink()


@pytest.fixture
async def client(web_graph_client, web_store, web_sink):
    factory = AdapterFactory(config_adapters.TestingConfig())
    factory._logger = RecordingLogger()
    factory._graph_api_client = web_graph_client
    factory._credential_source = StaticCredentialSource()
    factory._record_sink = web_sink

    app = FastAPI()
    app.include_router(router)
    app.dependency_overrides[get_checkpoint_store] = lambda: web_store
    app.dependency_overrides[get_adapter_factory] = lambda: factory

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client


async def test_users_sync_bootstraps_and_reports(client, web_graph_client, web_store, web_sink):
    web_graph_client.add_pages("/users/delta", page([{"id": "u1"}], delta_link="tokU1"))

    response = await client.post("/sync/users")

    assert response.status_code == 200
    body = response.json()
    assert body["target"] == "users"
    summary = body["passes"][0]
    assert summary["bootstrapped"] is True
    assert summary["succeeded"] == 1
    assert summary["item_count"] == 1
    assert web_store.snapshot() == {"O365_users_delta": "tokU1", "O365_folders|u1": ""}
    assert web_sink.counts() == {"users": 1}


async def test_sync_all_runs_each_level(client, web_graph_client):
    web_graph_client.add_pages("/users/delta", page([{"id": "u1"}], delta_link="tokU1"))
    web_graph_client.add_pages("/users/u1/mailFolders/delta", page([], delta_link="tokF1"))

    response = await client.post("/sync/all")

    assert response.status_code == 200
    assert [p["item_count"] for p in response.json()["passes"]] == [1, 0, 0]


async def test_unknown_target_is_not_found(client):
    assert (await client.post("/sync/contacts")).status_code == 404


async def test_filter_with_all_is_rejected(client):
    response = await client.post("/sync/all", params={"filter": "O365_users_delta"})
    assert response.status_code == 400


async def test_invalid_filter_is_rejected(client):
    response = await client.post("/sync/folders", params={"filter": "O365_folders("})
    assert response.status_code == 400


async def test_list_checkpoints(client, web_store):
    await web_store.put("O365_folders|u1", "tokF1")
    await web_store.put("O365_folders|u2", "")
    await web_store.put("O365_users_delta", "tokU1")

    response = await client.get("/checkpoints", params={"prefix": "O365_folders"})

    assert response.json() == {
        "count": 2,
        "checkpoints": [
            {"key": "O365_folders|u1", "pending_baseline": False},
            {"key": "O365_folders|u2", "pending_baseline": True},
        ],
    }


async def test_health(client):
    response = await client.get("/health")
    assert response.json() == {"status": "ok", "sync_running": False}
