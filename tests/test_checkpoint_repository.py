"""SQLAlchemy 체크포인트 저장소 테스트"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from config import adapters as config_adapters
from adapters.db.checkpoint_repository import CheckpointRepositoryAdapter
from adapters.db.database import open_checkpoint_session
from adapters.db.models import Base


@pytest.fixture
async def session_factory(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'checkpoints.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def repository(session):
    return CheckpointRepositoryAdapter(session)


async def test_put_then_get(repository):
    assert await repository.get("O365_users_delta") is None

    await repository.put("O365_users_delta", "")
    assert await repository.get("O365_users_delta") == ""

    await repository.put("O365_users_delta", "tokU1")
    assert await repository.get("O365_users_delta") == "tokU1"
    assert await repository.list_keys() == {"O365_users_delta"}


async def test_put_if_absent_keeps_existing_value(repository):
    assert await repository.put_if_absent("O365_folders|u1", "") is True
    await repository.put("O365_folders|u1", "tokF1")

    assert await repository.put_if_absent("O365_folders|u1", "") is False
    assert await repository.get("O365_folders|u1") == "tokF1"


async def test_list_entries_filters_by_prefix_in_key_order(repository):
    await repository.put("O365_messages|u1|f2", "")
    await repository.put("O365_messages|u1|f1", "tokM1")
    await repository.put("O365_folders|u1", "tokF1")

    entries = await repository.list_entries("O365_messages")

    assert [e.key for e in entries] == ["O365_messages|u1|f1", "O365_messages|u1|f2"]
    assert [e.is_baseline() for e in entries] == [False, True]
    assert len(await repository.list_entries()) == 3


async def test_prefix_is_matched_literally(repository):
    await repository.put("O365_folders|u1", "")
    await repository.put("O365xfolders|u2", "")

    assert [e.key for e in await repository.list_entries("O365_f")] == ["O365_folders|u1"]


async def test_delete(repository):
    await repository.put("O365_folders|u1", "tokF1")

    assert await repository.delete("O365_folders|u1") is True
    assert await repository.delete("O365_folders|u1") is False
    assert await repository.list_keys() == set()


async def test_delete_by_prefix(repository):
    await repository.put("O365_messages|u1|f1", "")
    await repository.put("O365_messages|u1|f2", "")
    await repository.put("O365_messages|u2|f1", "")
    await repository.put("O365_folders|u1", "")

    assert await repository.delete_by_prefix("O365_messages|u1|") == 2
    assert await repository.list_keys() == {"O365_messages|u2|f1", "O365_folders|u1"}

    with pytest.raises(ValueError):
        await repository.delete_by_prefix("")


async def test_put_updates_key_inserted_by_another_instance(session_factory, monkeypatch):
    async with session_factory() as session_a, session_factory() as session_b:
        repository_a = CheckpointRepositoryAdapter(session_a)
        repository_b = CheckpointRepositoryAdapter(session_b)
        lookup = repository_a._get_model
        lookups = []

        async def lookup_before_other_insert(key):
            lookups.append(key)
            if len(lookups) == 1:
                # 조회 직후 다른 인스턴스가 같은 키를 기록
                await repository_b.put(key, "tokB")
                return None
            return await lookup(key)

        monkeypatch.setattr(repository_a, "_get_model", lookup_before_other_insert)

        await repository_a.put("O365_folders|u1", "tokA")
        await repository_a.put("O365_folders|u2", "")

        assert await repository_a.get("O365_folders|u1") == "tokA"
        assert await repository_a.list_keys() == {"O365_folders|u1", "O365_folders|u2"}


async def test_put_if_absent_loses_race_without_breaking_session(session_factory, monkeypatch):
    async with session_factory() as session_a, session_factory() as session_b:
        repository_a = CheckpointRepositoryAdapter(session_a)
        repository_b = CheckpointRepositoryAdapter(session_b)
        lookup = repository_a._get_model
        lookups = []

        async def lookup_before_other_insert(key):
            lookups.append(key)
            if len(lookups) == 1:
                await repository_b.put(key, "tokB")
                return None
            return await lookup(key)

        monkeypatch.setattr(repository_a, "_get_model", lookup_before_other_insert)

        assert await repository_a.put_if_absent("O365_folders|u1", "") is False
        assert await repository_a.get("O365_folders|u1") == "tokB"


async def test_checkpoint_session_creates_tables_and_closes(tmp_path):
    config = config_adapters.TestingConfig(database_url=f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")

    async with open_checkpoint_session(config, create_tables=True) as session:
        await CheckpointRepositoryAdapter(session).put("O365_users_delta", "tokU1")

    async with open_checkpoint_session(config) as session:
        assert await CheckpointRepositoryAdapter(session).get("O365_users_delta") == "tokU1"
