"""공용 테스트 픽스처"""

import pytest

from core.usecases.delta_paginator import DeltaPaginator
from core.usecases.delta_sync import DeltaSyncUseCase
from core.usecases.retry import RetryWrapper
from core.usecases.sync_targets import FolderSyncTarget, MessageSyncTarget, UserSyncTarget
from core.usecases.token_provider import TokenProvider
from adapters.external.memory_checkpoint_store import InMemoryCheckpointStoreAdapter
from adapters.output.record_sinks import InMemoryRecordSink
from tests.fakes import FakeGraphApiClient, RecordingLogger, StaticCredentialSource


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def credential_source():
    return StaticCredentialSource()


@pytest.fixture
def graph_client():
    return FakeGraphApiClient()


@pytest.fixture
def token_provider(credential_source, graph_client, logger):
    return TokenProvider(credential_source, graph_client, logger)


@pytest.fixture
def retry_wrapper(token_provider, logger):
    return RetryWrapper(token_provider, logger)


@pytest.fixture
def paginator(graph_client, token_provider, logger):
    return DeltaPaginator(
        graph_api_client=graph_client,
        token_provider=token_provider,
        logger=logger,
        user_fields="id,displayName",
        folder_fields="id,displayName",
        message_fields="id,subject,hasAttachments",
        message_page_size=10,
    )


@pytest.fixture
def store(logger):
    return InMemoryCheckpointStoreAdapter(logger)


@pytest.fixture
def sink():
    return InMemoryRecordSink()


@pytest.fixture
def delta_sync(store, paginator, retry_wrapper, sink, logger):
    return DeltaSyncUseCase(
        checkpoint_store=store,
        paginator=paginator,
        retry_wrapper=retry_wrapper,
        record_sink=sink,
        targets=[UserSyncTarget(), FolderSyncTarget(), MessageSyncTarget(paginator)],
        logger=logger,
    )
