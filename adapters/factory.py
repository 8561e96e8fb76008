"""
어댑터 팩토리

모든 어댑터들을 생성하고 의존성을 주입하는 팩토리 클래스입니다.
클린 아키텍처의 의존성 역전 원칙을 구현합니다.

토큰 제공자는 프로세스당 하나만 생성되어 모든 유즈케이스가 같은 토큰을 공유합니다.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.ports import (
    CheckpointStorePort,
    ConfigPort,
    CredentialSourcePort,
    GraphApiClientPort,
    LoggerPort,
    RecordSinkPort,
)
from core.usecases.delta_paginator import DeltaPaginator
from core.usecases.delta_sync import DeltaSyncUseCase
from core.usecases.graph_passthrough import GraphPassthroughUseCase
from core.usecases.retry import RetryWrapper
from core.usecases.sync_targets import FolderSyncTarget, MessageSyncTarget, UserSyncTarget
from core.usecases.token_provider import TokenProvider

from .db.checkpoint_repository import CheckpointRepositoryAdapter
from .external.credential_sources import create_credential_source
from .external.graph_api_client import GraphApiClientAdapter
from .external.memory_checkpoint_store import InMemoryCheckpointStoreAdapter
from .logger import LoggerAdapter
from .output.record_sinks import JsonLinesRecordSink
from config.adapters import get_config


class AdapterFactory:
    """어댑터 팩토리"""

    def __init__(self, config: Optional[ConfigPort] = None):
        self.config = config or get_config()
        self._logger: Optional[LoggerPort] = None
        self._graph_api_client: Optional[GraphApiClientPort] = None
        self._credential_source: Optional[CredentialSourcePort] = None
        self._token_provider: Optional[TokenProvider] = None
        self._record_sink: Optional[RecordSinkPort] = None

    def create_logger(self) -> LoggerPort:
        """로거 어댑터를 생성합니다."""
        if self._logger is None:
            self._logger = LoggerAdapter(
                name="o365_delta_sync",
                level=self.config.get_log_level(),
                format_string=self.config.get_log_format(),
            )
        return self._logger

    def create_graph_api_client(self) -> GraphApiClientPort:
        """Graph API 클라이언트 어댑터를 생성합니다."""
        if self._graph_api_client is None:
            self._graph_api_client = GraphApiClientAdapter(
                logger=self.create_logger(),
                base_url=self.config.get_graph_base_url(),
                auth_url=self.config.get_auth_base_url(),
                timeout=self.config.get_http_timeout(),
            )
        return self._graph_api_client

    def create_credential_source(self) -> CredentialSourcePort:
        """설정된 자격 증명 소스를 생성합니다."""
        if self._credential_source is None:
            self._credential_source = create_credential_source(self.config, self.create_logger())
        return self._credential_source

    def create_token_provider(self) -> TokenProvider:
        """공유 토큰 제공자를 생성합니다."""
        if self._token_provider is None:
            self._token_provider = TokenProvider(
                credential_source=self.create_credential_source(),
                graph_api_client=self.create_graph_api_client(),
                logger=self.create_logger(),
            )
        return self._token_provider

    def create_retry_wrapper(self) -> RetryWrapper:
        """재시도 래퍼를 생성합니다."""
        return RetryWrapper(self.create_token_provider(), self.create_logger())

    def create_paginator(self) -> DeltaPaginator:
        """델타 페이지네이터를 생성합니다."""
        return DeltaPaginator(
            graph_api_client=self.create_graph_api_client(),
            token_provider=self.create_token_provider(),
            logger=self.create_logger(),
            user_fields=self.config.get_user_fields(),
            folder_fields=self.config.get_folder_fields(),
            message_fields=self.config.get_message_fields(),
            message_page_size=self.config.get_message_page_size(),
        )

    def create_record_sink(self) -> RecordSinkPort:
        """JSON Lines 레코드 출력을 생성합니다."""
        if self._record_sink is None:
            self._record_sink = JsonLinesRecordSink(
                output_dir=self.config.get_output_dir(),
                logger=self.create_logger(),
            )
        return self._record_sink

    def create_checkpoint_repository(self, session: AsyncSession) -> CheckpointRepositoryAdapter:
        """데이터베이스 체크포인트 저장소를 생성합니다."""
        return CheckpointRepositoryAdapter(session)

    def create_memory_checkpoint_store(self) -> InMemoryCheckpointStoreAdapter:
        """메모리 체크포인트 저장소를 생성합니다."""
        return InMemoryCheckpointStoreAdapter(self.create_logger())

    def create_delta_sync_usecase(
        self,
        checkpoint_store: CheckpointStorePort,
        record_sink: Optional[RecordSinkPort] = None,
    ) -> DeltaSyncUseCase:
        """델타 동기화 유즈케이스를 생성합니다."""
        paginator = self.create_paginator()
        targets = [
            UserSyncTarget(),
            FolderSyncTarget(),
            MessageSyncTarget(paginator, fetch_attachments=self.config.is_fetch_attachments()),
        ]

        return DeltaSyncUseCase(
            checkpoint_store=checkpoint_store,
            paginator=paginator,
            retry_wrapper=self.create_retry_wrapper(),
            record_sink=record_sink or self.create_record_sink(),
            targets=targets,
            logger=self.create_logger(),
        )

    def create_graph_passthrough_usecase(self) -> GraphPassthroughUseCase:
        """Graph API 단발 호출 유즈케이스를 생성합니다."""
        return GraphPassthroughUseCase(
            graph_api_client=self.create_graph_api_client(),
            token_provider=self.create_token_provider(),
            retry_wrapper=self.create_retry_wrapper(),
            logger=self.create_logger(),
        )

    def get_config(self) -> ConfigPort:
        """설정 객체를 반환합니다."""
        return self.config


# 전역 팩토리 인스턴스
_factory: Optional[AdapterFactory] = None


def get_adapter_factory() -> AdapterFactory:
    """전역 어댑터 팩토리 인스턴스를 반환합니다."""
    global _factory
    if _factory is None:
        _factory = AdapterFactory()
    return _factory


def initialize_adapter_factory(config: Optional[ConfigPort] = None) -> AdapterFactory:
    """어댑터 팩토리를 초기화합니다."""
    global _factory
    _factory = AdapterFactory(config)
    return _factory
