"""
델타 동기화 유즈케이스

체크포인트 저장소의 키를 필터로 골라 스코프별 델타 조회를 실행하고,
발견한 아이템을 다운스트림으로 내보낸 뒤 새 델타 링크를 저장합니다.
사용자/폴더 스코프에서는 하위 스코프의 체크포인트 키를 새로 기록합니다.

키별 상태 전이:
- 키 없음 → 기준 조회 → 델타 링크 저장
- 델타 링크 T → 증분 조회(T) → 새 델타 링크 T'
"""

import traceback
from typing import Dict, List, Optional

from ..domain.checkpoint_keys import (
    ScopeFilter,
    format_checkpoint_key,
    parse_checkpoint_key,
)
from ..domain.entities import (
    OFFICE365_CACHE_KEY,
    OFFICE365_DELTA_KEY,
    OFFICE365_ERROR,
    OFFICE365_STACK_TRACE,
    KeyOutcome,
    KeyStatus,
    OutputRecord,
    RecordChannel,
    Scope,
    ScopeType,
    SyncPassResult,
)
from ..domain.exceptions import MalformedCheckpointKeyError
from ..domain.ports import CheckpointStorePort, LoggerPort, RecordSinkPort
from .delta_paginator import DeltaPaginator
from .retry import RetryWrapper
from .sync_targets import SyncTarget

HIERARCHY = (
    ScopeType.ALL_USERS,
    ScopeType.USER_FOLDERS,
    ScopeType.USER_FOLDER_MESSAGES,
)


class DeltaSyncUseCase:
    """델타 동기화 유즈케이스"""

    def __init__(
        self,
        checkpoint_store: CheckpointStorePort,
        paginator: DeltaPaginator,
        retry_wrapper: RetryWrapper,
        record_sink: RecordSinkPort,
        targets: List[SyncTarget],
        logger: LoggerPort,
    ):
        self.checkpoint_store = checkpoint_store
        self.paginator = paginator
        self.retry_wrapper = retry_wrapper
        self.record_sink = record_sink
        self.targets: Dict[ScopeType, SyncTarget] = {t.scope_type: t for t in targets}
        self.logger = logger

    async def run_pass(self, scope_filter: ScopeFilter) -> SyncPassResult:
        """
        동기화 패스를 한 번 실행합니다.

        Args:
            scope_filter: 처리할 체크포인트 키를 고르는 필터

        Returns:
            키별 처리 결과를 담은 패스 결과
        """
        target = self.targets.get(scope_filter.scope_type)
        if target is None:
            raise ValueError(f"등록되지 않은 동기화 대상입니다: {scope_filter.scope_type.value}")

        result = SyncPassResult(filter_pattern=scope_filter.pattern)
        self.logger.info(f"동기화 패스 시작: {scope_filter}")

        keys = [key for key in await self.checkpoint_store.list_keys() if scope_filter.matches(key)]
        self.logger.info(f"일치하는 체크포인트 키: {len(keys)}개")

        if not keys:
            bootstrap_scope = target.bootstrap_scope()
            if bootstrap_scope is None:
                self.logger.debug(f"처리할 키가 없고 부트스트랩 대상도 없음: {scope_filter}")
            else:
                result.bootstrapped = True
                keys = [format_checkpoint_key(bootstrap_scope)]
                self.logger.info(f"빈 저장소 부트스트랩: {keys[0]}")

        for key in keys:
            outcome = await self._process_key(target, key)
            result.outcomes.append(outcome)

        result.mark_as_completed()
        self.logger.info(
            f"동기화 패스 완료: {scope_filter}, 성공: {len(result.succeeded)}, "
            f"실패: {len(result.failed)}, 아이템: {result.item_count}"
        )
        return result

    async def run_hierarchy(
        self,
        filter_patterns: Optional[Dict[ScopeType, str]] = None,
    ) -> List[SyncPassResult]:
        """사용자 → 폴더 → 메시지 순서로 패스를 실행합니다."""
        filter_patterns = filter_patterns or {}
        results = []
        for scope_type in HIERARCHY:
            if scope_type not in self.targets:
                continue
            scope_filter = ScopeFilter(scope_type, filter_patterns.get(scope_type))
            results.append(await self.run_pass(scope_filter))
        return results

    async def _process_key(self, target: SyncTarget, key: str) -> KeyOutcome:
        """키 하나를 처리합니다. 실패는 이 키에만 한정됩니다."""
        try:
            scope = parse_checkpoint_key(key)
            if scope.scope_type != target.scope_type:
                raise MalformedCheckpointKeyError(
                    key, f"{target.scope_type.value} 대상이 아닌 키입니다"
                )

            resume_token = await self.checkpoint_store.get(key) or ""

            outcome = await self.retry_wrapper.with_retry(
                lambda: self._sync_scope(target, key, scope, resume_token),
                description=key,
            )

            # 페이지네이션이 끝까지 완료된 경우에만 체크포인트 기록
            await self.checkpoint_store.put(key, outcome.delta_link)

            self.logger.info(
                f"키 처리 완료: {key}, 아이템: {outcome.item_count}, "
                f"하위 키: {len(outcome.seeded_keys)}, 변경: {outcome.drifted}"
            )
            return outcome

        except Exception as e:
            self.logger.error(f"키 처리 실패: {key}, 오류: {str(e)}")
            await self._emit_failure(key, e)
            return KeyOutcome(key=key, status=KeyStatus.FAILED, error_message=str(e))

    async def _sync_scope(
        self,
        target: SyncTarget,
        key: str,
        scope: Scope,
        resume_token: str,
    ) -> KeyOutcome:
        """스코프의 델타 페이지를 끝까지 소비합니다. 재시도 시 처음부터 다시 호출됩니다."""
        outcome = KeyOutcome(key=key, status=KeyStatus.SUCCESS)
        stream = self.paginator.fetch(scope, resume_token)

        async for item in stream:
            attributes = item.attributes()

            # 삭제된 상위 아이템은 하위 스코프를 만들지 않음
            child_scope = None if item.removed else scope.child(item.item_id)
            child_key = format_checkpoint_key(child_scope) if child_scope else None
            if child_key:
                attributes[OFFICE365_CACHE_KEY] = child_key

            await target.before_emit(item, self.record_sink)
            await self.record_sink.emit(
                OutputRecord(channel=target.channel, payload=item.raw, attributes=attributes)
            )
            outcome.item_count += 1

            if child_key and await self.checkpoint_store.put_if_absent(child_key, ""):
                outcome.seeded_keys.append(child_key)

        outcome.delta_link = stream.delta_link
        outcome.drifted = stream.delta_link != resume_token
        return outcome

    async def _emit_failure(self, key: str, error: Exception) -> None:
        """실패 채널로 오류 레코드 하나를 내보냅니다."""
        stack_trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        await self.record_sink.emit(
            OutputRecord(
                channel=RecordChannel.FAILURE,
                payload="",
                attributes={
                    OFFICE365_ERROR: str(error),
                    OFFICE365_STACK_TRACE: stack_trace,
                    OFFICE365_DELTA_KEY: key,
                },
            )
        )
