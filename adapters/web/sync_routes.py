"""
FastAPI 동기화 라우터

동기화 패스 실행과 체크포인트 조회를 위한 HTTP 인터페이스입니다.
같은 프로세스 안에서는 동기화 패스가 한 번에 하나만 실행됩니다.
"""

import asyncio
import re
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from core.domain.checkpoint_keys import ScopeFilter
from core.domain.entities import ScopeType, SyncPassResult
from core.domain.ports import CheckpointStorePort
from adapters.db.checkpoint_repository import CheckpointRepositoryAdapter
from adapters.db.database import get_db_session
from adapters.factory import AdapterFactory, get_adapter_factory

router = APIRouter(tags=["sync"])

SYNC_TARGETS = {
    "users": ScopeType.ALL_USERS,
    "folders": ScopeType.USER_FOLDERS,
    "messages": ScopeType.USER_FOLDER_MESSAGES,
}

_sync_lock = asyncio.Lock()


async def get_checkpoint_store(
    session: AsyncSession = Depends(get_db_session),
) -> CheckpointStorePort:
    """요청 범위의 체크포인트 저장소"""
    return CheckpointRepositoryAdapter(session)


def _summarize(result: SyncPassResult) -> dict:
    return {
        "filter": result.filter_pattern,
        "bootstrapped": result.bootstrapped,
        "succeeded": len(result.succeeded),
        "failed": len(result.failed),
        "item_count": result.item_count,
        "started_at": result.started_at.isoformat(),
        "completed_at": result.completed_at.isoformat() if result.completed_at else None,
        "outcomes": [outcome.model_dump(mode="json") for outcome in result.outcomes],
    }


@router.post("/sync/{target}")
async def run_sync(
    target: str,
    pattern: Optional[str] = Query(None, alias="filter", description="체크포인트 키 필터 정규식"),
    store: CheckpointStorePort = Depends(get_checkpoint_store),
    factory: AdapterFactory = Depends(get_adapter_factory),
):
    """동기화 패스를 실행합니다. target은 users, folders, messages, all 중 하나입니다."""
    if target != "all" and target not in SYNC_TARGETS:
        raise HTTPException(status_code=404, detail=f"알 수 없는 동기화 대상입니다: {target}")
    if target == "all" and pattern:
        raise HTTPException(status_code=400, detail="all 대상에는 필터를 지정할 수 없습니다")

    if _sync_lock.locked():
        raise HTTPException(status_code=409, detail="이미 동기화가 실행 중입니다")

    logger = factory.create_logger()
    filter_regexes = factory.get_config().get_filter_regexes()

    async with _sync_lock:
        usecase = factory.create_delta_sync_usecase(store)

        if target == "all":
            results = await usecase.run_hierarchy(filter_regexes)
            return {"target": target, "passes": [_summarize(result) for result in results]}

        scope_type = SYNC_TARGETS[target]
        try:
            scope_filter = ScopeFilter(scope_type, pattern or filter_regexes[scope_type])
        except (ValueError, re.error) as e:
            logger.error(f"필터 정규식 오류: {str(e)}")
            raise HTTPException(status_code=400, detail=f"잘못된 필터 정규식입니다: {str(e)}")

        result = await usecase.run_pass(scope_filter)
        return {"target": target, "passes": [_summarize(result)]}


@router.get("/checkpoints")
async def list_checkpoints(
    prefix: Optional[str] = Query(None, description="키 접두사 필터"),
    store: CheckpointStorePort = Depends(get_checkpoint_store),
):
    """저장된 체크포인트 키와 기준 동기화 대기 여부를 조회합니다."""
    keys = sorted(await store.list_keys())
    if prefix:
        keys = [key for key in keys if key.startswith(prefix)]

    checkpoints = []
    for key in keys:
        value = await store.get(key) or ""
        checkpoints.append({"key": key, "pending_baseline": not value.strip()})

    return {"count": len(checkpoints), "checkpoints": checkpoints}


@router.get("/health")
async def health():
    """상태 확인"""
    return {"status": "ok", "sync_running": _sync_lock.locked()}
