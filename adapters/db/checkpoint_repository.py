"""
체크포인트 저장소 Repository 어댑터

CheckpointStorePort를 구현하는 SQLAlchemy 기반 어댑터입니다.
여러 인스턴스가 같은 테이블을 공유할 수 있으며, 잠금이나 트랜잭션 범위를
넘어서는 보장은 하지 않습니다.
"""

from typing import List, Optional, Set

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from core.domain.entities import CheckpointEntry
from core.domain.ports import CheckpointStorePort
from .models import CheckpointModel


class CheckpointRepositoryAdapter(CheckpointStorePort):
    """체크포인트 Repository 어댑터"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_keys(self) -> Set[str]:
        """모든 키를 조회합니다."""
        result = await self.session.execute(select(CheckpointModel.key))
        return set(result.scalars().all())

    async def get(self, key: str) -> Optional[str]:
        """키의 값을 조회합니다."""
        model = await self._get_model(key)
        if model is None:
            return None
        return model.value

    async def put(self, key: str, value: str) -> None:
        """키의 값을 저장합니다. 이미 있으면 덮어씁니다."""
        model = await self._get_model(key)
        if model is not None:
            model.value = value
            await self._commit()
            return

        self.session.add(CheckpointModel(key=key, value=value))
        try:
            await self._commit()
        except IntegrityError:
            # 조회 이후 다른 인스턴스가 같은 키를 추가한 경우 갱신으로 처리
            model = await self._get_model(key)
            if model is None:
                raise
            model.value = value
            await self._commit()

    async def put_if_absent(self, key: str, value: str) -> bool:
        """키가 없을 때만 저장합니다."""
        if await self._get_model(key) is not None:
            return False

        self.session.add(CheckpointModel(key=key, value=value))
        try:
            await self._commit()
        except IntegrityError:
            # 다른 인스턴스가 먼저 기록한 경우
            return False
        return True

    async def list_entries(self, prefix: Optional[str] = None) -> List[CheckpointEntry]:
        """저장된 항목을 키 순서로 조회합니다."""
        stmt = select(CheckpointModel).order_by(CheckpointModel.key)
        if prefix:
            stmt = stmt.where(CheckpointModel.key.startswith(prefix, autoescape=True))

        result = await self.session.execute(stmt)
        return [CheckpointEntry(key=model.key, value=model.value) for model in result.scalars().all()]

    async def delete(self, key: str) -> bool:
        """키 하나를 삭제합니다."""
        result = await self.session.execute(
            delete(CheckpointModel).where(CheckpointModel.key == key)
        )
        await self._commit()
        return result.rowcount > 0

    async def delete_by_prefix(self, prefix: str) -> int:
        """접두사로 시작하는 키를 모두 삭제합니다."""
        if not prefix:
            raise ValueError("삭제할 키 접두사가 필요합니다")

        result = await self.session.execute(
            delete(CheckpointModel).where(CheckpointModel.key.startswith(prefix, autoescape=True))
        )
        await self._commit()
        return result.rowcount

    async def _commit(self) -> None:
        """커밋이 실패하면 롤백해 세션을 다음 호출에 쓸 수 있는 상태로 되돌립니다."""
        try:
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    async def _get_model(self, key: str) -> Optional[CheckpointModel]:
        stmt = select(CheckpointModel).where(CheckpointModel.key == key)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
