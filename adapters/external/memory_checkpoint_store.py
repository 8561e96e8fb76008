"""
메모리 체크포인트 저장소 어댑터

프로세스 메모리에 체크포인트를 보관합니다. 테스트나 일회성 실행에 사용됩니다.
"""

from typing import Dict, Optional, Set

from core.domain.ports import CheckpointStorePort, LoggerPort


class InMemoryCheckpointStoreAdapter(CheckpointStorePort):
    """메모리 기반 체크포인트 저장소 어댑터"""

    def __init__(self, logger: LoggerPort, initial: Optional[Dict[str, str]] = None):
        self.logger = logger
        self._entries: Dict[str, str] = dict(initial or {})

    async def list_keys(self) -> Set[str]:
        return set(self._entries)

    async def get(self, key: str) -> Optional[str]:
        value = self._entries.get(key)
        if value is None:
            self.logger.debug(f"체크포인트 키 없음: {key}")
        return value

    async def put(self, key: str, value: str) -> None:
        self._entries[key] = value
        self.logger.debug(f"체크포인트 저장: {key}")

    async def put_if_absent(self, key: str, value: str) -> bool:
        if key in self._entries:
            return False
        self._entries[key] = value
        self.logger.debug(f"체크포인트 키 생성: {key}")
        return True

    def snapshot(self) -> Dict[str, str]:
        """현재 저장 상태의 복사본"""
        return dict(self._entries)
