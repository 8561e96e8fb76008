"""
레코드 출력 어댑터

동기화 중 발견한 아이템과 실패 레코드를 다운스트림으로 내보냅니다.
- JsonLinesRecordSink: 채널별 .jsonl 파일에 한 줄씩 추가
- InMemoryRecordSink: 메모리 목록에 보관 (테스트/웹 응답용)
"""

import asyncio
import json
from pathlib import Path
from typing import Dict, List

import aiofiles

from core.domain.entities import OutputRecord, RecordChannel
from core.domain.ports import LoggerPort, RecordSinkPort


class JsonLinesRecordSink(RecordSinkPort):
    """채널별 JSON Lines 파일 출력"""

    def __init__(self, output_dir: str, logger: LoggerPort):
        self.output_dir = Path(output_dir)
        self.logger = logger
        self._lock = asyncio.Lock()

    def path_for(self, channel: RecordChannel) -> Path:
        return self.output_dir / f"{channel.value}.jsonl"

    async def emit(self, record: OutputRecord) -> None:
        line = json.dumps(
            {"payload": record.payload, "attributes": record.attributes},
            ensure_ascii=False,
        )

        async with self._lock:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(self.path_for(record.channel), "a", encoding="utf-8") as f:
                await f.write(line + "\n")

        if record.channel == RecordChannel.FAILURE:
            self.logger.debug(f"실패 레코드 출력: {self.path_for(record.channel)}")


class InMemoryRecordSink(RecordSinkPort):
    """메모리 레코드 출력"""

    def __init__(self):
        self.records: List[OutputRecord] = []

    async def emit(self, record: OutputRecord) -> None:
        self.records.append(record)

    def by_channel(self, channel: RecordChannel) -> List[OutputRecord]:
        return [record for record in self.records if record.channel == channel]

    def counts(self) -> Dict[str, int]:
        """채널별 레코드 수"""
        result: Dict[str, int] = {}
        for record in self.records:
            result[record.channel.value] = result.get(record.channel.value, 0) + 1
        return result
