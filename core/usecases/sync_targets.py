"""
동기화 대상 정의

스코프 타입별로 다른 부분(출력 채널, 부트스트랩, 추가 레코드)을 정의합니다.
"""

import json
from typing import Optional

from ..domain.entities import (
    OFFICE365_FOLDER_ID,
    OFFICE365_MESSAGE_ID,
    OFFICE365_USER_ID,
    OutputRecord,
    RecordChannel,
    Scope,
    ScopeType,
    SyncItem,
)
from ..domain.ports import RecordSinkPort
from .delta_paginator import DeltaPaginator


class SyncTarget:
    """동기화 대상 기본 클래스"""

    scope_type: ScopeType
    channel: RecordChannel

    def bootstrap_scope(self) -> Optional[Scope]:
        """일치하는 키가 없을 때 실행할 기준 스코프 (없으면 None)"""
        return None

    async def before_emit(self, item: SyncItem, sink: RecordSinkPort) -> int:
        """아이템 레코드를 내보내기 전에 추가 레코드를 내보냅니다. 추가 레코드 수 반환"""
        return 0


class UserSyncTarget(SyncTarget):
    """전체 사용자 동기화"""

    scope_type = ScopeType.ALL_USERS
    channel = RecordChannel.USERS

    def bootstrap_scope(self) -> Optional[Scope]:
        return Scope.all_users()


class FolderSyncTarget(SyncTarget):
    """사용자별 메일 폴더 동기화"""

    scope_type = ScopeType.USER_FOLDERS
    channel = RecordChannel.FOLDERS


class MessageSyncTarget(SyncTarget):
    """폴더별 메시지 동기화 (첨부파일 포함)"""

    scope_type = ScopeType.USER_FOLDER_MESSAGES
    channel = RecordChannel.MESSAGES

    def __init__(self, paginator: DeltaPaginator, fetch_attachments: bool = True):
        self.paginator = paginator
        self.fetch_attachments = fetch_attachments

    async def before_emit(self, item: SyncItem, sink: RecordSinkPort) -> int:
        # hasAttachments는 인라인 첨부파일을 세지 않으므로 항상 조회
        if not self.fetch_attachments or item.removed:
            return 0

        count = 0
        async for attachment, raw_text in self.paginator.list_attachments(item.scope.user_id, item.item_id):
            await sink.emit(
                OutputRecord(
                    channel=RecordChannel.ATTACHMENTS,
                    payload=raw_text if raw_text is not None else json.dumps(attachment, ensure_ascii=False),
                    attributes={
                        OFFICE365_USER_ID: item.scope.user_id,
                        OFFICE365_FOLDER_ID: item.scope.folder_id,
                        OFFICE365_MESSAGE_ID: item.item_id,
                    },
                )
            )
            count += 1
        return count
