"""
도메인 엔티티 정의

델타 동기화의 핵심 개념을 나타내는 엔티티들을 정의합니다.
모든 엔티티는 Pydantic 모델을 기반으로 하여 타입 안정성을 보장합니다.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

KEY_DELIMITER = "|"

# 다운스트림 레코드 속성 이름
OFFICE365_USER_ID = "office365_user_id"
OFFICE365_FOLDER_ID = "office365_folder_id"
OFFICE365_MESSAGE_ID = "office365_message_id"
OFFICE365_CACHE_KEY = "office365_cache_key"
OFFICE365_DELTA_KEY = "office365_delta_key"
OFFICE365_ERROR = "Office365.Error"
OFFICE365_STACK_TRACE = "Office365.StackTrace"

# 페이지 응답의 value 원소별 원본 JSON 텍스트 (어댑터가 채움)
RAW_VALUES = "_raw_values"


class ScopeType(str, Enum):
    """동기화 스코프 타입"""
    ALL_USERS = "users"
    USER_FOLDERS = "folders"
    USER_FOLDER_MESSAGES = "messages"


class RecordChannel(str, Enum):
    """다운스트림 레코드 채널"""
    USERS = "users"
    FOLDERS = "folders"
    MESSAGES = "messages"
    ATTACHMENTS = "attachments"
    FAILURE = "failure"


class KeyStatus(str, Enum):
    """체크포인트 키 처리 결과"""
    SUCCESS = "success"
    FAILED = "failed"


class Scope(BaseModel):
    """
    동기화 대상 스코프

    AllUsers → UserFolders{user_id} → UserFolderMessages{user_id, folder_id}
    계층을 하나의 태그 모델로 표현합니다.
    """

    model_config = ConfigDict(frozen=True)

    scope_type: ScopeType = Field(..., description="스코프 타입")
    user_id: Optional[str] = Field(None, description="소유 사용자 ID")
    folder_id: Optional[str] = Field(None, description="소유 폴더 ID")

    @model_validator(mode="after")
    def validate_identifiers(self):
        """스코프 타입별 필수 식별자 검증"""
        required = {
            ScopeType.ALL_USERS: (),
            ScopeType.USER_FOLDERS: ("user_id",),
            ScopeType.USER_FOLDER_MESSAGES: ("user_id", "folder_id"),
        }[self.scope_type]

        for name in ("user_id", "folder_id"):
            value = getattr(self, name)
            if name in required:
                if not value:
                    raise ValueError(f"{self.scope_type.value} 스코프에는 {name}가 필요합니다")
                if KEY_DELIMITER in value:
                    raise ValueError(f"{name}에 '{KEY_DELIMITER}' 문자를 사용할 수 없습니다: {value}")
            elif value is not None:
                raise ValueError(f"{self.scope_type.value} 스코프에는 {name}를 지정할 수 없습니다")
        return self

    @classmethod
    def all_users(cls) -> "Scope":
        return cls(scope_type=ScopeType.ALL_USERS)

    @classmethod
    def user_folders(cls, user_id: str) -> "Scope":
        return cls(scope_type=ScopeType.USER_FOLDERS, user_id=user_id)

    @classmethod
    def user_folder_messages(cls, user_id: str, folder_id: str) -> "Scope":
        return cls(
            scope_type=ScopeType.USER_FOLDER_MESSAGES,
            user_id=user_id,
            folder_id=folder_id,
        )

    def child(self, item_id: str) -> Optional["Scope"]:
        """이 스코프에서 발견된 아이템이 만드는 하위 스코프 (메시지 스코프는 하위가 없음)"""
        if self.scope_type == ScopeType.ALL_USERS:
            return Scope.user_folders(item_id)
        if self.scope_type == ScopeType.USER_FOLDERS:
            return Scope.user_folder_messages(self.user_id, item_id)
        return None


class CheckpointEntry(BaseModel):
    """체크포인트 저장소 항목"""

    key: str = Field(..., description="스코프 키")
    value: str = Field(default="", description="델타 링크 (빈 값이면 최초 동기화)")

    def is_baseline(self) -> bool:
        """최초(기준) 동기화가 필요한지 확인"""
        return not self.value.strip()


class SyncItem(BaseModel):
    """델타 페이지에서 발견된 아이템"""

    scope: Scope = Field(..., description="아이템을 발견한 스코프")
    item_id: str = Field(..., description="원격 식별자")
    payload: Dict[str, Any] = Field(default_factory=dict, description="파싱된 페이로드")
    raw_text: Optional[str] = Field(None, description="응답 본문에서 잘라낸 원본 JSON 텍스트")

    @property
    def raw(self) -> str:
        """다운스트림으로 전달할 원본 JSON 텍스트"""
        if self.raw_text is not None:
            return self.raw_text
        return json.dumps(self.payload, ensure_ascii=False)

    @property
    def removed(self) -> bool:
        """델타 응답에서 삭제로 표시된 아이템인지 확인"""
        return "@removed" in self.payload

    def attributes(self) -> Dict[str, str]:
        """스코프에서 파생된 메타데이터"""
        if self.scope.scope_type == ScopeType.ALL_USERS:
            return {OFFICE365_USER_ID: self.item_id}
        if self.scope.scope_type == ScopeType.USER_FOLDERS:
            return {
                OFFICE365_USER_ID: self.scope.user_id,
                OFFICE365_FOLDER_ID: self.item_id,
            }
        return {
            OFFICE365_USER_ID: self.scope.user_id,
            OFFICE365_FOLDER_ID: self.scope.folder_id,
            OFFICE365_MESSAGE_ID: self.item_id,
        }


class OutputRecord(BaseModel):
    """다운스트림 파이프라인으로 내보내는 레코드"""

    channel: RecordChannel = Field(..., description="출력 채널")
    payload: str = Field(default="", description="원본 페이로드")
    attributes: Dict[str, str] = Field(default_factory=dict, description="부가 속성")


class ClientCredentials(BaseModel):
    """토큰 교환에 사용하는 클라이언트 자격 증명"""

    tenant_id: str = Field(..., description="Azure AD 테넌트 ID")
    client_id: str = Field(..., description="애플리케이션 클라이언트 ID")
    client_secret: str = Field(..., repr=False, description="클라이언트 시크릿")
    grant_type: str = Field(default="client_credentials", description="권한 부여 유형")
    scope: str = Field(default="https://graph.microsoft.com/.default", description="권한 범위")


class KeyOutcome(BaseModel):
    """체크포인트 키 하나의 처리 결과"""

    key: str = Field(..., description="체크포인트 키")
    status: KeyStatus = Field(..., description="처리 결과")
    item_count: int = Field(default=0, description="내보낸 아이템 수")
    seeded_keys: List[str] = Field(default_factory=list, description="새로 기록한 하위 키")
    delta_link: Optional[str] = Field(None, description="새 델타 링크")
    drifted: bool = Field(default=True, description="델타 링크가 바뀌었는지 여부")
    error_message: Optional[str] = Field(None, description="오류 메시지")


class SyncPassResult(BaseModel):
    """동기화 패스 하나의 결과"""

    filter_pattern: str = Field(..., description="키 필터")
    started_at: datetime = Field(default_factory=datetime.utcnow, description="시작 시간")
    completed_at: Optional[datetime] = Field(None, description="완료 시간")
    bootstrapped: bool = Field(default=False, description="부트스트랩 경로 실행 여부")
    outcomes: List[KeyOutcome] = Field(default_factory=list, description="키별 결과")

    @property
    def succeeded(self) -> List[KeyOutcome]:
        return [o for o in self.outcomes if o.status == KeyStatus.SUCCESS]

    @property
    def failed(self) -> List[KeyOutcome]:
        return [o for o in self.outcomes if o.status == KeyStatus.FAILED]

    @property
    def item_count(self) -> int:
        return sum(o.item_count for o in self.outcomes)

    def mark_as_completed(self) -> None:
        """패스 완료로 표시"""
        self.completed_at = datetime.utcnow()
