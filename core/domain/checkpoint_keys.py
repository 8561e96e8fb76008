"""
체크포인트 키 규칙

스코프와 체크포인트 저장소 키 사이의 변환을 담당합니다.
기존 저장소와 호환되어야 하므로 키 형식은 정확히 유지합니다.

- AllUsers                        → O365_users_delta
- UserFolders{user_id}            → O365_folders|<user_id>
- UserFolderMessages{user, folder} → O365_messages|<user_id>|<folder_id>
"""

import re
from typing import Optional

from pydantic import ValidationError

from .entities import KEY_DELIMITER, Scope, ScopeType
from .exceptions import MalformedCheckpointKeyError

USER_DELTA_KEY = "O365_users_delta"
FOLDER_KEY_PREFIX = "O365_folders"
MESSAGE_KEY_PREFIX = "O365_messages"

KEY_PREFIXES = {
    ScopeType.ALL_USERS: USER_DELTA_KEY,
    ScopeType.USER_FOLDERS: FOLDER_KEY_PREFIX,
    ScopeType.USER_FOLDER_MESSAGES: MESSAGE_KEY_PREFIX,
}

DEFAULT_FILTER_REGEX = {
    ScopeType.ALL_USERS: USER_DELTA_KEY,
    ScopeType.USER_FOLDERS: FOLDER_KEY_PREFIX + ".*",
    ScopeType.USER_FOLDER_MESSAGES: MESSAGE_KEY_PREFIX + ".*",
}


def format_checkpoint_key(scope: Scope) -> str:
    """스코프를 체크포인트 키로 변환합니다."""
    if scope.scope_type == ScopeType.ALL_USERS:
        return USER_DELTA_KEY
    if scope.scope_type == ScopeType.USER_FOLDERS:
        return KEY_DELIMITER.join((FOLDER_KEY_PREFIX, scope.user_id))
    return KEY_DELIMITER.join((MESSAGE_KEY_PREFIX, scope.user_id, scope.folder_id))


def parse_checkpoint_key(key: str) -> Scope:
    """
    체크포인트 키를 스코프로 변환합니다.

    Raises:
        MalformedCheckpointKeyError: 알 수 없는 접두사이거나 필드 수가 맞지 않는 경우
    """
    if key == USER_DELTA_KEY:
        return Scope.all_users()

    fields = key.split(KEY_DELIMITER)
    prefix = fields[0]

    try:
        if prefix == FOLDER_KEY_PREFIX:
            if len(fields) != 2:
                raise MalformedCheckpointKeyError(key, "폴더 키는 사용자 ID 하나가 필요합니다")
            return Scope.user_folders(fields[1])

        if prefix == MESSAGE_KEY_PREFIX:
            if len(fields) != 3:
                raise MalformedCheckpointKeyError(key, "메시지 키는 사용자 ID와 폴더 ID가 필요합니다")
            return Scope.user_folder_messages(fields[1], fields[2])
    except ValidationError as e:
        raise MalformedCheckpointKeyError(key, str(e.errors()[0].get("msg", e))) from e

    raise MalformedCheckpointKeyError(key, f"알 수 없는 접두사: {prefix}")


def scope_type_of_key(key: str) -> Optional[ScopeType]:
    """키의 타입 태그만 확인합니다. 알 수 없으면 None"""
    prefix = key.split(KEY_DELIMITER, 1)[0]
    for scope_type, known_prefix in KEY_PREFIXES.items():
        if prefix == known_prefix:
            return scope_type
    return None


class ScopeFilter:
    """
    체크포인트 키 필터

    정규식 전체 일치로 키를 선택합니다. 정규식에는 해당 스코프 타입의
    접두사가 반드시 포함되어야 합니다.
    """

    def __init__(self, scope_type: ScopeType, pattern: Optional[str] = None):
        self.scope_type = scope_type
        self.pattern = pattern or DEFAULT_FILTER_REGEX[scope_type]

        prefix = KEY_PREFIXES[scope_type]
        if prefix not in self.pattern:
            raise ValueError(f"필터 정규식에는 '{prefix}' 문자열이 포함되어야 합니다: {self.pattern}")

        self._regex = re.compile(self.pattern)

    def matches(self, key: str) -> bool:
        """키가 필터와 일치하는지 확인"""
        return self._regex.fullmatch(key) is not None

    def __repr__(self) -> str:
        return f"ScopeFilter({self.scope_type.value}, {self.pattern!r})"
