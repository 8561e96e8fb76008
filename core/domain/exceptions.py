"""
도메인 예외 정의

델타 동기화 엔진에서 발생하는 오류 분류입니다.
- 자격 증명 오류: 토큰 발급 실패, 자격 증명 소스 읽기 실패
- 원격 호출 오류: Graph API 컬렉션 엔드포인트의 비정상 응답
- 체크포인트 키 오류: 스코프로 해석할 수 없는 키
"""

from typing import Optional


class DeltaSyncError(Exception):
    """델타 동기화 엔진 기본 예외"""


class CredentialSourceError(DeltaSyncError):
    """자격 증명 소스에서 테넌트/클라이언트/시크릿을 읽지 못한 경우"""


class TokenAcquisitionError(DeltaSyncError):
    """토큰 교환 호출이 실패한 경우"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class GraphApiError(DeltaSyncError):
    """Graph API 호출이 2xx 이외의 응답을 반환한 경우"""

    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code} - {message}")
        self.status_code = status_code
        self.message = message

    @property
    def is_authorization_error(self) -> bool:
        """만료되었거나 거부된 자격 증명으로 인한 오류인지 확인"""
        return self.status_code in (401, 403)


class MalformedCheckpointKeyError(DeltaSyncError):
    """체크포인트 키를 스코프로 해석할 수 없는 경우"""

    def __init__(self, key: str, reason: str):
        super().__init__(f"잘못된 체크포인트 키: {key!r} ({reason})")
        self.key = key
        self.reason = reason


class PageStreamError(DeltaSyncError):
    """재시작할 수 없는 페이지 스트림을 잘못 사용했거나 마지막 페이지에 델타 링크가 없는 경우"""
