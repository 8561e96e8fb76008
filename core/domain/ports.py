"""
포트 인터페이스 정의

클린 아키텍처의 핵심으로, Core 레이어와 외부 어댑터 간의 계약을 정의합니다.
모든 포트는 추상 기본 클래스(ABC)로 정의되어 구현을 강제합니다.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Set

from .entities import ClientCredentials, OutputRecord


class CheckpointStorePort(ABC):
    """
    체크포인트 저장소 포트

    공유 키-값 저장소입니다. 트랜잭션이나 잠금을 보장하지 않으며
    list_keys의 순서도 보장하지 않습니다.
    """

    @abstractmethod
    async def list_keys(self) -> Set[str]:
        """모든 키 조회"""
        pass

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """키의 값 조회 (없으면 None)"""
        pass

    @abstractmethod
    async def put(self, key: str, value: str) -> None:
        """키의 값 저장 (기존 값 덮어쓰기)"""
        pass

    @abstractmethod
    async def put_if_absent(self, key: str, value: str) -> bool:
        """키가 없을 때만 저장 (새로 저장했으면 True)"""
        pass


class RecordSinkPort(ABC):
    """다운스트림 레코드 출력 포트"""

    @abstractmethod
    async def emit(self, record: OutputRecord) -> None:
        """레코드 출력"""
        pass


class CredentialSourcePort(ABC):
    """자격 증명 소스 포트"""

    @abstractmethod
    def load_credentials(self) -> ClientCredentials:
        """테넌트/클라이언트/시크릿/권한 부여 유형/범위 로드"""
        pass


class TokenProviderPort(ABC):
    """토큰 제공자 포트"""

    @abstractmethod
    async def get_token(self) -> str:
        """Authorization 헤더 값 ("<token_type> <access_token>") 조회"""
        pass

    @abstractmethod
    async def invalidate(self) -> None:
        """캐시된 토큰 폐기"""
        pass


class GraphApiClientPort(ABC):
    """Microsoft Graph API 클라이언트 포트"""

    @abstractmethod
    async def request_token(self, credentials: ClientCredentials) -> Dict[str, Any]:
        """토큰 교환 (token_type, access_token을 포함한 JSON 반환)"""
        pass

    @abstractmethod
    async def get_page(
        self,
        authorization: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """컬렉션 페이지 조회 (상대 경로 또는 nextLink/deltaLink 절대 URL)"""
        pass

    @abstractmethod
    async def request(
        self,
        authorization: str,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """임의 엔드포인트 호출 (본문이 없는 응답은 None)"""
        pass

    @abstractmethod
    async def send_mail(
        self,
        authorization: str,
        user_id: str,
        message_data: Dict[str, Any],
    ) -> None:
        """메시지 발송"""
        pass


class LoggerPort(ABC):
    """로거 포트"""

    @abstractmethod
    def info(self, message: str, **kwargs) -> None:
        """정보 로그"""
        pass

    @abstractmethod
    def warning(self, message: str, **kwargs) -> None:
        """경고 로그"""
        pass

    @abstractmethod
    def error(self, message: str, **kwargs) -> None:
        """오류 로그"""
        pass

    @abstractmethod
    def debug(self, message: str, **kwargs) -> None:
        """디버그 로그"""
        pass


class ConfigPort(ABC):
    """설정 포트"""

    # 환경 설정
    @abstractmethod
    def get_environment(self) -> str:
        """환경 조회 (development, production, testing)"""
        pass

    @abstractmethod
    def is_debug(self) -> bool:
        """디버그 모드 여부"""
        pass

    # 데이터베이스 설정
    @abstractmethod
    def get_database_url(self) -> str:
        """데이터베이스 URL 조회"""
        pass

    # 자격 증명 설정
    @abstractmethod
    def get_credential_source(self) -> str:
        """자격 증명 소스 조회 (settings, env, files)"""
        pass

    @abstractmethod
    def get_azure_tenant_id(self) -> str:
        """Azure 테넌트 ID 조회"""
        pass

    @abstractmethod
    def get_azure_client_id(self) -> str:
        """Azure 클라이언트 ID 조회"""
        pass

    @abstractmethod
    def get_azure_client_secret(self) -> str:
        """Azure 클라이언트 시크릿 조회"""
        pass

    @abstractmethod
    def get_credential_env_vars(self) -> dict:
        """자격 증명 환경 변수 이름 조회"""
        pass

    @abstractmethod
    def get_credential_files(self) -> dict:
        """자격 증명 시크릿 파일 경로 조회"""
        pass

    @abstractmethod
    def get_auth_grant_type(self) -> str:
        """권한 부여 유형 조회"""
        pass

    @abstractmethod
    def get_auth_scope(self) -> str:
        """토큰 권한 범위 조회"""
        pass

    # Graph API 설정
    @abstractmethod
    def get_graph_base_url(self) -> str:
        """Graph API 베이스 URL 조회"""
        pass

    @abstractmethod
    def get_auth_base_url(self) -> str:
        """토큰 발급 베이스 URL 조회"""
        pass

    @abstractmethod
    def get_http_timeout(self) -> float:
        """HTTP 타임아웃(초) 조회"""
        pass

    # 동기화 설정
    @abstractmethod
    def get_user_fields(self) -> str:
        """사용자 조회 필드 목록"""
        pass

    @abstractmethod
    def get_folder_fields(self) -> str:
        """메일 폴더 조회 필드 목록"""
        pass

    @abstractmethod
    def get_message_fields(self) -> str:
        """메시지 조회 필드 목록"""
        pass

    @abstractmethod
    def get_message_page_size(self) -> int:
        """메시지 페이지 크기 힌트"""
        pass

    @abstractmethod
    def is_fetch_attachments(self) -> bool:
        """첨부파일 조회 여부"""
        pass

    @abstractmethod
    def get_filter_regexes(self) -> dict:
        """스코프 타입별 키 필터 정규식 조회"""
        pass

    @abstractmethod
    def get_output_dir(self) -> str:
        """레코드 출력 디렉터리 조회"""
        pass

    @abstractmethod
    def get_sync_interval_minutes(self) -> int:
        """동기화 간격(분) 조회"""
        pass

    # 로깅 설정
    @abstractmethod
    def get_log_level(self) -> str:
        """로그 레벨 조회"""
        pass

    @abstractmethod
    def get_log_format(self) -> str:
        """로그 포맷 조회"""
        pass

    # 웹 서버 설정
    @abstractmethod
    def get_web_host(self) -> str:
        """웹 서버 호스트 조회"""
        pass

    @abstractmethod
    def get_web_port(self) -> int:
        """웹 서버 포트 조회"""
        pass
