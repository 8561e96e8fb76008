"""
설정 어댑터

Pydantic Settings 기반으로 ConfigPort를 구현합니다.
ENVIRONMENT 값에 따라 개발/운영/테스트 설정 클래스를 선택합니다.
"""

import os
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.checkpoint_keys import DEFAULT_FILTER_REGEX, KEY_PREFIXES
from core.domain.entities import ScopeType
from core.domain.ports import ConfigPort

DEFAULT_USER_FIELDS = (
    "businessPhones,displayName,givenName,jobTitle,mail,mobilePhone,"
    "officeLocation,preferredLanguage,surname,userPrincipalName,id"
)
DEFAULT_FOLDER_FIELDS = "id,displayName,childFolderCount,parentFolderId,totalItemCount,unreadItemCount"
DEFAULT_MESSAGE_FIELDS = (
    "id,createdDateTime,lastModifiedDateTime,changeKey,categories,receivedDateTime,"
    "sentDateTime,hasAttachments,internetMessageId,subject,bodyPreview,importance,"
    "parentFolderId,conversationId,isDeliveryReceiptRequested,isReadReceiptRequested,"
    "isRead,isDraft,webLink,inferenceClassification,body,sender,from,toRecipients,"
    "ccRecipients,bccRecipients,replyTo,flag"
)

CREDENTIAL_SOURCES = ("settings", "env", "files")


class BaseConfig(BaseSettings, ConfigPort):
    """기본 설정 클래스"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # 환경 설정
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    # 데이터베이스 설정 (체크포인트 저장소)
    database_url: str = Field(default="sqlite+aiosqlite:///./dev_database.db")

    # 자격 증명 설정
    credential_source: str = Field(default="settings")
    azure_tenant_id: str = Field(default="")
    azure_client_id: str = Field(default="")
    azure_client_secret: str = Field(default="")

    credential_env_tenant_id: str = Field(default="OFFICE_365_AUTH_TENANT_ID")
    credential_env_client_id: str = Field(default="OFFICE_365_AUTH_CLIENT_ID")
    credential_env_client_secret: str = Field(default="OFFICE_365_AUTH_CLIENT_SECRET")

    credential_file_tenant_id: str = Field(default="/run/secrets/OFFICE_365_AUTH_TENANT_ID")
    credential_file_client_id: str = Field(default="/run/secrets/OFFICE_365_AUTH_CLIENT_ID")
    credential_file_client_secret: str = Field(default="/run/secrets/OFFICE_365_AUTH_CLIENT_SECRET")

    auth_grant_type: str = Field(default="client_credentials")
    auth_scope: str = Field(default="https://graph.microsoft.com/.default")

    # Microsoft Graph API 설정
    graph_base_url: str = Field(default="https://graph.microsoft.com/v1.0")
    auth_base_url: str = Field(default="https://login.microsoftonline.com")
    http_timeout: float = Field(default=30.0)

    # 동기화 설정
    user_fields: str = Field(default=DEFAULT_USER_FIELDS)
    folder_fields: str = Field(default=DEFAULT_FOLDER_FIELDS)
    message_fields: str = Field(default=DEFAULT_MESSAGE_FIELDS)
    message_page_size: int = Field(default=10, ge=1)
    fetch_attachments: bool = Field(default=True)

    user_filter_regex: str = Field(default=DEFAULT_FILTER_REGEX[ScopeType.ALL_USERS])
    folder_filter_regex: str = Field(default=DEFAULT_FILTER_REGEX[ScopeType.USER_FOLDERS])
    message_filter_regex: str = Field(default=DEFAULT_FILTER_REGEX[ScopeType.USER_FOLDER_MESSAGES])

    output_dir: str = Field(default="./output")
    sync_interval_minutes: int = Field(default=5, ge=1)

    # 로깅 설정
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    # 웹 서버 설정
    web_host: str = Field(default="0.0.0.0")
    web_port: int = Field(default=5000)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """로그 레벨 검증"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"로그 레벨은 {valid_levels} 중 하나여야 합니다")
        return v.upper()

    @field_validator("credential_source")
    @classmethod
    def validate_credential_source(cls, v):
        """자격 증명 소스 검증"""
        if v.lower() not in CREDENTIAL_SOURCES:
            raise ValueError(f"자격 증명 소스는 {CREDENTIAL_SOURCES} 중 하나여야 합니다")
        return v.lower()

    @model_validator(mode="after")
    def validate_filter_regexes(self):
        """키 필터 정규식에는 스코프 타입 접두사가 포함되어야 함"""
        for scope_type, pattern in self.get_filter_regexes().items():
            prefix = KEY_PREFIXES[scope_type]
            if prefix not in pattern:
                raise ValueError(f"{scope_type.value} 필터 정규식에는 '{prefix}' 문자열이 포함되어야 합니다")
        return self

    # ConfigPort 인터페이스 구현
    def get_environment(self) -> str:
        return self.environment

    def is_debug(self) -> bool:
        return self.debug

    def get_database_url(self) -> str:
        return self.database_url

    def get_credential_source(self) -> str:
        return self.credential_source

    def get_azure_tenant_id(self) -> str:
        return self.azure_tenant_id

    def get_azure_client_id(self) -> str:
        return self.azure_client_id

    def get_azure_client_secret(self) -> str:
        return self.azure_client_secret

    def get_credential_env_vars(self) -> dict:
        return {
            "tenant_id": self.credential_env_tenant_id,
            "client_id": self.credential_env_client_id,
            "client_secret": self.credential_env_client_secret,
        }

    def get_credential_files(self) -> dict:
        return {
            "tenant_id": self.credential_file_tenant_id,
            "client_id": self.credential_file_client_id,
            "client_secret": self.credential_file_client_secret,
        }

    def get_auth_grant_type(self) -> str:
        return self.auth_grant_type

    def get_auth_scope(self) -> str:
        return self.auth_scope

    def get_graph_base_url(self) -> str:
        return self.graph_base_url

    def get_auth_base_url(self) -> str:
        return self.auth_base_url

    def get_http_timeout(self) -> float:
        return self.http_timeout

    def get_user_fields(self) -> str:
        return self.user_fields

    def get_folder_fields(self) -> str:
        return self.folder_fields

    def get_message_fields(self) -> str:
        return self.message_fields

    def get_message_page_size(self) -> int:
        return self.message_page_size

    def is_fetch_attachments(self) -> bool:
        return self.fetch_attachments

    def get_filter_regexes(self) -> dict:
        return {
            ScopeType.ALL_USERS: self.user_filter_regex,
            ScopeType.USER_FOLDERS: self.folder_filter_regex,
            ScopeType.USER_FOLDER_MESSAGES: self.message_filter_regex,
        }

    def get_output_dir(self) -> str:
        return self.output_dir

    def get_sync_interval_minutes(self) -> int:
        return self.sync_interval_minutes

    def get_log_level(self) -> str:
        return self.log_level

    def get_log_format(self) -> str:
        return self.log_format

    def get_web_host(self) -> str:
        return self.web_host

    def get_web_port(self) -> int:
        return self.web_port


class DevelopmentConfig(BaseConfig):
    """개발 환경 설정"""

    environment: str = "development"
    debug: bool = True
    log_level: str = "DEBUG"


class ProductionConfig(BaseConfig):
    """운영 환경 설정"""

    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"

    @field_validator("database_url")
    @classmethod
    def validate_production_database_url(cls, v):
        """운영 환경에서는 PostgreSQL 데이터베이스가 필수"""
        if not v or v.startswith("sqlite"):
            raise ValueError("운영 환경에서는 PostgreSQL 데이터베이스가 필요합니다")
        return v

    @model_validator(mode="after")
    def validate_production_secrets(self):
        """settings 소스를 쓰는 운영 환경에서는 실제 시크릿이 필수"""
        if self.credential_source == "settings":
            for name in ("azure_tenant_id", "azure_client_id", "azure_client_secret"):
                value = getattr(self, name)
                if not value or value.startswith(("dev_", "test_")):
                    raise ValueError(f"운영 환경에서는 실제 {name} 값이 필요합니다")
        return self


class TestingConfig(BaseConfig):
    """테스트 환경 설정"""

    environment: str = "testing"
    debug: bool = True
    log_level: str = "WARNING"

    # 테스트용 기본값들
    database_url: str = "sqlite+aiosqlite:///:memory:"
    azure_tenant_id: str = "test_tenant_id"
    azure_client_id: str = "test_client_id"
    azure_client_secret: str = "test_client_secret"
    output_dir: str = "./test_output"


class ConfigAdapter:
    """설정 어댑터 팩토리"""

    @staticmethod
    def create_config() -> ConfigPort:
        """환경에 따른 설정 객체를 생성합니다."""
        environment = os.getenv("ENVIRONMENT", "development").lower()

        if environment == "production":
            return ProductionConfig()
        elif environment == "testing":
            return TestingConfig()
        else:
            return DevelopmentConfig()


# 전역 설정 인스턴스
_config: Optional[ConfigPort] = None


def get_config() -> ConfigPort:
    """전역 설정 인스턴스를 반환합니다."""
    global _config
    if _config is None:
        _config = ConfigAdapter.create_config()
    return _config


def initialize_config() -> ConfigPort:
    """설정을 초기화합니다."""
    global _config
    _config = ConfigAdapter.create_config()
    return _config
