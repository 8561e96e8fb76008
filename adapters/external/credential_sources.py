"""
자격 증명 소스 어댑터

토큰 교환에 필요한 테넌트 ID, 클라이언트 ID, 클라이언트 시크릿을 읽어옵니다.
- settings: 설정 파일(.env)의 값
- env: 지정한 이름의 환경 변수
- files: 마운트된 시크릿 파일 (내용의 앞뒤 공백 제거)
"""

import os
from pathlib import Path
from typing import Dict, Mapping, Optional

from core.domain.entities import ClientCredentials
from core.domain.exceptions import CredentialSourceError
from core.domain.ports import ConfigPort, CredentialSourcePort, LoggerPort

CREDENTIAL_FIELDS = ("tenant_id", "client_id", "client_secret")


def _build_credentials(values: Dict[str, str], grant_type: str, scope: str, source: str) -> ClientCredentials:
    missing = [name for name in CREDENTIAL_FIELDS if not values.get(name)]
    if missing:
        raise CredentialSourceError(f"{source} 자격 증명 값이 없습니다: {', '.join(missing)}")

    return ClientCredentials(
        tenant_id=values["tenant_id"],
        client_id=values["client_id"],
        client_secret=values["client_secret"],
        grant_type=grant_type,
        scope=scope,
    )


class SettingsCredentialSource(CredentialSourcePort):
    """설정 값에서 자격 증명을 읽는 소스"""

    def __init__(self, config: ConfigPort):
        self.config = config

    def load_credentials(self) -> ClientCredentials:
        values = {
            "tenant_id": self.config.get_azure_tenant_id(),
            "client_id": self.config.get_azure_client_id(),
            "client_secret": self.config.get_azure_client_secret(),
        }
        return _build_credentials(
            values,
            self.config.get_auth_grant_type(),
            self.config.get_auth_scope(),
            "settings",
        )


class EnvVarCredentialSource(CredentialSourcePort):
    """환경 변수에서 자격 증명을 읽는 소스"""

    def __init__(
        self,
        variable_names: Mapping[str, str],
        grant_type: str,
        scope: str,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.variable_names = dict(variable_names)
        self.grant_type = grant_type
        self.scope = scope
        self.environ = environ if environ is not None else os.environ

    def load_credentials(self) -> ClientCredentials:
        values = {}
        for name in CREDENTIAL_FIELDS:
            variable = self.variable_names.get(name)
            if not variable:
                raise CredentialSourceError(f"{name} 환경 변수 이름이 설정되지 않았습니다")
            values[name] = self.environ.get(variable, "").strip()
        return _build_credentials(values, self.grant_type, self.scope, "env")


class SecretFileCredentialSource(CredentialSourcePort):
    """시크릿 파일에서 자격 증명을 읽는 소스"""

    def __init__(self, file_paths: Mapping[str, str], grant_type: str, scope: str):
        self.file_paths = dict(file_paths)
        self.grant_type = grant_type
        self.scope = scope

    def load_credentials(self) -> ClientCredentials:
        values = {}
        for name in CREDENTIAL_FIELDS:
            path = self.file_paths.get(name)
            if not path:
                raise CredentialSourceError(f"{name} 시크릿 파일 경로가 설정되지 않았습니다")
            try:
                values[name] = Path(path).read_text(encoding="utf-8").strip()
            except OSError as e:
                raise CredentialSourceError(f"시크릿 파일을 읽을 수 없습니다: {path}") from e
        return _build_credentials(values, self.grant_type, self.scope, "files")


def create_credential_source(config: ConfigPort, logger: LoggerPort) -> CredentialSourcePort:
    """설정된 소스 종류에 맞는 자격 증명 소스를 생성합니다."""
    source = config.get_credential_source()
    logger.debug(f"자격 증명 소스: {source}")

    if source == "env":
        return EnvVarCredentialSource(
            config.get_credential_env_vars(),
            config.get_auth_grant_type(),
            config.get_auth_scope(),
        )
    if source == "files":
        return SecretFileCredentialSource(
            config.get_credential_files(),
            config.get_auth_grant_type(),
            config.get_auth_scope(),
        )
    if source == "settings":
        return SettingsCredentialSource(config)

    raise CredentialSourceError(f"알 수 없는 자격 증명 소스입니다: {source}")
