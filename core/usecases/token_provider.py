"""
토큰 제공자

하나의 Bearer 토큰을 메모리에 캐시하고 요청 시 발급합니다.
- 캐시된 토큰이 없을 때만 토큰 교환 호출을 수행합니다.
- 토큰 교환은 하나의 잠금 구간 안에서 수행되므로 동시에 여러 호출자가
  요청해도 교환 호출은 한 번만 일어나고, 대기하던 호출자는 새 토큰을 받습니다.
- 만료 시간은 추적하지 않으며, 실패 시 invalidate()로만 폐기됩니다.
"""

import asyncio
from typing import Optional

from ..domain.entities import ClientCredentials
from ..domain.exceptions import TokenAcquisitionError
from ..domain.ports import (
    CredentialSourcePort,
    GraphApiClientPort,
    LoggerPort,
    TokenProviderPort,
)


class TokenProvider(TokenProviderPort):
    """토큰 제공자"""

    def __init__(
        self,
        credential_source: CredentialSourcePort,
        graph_api_client: GraphApiClientPort,
        logger: LoggerPort,
    ):
        self.credential_source = credential_source
        self.graph_api_client = graph_api_client
        self.logger = logger
        self._lock = asyncio.Lock()
        self._credentials: Optional[ClientCredentials] = None
        self._token: Optional[str] = None

    @property
    def has_token(self) -> bool:
        """캐시된 토큰이 있는지 확인"""
        return self._token is not None

    async def get_token(self) -> str:
        """
        Authorization 헤더 값을 반환합니다.

        Returns:
            "<token_type> <access_token>" 형식의 문자열

        Raises:
            TokenAcquisitionError: 토큰 교환에 실패한 경우 (캐시는 빈 상태로 유지)
            CredentialSourceError: 자격 증명을 읽지 못한 경우
        """
        async with self._lock:
            if self._token is None:
                self._token = await self._load_token()
            return self._token

    async def invalidate(self) -> None:
        """캐시된 토큰을 폐기합니다. 이미 비어 있으면 아무 작업도 하지 않습니다."""
        async with self._lock:
            if self._token is not None:
                self.logger.info("캐시된 토큰 폐기")
            self._token = None

    async def _load_token(self) -> str:
        """토큰 교환을 수행합니다. 잠금을 보유한 상태에서만 호출됩니다."""
        if self._credentials is None:
            self._credentials = self.credential_source.load_credentials()

        credentials = self._credentials
        self.logger.debug(
            f"토큰 발급 요청: tenant_id={credentials.tenant_id}, client_id={credentials.client_id}"
        )

        response = await self.graph_api_client.request_token(credentials)

        if not isinstance(response, dict):
            raise TokenAcquisitionError("토큰 응답이 JSON 객체가 아닙니다")

        token_type = response.get("token_type")
        access_token = response.get("access_token")
        if not token_type or not access_token:
            raise TokenAcquisitionError("토큰 응답에 token_type 또는 access_token이 없습니다")

        self.logger.info(f"토큰 발급 완료: tenant_id={credentials.tenant_id}")
        return f"{token_type} {access_token}"
