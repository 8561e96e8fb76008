"""
Microsoft Graph API 클라이언트 어댑터

Microsoft Graph API와의 통신을 담당하는 어댑터입니다.
클라이언트 자격 증명 토큰 교환, 델타/컬렉션 페이지 조회,
임의 엔드포인트 호출과 메일 발송을 구현합니다.
"""

import json
import re
from typing import Any, Dict, List, Optional

import httpx

from core.domain.entities import RAW_VALUES, ClientCredentials
from core.domain.exceptions import GraphApiError, TokenAcquisitionError
from core.domain.ports import GraphApiClientPort, LoggerPort


_decoder = json.JSONDecoder()
_whitespace = re.compile(r"[ \t\n\r]*")


def split_raw_values(text: str) -> Optional[List[str]]:
    """
    컬렉션 응답 본문에서 value 배열 원소의 원본 텍스트를 순서대로 잘라냅니다.

    숫자 표기와 이스케이프를 포함해 서버가 보낸 그대로 다운스트림에 전달하기 위해 사용합니다.
    최상위가 객체가 아니거나 value 배열이 없으면 None을 반환합니다.
    """

    def skip(index: int) -> int:
        return _whitespace.match(text, index).end()

    index = skip(0)
    if text[index:index + 1] != "{":
        return None
    index = skip(index + 1)

    while index < len(text) and text[index] != "}":
        name, index = _decoder.raw_decode(text, index)
        index = skip(skip(index) + 1)  # ':'

        if name == "value" and text[index] == "[":
            values = []
            index = skip(index + 1)
            while text[index] != "]":
                _, end = _decoder.raw_decode(text, index)
                values.append(text[index:end])
                index = skip(end)
                if text[index] == ",":
                    index = skip(index + 1)
            return values

        _, index = _decoder.raw_decode(text, index)
        index = skip(index)
        if text[index] == ",":
            index = skip(index + 1)

    return None


class GraphApiClientAdapter(GraphApiClientPort):
    """Microsoft Graph API 클라이언트 어댑터"""

    def __init__(
        self,
        logger: LoggerPort,
        base_url: str = "https://graph.microsoft.com/v1.0",
        auth_url: str = "https://login.microsoftonline.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.logger = logger
        self.base_url = base_url.rstrip("/")
        self.auth_url = auth_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self.transport)

    def _resolve(self, url: str) -> str:
        """상대 경로는 베이스 URL에 붙이고, nextLink/deltaLink 같은 절대 URL은 그대로 사용"""
        if url.startswith(("https://", "http://")):
            return url
        return f"{self.base_url}/{url.lstrip('/')}"

    async def request_token(self, credentials: ClientCredentials) -> Dict[str, Any]:
        """클라이언트 자격 증명으로 토큰을 교환합니다."""
        self.logger.debug(
            f"토큰 교환: client_id={credentials.client_id}, tenant_id={credentials.tenant_id}"
        )

        url = f"{self.auth_url}/{credentials.tenant_id}/oauth2/v2.0/token"

        data = {
            "grant_type": credentials.grant_type,
            "client_id": credentials.client_id,
            "client_secret": credentials.client_secret,
            "scope": credentials.scope,
        }

        try:
            async with self._client() as client:
                response = await client.post(
                    url,
                    data=data,
                    headers={"Content-Type": "application/x-www-form-urlencoded"}
                )
        except httpx.HTTPError as e:
            error_msg = f"토큰 교환 요청 오류: {str(e)}"
            self.logger.error(error_msg)
            raise TokenAcquisitionError(error_msg) from e

        if not response.is_success:
            error_msg = f"토큰 교환 실패: {response.status_code} - {response.text}"
            self.logger.error(error_msg)
            raise TokenAcquisitionError(error_msg, status_code=response.status_code)

        try:
            result = response.json()
        except ValueError as e:
            raise TokenAcquisitionError("토큰 응답을 JSON으로 해석할 수 없습니다") from e

        self.logger.debug("토큰 교환 성공")
        return result

    async def get_page(
        self,
        authorization: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """컬렉션 페이지 하나를 조회합니다."""
        target = self._resolve(url)
        self.logger.debug(f"페이지 조회: {target}")

        headers = {
            "Authorization": authorization,
            "Content-Type": "application/json",
        }

        async with self._client() as client:
            response = await client.get(target, headers=headers, params=params)

            if response.status_code != 200:
                error_msg = f"페이지 조회 실패: {response.status_code} - {response.text}"
                self.logger.error(error_msg)
                raise GraphApiError(response.status_code, response.text)

            result = response.json()
            raw_values = split_raw_values(response.text)
            if raw_values is not None:
                result[RAW_VALUES] = raw_values

            self.logger.debug(f"페이지 조회 성공: {len(result.get('value', []))}개 항목")
            return result

    async def request(
        self,
        authorization: str,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """임의 엔드포인트를 호출합니다."""
        target = self._resolve(url)
        self.logger.debug(f"Graph API 요청: {method} {target}")

        request_headers = {
            "Authorization": authorization,
            "Content-Type": "application/json",
        }
        if headers:
            request_headers.update(headers)

        async with self._client() as client:
            response = await client.request(
                method,
                target,
                headers=request_headers,
                params=params,
                json=json_body,
            )

            if not response.is_success:
                error_msg = f"Graph API 요청 실패: {response.status_code} - {response.text}"
                self.logger.error(error_msg)
                raise GraphApiError(response.status_code, response.text)

            # 204 등 응답 본문이 없을 수 있음
            if not response.content:
                return None
            return response.json()

    async def send_mail(
        self,
        authorization: str,
        user_id: str,
        message_data: Dict[str, Any],
    ) -> None:
        """메시지를 발송합니다."""
        self.logger.debug(f"메시지 발송: subject={message_data.get('message', {}).get('subject', 'N/A')}")

        if user_id == "me":
            url = f"{self.base_url}/me/sendMail"
        else:
            url = f"{self.base_url}/users/{user_id}/sendMail"

        headers = {
            "Authorization": authorization,
            "Content-Type": "application/json",
        }

        async with self._client() as client:
            response = await client.post(
                url,
                headers=headers,
                json=message_data
            )

            if response.status_code not in [200, 202]:
                error_msg = f"메시지 발송 실패: {response.status_code} - {response.text}"
                self.logger.error(error_msg)
                raise GraphApiError(response.status_code, response.text)

            self.logger.debug("메시지 발송 성공")
