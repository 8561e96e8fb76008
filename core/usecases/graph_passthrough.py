"""
Graph API 단발 호출 유즈케이스

델타 동기화와 별개로 임의 엔드포인트 호출과 메일 발송을 제공합니다.
두 작업 모두 토큰 제공자의 토큰을 사용하고 재시도 래퍼로 감쌉니다.
"""

from typing import Any, Dict, List, Optional

from ..domain.ports import GraphApiClientPort, LoggerPort, TokenProviderPort
from .retry import RetryWrapper

ALLOWED_METHODS = ("GET", "PUT", "POST", "DELETE", "PATCH")


def split_addresses(addresses: Optional[str]) -> List[str]:
    """쉼표로 구분된 주소 목록을 나눕니다."""
    if not addresses:
        return []
    return [address.strip() for address in addresses.split(",") if address.strip()]


def _recipients(addresses: List[str]) -> List[Dict[str, Any]]:
    return [{"emailAddress": {"address": address}} for address in addresses]


class GraphPassthroughUseCase:
    """Graph API 단발 호출 유즈케이스"""

    def __init__(
        self,
        graph_api_client: GraphApiClientPort,
        token_provider: TokenProviderPort,
        retry_wrapper: RetryWrapper,
        logger: LoggerPort,
    ):
        self.graph_api_client = graph_api_client
        self.token_provider = token_provider
        self.retry_wrapper = retry_wrapper
        self.logger = logger

    async def call_endpoint(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        body: Optional[Dict[str, Any]] = None,
        select: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        임의의 Graph API 엔드포인트를 호출합니다.

        Args:
            method: HTTP 메서드 (GET, PUT, POST, DELETE, PATCH)
            path: 베이스 URL 뒤에 붙는 경로 또는 절대 URL
            params: 쿼리 옵션
            headers: 추가 헤더
            body: JSON 본문
            select: $select 필드 목록

        Returns:
            응답 JSON (본문이 없으면 None)
        """
        method = method.upper()
        if method not in ALLOWED_METHODS:
            raise ValueError(f"지원하지 않는 HTTP 메서드입니다: {method}")

        query = dict(params or {})
        if select:
            query["$select"] = select

        self.logger.info(f"Graph API 호출: {method} {path}")

        async def operation() -> Optional[Dict[str, Any]]:
            authorization = await self.token_provider.get_token()
            return await self.graph_api_client.request(
                authorization,
                method,
                path,
                params=query or None,
                headers=headers,
                json_body=body,
            )

        return await self.retry_wrapper.with_retry(operation, description=f"{method} {path}")

    async def send_mail(
        self,
        subject: str,
        body: str,
        to_recipients: Optional[str],
        cc_recipients: Optional[str] = None,
        bcc_recipients: Optional[str] = None,
        user_id: str = "me",
        body_type: str = "HTML",
        save_to_sent_items: bool = True,
    ) -> None:
        """
        메일을 발송합니다.

        Args:
            subject: 제목
            body: 본문 내용
            to_recipients: 쉼표로 구분된 수신자
            cc_recipients: 쉼표로 구분된 참조 수신자
            bcc_recipients: 쉼표로 구분된 숨은참조 수신자
            user_id: 발신 사용자 ID ("me"는 토큰의 사용자)
            body_type: 본문 타입 (HTML, Text)
            save_to_sent_items: 보낸 편지함 저장 여부
        """
        to_list = split_addresses(to_recipients)
        if not to_list:
            raise ValueError("수신자가 한 명 이상 필요합니다")

        message_data: Dict[str, Any] = {
            "message": {
                "subject": subject,
                "body": {
                    "contentType": body_type,
                    "content": body,
                },
                "toRecipients": _recipients(to_list),
            },
            "saveToSentItems": save_to_sent_items,
        }

        cc_list = split_addresses(cc_recipients)
        if cc_list:
            message_data["message"]["ccRecipients"] = _recipients(cc_list)

        bcc_list = split_addresses(bcc_recipients)
        if bcc_list:
            message_data["message"]["bccRecipients"] = _recipients(bcc_list)

        self.logger.info(f"메일 발송 시작: {user_id}, 수신자: {len(to_list)}명")

        async def operation() -> None:
            authorization = await self.token_provider.get_token()
            await self.graph_api_client.send_mail(authorization, user_id, message_data)

        await self.retry_wrapper.with_retry(operation, description=f"sendMail {user_id}")
        self.logger.info(f"메일 발송 완료: {user_id}")
