"""
델타 페이지네이터

스코프와 재개 토큰(델타 링크)을 받아 Graph API 델타 페이지를 차례로 조회합니다.
nextLink가 있으면 다음 페이지를 따라가고, 없으면 그 페이지의 deltaLink가
새 체크포인트가 됩니다.
"""

from typing import Any, AsyncIterator, Dict, List, Optional, Tuple
from urllib.parse import quote

from ..domain.entities import RAW_VALUES, Scope, ScopeType, SyncItem
from ..domain.exceptions import PageStreamError
from ..domain.ports import GraphApiClientPort, LoggerPort, TokenProviderPort

NEXT_LINK = "@odata.nextLink"
DELTA_LINK = "@odata.deltaLink"


def _segment(value: str) -> str:
    return quote(value, safe="")


def page_values(page: Dict[str, Any]) -> List[Tuple[Dict[str, Any], Optional[str]]]:
    """페이지의 value 원소와 원본 텍스트를 짝지어 반환합니다. 원본 텍스트가 없으면 None"""
    values = page.get("value") or []
    raw_values = page.get(RAW_VALUES) or []
    if len(raw_values) != len(values):
        raw_values = [None] * len(values)
    return list(zip(values, raw_values))


class DeltaPageStream:
    """
    한 스코프의 델타 조회 결과

    아이템을 서버가 준 순서대로 한 번만 내보내는 지연 시퀀스입니다.
    끝까지 소비한 뒤에만 delta_link를 읽을 수 있습니다.
    """

    def __init__(
        self,
        paginator: "DeltaPaginator",
        scope: Scope,
        resume_token: Optional[str],
    ):
        self.scope = scope
        self.resume_token = resume_token
        self._paginator = paginator
        self._started = False
        self._delta_link: Optional[str] = None
        self.page_count = 0

    def __aiter__(self) -> AsyncIterator[SyncItem]:
        if self._started:
            raise PageStreamError("델타 페이지 스트림은 다시 순회할 수 없습니다")
        self._started = True
        return self._iterate()

    @property
    def exhausted(self) -> bool:
        return self._delta_link is not None

    @property
    def delta_link(self) -> str:
        """마지막 페이지의 델타 링크"""
        if self._delta_link is None:
            raise PageStreamError("페이지 스트림을 끝까지 소비하기 전에는 델타 링크를 읽을 수 없습니다")
        return self._delta_link

    async def _iterate(self) -> AsyncIterator[SyncItem]:
        paginator = self._paginator
        url, params = paginator.first_request(self.scope, self.resume_token)

        while url is not None:
            authorization = await paginator.token_provider.get_token()
            page = await paginator.graph_api_client.get_page(authorization, url, params)
            self.page_count += 1

            values = page_values(page)
            paginator.logger.debug(
                f"델타 페이지 조회: scope={self.scope.scope_type.value}, "
                f"page={self.page_count}, items={len(values)}"
            )

            for payload, raw_text in values:
                item_id = payload.get("id")
                if not item_id:
                    paginator.logger.warning(f"ID가 없는 아이템 건너뜀: scope={self.scope.scope_type.value}")
                    continue
                yield SyncItem(scope=self.scope, item_id=item_id, payload=payload, raw_text=raw_text)

            next_link = page.get(NEXT_LINK)
            if next_link:
                url, params = next_link, None
                continue

            delta_link = page.get(DELTA_LINK)
            if not delta_link:
                raise PageStreamError("마지막 페이지에 델타 링크가 없습니다")
            self._delta_link = delta_link
            url = None


class DeltaPaginator:
    """Graph API 델타 페이지네이터"""

    def __init__(
        self,
        graph_api_client: GraphApiClientPort,
        token_provider: TokenProviderPort,
        logger: LoggerPort,
        user_fields: str,
        folder_fields: str,
        message_fields: str,
        message_page_size: int = 10,
    ):
        self.graph_api_client = graph_api_client
        self.token_provider = token_provider
        self.logger = logger
        self.user_fields = user_fields
        self.folder_fields = folder_fields
        self.message_fields = message_fields
        self.message_page_size = message_page_size

    def fetch(self, scope: Scope, resume_token: Optional[str] = None) -> DeltaPageStream:
        """
        스코프의 델타 조회를 시작합니다.

        Args:
            scope: 동기화 스코프
            resume_token: 저장된 델타 링크 (없거나 빈 값이면 전체 기준 동기화)

        Returns:
            아이템을 내보내고 마지막에 델타 링크를 제공하는 스트림
        """
        return DeltaPageStream(self, scope, resume_token)

    def first_request(
        self,
        scope: Scope,
        resume_token: Optional[str],
    ) -> Tuple[str, Optional[Dict[str, Any]]]:
        """첫 페이지 요청의 URL과 쿼리 파라미터를 구성합니다."""
        token = (resume_token or "").strip()

        # 저장된 값이 델타 링크 URL이면 그대로 조회
        if token.startswith(("https://", "http://")):
            return token, None

        path, params = self._delta_endpoint(scope)
        if token:
            params["$deltatoken"] = token
        return path, params

    def _delta_endpoint(self, scope: Scope) -> Tuple[str, Dict[str, Any]]:
        if scope.scope_type == ScopeType.ALL_USERS:
            params: Dict[str, Any] = {}
            if self.user_fields:
                params["$select"] = self.user_fields
            return "/users/delta", params

        if scope.scope_type == ScopeType.USER_FOLDERS:
            params = {}
            if self.folder_fields:
                params["$select"] = self.folder_fields
            return f"/users/{_segment(scope.user_id)}/mailFolders/delta", params

        params = {"$top": self.message_page_size}
        if self.message_fields:
            params["$select"] = self.message_fields
        path = (
            f"/users/{_segment(scope.user_id)}/mailFolders/"
            f"{_segment(scope.folder_id)}/messages/delta"
        )
        return path, params

    async def list_attachments(
        self,
        user_id: str,
        message_id: str,
    ) -> AsyncIterator[Tuple[Dict[str, Any], Optional[str]]]:
        """메시지의 첨부파일과 원본 텍스트를 nextLink를 따라가며 조회합니다 (델타 없음)."""
        url: Optional[str] = f"/users/{_segment(user_id)}/messages/{_segment(message_id)}/attachments"

        while url is not None:
            authorization = await self.token_provider.get_token()
            page = await self.graph_api_client.get_page(authorization, url)

            for attachment, raw_text in page_values(page):
                yield attachment, raw_text

            url = page.get(NEXT_LINK)
