"""
재시도 래퍼

원격 호출이 실패하면 캐시된 토큰을 폐기하고 같은 작업을 정확히 한 번 더 실행합니다.
만료된 토큰으로 인한 실패를 복구하기 위한 단발성 재시도이며,
백오프나 재시도 예산은 없습니다.
"""

from typing import Awaitable, Callable, TypeVar

from ..domain.ports import LoggerPort, TokenProviderPort

T = TypeVar("T")


class RetryWrapper:
    """토큰 폐기 후 1회 재시도"""

    def __init__(self, token_provider: TokenProviderPort, logger: LoggerPort):
        self.token_provider = token_provider
        self.logger = logger

    async def with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        description: str = "",
    ) -> T:
        """
        작업을 실행하고, 실패하면 토큰을 폐기한 뒤 한 번 더 실행합니다.

        Args:
            operation: 다시 호출할 수 있는 비동기 작업
            description: 로그에 남길 작업 설명

        Returns:
            작업 결과

        Raises:
            두 번째 시도에서 발생한 예외
        """
        try:
            return await operation()
        except Exception as e:
            self.logger.warning(f"작업 실패, 토큰 폐기 후 재시도: {description}, 오류: {str(e)}")

        await self.token_provider.invalidate()
        return await operation()
