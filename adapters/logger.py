"""
로거 어댑터

Core 레이어의 LoggerPort를 구현하는 Python 표준 로깅 어댑터입니다.
"""

import logging
import sys

from core.domain.ports import LoggerPort

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class LoggerAdapter(LoggerPort):
    """Python 표준 로깅을 사용하는 로거 어댑터"""

    def __init__(
        self,
        name: str = "o365_delta_sync",
        level: str = "INFO",
        format_string: str = DEFAULT_FORMAT,
    ):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))

        # 핸들러가 없으면 콘솔 핸들러 추가
        if not self.logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(logging.Formatter(format_string))
            self.logger.addHandler(handler)

    def info(self, message: str, **kwargs) -> None:
        """정보 로그"""
        self.logger.info(message, extra=kwargs)

    def warning(self, message: str, **kwargs) -> None:
        """경고 로그"""
        self.logger.warning(message, extra=kwargs)

    def error(self, message: str, **kwargs) -> None:
        """오류 로그"""
        self.logger.error(message, extra=kwargs)

    def debug(self, message: str, **kwargs) -> None:
        """디버그 로그"""
        self.logger.debug(message, extra=kwargs)

