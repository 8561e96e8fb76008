"""
체크포인트 데이터베이스 연결 관리

체크포인트 테이블이 있는 데이터베이스의 비동기 엔진과 세션을 관리합니다.
개발/테스트 환경은 aiosqlite, 운영 환경은 asyncpg 드라이버를 사용합니다.

- CLI 명령은 open_checkpoint_session()으로 명령 하나 동안만 연결을 엽니다.
- 웹 서버는 시작 시 initialize_database()로 전역 어댑터를 만들고
  요청마다 get_db_session()으로 세션을 받습니다.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from core.domain.ports import ConfigPort
from .models import Base


def engine_options_for(database_url: str) -> Dict[str, Any]:
    """드라이버에 맞는 엔진 옵션"""
    options: Dict[str, Any] = {"echo": False, "pool_pre_ping": True}

    # aiosqlite는 연결 풀 크기 옵션을 받지 않음
    if not database_url.startswith("sqlite"):
        options.update(pool_size=5, max_overflow=10, pool_recycle=1800)
    return options


class DatabaseAdapter:
    """체크포인트 데이터베이스 어댑터"""

    def __init__(self, config: ConfigPort):
        self.config = config
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[sessionmaker] = None

    async def initialize(self) -> None:
        """엔진과 세션 팩토리를 만듭니다."""
        database_url = self.config.get_database_url()
        self.engine = create_async_engine(database_url, **engine_options_for(database_url))
        self.session_factory = sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    def _require_engine(self) -> AsyncEngine:
        if self.engine is None:
            raise RuntimeError("데이터베이스가 초기화되지 않았습니다")
        return self.engine

    async def create_tables(self) -> None:
        """체크포인트 테이블을 생성합니다. 이미 있으면 그대로 둡니다."""
        async with self._require_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_tables(self) -> None:
        async with self._require_engine().begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def reset(self) -> None:
        """체크포인트를 모두 지우고 빈 테이블을 다시 만듭니다."""
        await self.drop_tables()
        await self.create_tables()

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """세션 하나를 엽니다. 예외가 나면 롤백 후 다시 발생시킵니다."""
        if self.session_factory is None:
            raise RuntimeError("데이터베이스가 초기화되지 않았습니다")

        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def close(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None


@asynccontextmanager
async def open_checkpoint_session(
    config: ConfigPort,
    create_tables: bool = False,
) -> AsyncGenerator[AsyncSession, None]:
    """명령 하나 동안 사용할 체크포인트 세션을 열고, 끝나면 연결을 정리합니다."""
    db_adapter = DatabaseAdapter(config)
    await db_adapter.initialize()
    try:
        if create_tables:
            await db_adapter.create_tables()
        async with db_adapter.get_session() as session:
            yield session
    finally:
        await db_adapter.close()


# 웹 서버용 전역 어댑터
_database_adapter: Optional[DatabaseAdapter] = None


def initialize_database(config: ConfigPort) -> DatabaseAdapter:
    """전역 데이터베이스 어댑터를 설정합니다."""
    global _database_adapter
    _database_adapter = DatabaseAdapter(config)
    return _database_adapter


def get_database_adapter() -> DatabaseAdapter:
    if _database_adapter is None:
        raise RuntimeError("데이터베이스 어댑터가 초기화되지 않았습니다")
    return _database_adapter


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI 의존성: 요청 범위의 체크포인트 세션"""
    async with get_database_adapter().get_session() as session:
        yield session
