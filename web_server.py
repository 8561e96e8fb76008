"""
FastAPI 웹 서버

델타 동기화 실행과 체크포인트 조회를 위한 HTTP 인터페이스를 제공합니다.
"""

import uvicorn
from fastapi import FastAPI

from adapters.web.sync_routes import router as sync_router
from adapters.db.database import get_database_adapter, initialize_database
from adapters.factory import get_adapter_factory
from config.adapters import get_config

# FastAPI 앱 생성
app = FastAPI(
    title="Office 365 델타 동기화 서비스",
    description="사용자/메일 폴더/메시지 델타 동기화 트리거",
    version="1.0.0",
)

# 라우터 등록
app.include_router(sync_router)


@app.on_event("startup")
async def startup_event():
    """서버 시작 시 실행되는 이벤트"""
    logger = get_adapter_factory().create_logger()
    logger.info("FastAPI 웹 서버 시작")

    # 데이터베이스 초기화
    config = get_config()
    db_adapter = initialize_database(config)
    await db_adapter.initialize()
    await db_adapter.create_tables()

    logger.info(f"환경: {config.get_environment()}")
    logger.info(f"데이터베이스: {config.get_database_url()}")
    logger.info("웹 서버 준비 완료")


@app.on_event("shutdown")
async def shutdown_event():
    """서버 종료 시 실행되는 이벤트"""
    get_adapter_factory().create_logger().info("FastAPI 웹 서버 종료")

    # 데이터베이스 연결 종료
    await get_database_adapter().close()


if __name__ == "__main__":
    # 설정 로드
    config = get_config()

    # 서버 실행
    uvicorn.run(
        "web_server:app",
        host=config.get_web_host(),
        port=config.get_web_port(),
        reload=config.is_debug(),
        log_level=config.get_log_level().lower(),
    )
