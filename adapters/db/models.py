"""
SQLAlchemy 데이터베이스 모델

체크포인트 저장소 테이블을 정의합니다.
키는 외부 시스템과 공유되는 문자열 그대로 저장하며, 값은 델타 링크 URL입니다.
"""

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base = declarative_base()


class CheckpointModel(Base):
    """체크포인트 테이블 모델"""

    __tablename__ = "checkpoints"

    key = Column(String(512), primary_key=True)
    value = Column(Text, nullable=False, default="")  # 빈 값이면 최초 동기화 필요
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), index=True)

    def __repr__(self) -> str:
        return f"<CheckpointModel(key={self.key!r})>"
