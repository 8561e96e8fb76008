"""
Domain 패키지

도메인 엔티티, 값 객체, 비즈니스 규칙을 정의합니다.
외부 의존성 없이 순수한 비즈니스 로직만 포함합니다.

주요 엔티티:
- Scope: 동기화 대상 (전체 사용자 / 사용자 폴더 / 폴더 메시지)
- CheckpointEntry: 스코프 키와 델타 링크
- SyncItem: 델타 페이지에서 발견된 아이템
- OutputRecord: 다운스트림으로 내보내는 레코드
- ClientCredentials: 토큰 교환용 자격 증명
"""
