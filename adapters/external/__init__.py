"""
외부 서비스 어댑터 패키지

외부 API, 서비스와의 통신을 담당하는 어댑터들을 포함합니다.
"""

from .graph_api_client import GraphApiClientAdapter
from .credential_sources import (
    EnvVarCredentialSource,
    SecretFileCredentialSource,
    SettingsCredentialSource,
    create_credential_source,
)
from .memory_checkpoint_store import InMemoryCheckpointStoreAdapter

__all__ = [
    "GraphApiClientAdapter",
    "EnvVarCredentialSource",
    "SecretFileCredentialSource",
    "SettingsCredentialSource",
    "create_credential_source",
    "InMemoryCheckpointStoreAdapter",
]
