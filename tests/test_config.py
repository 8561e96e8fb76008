"""설정 어댑터 테스트"""

import pytest
from pydantic import ValidationError

from config import adapters as config_adapters
from config.adapters import ConfigAdapter, DevelopmentConfig, ProductionConfig
from core.domain.entities import ScopeType


def test_defaults():
    config = config_adapters.TestingConfig()

    assert config.get_message_page_size() == 10
    assert config.is_fetch_attachments() is True
    assert config.get_graph_base_url() == "https://graph.microsoft.com/v1.0"
    assert config.get_auth_base_url() == "https://login.microsoftonline.com"
    assert config.get_filter_regexes() == {
        ScopeType.ALL_USERS: "O365_users_delta",
        ScopeType.USER_FOLDERS: "O365_folders.*",
        ScopeType.USER_FOLDER_MESSAGES: "O365_messages.*",
    }
    assert config.get_credential_env_vars()["client_secret"] == "OFFICE_365_AUTH_CLIENT_SECRET"
    assert config.get_credential_files()["tenant_id"] == "/run/secrets/OFFICE_365_AUTH_TENANT_ID"


def test_settings_are_read_from_environment(monkeypatch):
    monkeypatch.setenv("MESSAGE_PAGE_SIZE", "25")
    monkeypatch.setenv("FETCH_ATTACHMENTS", "false")
    monkeypatch.setenv("FOLDER_FILTER_REGEX", "O365_folders\\|u1")

    config = config_adapters.TestingConfig()

    assert config.get_message_page_size() == 25
    assert config.is_fetch_attachments() is False
    assert config.get_filter_regexes()[ScopeType.USER_FOLDERS] == "O365_folders\\|u1"


def test_filter_without_prefix_is_rejected():
    with pytest.raises(ValidationError):
        config_adapters.TestingConfig(message_filter_regex=".*")


def test_log_level_is_normalized():
    assert config_adapters.TestingConfig(log_level="debug").get_log_level() == "DEBUG"
    with pytest.raises(ValidationError):
        config_adapters.TestingConfig(log_level="verbose")


def test_unknown_credential_source_is_rejected():
    with pytest.raises(ValidationError):
        config_adapters.TestingConfig(credential_source="vault")


def test_production_rejects_sqlite():
    with pytest.raises(ValidationError):
        ProductionConfig(
            database_url="sqlite+aiosqlite:///./prod.db",
            azure_tenant_id="tenant",
            azure_client_id="client",
            azure_client_secret="secret",
        )


def test_production_requires_real_secrets_for_settings_source():
    with pytest.raises(ValidationError):
        ProductionConfig(database_url="postgresql+asyncpg://db/app", azure_client_secret="dev_secret")

    config = ProductionConfig(database_url="postgresql+asyncpg://db/app", credential_source="files")
    assert config.get_credential_source() == "files"


@pytest.mark.parametrize(
    "environment, config_class",
    [("production", ProductionConfig), ("testing", config_adapters.TestingConfig), ("development", DevelopmentConfig)],
)
def test_environment_selects_config_class(monkeypatch, environment, config_class):
    monkeypatch.setenv("ENVIRONMENT", environment)
    monkeypatch.setenv("DATABASE_URL", "postgresql+asyncpg://db/app")
    monkeypatch.setenv("CREDENTIAL_SOURCE", "env")

    assert isinstance(ConfigAdapter.create_config(), config_class)


def test_web_and_log_settings():
    config = config_adapters.TestingConfig(web_host="127.0.0.1", web_port=9000, log_format="%(message)s")

    assert (config.get_web_host(), config.get_web_port()) == ("127.0.0.1", 9000)
    assert config.get_log_format() == "%(message)s"
