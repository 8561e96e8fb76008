"""자격 증명 소스 테스트"""

import pytest

from config import adapters as config_adapters
from core.domain.exceptions import CredentialSourceError
from adapters.external.credential_sources import (
    EnvVarCredentialSource,
    SecretFileCredentialSource,
    SettingsCredentialSource,
    create_credential_source,
)
from tests.fakes import RecordingLogger

ENV_NAMES = {
    "tenant_id": "OFFICE_365_AUTH_TENANT_ID",
    "client_id": "OFFICE_365_AUTH_CLIENT_ID",
    "client_secret": "OFFICE_365_AUTH_CLIENT_SECRET",
}
GRAPH_SCOPE = "https://graph.microsoft.com/.default"


def test_settings_source_reads_config():
    credentials = SettingsCredentialSource(config_adapters.TestingConfig()).load_credentials()

    assert credentials.tenant_id == "test_tenant_id"
    assert credentials.client_id == "test_client_id"
    assert credentials.client_secret == "test_client_secret"
    assert credentials.grant_type == "client_credentials"
    assert credentials.scope == GRAPH_SCOPE


def test_env_source_reads_named_variables():
    environ = {
        "OFFICE_365_AUTH_TENANT_ID": "tenant",
        "OFFICE_365_AUTH_CLIENT_ID": "client",
        "OFFICE_365_AUTH_CLIENT_SECRET": " secret\n",
    }

    credentials = EnvVarCredentialSource(ENV_NAMES, "client_credentials", GRAPH_SCOPE, environ).load_credentials()

    assert credentials.client_secret == "secret"


def test_env_source_reports_missing_values():
    source = EnvVarCredentialSource(ENV_NAMES, "client_credentials", GRAPH_SCOPE, {"OFFICE_365_AUTH_TENANT_ID": "t"})

    with pytest.raises(CredentialSourceError, match="client_id"):
        source.load_credentials()


def test_file_source_trims_content(tmp_path):
    paths = {}
    for name, content in (("tenant_id", "tenant\n"), ("client_id", "  client"), ("client_secret", "secret\n\n")):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        paths[name] = str(path)

    credentials = SecretFileCredentialSource(paths, "client_credentials", GRAPH_SCOPE).load_credentials()

    assert (credentials.tenant_id, credentials.client_id, credentials.client_secret) == ("tenant", "client", "secret")


def test_file_source_reports_unreadable_file(tmp_path):
    paths = {name: str(tmp_path / name) for name in ENV_NAMES}

    with pytest.raises(CredentialSourceError):
        SecretFileCredentialSource(paths, "client_credentials", GRAPH_SCOPE).load_credentials()


def test_factory_selects_configured_source():
    logger = RecordingLogger()

    assert isinstance(create_credential_source(config_adapters.TestingConfig(credential_source="env"), logger), EnvVarCredentialSource)
    assert isinstance(create_credential_source(config_adapters.TestingConfig(credential_source="files"), logger), SecretFileCredentialSource)
    assert isinstance(create_credential_source(config_adapters.TestingConfig(), logger), SettingsCredentialSource)


def test_secret_is_hidden_from_repr():
    credentials = SettingsCredentialSource(config_adapters.TestingConfig()).load_credentials()

    assert "test_client_secret" not in repr(credentials)
