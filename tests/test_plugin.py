"""Tests for plugin config assembly."""

from __future__ import annotations

import pytest

from relconnect.conf import Db2V11Conf
from relconnect.datasources import CommitMode, DataSourceFactory, PooledConnectionSource
from relconnect.dialects import Db2Dialect
from relconnect.errors import ConnectorConfigError, MissingFieldError
from relconnect.plugin import PluginConfigBuilder


class _CredentialsStub:
    def __init__(self) -> None:
        self.lookups: list[str] = []

    def lookup(self, reference: str) -> str:
        self.lookups.append(reference)
        return "resolved"


class _OptionsStub:
    def __init__(self) -> None:
        self.reads: list[str] = []

    def get_option(self, name: str) -> object:
        self.reads.append(name)
        return None


def _conf(**overrides: object) -> Db2V11Conf:
    values: dict[str, object] = {
        "host": "db.example.com",
        "port": "50000",
        "database": "SALES",
        "username": "u",
        "password": "p",
    }
    values.update(overrides)
    return Db2V11Conf(**values)


@pytest.mark.parametrize("enabled", [True, False])
def test_plugin_config_mirrors_external_query_flag(dialect_registry, enabled: bool) -> None:
    config = _conf(enable_external_query=enabled).build_plugin_config(PluginConfigBuilder(), None, None)

    assert config.allow_external_query is enabled
    assert config.show_only_connection_database is False
    assert config.fetch_size == 500


def test_plugin_configs_share_one_dialect(dialect_registry) -> None:
    first = _conf().build_plugin_config(PluginConfigBuilder(), None, None)
    second = _conf(host="other.example.com", fetch_size=10).build_plugin_config(PluginConfigBuilder(), None, None)

    assert first.dialect is second.dialect
    assert isinstance(first.dialect, Db2Dialect)
    assert first.dialect is Db2V11Conf.get_dialect_singleton()


def test_assembly_does_not_consult_collaborators_or_network(dialect_registry, fake_ibm_db) -> None:
    credentials = _CredentialsStub()
    options = _OptionsStub()

    config = _conf().build_plugin_config(PluginConfigBuilder(), credentials, options)

    assert credentials.lookups == []
    assert options.reads == []
    assert fake_ibm_db.opened == []
    assert isinstance(config.datasource_factory, DataSourceFactory)


def test_factory_builds_independent_pools(dialect_registry, fake_ibm_db) -> None:
    config = _conf(max_idle_conns=3, idle_time_sec=30).build_plugin_config(PluginConfigBuilder(), None, None)

    first = config.datasource_factory()
    second = config.datasource_factory()
    try:
        assert isinstance(first, PooledConnectionSource)
        assert first is not second
        assert first.max_idle == 3
        assert first.idle_time_sec == 30
        assert first.commit_mode is CommitMode.DRIVER_SPECIFIED
        conn = fake_ibm_db.opened[0]
        assert conn.address == "db2://db.example.com:50000/SALES"
        assert (conn.username, conn.password) == ("u", "p")
    finally:
        first.close()
        second.close()


def test_factory_is_bound_to_values_at_assembly(dialect_registry, fake_ibm_db) -> None:
    conf = _conf()
    config = conf.build_plugin_config(PluginConfigBuilder(), None, None)
    conf.host = "moved.example.com"

    with config.datasource_factory() as source:
        assert source.stats()["idle_connections"] == 1

    assert fake_ibm_db.opened[0].address == "db2://db.example.com:50000/SALES"


def test_assembly_fails_fast_on_missing_fields(dialect_registry) -> None:
    with pytest.raises(MissingFieldError) as excinfo:
        _conf(username=" ").build_plugin_config(PluginConfigBuilder(), None, None)

    assert excinfo.value.field == "username"


def test_resolve_credentials_default_returns_configured_values() -> None:
    assert _conf().resolve_credentials(_CredentialsStub()) == ("u", "p")


def test_builder_is_immutable_and_checks_required_parts(dialect_registry) -> None:
    builder = PluginConfigBuilder()
    updated = builder.with_fetch_size(10)

    assert builder.fetch_size == 0
    assert updated.fetch_size == 10
    with pytest.raises(ConnectorConfigError, match="dialect"):
        updated.build()
    with pytest.raises(ConnectorConfigError, match="datasource factory"):
        updated.with_dialect(Db2V11Conf.get_dialect_singleton()).build()


class _VaultDb2Conf(Db2V11Conf):
    def resolve_credentials(self, credentials_service):  # type: ignore[no-untyped-def]
        return credentials_service.lookup("user"), credentials_service.lookup("secret")


def test_resolved_credentials_reach_the_driver(dialect_registry, fake_ibm_db) -> None:
    credentials = _CredentialsStub()
    conf = _VaultDb2Conf(host="db.example.com", port="50000", database="SALES", username="u", password="p")

    config = conf.build_plugin_config(PluginConfigBuilder(), credentials, None)
    assert credentials.lookups == ["user", "secret"]

    with config.datasource_factory():
        pass

    conn = fake_ibm_db.opened[0]
    assert (conn.username, conn.password) == ("resolved", "resolved")
    assert len(credentials.lookups) == 2
