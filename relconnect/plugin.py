"""Plugin configuration handed to the host engine on connector activation."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, Protocol, runtime_checkable

from .datasources import PooledConnectionSource
from .dialects import Dialect
from .errors import ConnectorConfigError

DataSourceFactoryType = Callable[[], PooledConnectionSource]


@runtime_checkable
class CredentialsService(Protocol):
    """Resolves credential references (vault paths, env lookups, ...)."""

    def lookup(self, reference: str) -> str:
        """Return the secret stored under ``reference``."""


@runtime_checkable
class OptionManager(Protocol):
    """Read access to runtime options of the host engine."""

    def get_option(self, name: str) -> Any:
        """Return the current value of option ``name``."""


@dataclass(frozen=True, slots=True)
class PluginConfig:
    """Everything the engine needs to run queries against a source."""

    dialect: Dialect
    datasource_factory: DataSourceFactoryType
    fetch_size: int
    allow_external_query: bool = False
    show_only_connection_database: bool = False


@dataclass(frozen=True, slots=True)
class PluginConfigBuilder:
    """Immutable builder; every ``with_*`` call returns an updated copy."""

    dialect: Dialect | None = None
    datasource_factory: DataSourceFactoryType | None = None
    fetch_size: int = 0
    allow_external_query: bool = False
    show_only_connection_database: bool = False

    def with_dialect(self, dialect: Dialect) -> PluginConfigBuilder:
        return replace(self, dialect=dialect)

    def with_datasource_factory(self, factory: DataSourceFactoryType) -> PluginConfigBuilder:
        return replace(self, datasource_factory=factory)

    def with_fetch_size(self, fetch_size: int) -> PluginConfigBuilder:
        return replace(self, fetch_size=fetch_size)

    def with_allow_external_query(self, allow: bool) -> PluginConfigBuilder:
        return replace(self, allow_external_query=allow)

    def with_show_only_connection_database(self, show_only: bool) -> PluginConfigBuilder:
        return replace(self, show_only_connection_database=show_only)

    def build(self) -> PluginConfig:
        if self.dialect is None:
            raise ConnectorConfigError("Plugin config requires a dialect")
        if self.datasource_factory is None:
            raise ConnectorConfigError("Plugin config requires a datasource factory")
        return PluginConfig(
            dialect=self.dialect,
            datasource_factory=self.datasource_factory,
            fetch_size=self.fetch_size,
            allow_external_query=self.allow_external_query,
            show_only_connection_database=self.show_only_connection_database,
        )


__all__ = [
    "CredentialsService",
    "DataSourceFactoryType",
    "OptionManager",
    "PluginConfig",
    "PluginConfigBuilder",
]
