"""Configuration for IBM DB2 v11 sources."""

from __future__ import annotations

from typing import ClassVar

from pydantic import Field, SecretStr, field_validator

from relconnect.datasources import CommitMode, DataSourceFactory, DataSourceSettings
from relconnect.dialects import Db2Dialect
from relconnect.fields import FieldSpec, FieldTable
from relconnect.plugin import CredentialsService, OptionManager, PluginConfig, PluginConfigBuilder

from .base import AbstractConnectorConf, build_connection_address
from .registry import SourceTypeInfo, register_source_type


@register_source_type
class Db2V11Conf(AbstractConnectorConf):
    SOURCE_TYPE: ClassVar[SourceTypeInfo] = SourceTypeInfo(
        value="IBMDB2V11ARP",
        label="IBM DB2 v11",
        ui_config="IBMDB2V11ARP-layout.json",
        external_query_supported=True,
    )
    DIALECT_DEFINITION: ClassVar[str] = "db2v11.toml"
    DIALECT_CLASS: ClassVar[type[Db2Dialect]] = Db2Dialect
    DRIVER: ClassVar[str] = "ibm_db_dbi"
    SCHEME: ClassVar[str] = "db2"

    FIELDS: ClassVar[FieldTable] = FieldTable(
        [
            FieldSpec("host", 1, "Database Server", required=True),
            FieldSpec("port", 2, "Database Port", required=True),
            FieldSpec("database", 3, "Database", required=True),
            FieldSpec("username", 4, "Username", required=True),
            FieldSpec("password", 5, "Password", required=True, secret=True),
            FieldSpec("fetch_size", 6, "Record fetch size", metadata_impacting=False, default=500),
            FieldSpec(
                "enable_external_query",
                7,
                "Grant External Query access (External Query allows creation of VDS from a DB2 query)",
                metadata_impacting=False,
                hidden=True,
                default=False,
            ),
            FieldSpec("max_idle_conns", 8, "Maximum idle connections", metadata_impacting=False, default=8),
            FieldSpec("idle_time_sec", 9, "Connection idle time (s)", metadata_impacting=False, default=60),
        ]
    )

    host: str | None = None
    port: str | None = None
    database: str | None = None
    username: str | None = None
    password: SecretStr | None = None
    fetch_size: int = Field(default=500, ge=0)
    enable_external_query: bool = False
    max_idle_conns: int = Field(default=8, ge=0)
    idle_time_sec: int = Field(default=60, ge=0)

    @field_validator("port", mode="before")
    @classmethod
    def _port_as_text(cls, value: object) -> object:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def to_connection_address(self) -> str:
        database = self._require("database")
        host = self._require("host")
        port = self._require("port")
        self._require("username")
        self._require("password")
        return build_connection_address(self.SCHEME, host, port, database)

    def datasource_settings(self, username: str | None = None, password: str | None = None) -> DataSourceSettings:
        """Copy the values the data source factory needs into a frozen snapshot.

        ``username`` and ``password`` default to the configured values.
        """

        address = self.to_connection_address()
        return DataSourceSettings(
            driver=self.DRIVER,
            address=address,
            username=username if username is not None else self._require("username"),
            password=SecretStr(password if password is not None else self._require("password")),
            properties=None,
            commit_mode=CommitMode.DRIVER_SPECIFIED,
            max_idle_conns=self.max_idle_conns,
            idle_time_sec=self.idle_time_sec,
        )

    def new_datasource_factory(self, username: str | None = None, password: str | None = None) -> DataSourceFactory:
        return DataSourceFactory(self.datasource_settings(username, password))

    def build_plugin_config(
        self,
        config_builder: PluginConfigBuilder,
        credentials_service: CredentialsService | None,
        option_manager: OptionManager | None,
    ) -> PluginConfig:
        # No runtime options apply to DB2.
        username, password = self.resolve_credentials(credentials_service)
        return (
            config_builder.with_dialect(self.get_dialect())
            .with_datasource_factory(self.new_datasource_factory(username, password))
            .with_show_only_connection_database(False)
            .with_fetch_size(self.fetch_size)
            .with_allow_external_query(self.enable_external_query)
            .build()
        )


__all__ = ["Db2V11Conf"]
