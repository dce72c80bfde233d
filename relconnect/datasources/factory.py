"""Builds pooled connection sources from frozen connection settings."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from pydantic import SecretStr

from .drivers import DriverRegistry, get_driver_registry
from .pool import CommitMode, PooledConnectionSource

LOG = logging.getLogger(__name__)


def _freeze(properties: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(properties or {}))


@dataclass(frozen=True, slots=True)
class DataSourceSettings:
    """Snapshot of everything needed to build a connection pool."""

    driver: str
    address: str
    username: str
    password: SecretStr
    properties: Mapping[str, str] = field(default_factory=lambda: _freeze(None))
    commit_mode: CommitMode = CommitMode.DRIVER_SPECIFIED
    max_idle_conns: int = 8
    idle_time_sec: int = 60

    def __post_init__(self) -> None:
        object.__setattr__(self, "properties", _freeze(self.properties))


def new_generic_connection_pool_data_source(
    driver: str,
    address: str,
    username: str,
    password: SecretStr | str,
    properties: Mapping[str, str] | None,
    commit_mode: CommitMode,
    max_idle_conns: int,
    idle_time_sec: int,
    *,
    drivers: DriverRegistry | None = None,
) -> PooledConnectionSource:
    """Create a pool and open its first connection.

    Raises ConnectionEstablishmentError if the driver is unknown or the first
    connection cannot be opened. No retries are attempted.
    """

    registry = drivers or get_driver_registry()
    adapter = registry.get(driver)
    secret = password if isinstance(password, SecretStr) else SecretStr(password)
    frozen = _freeze(properties)

    def _connect():  # type: ignore[no-untyped-def]
        return adapter.connect(address, username, secret.get_secret_value(), frozen)

    source = PooledConnectionSource(
        _connect,
        max_idle=max_idle_conns,
        idle_time_sec=idle_time_sec,
        commit_mode=commit_mode,
        label=f"{username}@{address}",
    )
    LOG.debug(
        "Opening pooled connection source",
        extra={"driver": driver, "address": address, "user": username},
    )
    source.prime()
    return source


class DataSourceFactory:
    """Zero-argument callable producing a fresh pool on every invocation."""

    __slots__ = ("_settings", "_drivers")

    def __init__(self, settings: DataSourceSettings, *, drivers: DriverRegistry | None = None) -> None:
        self._settings = settings
        self._drivers = drivers

    @property
    def settings(self) -> DataSourceSettings:
        return self._settings

    def __call__(self) -> PooledConnectionSource:
        settings = self._settings
        return new_generic_connection_pool_data_source(
            settings.driver,
            settings.address,
            settings.username,
            settings.password,
            settings.properties,
            settings.commit_mode,
            settings.max_idle_conns,
            settings.idle_time_sec,
            drivers=self._drivers,
        )

    def __repr__(self) -> str:
        return f"DataSourceFactory(driver={self._settings.driver!r}, address={self._settings.address!r})"


__all__ = [
    "DataSourceFactory",
    "DataSourceSettings",
    "new_generic_connection_pool_data_source",
]
