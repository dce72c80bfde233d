"""DB-API driver adapters keyed by driver identity."""

from __future__ import annotations

import importlib
import threading
from dataclasses import dataclass
from typing import Any, Callable, Mapping
from urllib.parse import urlsplit

from relconnect.errors import ConnectionEstablishmentError, ConnectorConfigError

ConnectFunction = Callable[[str, str, str, Mapping[str, str]], Any]


@dataclass(frozen=True, slots=True)
class Driver:
    """A named way of opening physical DB-API connections."""

    name: str
    connect: ConnectFunction


class DriverRegistry:
    """Collects driver adapters available to the pooling layer."""

    def __init__(self) -> None:
        self._drivers: dict[str, Driver] = {}
        self._lock = threading.Lock()

    def register(self, driver: Driver, *, replace: bool = False) -> None:
        with self._lock:
            if not replace and driver.name in self._drivers:
                raise ConnectorConfigError(f"Driver '{driver.name}' is already registered")
            self._drivers[driver.name] = driver

    def unregister(self, name: str) -> None:
        with self._lock:
            self._drivers.pop(name, None)

    def get(self, name: str) -> Driver:
        driver = self._drivers.get(name)
        if driver is None:
            raise ConnectionEstablishmentError(f"No driver registered for '{name}'")
        return driver

    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._drivers))


def _import_driver_module(module_name: str) -> Any:
    try:
        return importlib.import_module(module_name)
    except ImportError as exc:
        raise ConnectionEstablishmentError(
            f"Driver module '{module_name}' is not installed"
        ) from exc


def db2_dsn(address: str, properties: Mapping[str, str]) -> str:
    """Translate ``db2://host:port/database`` into an ibm_db DSN string."""

    parts = urlsplit(address)
    if parts.scheme != "db2":
        raise ConnectionEstablishmentError(f"Unsupported DB2 address '{address}'")
    pairs = {
        "DATABASE": parts.path.lstrip("/"),
        "HOSTNAME": parts.hostname or "",
        "PORT": str(parts.port or ""),
        "PROTOCOL": "TCPIP",
    }
    for key, value in properties.items():
        pairs[key.upper()] = value
    return "".join(f"{key}={value};" for key, value in pairs.items())


def _connect_ibm_db(address: str, username: str, password: str, properties: Mapping[str, str]) -> Any:
    module = _import_driver_module("ibm_db_dbi")
    return module.connect(db2_dsn(address, properties), user=username, password=password)


IBM_DB_DRIVER = Driver(name="ibm_db_dbi", connect=_connect_ibm_db)

_registry = DriverRegistry()
_registry.register(IBM_DB_DRIVER)


def get_driver_registry() -> DriverRegistry:
    return _registry


__all__ = [
    "ConnectFunction",
    "Driver",
    "DriverRegistry",
    "IBM_DB_DRIVER",
    "db2_dsn",
    "get_driver_registry",
]
