"""Shared fixtures: fake DB-API connections and isolated registries."""

from __future__ import annotations

from typing import Iterator, Mapping

import pytest

from relconnect.datasources import IBM_DB_DRIVER, Driver, get_driver_registry
from relconnect.dialects import DialectRegistry, set_dialect_registry


class FakeConnection:
    def __init__(self, address: str, username: str, password: str, properties: Mapping[str, str]) -> None:
        self.address = address
        self.username = username
        self.password = password
        self.properties = dict(properties)
        self.autocommit: bool | None = None
        self.rollbacks = 0
        self.closed = False

    def rollback(self) -> None:
        self.rollbacks += 1

    def close(self) -> None:
        self.closed = True


class FakeDriver:
    """Records every physical connection it opens."""

    def __init__(self) -> None:
        self.opened: list[FakeConnection] = []
        self.error: Exception | None = None

    def connect(self, address: str, username: str, password: str, properties: Mapping[str, str]) -> FakeConnection:
        if self.error is not None:
            raise self.error
        conn = FakeConnection(address, username, password, properties)
        self.opened.append(conn)
        return conn


@pytest.fixture
def fake_driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture
def fake_ibm_db(fake_driver: FakeDriver) -> Iterator[FakeDriver]:
    """Route the DB2 driver identity to the fake driver."""

    registry = get_driver_registry()
    registry.register(Driver(name=IBM_DB_DRIVER.name, connect=fake_driver.connect), replace=True)
    try:
        yield fake_driver
    finally:
        registry.register(IBM_DB_DRIVER, replace=True)


@pytest.fixture
def dialect_registry() -> Iterator[DialectRegistry]:
    """Install a fresh process-wide dialect registry for the test."""

    registry = DialectRegistry()
    previous = set_dialect_registry(registry)
    try:
        yield registry
    finally:
        set_dialect_registry(previous)
