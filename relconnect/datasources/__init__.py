"""Pooled connection sources and the drivers behind them."""

from .drivers import IBM_DB_DRIVER, Driver, DriverRegistry, db2_dsn, get_driver_registry
from .factory import DataSourceFactory, DataSourceSettings, new_generic_connection_pool_data_source
from .pool import CommitMode, PooledConnectionSource

__all__ = [
    "CommitMode",
    "DataSourceFactory",
    "DataSourceSettings",
    "Driver",
    "DriverRegistry",
    "IBM_DB_DRIVER",
    "PooledConnectionSource",
    "db2_dsn",
    "get_driver_registry",
    "new_generic_connection_pool_data_source",
]
