"""Connector parameter sets and the source type registry."""

from .base import SECRET_MASK, AbstractConnectorConf, build_connection_address
from .db2 import Db2V11Conf
from .registry import SourceTypeInfo, get_source_type, register_source_type, registered_source_types

__all__ = [
    "AbstractConnectorConf",
    "Db2V11Conf",
    "SECRET_MASK",
    "SourceTypeInfo",
    "build_connection_address",
    "get_source_type",
    "register_source_type",
    "registered_source_types",
]
