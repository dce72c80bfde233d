"""Registry of connector configuration classes keyed by source type."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from relconnect.errors import ConnectorConfigError

if TYPE_CHECKING:
    from .base import AbstractConnectorConf


@dataclass(frozen=True, slots=True)
class SourceTypeInfo:
    """Identity and display hints of a source type."""

    value: str
    label: str
    ui_config: str | None = None
    external_query_supported: bool = False


C = TypeVar("C", bound="type[AbstractConnectorConf]")

_SOURCE_TYPES: dict[str, type[AbstractConnectorConf]] = {}
_lock = threading.Lock()


def register_source_type(conf_class: C) -> C:
    """Class decorator registering ``conf_class`` under its ``SOURCE_TYPE``."""

    info = getattr(conf_class, "SOURCE_TYPE", None)
    if not isinstance(info, SourceTypeInfo):
        raise ConnectorConfigError(f"{conf_class.__name__} does not declare a SOURCE_TYPE")
    with _lock:
        existing = _SOURCE_TYPES.get(info.value)
        if existing is not None and existing is not conf_class:
            raise ConnectorConfigError(
                f"Source type '{info.value}' is already registered by {existing.__name__}"
            )
        _SOURCE_TYPES[info.value] = conf_class
    return conf_class


def get_source_type(value: str) -> type[AbstractConnectorConf]:
    try:
        return _SOURCE_TYPES[value]
    except KeyError:
        raise ConnectorConfigError(f"Unknown source type '{value}'") from None


def registered_source_types() -> tuple[SourceTypeInfo, ...]:
    return tuple(
        conf_class.SOURCE_TYPE
        for _, conf_class in sorted(_SOURCE_TYPES.items())
    )


__all__ = [
    "SourceTypeInfo",
    "get_source_type",
    "register_source_type",
    "registered_source_types",
]
