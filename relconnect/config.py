"""Loading persisted source configurations."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

import tomllib

from pydantic import ValidationError

from .conf import AbstractConnectorConf, get_source_type
from .errors import ConnectorConfigError, FieldError, ParameterValidationError

LOG = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".config" / "relconnect" / "sources"


def parse_source_config(data: Mapping[str, Any]) -> AbstractConnectorConf:
    """Build a parameter set from an already decoded configuration mapping.

    ``data`` holds a ``type`` key plus either a ``fields`` table keyed by field
    name or a ``wire`` table keyed by numeric tag.
    """

    type_name = data.get("type")
    if not isinstance(type_name, str):
        raise ConnectorConfigError("Source configuration is missing 'type'")
    conf_class = get_source_type(type_name)

    fields = data.get("fields")
    wire = data.get("wire")
    if fields is not None and wire is not None:
        raise ConnectorConfigError("Use either [fields] or [wire], not both")
    try:
        if wire is not None:
            if not isinstance(wire, dict):
                raise ConnectorConfigError("[wire] must be a table")
            return conf_class.from_wire(wire)
        if fields is not None and not isinstance(fields, dict):
            raise ConnectorConfigError("[fields] must be a table")
        return conf_class.model_validate(fields or {})
    except ValidationError as exc:
        raise _field_errors(conf_class, exc) from exc


def load_source_config(path: Path | str) -> AbstractConnectorConf:
    """Read a single source configuration file."""

    path = Path(path)
    try:
        data = _read_config_file(path)
    except FileNotFoundError as exc:
        raise ConnectorConfigError(f"Source configuration '{path}' does not exist") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConnectorConfigError(f"Source configuration '{path}' is not valid TOML: {exc}") from exc
    except OSError as exc:
        raise ConnectorConfigError(f"Source configuration '{path}' could not be read: {exc}") from exc
    return parse_source_config(data)


def load_source_configs(directory: Path | None = None) -> dict[str, AbstractConnectorConf]:
    """Load every ``*.toml`` source in ``directory``, keyed by file stem."""

    directory = directory or CONFIG_DIR
    if not directory.is_dir():
        return {}
    sources: dict[str, AbstractConnectorConf] = {}
    for path in sorted(directory.glob("*.toml")):
        sources[path.stem] = load_source_config(path)
        LOG.debug("Loaded source configuration", extra={"source": path.stem})
    return sources


def _field_errors(conf_class: type[AbstractConnectorConf], exc: ValidationError) -> ParameterValidationError:
    errors: list[FieldError] = []
    for error in exc.errors():
        loc = error.get("loc") or ("",)
        name = str(loc[0])
        label = name
        for spec in conf_class.FIELDS:
            if name in (spec.name, _camel(spec.name)):
                name, label = spec.name, spec.label
                break
        errors.append(FieldError(field=name, label=label, message=error.get("msg", "invalid value")))
    return ParameterValidationError(errors)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _read_config_file(path: Path) -> dict[str, Any]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


__all__ = ["CONFIG_DIR", "load_source_config", "load_source_configs", "parse_source_config"]
