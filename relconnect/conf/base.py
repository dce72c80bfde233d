"""Base class shared by connector parameter sets."""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Mapping

from pydantic import BaseModel, ConfigDict, SecretStr
from pydantic.alias_generators import to_camel

from relconnect.dialects import Dialect, DialectRegistry, get_dialect_registry
from relconnect.errors import (
    ConnectorConfigError,
    FieldError,
    MissingFieldError,
    ParameterValidationError,
)
from relconnect.fields import FieldSpec, FieldTable, is_blank
from relconnect.plugin import CredentialsService, OptionManager, PluginConfig, PluginConfigBuilder

from .registry import SourceTypeInfo

LOG = logging.getLogger(__name__)

SECRET_MASK = "********"


def build_connection_address(scheme: str, host: str, port: str, database: str) -> str:
    """Compose ``scheme://host:port/database`` by plain substitution."""

    return f"{scheme}://{host}:{port}/{database}"


class AbstractConnectorConf(BaseModel):
    """Typed connection parameters plus the wiring to a dialect and data source.

    Subclasses declare pydantic fields and a matching ``FIELDS`` table. The
    table drives required-field checks, tag-keyed persistence, client
    serialization and metadata impact classification.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    SOURCE_TYPE: ClassVar[SourceTypeInfo]
    FIELDS: ClassVar[FieldTable] = FieldTable(())
    DIALECT_DEFINITION: ClassVar[str]
    DIALECT_CLASS: ClassVar[type[Dialect]] = Dialect

    @classmethod
    def __pydantic_init_subclass__(cls, **kwargs: Any) -> None:
        super().__pydantic_init_subclass__(**kwargs)
        if "FIELDS" not in cls.__dict__:
            return
        for spec in cls.FIELDS:
            model_field = cls.model_fields.get(spec.name)
            if model_field is None:
                raise ConnectorConfigError(f"{cls.__name__}.FIELDS names unknown field '{spec.name}'")
            if not spec.required and model_field.default != spec.default:
                raise ConnectorConfigError(
                    f"{cls.__name__}.{spec.name} default {model_field.default!r} "
                    f"does not match descriptor default {spec.default!r}"
                )

    # ------------------------------------------------------------------
    # Dialect
    # ------------------------------------------------------------------

    @classmethod
    def get_dialect_singleton(cls, registry: DialectRegistry | None = None) -> Dialect:
        """Return the dialect shared by every instance of this source type."""

        registry = registry or get_dialect_registry()
        return registry.get_or_load(cls.SOURCE_TYPE.value, cls.DIALECT_DEFINITION, cls.DIALECT_CLASS)

    def get_dialect(self) -> Dialect:
        return type(self).get_dialect_singleton()

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_required(self) -> None:
        """Raise ParameterValidationError listing every blank required field."""

        errors = [
            FieldError(field=spec.name, label=spec.label, message="must not be blank")
            for spec in self.FIELDS.required()
            if is_blank(self._raw_value(spec.name))
        ]
        if errors:
            raise ParameterValidationError(errors)

    def _require(self, name: str) -> str:
        value = self._raw_value(name)
        if is_blank(value):
            raise MissingFieldError(name, self.FIELDS.by_name(name).label)
        return str(value)

    def _raw_value(self, name: str) -> Any:
        value = getattr(self, name)
        if isinstance(value, SecretStr):
            return value.get_secret_value()
        return value

    def to_connection_address(self) -> str:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Plugin assembly
    # ------------------------------------------------------------------

    def resolve_credentials(self, credentials_service: CredentialsService | None) -> tuple[str, str]:
        """Extension hook for variants that resolve credentials externally.

        The default returns the configured username and password unchanged.
        Overrides run before the data source factory is bound.
        """

        return self._require("username"), self._require("password")

    def build_plugin_config(
        self,
        config_builder: PluginConfigBuilder,
        credentials_service: CredentialsService | None,
        option_manager: OptionManager | None,
    ) -> PluginConfig:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Metadata impact
    # ------------------------------------------------------------------

    @classmethod
    def metadata_impacting_fields(cls) -> tuple[str, ...]:
        return tuple(spec.name for spec in cls.FIELDS.metadata_impacting())

    @classmethod
    def non_metadata_impacting_fields(cls) -> tuple[str, ...]:
        return tuple(spec.name for spec in cls.FIELDS.non_metadata_impacting())

    def changed_fields(self, other: AbstractConnectorConf) -> tuple[str, ...]:
        if type(other) is not type(self):
            raise ConnectorConfigError(
                f"Cannot compare {type(self).__name__} with {type(other).__name__}"
            )
        return tuple(
            spec.name
            for spec in self.FIELDS
            if self._raw_value(spec.name) != other._raw_value(spec.name)
        )

    def requires_metadata_refresh(self, other: AbstractConnectorConf) -> bool:
        """True when switching to ``other`` must invalidate cached metadata."""

        impacting = set(self.metadata_impacting_fields())
        return any(name in impacting for name in self.changed_fields(other))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_wire(self) -> dict[int, Any]:
        """Tag-keyed persisted form; unset fields are omitted."""

        wire: dict[int, Any] = {}
        for spec in self.FIELDS:
            value = self._raw_value(spec.name)
            if value is not None:
                wire[spec.tag] = value
        return wire

    @classmethod
    def from_wire(cls, wire: Mapping[int | str, Any]):  # type: ignore[no-untyped-def]
        values: dict[str, Any] = {}
        for raw_tag, value in wire.items():
            try:
                spec = cls.FIELDS.by_tag(int(raw_tag))
            except (KeyError, ValueError):
                LOG.debug("Ignoring unknown field tag", extra={"tag": raw_tag, "conf": cls.__name__})
                continue
            values[spec.name] = value
        return cls.model_validate(values)

    def to_client_dict(self) -> dict[str, Any]:
        """Display form: secrets masked, hidden fields dropped."""

        result: dict[str, Any] = {}
        for spec in self.FIELDS.visible():
            value = self._raw_value(spec.name)
            if spec.secret and value is not None:
                value = SECRET_MASK
            result[spec.name] = value
        return result

    @classmethod
    def display_fields(cls) -> tuple[FieldSpec, ...]:
        return cls.FIELDS.visible()


__all__ = ["AbstractConnectorConf", "SECRET_MASK", "build_connection_address"]
