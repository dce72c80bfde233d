"""Dialect definition schema and the immutable dialect descriptor."""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, ConfigDict, Field
from sqlglot import exp
from sqlglot.dialects.dialect import Dialect as SqlglotDialect


class IdentifierCase(str, Enum):
    """How the database folds unquoted identifiers."""

    UPPER = "upper"
    LOWER = "lower"
    PRESERVE = "preserve"


class DefinitionMetadata(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    api_name: str
    version: str = "1.0"
    base: str = Field(description="sqlglot dialect used for identifier quoting")


class SyntaxRules(BaseModel):
    """Lexical and structural syntax rules of the database."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    identifier_quote: str = '"'
    identifier_length_limit: int = Field(default=128, gt=0)
    unquoted_identifier_case: IdentifierCase = IdentifierCase.PRESERVE
    allows_boolean_literal: bool = True
    map_boolean_literal_to_bit: bool = False
    supports_catalogs: bool = False
    supports_schemas: bool = True


class TypeMapping(BaseModel):
    """Native source type to engine type mapping."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    source: str
    target: str
    required_cast: str | None = None


class DialectDefinition(BaseModel):
    """Shape of a declarative dialect definition file."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    metadata: DefinitionMetadata
    syntax: SyntaxRules = Field(default_factory=SyntaxRules)
    data_types: list[TypeMapping] = Field(default_factory=list)
    capabilities: list[str] = Field(default_factory=list)
    functions: list[str] = Field(default_factory=list)


class Dialect:
    """Capability descriptor of one database variant.

    Instances are built once per variant and shared by reference; attributes
    cannot be rebound or deleted after construction.
    """

    __slots__ = ("_definition", "_base", "_type_mappings", "_capabilities", "_functions")

    supports_nested_aggregations = True

    def __init__(self, definition: DialectDefinition, base: SqlglotDialect) -> None:
        object.__setattr__(self, "_definition", definition)
        object.__setattr__(self, "_base", base)
        object.__setattr__(
            self,
            "_type_mappings",
            MappingProxyType({mapping.source.upper(): mapping for mapping in definition.data_types}),
        )
        object.__setattr__(self, "_capabilities", frozenset(definition.capabilities))
        object.__setattr__(self, "_functions", frozenset(name.upper() for name in definition.functions))

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable; cannot set '{name}'")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable; cannot delete '{name}'")

    @property
    def name(self) -> str:
        return self._definition.metadata.name

    @property
    def api_name(self) -> str:
        return self._definition.metadata.api_name

    @property
    def version(self) -> str:
        return self._definition.metadata.version

    @property
    def syntax(self) -> SyntaxRules:
        return self._definition.syntax

    @property
    def base(self) -> SqlglotDialect:
        """sqlglot dialect backing identifier rendering."""

        return self._base

    @property
    def type_mappings(self) -> Mapping[str, TypeMapping]:
        return self._type_mappings

    @property
    def capabilities(self) -> frozenset[str]:
        return self._capabilities

    @property
    def functions(self) -> frozenset[str]:
        return self._functions

    def supports(self, capability: str) -> bool:
        return capability in self._capabilities

    def supports_function(self, name: str) -> bool:
        return name.upper() in self._functions

    def map_source_type(self, native_type: str) -> str | None:
        """Return the engine type for a native column type, if mapped."""

        mapping = self._type_mappings.get(native_type.upper())
        return mapping.target if mapping else None

    def normalize_identifier(self, name: str) -> str:
        """Apply the database's folding rule for unquoted identifiers."""

        case = self.syntax.unquoted_identifier_case
        if case is IdentifierCase.UPPER:
            return name.upper()
        if case is IdentifierCase.LOWER:
            return name.lower()
        return name

    def quote_identifier(self, name: str) -> str:
        """Quote ``name`` through the base dialect.

        The loader rejects definitions whose ``identifier_quote`` differs from the
        base dialect's, so both always agree.
        """

        if len(name) > self.syntax.identifier_length_limit:
            raise ValueError(
                f"Identifier '{name}' exceeds {self.syntax.identifier_length_limit} characters"
            )
        return exp.to_identifier(name, quoted=True).sql(dialect=self._base)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, version={self.version!r})"


__all__ = [
    "DefinitionMetadata",
    "Dialect",
    "DialectDefinition",
    "IdentifierCase",
    "SyntaxRules",
    "TypeMapping",
]
