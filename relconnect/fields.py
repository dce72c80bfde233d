"""Declarative field descriptors for connector parameter sets.

Each connector declares a table of ``FieldSpec`` entries next to its model
fields. The table is the single source for validation (which fields are
required), persistence (stable numeric tags), display (labels and secrecy) and
metadata invalidation (which fields leave cached dataset metadata intact).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Sequence

from .errors import ConnectorConfigError


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """Metadata attached to a single connector field."""

    name: str
    tag: int
    label: str
    required: bool = False
    secret: bool = False
    metadata_impacting: bool = True
    hidden: bool = False
    default: Any = None


class FieldTable(Sequence[FieldSpec]):
    """Ordered, validated collection of field descriptors."""

    def __init__(self, specs: Iterable[FieldSpec]) -> None:
        ordered = tuple(sorted(specs, key=lambda spec: spec.tag))
        by_name: dict[str, FieldSpec] = {}
        by_tag: dict[int, FieldSpec] = {}
        for spec in ordered:
            if spec.tag < 1:
                raise ConnectorConfigError(f"Field '{spec.name}' has invalid tag {spec.tag}")
            if spec.name in by_name:
                raise ConnectorConfigError(f"Duplicate field name '{spec.name}'")
            if spec.tag in by_tag:
                raise ConnectorConfigError(
                    f"Tag {spec.tag} is used by both '{by_tag[spec.tag].name}' and '{spec.name}'"
                )
            by_name[spec.name] = spec
            by_tag[spec.tag] = spec
        self._specs = ordered
        self._by_name = by_name
        self._by_tag = by_tag

    def __getitem__(self, index):  # type: ignore[no-untyped-def]
        return self._specs[index]

    def __len__(self) -> int:
        return len(self._specs)

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self._specs)

    def by_name(self, name: str) -> FieldSpec:
        return self._by_name[name]

    def by_tag(self, tag: int) -> FieldSpec:
        return self._by_tag[tag]

    def names(self) -> tuple[str, ...]:
        return tuple(spec.name for spec in self._specs)

    def required(self) -> tuple[FieldSpec, ...]:
        return tuple(spec for spec in self._specs if spec.required)

    def secrets(self) -> tuple[FieldSpec, ...]:
        return tuple(spec for spec in self._specs if spec.secret)

    def metadata_impacting(self) -> tuple[FieldSpec, ...]:
        return tuple(spec for spec in self._specs if spec.metadata_impacting)

    def non_metadata_impacting(self) -> tuple[FieldSpec, ...]:
        return tuple(spec for spec in self._specs if not spec.metadata_impacting)

    def visible(self) -> tuple[FieldSpec, ...]:
        return tuple(spec for spec in self._specs if not spec.hidden)


def is_blank(value: object) -> bool:
    """Return True for ``None``, empty and whitespace-only strings."""

    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


__all__ = ["FieldSpec", "FieldTable", "is_blank"]
