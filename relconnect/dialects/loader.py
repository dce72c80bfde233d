"""Dialect definition loading and the per-variant singleton registry."""

from __future__ import annotations

import logging
import threading
import tomllib
from pathlib import Path
from typing import Callable, TypeVar

from pydantic import ValidationError
from sqlglot.dialects.dialect import Dialect as SqlglotDialect

from relconnect.errors import DialectLoadError

from .models import Dialect, DialectDefinition

LOG = logging.getLogger(__name__)

DEFINITIONS_DIR = Path(__file__).resolve().parent / "definitions"

D = TypeVar("D", bound=Dialect)
DialectConstructor = Callable[[DialectDefinition, SqlglotDialect], D]


def resolve_definition_path(definition_path: Path | str) -> Path:
    """Resolve relative definition names against the bundled definitions."""

    path = Path(definition_path)
    if path.is_absolute():
        return path
    return DEFINITIONS_DIR / path


def load_dialect(definition_path: Path | str, variant_constructor: DialectConstructor[D]) -> D:
    """Read a dialect definition file and wrap it with ``variant_constructor``."""

    path = resolve_definition_path(definition_path)
    try:
        with path.open("rb") as handle:
            raw = tomllib.load(handle)
    except FileNotFoundError as exc:
        raise DialectLoadError(path, "file not found") from exc
    except tomllib.TOMLDecodeError as exc:
        raise DialectLoadError(path, f"malformed TOML ({exc})") from exc
    except OSError as exc:
        raise DialectLoadError(path, str(exc)) from exc

    try:
        definition = DialectDefinition.model_validate(raw)
    except ValidationError as exc:
        raise DialectLoadError(path, f"invalid definition ({exc.error_count()} errors)") from exc

    try:
        base = SqlglotDialect.get_or_raise(definition.metadata.base)
    except ValueError as exc:
        raise DialectLoadError(path, f"unknown base dialect '{definition.metadata.base}'") from exc

    base_quote = getattr(base, "IDENTIFIER_START", None)
    if base_quote is not None and base_quote != definition.syntax.identifier_quote:
        raise DialectLoadError(
            path,
            f"identifier quote {definition.syntax.identifier_quote!r} does not match "
            f"base dialect '{definition.metadata.base}' quote {base_quote!r}",
        )

    dialect = variant_constructor(definition, base)
    LOG.debug(
        "Loaded dialect definition",
        extra={"dialect": definition.metadata.name, "path": str(path)},
    )
    return dialect


class DialectRegistry:
    """Caches one dialect per variant; each variant is constructed at most once.

    A failed load is remembered and re-raised on every later lookup so a
    broken variant stays unusable instead of being retried.
    """

    def __init__(self) -> None:
        self._dialects: dict[str, Dialect] = {}
        self._failures: dict[str, DialectLoadError] = {}
        self._lock = threading.Lock()

    def get_or_load(
        self,
        variant: str,
        definition_path: Path | str,
        variant_constructor: DialectConstructor[D],
    ) -> D:
        dialect = self._lookup(variant)
        if dialect is not None:
            return dialect  # type: ignore[return-value]
        with self._lock:
            dialect = self._lookup(variant)
            if dialect is not None:
                return dialect  # type: ignore[return-value]
            try:
                loaded = load_dialect(definition_path, variant_constructor)
            except DialectLoadError as exc:
                LOG.error(
                    "Dialect variant is unusable",
                    extra={"variant": variant, "path": str(exc.path)},
                )
                self._failures[variant] = exc
                raise
            self._dialects[variant] = loaded
            return loaded

    def get(self, variant: str) -> Dialect | None:
        """Return a cached dialect without triggering a load."""

        return self._lookup(variant)

    def loaded_variants(self) -> tuple[str, ...]:
        return tuple(sorted(self._dialects))

    def _lookup(self, variant: str) -> Dialect | None:
        failure = self._failures.get(variant)
        if failure is not None:
            raise failure
        return self._dialects.get(variant)


_registry: DialectRegistry | None = None
_registry_lock = threading.Lock()


def get_dialect_registry() -> DialectRegistry:
    """Return the process-wide registry (thread-safe double-checked locking)."""

    global _registry
    if _registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = DialectRegistry()
    return _registry


def set_dialect_registry(registry: DialectRegistry | None) -> DialectRegistry | None:
    """Swap the process-wide registry; returns the previous one."""

    global _registry
    with _registry_lock:
        previous = _registry
        _registry = registry
    return previous


__all__ = [
    "DEFINITIONS_DIR",
    "DialectConstructor",
    "DialectRegistry",
    "get_dialect_registry",
    "load_dialect",
    "resolve_definition_path",
    "set_dialect_registry",
]
