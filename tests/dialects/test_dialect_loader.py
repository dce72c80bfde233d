"""Tests for dialect definition loading and the singleton registry."""

from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from relconnect.dialects import (
    DEFINITIONS_DIR,
    Db2Dialect,
    Dialect,
    DialectRegistry,
    get_dialect_registry,
    load_dialect,
)
from relconnect.errors import DialectLoadError

MINIMAL = """
[metadata]
name = "Tiny"
api_name = "tiny"
base = "postgres"
"""


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "tiny.toml"
    path.write_text(content)
    return path


def test_bundled_db2_definition_loads() -> None:
    dialect = load_dialect("db2v11.toml", Db2Dialect)

    assert isinstance(dialect, Db2Dialect)
    assert dialect.name == "IBM DB2 v11"
    assert dialect.api_name == "db2v11"
    assert dialect.supports("join.inner")
    assert (DEFINITIONS_DIR / "db2v11.toml").is_file()


def test_minimal_definition_uses_defaults(tmp_path: Path) -> None:
    dialect = load_dialect(_write(tmp_path, MINIMAL), Dialect)

    assert dialect.syntax.identifier_quote == '"'
    assert dialect.capabilities == frozenset()
    assert dialect.map_source_type("INTEGER") is None


def test_missing_definition_raises(tmp_path: Path) -> None:
    with pytest.raises(DialectLoadError, match="file not found") as excinfo:
        load_dialect(tmp_path / "absent.toml", Dialect)

    assert excinfo.value.path == tmp_path / "absent.toml"


def test_malformed_definition_raises(tmp_path: Path) -> None:
    with pytest.raises(DialectLoadError, match="malformed TOML"):
        load_dialect(_write(tmp_path, "[metadata\nname = "), Dialect)


def test_definition_failing_schema_raises(tmp_path: Path) -> None:
    with pytest.raises(DialectLoadError, match="invalid definition"):
        load_dialect(_write(tmp_path, "[metadata]\nname = 'x'\n"), Dialect)


def test_unknown_base_dialect_raises(tmp_path: Path) -> None:
    content = MINIMAL.replace('"postgres"', '"no-such-sql"')

    with pytest.raises(DialectLoadError, match="unknown base dialect"):
        load_dialect(_write(tmp_path, content), Dialect)


def test_identifier_quote_must_match_base_dialect(tmp_path: Path) -> None:
    content = MINIMAL + "\n[syntax]\nidentifier_quote = \"`\"\n"

    with pytest.raises(DialectLoadError, match="identifier quote"):
        load_dialect(_write(tmp_path, content), Dialect)


def test_quoted_identifiers_use_definition_quote(tmp_path: Path) -> None:
    dialect = load_dialect(_write(tmp_path, MINIMAL), Dialect)

    assert dialect.quote_identifier("Orders") == '"Orders"'


def test_registry_constructs_once_under_concurrency(tmp_path: Path) -> None:
    path = _write(tmp_path, MINIMAL)
    registry = DialectRegistry()
    constructions: list[int] = []
    barrier = threading.Barrier(8)
    results: list[Dialect] = []
    results_lock = threading.Lock()

    def _construct(definition, base):  # type: ignore[no-untyped-def]
        constructions.append(1)
        time.sleep(0.01)
        return Dialect(definition, base)

    def _worker() -> None:
        barrier.wait()
        dialect = registry.get_or_load("tiny", path, _construct)
        with results_lock:
            results.append(dialect)

    threads = [threading.Thread(target=_worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(constructions) == 1
    assert len(results) == 8
    assert all(dialect is results[0] for dialect in results)


def test_registry_ignores_definition_changes_after_load(tmp_path: Path) -> None:
    path = _write(tmp_path, MINIMAL)
    registry = DialectRegistry()
    first = registry.get_or_load("tiny", path, Dialect)

    path.write_text(MINIMAL.replace('"Tiny"', '"Changed"'))

    assert registry.get_or_load("tiny", path, Dialect) is first
    assert first.name == "Tiny"


def test_registry_remembers_failures(tmp_path: Path) -> None:
    path = tmp_path / "late.toml"
    registry = DialectRegistry()

    with pytest.raises(DialectLoadError):
        registry.get_or_load("late", path, Dialect)
    path.write_text(MINIMAL)

    with pytest.raises(DialectLoadError):
        registry.get_or_load("late", path, Dialect)
    with pytest.raises(DialectLoadError):
        registry.get("late")


def test_process_registry_is_a_singleton() -> None:
    assert get_dialect_registry() is get_dialect_registry()


def test_fresh_registry_fixture_is_installed(dialect_registry: DialectRegistry) -> None:
    assert get_dialect_registry() is dialect_registry
    assert dialect_registry.loaded_variants() == ()
