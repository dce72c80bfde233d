"""Tests for the field descriptor table."""

from __future__ import annotations

import pytest

from relconnect.errors import ConnectorConfigError, MissingFieldError
from relconnect.fields import FieldSpec, FieldTable, is_blank


def test_table_orders_by_tag() -> None:
    table = FieldTable([FieldSpec("b", 2, "B"), FieldSpec("a", 1, "A", required=True)])

    assert table.names() == ("a", "b")
    assert table.by_tag(2).name == "b"
    assert table.required() == (table.by_name("a"),)
    assert len(table) == 2


def test_duplicate_tags_are_rejected() -> None:
    with pytest.raises(ConnectorConfigError, match="Tag 1"):
        FieldTable([FieldSpec("a", 1, "A"), FieldSpec("b", 1, "B")])


def test_duplicate_names_are_rejected() -> None:
    with pytest.raises(ConnectorConfigError, match="Duplicate field name"):
        FieldTable([FieldSpec("a", 1, "A"), FieldSpec("a", 2, "A again")])


def test_non_positive_tags_are_rejected() -> None:
    with pytest.raises(ConnectorConfigError, match="invalid tag"):
        FieldTable([FieldSpec("a", 0, "A")])


@pytest.mark.parametrize(("value", "expected"), [(None, True), ("", True), (" \t", True), ("x", False), (0, False)])
def test_is_blank(value: object, expected: bool) -> None:
    assert is_blank(value) is expected


def test_missing_field_error_carries_label() -> None:
    error = MissingFieldError("host", "Database Server")

    assert error.field == "host"
    assert error.fields == ("host",)
    assert error.errors[0].label == "Database Server"
    assert str(error) == "Missing host."
