"""Error taxonomy shared by the connector modules."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable


class ConnectorError(RuntimeError):
    """Base error for connector failures."""


class ConnectorConfigError(ConnectorError):
    """Raised when persisted configuration or registrations are invalid."""


@dataclass(frozen=True, slots=True)
class FieldError:
    """A validation problem tied to a single configuration field."""

    field: str
    label: str
    message: str

    def __str__(self) -> str:
        return f"{self.label}: {self.message}"


class ParameterValidationError(ConnectorConfigError):
    """Raised when one or more connection parameters fail validation."""

    def __init__(self, errors: Iterable[FieldError]) -> None:
        self.errors = tuple(errors)
        super().__init__("; ".join(str(error) for error in self.errors))

    @property
    def fields(self) -> tuple[str, ...]:
        return tuple(error.field for error in self.errors)


class MissingFieldError(ParameterValidationError):
    """Raised when a required connection parameter is blank."""

    def __init__(self, field: str, label: str | None = None) -> None:
        self.field = field
        super().__init__([FieldError(field=field, label=label or field, message=f"Missing {field}.")])

    def __str__(self) -> str:
        return f"Missing {self.field}."


class DialectLoadError(ConnectorError):
    """Raised when a dialect definition cannot be read or parsed."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Failed to load dialect definition '{self.path}': {reason}")


class ConnectionEstablishmentError(ConnectorError):
    """Raised when a pooled connection source cannot be created."""


__all__ = [
    "ConnectionEstablishmentError",
    "ConnectorConfigError",
    "ConnectorError",
    "DialectLoadError",
    "FieldError",
    "MissingFieldError",
    "ParameterValidationError",
]
