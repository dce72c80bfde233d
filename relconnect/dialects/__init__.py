"""Dialect descriptors and their loader."""

from .db2 import Db2Dialect
from .loader import (
    DEFINITIONS_DIR,
    DialectRegistry,
    get_dialect_registry,
    load_dialect,
    set_dialect_registry,
)
from .models import Dialect, DialectDefinition, IdentifierCase, SyntaxRules, TypeMapping

__all__ = [
    "DEFINITIONS_DIR",
    "Db2Dialect",
    "Dialect",
    "DialectDefinition",
    "DialectRegistry",
    "IdentifierCase",
    "SyntaxRules",
    "TypeMapping",
    "get_dialect_registry",
    "load_dialect",
    "set_dialect_registry",
]
