"""Command line checks for source configurations."""

from __future__ import annotations

import argparse
import logging
import sys

from . import __version__
from .config import load_source_config
from .errors import ConnectorError, ParameterValidationError
from .plugin import PluginConfigBuilder

LOG = logging.getLogger(__name__)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="relconnect", description=__doc__)
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subcommands = parser.add_subparsers(dest="command", required=True)
    check = subcommands.add_parser("check", help="Validate a source configuration file")
    check.add_argument("config", help="Path to a source configuration TOML file")
    check.add_argument("--connect", action="store_true", help="Open and close one pooled connection")
    return parser.parse_args(argv)


def check(path: str, *, connect: bool = False) -> int:
    conf = load_source_config(path)
    conf.validate_required()
    print(f"Source type: {conf.SOURCE_TYPE.label} ({conf.SOURCE_TYPE.value})")
    for name, value in conf.to_client_dict().items():
        print(f"  {name} = {value}")
    print(f"Address: {conf.to_connection_address()}")
    plugin_config = conf.build_plugin_config(PluginConfigBuilder(), None, None)
    print(f"Dialect: {plugin_config.dialect.name} {plugin_config.dialect.version}")
    if connect:
        with plugin_config.datasource_factory() as source:
            with source.connection():
                pass
        print("Connection OK")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    try:
        return check(args.config, connect=args.connect)
    except ParameterValidationError as exc:
        for error in exc.errors:
            print(f"error: {error}", file=sys.stderr)
        return 1
    except ConnectorError as exc:
        LOG.debug("Check failed", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1


__all__ = ["check", "main", "parse_args"]
