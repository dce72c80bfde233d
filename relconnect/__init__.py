"""Configuration-driven relational source connectors."""

from __future__ import annotations

__version__ = "0.1.0"

from .conf import AbstractConnectorConf, Db2V11Conf  # noqa: E402
from .plugin import PluginConfig, PluginConfigBuilder  # noqa: E402

__all__ = [
    "AbstractConnectorConf",
    "Db2V11Conf",
    "PluginConfig",
    "PluginConfigBuilder",
    "__version__",
]
