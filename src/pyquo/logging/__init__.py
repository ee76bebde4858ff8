"""PyQuo Logging: logging port, adapters, and a one-call setup helper."""

from __future__ import annotations

from pyquo.config import Config
from pyquo.logging.port import LoggingPort
from pyquo.logging.stdlib_adapter import StdlibLoggingAdapter
from pyquo.logging.structlog_adapter import StructlogAdapter


def configure_logging(config: Config | None = None, adapter: LoggingPort | None = None) -> LoggingPort:
    """Configure logging from ``pyquo.logging.*`` and return the adapter used.

    Defaults to :class:`StructlogAdapter`.
    """
    adapter = adapter if adapter is not None else StructlogAdapter()
    adapter.configure(config if config is not None else Config({}))
    return adapter


__all__ = ["LoggingPort", "StdlibLoggingAdapter", "StructlogAdapter", "configure_logging"]
