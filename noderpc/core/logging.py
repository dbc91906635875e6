# noderpc/core/logging.py
"""
Logging for the RPC client.

Everything logs below the ``noderpc`` logger. ``NodeRpcLogger.configure`` sets
up handlers once per process; classes pick up a per-class logger through
``LoggingMixin`` and attach context (api, method, block numbers, ...) as
record attributes, which the structured formatter renders as ``key=value``.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

from ..types import ConfigurationError

ROOT_LOGGER = 'noderpc'


class NodeRpcFormatter(logging.Formatter):
    """Plain ``time - name - level - message`` line, optionally with context."""

    CONTEXT_ATTRS = (
        'api', 'method', 'transport',
        'stream', 'mode', 'interval', 'block_number', 'observed', 'current',
        'transaction_id', 'catalog', 'method_count',
        'error',
    )

    default_msec_format = '%s.%03d'

    def __init__(self, include_context: bool = False):
        super().__init__(fmt='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        self.include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        if not self.include_context:
            return line

        context = " ".join(
            f"{attr}={getattr(record, attr)}"
            for attr in self.CONTEXT_ATTRS
            if hasattr(record, attr)
        )
        return f"{line} | {context}" if context else line


def _parse_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ConfigurationError(f"Unknown log level {level!r}")
    return value


class NodeRpcLogger:
    """Process-wide handler setup for the ``noderpc`` logger tree."""

    _configured = False
    _log_dir: Optional[Path] = None
    _log_level = logging.INFO

    @classmethod
    def configure(cls,
                  log_dir: Optional[Path] = None,
                  log_level: Union[str, int] = "INFO",
                  console_enabled: bool = True,
                  file_enabled: bool = False,
                  structured_format: bool = True) -> None:
        """First call wins; later calls are ignored until ``reset()``."""
        if cls._configured:
            return

        cls._log_level = _parse_level(log_level)
        cls._log_dir = log_dir

        root = logging.getLogger(ROOT_LOGGER)
        root.setLevel(cls._log_level)
        root.handlers.clear()

        if console_enabled:
            console = logging.StreamHandler(sys.stderr)
            console.setFormatter(NodeRpcFormatter(include_context=structured_format))
            root.addHandler(console)

        if file_enabled and log_dir:
            log_dir.mkdir(parents=True, exist_ok=True)
            logfile = logging.FileHandler(log_dir / 'noderpc.log')
            logfile.setFormatter(NodeRpcFormatter(include_context=True))
            root.addHandler(logfile)

        for handler in root.handlers:
            handler.setLevel(cls._log_level)

        cls._configured = True

    @classmethod
    def reset(cls) -> None:
        root = logging.getLogger(ROOT_LOGGER)
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        cls._configured = False

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        if name != ROOT_LOGGER and not name.startswith(f'{ROOT_LOGGER}.'):
            name = f'{ROOT_LOGGER}.{name}'
        return logging.getLogger(name)


def get_class_logger(instance) -> logging.Logger:
    """``noderpc.clients.ws.WsTransport`` style logger for an object."""
    cls = type(instance)
    module = cls.__module__
    prefix = f'{ROOT_LOGGER}.'
    if module.startswith(prefix):
        module = module[len(prefix):]
    return NodeRpcLogger.get_logger(f"{module}.{cls.__name__}")


def log_with_context(logger: logging.Logger, level: int, message: str, **context) -> None:
    """Emit ``message`` with ``context`` set as attributes on the record."""
    if not logger.isEnabledFor(level):
        return
    record = logger.makeRecord(logger.name, level, "", 0, message, (), None)
    record.__dict__.update(context)
    logger.handle(record)


class LoggingMixin:
    """Per-class logger plus ``log_<level>(message, **context)`` helpers."""

    @property
    def logger(self) -> logging.Logger:
        logger = self.__dict__.get('_logger')
        if logger is None:
            logger = self._logger = get_class_logger(self)
        return logger

    def log_debug(self, message: str, **context) -> None:
        log_with_context(self.logger, logging.DEBUG, message, **context)

    def log_info(self, message: str, **context) -> None:
        log_with_context(self.logger, logging.INFO, message, **context)

    def log_warning(self, message: str, **context) -> None:
        log_with_context(self.logger, logging.WARNING, message, **context)

    def log_error(self, message: str, **context) -> None:
        log_with_context(self.logger, logging.ERROR, message, **context)
