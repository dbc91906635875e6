# noderpc/__init__.py

import logging
from pathlib import Path
from typing import Mapping, Optional, Union

from .api.client import Client
from .api.interfaces import ClientListener
from .api.registry import MethodRegistry
from .api.broadcast import TransactionSerializer, MsgpackTransactionSerializer
from .clients import Transport, AsyncTransport, HttpTransport, WsTransport, TRANSPORTS
from .core.config import ClientConfig, LoggingConfig
from .core.logging import NodeRpcLogger, log_with_context
from .stream.interfaces import StreamHandle
from .types import (
    MethodDescriptor,
    NodeRpcError,
    ConfigurationError,
    TransportError,
    RPCError,
)


def create_client(env_vars: Optional[Mapping[str, str]] = None,
                  config_path: Optional[Union[str, Path]] = None,
                  **overrides) -> Client:
    """
    Build a client from a YAML config file or NODERPC_* environment variables.

    Keyword overrides (transport, uri, websocket, timeout) win over both.
    ``transport`` may also be a transport class or instance.
    """
    if config_path:
        config = ClientConfig.from_file(config_path)
    else:
        config = ClientConfig.from_env(env_vars)

    # Files and the environment only name transports.
    transport = overrides.pop('transport', None)
    if isinstance(transport, str):
        overrides['transport'] = transport
        transport = None
    config = config.merge(**overrides)

    _configure_logging_early(config.logging)

    logger = NodeRpcLogger.get_logger('core.init')
    registry = MethodRegistry.load(config.catalog_path) if config.catalog_path else None

    options = config.to_options()
    if transport is not None:
        options['transport'] = transport
    client = Client(options, registry=registry)

    log_with_context(logger, logging.INFO, "Client created",
                     transport=type(client.transport).__name__,
                     method_count=len(client.methods))
    return client


def _configure_logging_early(settings: LoggingConfig) -> None:
    log_dir = Path(settings.log_dir) if settings.log_dir else Path.cwd() / "logs"

    NodeRpcLogger.configure(
        log_dir=log_dir,
        log_level=settings.log_level,
        console_enabled=settings.console_enabled,
        file_enabled=settings.file_enabled,
        structured_format=settings.structured_format,
    )


__all__ = [
    'create_client',
    'Client',
    'ClientConfig',
    'ClientListener',
    'MethodRegistry',
    'MethodDescriptor',
    'StreamHandle',
    'Transport',
    'AsyncTransport',
    'HttpTransport',
    'WsTransport',
    'TRANSPORTS',
    'TransactionSerializer',
    'MsgpackTransactionSerializer',
    'NodeRpcLogger',
    'NodeRpcError',
    'ConfigurationError',
    'TransportError',
    'RPCError',
]
