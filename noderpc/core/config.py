# noderpc/core/config.py

import os
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import msgspec
import yaml
from dotenv import load_dotenv
from msgspec import Struct

from ..types import ConfigurationError
from .logging import NodeRpcLogger, log_with_context

ENV_PREFIX = "NODERPC_"


class LoggingConfig(Struct):
    log_level: str = "INFO"
    log_dir: Optional[str] = None
    console_enabled: bool = True
    file_enabled: bool = False
    structured_format: bool = False


class ClientConfig(Struct):
    transport: str = "ws"
    websocket: Optional[str] = None
    uri: Optional[str] = None
    timeout: Optional[float] = None
    catalog_path: Optional[str] = None
    logging: LoggingConfig = msgspec.field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, env_vars: Optional[Mapping[str, str]] = None) -> 'ClientConfig':
        logger = NodeRpcLogger.get_logger('core.config')

        if env_vars is None:
            load_dotenv()
            env_vars = os.environ
        env = env_vars

        raw: Dict[str, Any] = {}
        for key in ("transport", "websocket", "uri", "timeout", "catalog_path"):
            value = env.get(f"{ENV_PREFIX}{key.upper()}")
            if value:
                raw[key] = value

        log_raw: Dict[str, Any] = {}
        for key in ("log_level", "log_dir"):
            value = env.get(f"{ENV_PREFIX}{key.upper()}")
            if value:
                log_raw[key] = value
        for key, env_key in (("console_enabled", "LOG_CONSOLE"),
                             ("file_enabled", "LOG_FILE"),
                             ("structured_format", "LOG_STRUCTURED")):
            value = env.get(f"{ENV_PREFIX}{env_key}")
            if value:
                log_raw[key] = value.lower() == "true"
        if log_raw:
            raw["logging"] = log_raw

        config = cls.from_dict(raw)
        log_with_context(logger, logging.DEBUG, "Configuration loaded from environment",
                         transport=config.transport)
        return config

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> 'ClientConfig':
        with open(path, 'r') as f:
            raw = yaml.safe_load(f) or {}
        return cls.from_dict(raw)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> 'ClientConfig':
        try:
            return msgspec.convert(dict(raw), type=cls, strict=False)
        except msgspec.ValidationError as e:
            raise ConfigurationError(f"Invalid client configuration: {e}") from e

    def merge(self, **overrides) -> 'ClientConfig':
        merged = msgspec.to_builtins(self)
        merged.update({key: value for key, value in overrides.items() if value is not None})
        return self.from_dict(merged)

    def to_options(self) -> Dict[str, Any]:
        """Options mapping handed to the client and its transport."""
        options = {
            "transport": self.transport,
            "websocket": self.websocket,
            "uri": self.uri,
            "timeout": self.timeout,
        }
        return {key: value for key, value in options.items() if value is not None}
