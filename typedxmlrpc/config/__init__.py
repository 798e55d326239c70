"""Configuration module for typedxmlrpc."""

from typedxmlrpc.config.loader import get_config_path, load_config, save_config
from typedxmlrpc.config.schema import ClientConfig

__all__ = ["ClientConfig", "load_config", "save_config", "get_config_path"]
