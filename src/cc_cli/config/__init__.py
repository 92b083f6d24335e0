"""Configuration module for cc-cli.

Provides the pydantic models for the config and auth status files and the
service functions that read and write them under ``~/.cc-cli``.
"""

from cc_cli.config.models import PROVIDERS, AuthStatus, CliConfig, Provider
from cc_cli.config.service import (
    get_cli_home,
    is_authenticated,
    load_auth_status,
    load_config,
    reload_config,
    save_config,
    update_auth_status,
)

__all__ = [
    "PROVIDERS",
    "AuthStatus",
    "CliConfig",
    "Provider",
    "get_cli_home",
    "is_authenticated",
    "load_auth_status",
    "load_config",
    "reload_config",
    "save_config",
    "update_auth_status",
]
