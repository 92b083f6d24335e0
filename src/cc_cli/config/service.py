"""Configuration service for loading and saving cc-cli state files."""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from pydantic import ValidationError

from cc_cli.config.models import PROVIDERS, AuthStatus, CliConfig, Provider

# Global cache for config (loaded once per process)
_CLI_CONFIG: CliConfig | None = None

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def get_cli_home() -> Path:
    """Get the cc-cli state directory.

    Returns:
        $CC_CLI_HOME if set, otherwise ~/.cc-cli
    """
    override = os.getenv("CC_CLI_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".cc-cli"


def get_config_path() -> Path:
    return get_cli_home() / "config"


def get_auth_dir() -> Path:
    return get_cli_home() / "auth"


def get_auth_status_path() -> Path:
    return get_auth_dir() / "auth_status.json"


def get_credentials_dir() -> Path:
    return get_cli_home() / "credentials"


def get_cache_dir() -> Path:
    return get_cli_home() / "cache"


def get_first_run_marker() -> Path:
    return get_cli_home() / "first_run_complete"


def get_optimizations_dir() -> Path:
    return get_cli_home() / "optimizations"


def ensure_dirs() -> None:
    """Create the state directory tree if it does not exist yet."""
    for path in (get_cli_home(), get_auth_dir(), get_credentials_dir(), get_cache_dir()):
        path.mkdir(parents=True, exist_ok=True)


def get_ollama_base_url() -> str:
    """Ollama API base URL, honouring OLLAMA_HOST the way ollama itself does."""
    host = os.getenv("OLLAMA_HOST", "").strip()
    if not host:
        return "http://localhost:11434"
    if not host.startswith(("http://", "https://")):
        host = f"http://{host}"
    return host.rstrip("/")


def _parse_bool(value: str | None, default: bool) -> bool:
    """Parse boolean from string."""
    if value is None:
        return default
    return value.strip().lower() in ("true", "1", "yes", "on")


def parse_key_value(text: str) -> Dict[str, str]:
    """Parse ``key=value`` lines, skipping blanks and ``#`` comments.

    Surrounding quotes on values are stripped so files written by a shell
    (``default_model="phi"``) are accepted too.
    """
    data: Dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            raise ValueError(f"Malformed config line: {raw!r}")
        key, value = line.split("=", 1)
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
            value = value[1:-1]
        data[key.strip()] = value
    return data


def format_key_value(cli_config: CliConfig) -> str:
    return (
        f"default_model={cli_config.default_model}\n"
        f"verbose={'true' if cli_config.verbose else 'false'}\n"
    )


def _load_from_env() -> CliConfig:
    """Build the initial configuration from environment variables.

    Used when the config file doesn't exist yet.
    """
    defaults = CliConfig()
    return CliConfig(
        default_model=os.getenv("CC_DEFAULT_MODEL") or defaults.default_model,
        verbose=_parse_bool(os.getenv("CC_VERBOSE"), defaults.verbose),
    )


def load_config() -> CliConfig:
    """Load CLI configuration.

    Loading priority:
    1. If already cached in memory, return cached instance
    2. If the config file exists, load from file
    3. Otherwise, create from environment variables and save to file

    Returns:
        CliConfig instance

    Raises:
        ValueError: If the config file is malformed or fails validation
    """
    global _CLI_CONFIG

    if _CLI_CONFIG is not None:
        return _CLI_CONFIG

    config_path = get_config_path()

    if config_path.exists():
        try:
            logger.info("Loading configuration from %s", config_path)
            raw: Dict[str, Any] = parse_key_value(config_path.read_text(encoding="utf-8"))
            _CLI_CONFIG = CliConfig(
                default_model=raw.get("default_model", CliConfig().default_model),
                verbose=_parse_bool(raw.get("verbose"), False),
                **{k: v for k, v in raw.items() if k not in ("default_model", "verbose")},
            )
            return _CLI_CONFIG
        except (ValidationError, ValueError) as exc:
            logger.error("Failed to parse config file %s: %s", config_path, exc)
            raise ValueError(f"Invalid configuration file {config_path}: {exc}") from exc

    logger.info("No config file found, creating from environment variables")
    _CLI_CONFIG = _load_from_env()
    save_config(_CLI_CONFIG)

    return _CLI_CONFIG


def save_config(cli_config: CliConfig) -> None:
    """Save configuration to file.

    Args:
        cli_config: CliConfig instance to save

    Raises:
        OSError: If file cannot be written
    """
    global _CLI_CONFIG

    ensure_dirs()
    config_path = get_config_path()
    config_path.write_text(format_key_value(cli_config), encoding="utf-8")

    _CLI_CONFIG = cli_config

    logger.info("Configuration saved to %s", config_path)


def reload_config() -> CliConfig:
    """Reload configuration from file, clearing the cache."""
    global _CLI_CONFIG
    _CLI_CONFIG = None
    return load_config()


def load_auth_status() -> AuthStatus:
    """Load the auth status file, creating it with all providers false.

    Raises:
        ValueError: If the file is not valid JSON or doesn't match the schema
    """
    path = get_auth_status_path()
    if not path.exists():
        status = AuthStatus()
        save_auth_status(status)
        return status

    try:
        with open(path, encoding="utf-8") as f:
            data: Dict[str, Any] = json.load(f)
        return AuthStatus(**data)
    except (json.JSONDecodeError, ValidationError, TypeError) as exc:
        logger.error("Failed to parse auth status file %s: %s", path, exc)
        raise ValueError(f"Invalid auth status file {path}: {exc}") from exc


def save_auth_status(status: AuthStatus) -> None:
    """Write the auth status file via a temp file and rename."""
    path = get_auth_status_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(path.name + ".tmp")
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(status.model_dump(mode="json"), f, indent=2)
    os.replace(tmp_path, path)


def update_auth_status(
    provider: Provider,
    authenticated: bool,
    now: datetime | None = None,
) -> AuthStatus:
    """Set one provider's flag and stamp ``last_login``.

    Args:
        provider: "gcp", "aws" or "azure"
        authenticated: New flag value
        now: Timestamp override (default: current UTC time)

    Returns:
        The updated AuthStatus
    """
    if provider not in PROVIDERS:
        raise ValueError(f"Unknown provider: {provider}")

    moment = now or datetime.now(timezone.utc)
    status = load_auth_status()
    updated = status.model_copy(
        update={provider: authenticated, "last_login": moment.strftime(TIMESTAMP_FORMAT)}
    )
    save_auth_status(updated)
    logger.info("Auth status for %s set to %s", provider, authenticated)
    return updated


def is_authenticated(provider: Provider) -> bool:
    """Check the auth status file without creating it."""
    if not get_auth_status_path().exists():
        return False
    return load_auth_status().is_authenticated(provider)


def is_first_run() -> bool:
    return not get_first_run_marker().exists()


def mark_first_run_complete() -> None:
    marker = get_first_run_marker()
    marker.parent.mkdir(parents=True, exist_ok=True)
    marker.touch()


def reset_first_run() -> None:
    get_first_run_marker().unlink(missing_ok=True)
