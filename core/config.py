"""Configuration models and loading."""

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

CONFIG_DIR = Path.home() / ".config" / "argon-proxy"
CONFIG_FILE = CONFIG_DIR / "config.json"


class ProxySettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str = "127.0.0.1"
    port: int = Field(default=8080, ge=1, le=65535)
    allow_origin: str = Field(default="*", min_length=1)
    verbose: bool = False
    trust_proxy: bool = False
    keep_alive_timeout: int = 5


class UpstreamSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    connect_timeout: float = 10.0
    read_timeout: float = 60.0
    write_timeout: float = 60.0
    pool_timeout: float = 10.0
    max_connections: int = 100
    max_keepalive_connections: int = 20
    follow_redirects: bool = True


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    proxy: ProxySettings = Field(default_factory=ProxySettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)


def load_config(path: Path = CONFIG_FILE) -> Config:
    """Load configuration from JSON file, creating default if needed."""
    if not path.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
        default = Config()
        path.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(path.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        # Backup corrupted config and recreate default
        backup = path.with_suffix(".json.bak")
        path.rename(backup)
        default = Config()
        path.write_text(default.model_dump_json(indent=2))
        return default


def apply_overrides(config: Config, **values: Any) -> Config:
    """Return a copy of config with the given proxy settings replaced.

    ``None`` values are ignored so unset command-line flags keep the file value.
    The result is re-validated, so a bad override raises ``ValidationError``.
    """
    updates = {key: value for key, value in values.items() if value is not None}
    if not updates:
        return config
    proxy = config.proxy.model_dump() | updates
    return Config.model_validate({"proxy": proxy, "upstream": config.upstream.model_dump()})
