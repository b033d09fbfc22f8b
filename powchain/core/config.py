"""powchain.core.config

Three config surfaces only:
1) `config/default.yaml` + `config/presets/*.yaml`
2) `config/user.yaml` (optional, replaces default.yaml when present)
3) Environment variables (`POWCHAIN_<SECTION>__<FIELD>`)

Everything else is derived.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from powchain import DEFAULT_DIFFICULTY, GENESIS_DATA
from powchain.core.exceptions import ConfigError


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


class ChainConfig(BaseModel):
    """Proof-of-work parameters."""

    difficulty: int = Field(DEFAULT_DIFFICULTY, ge=0, le=64)
    genesis_data: str = GENESIS_DATA
    max_nonce: int | None = Field(None, gt=0)

    @field_validator("genesis_data")
    @classmethod
    def genesis_data_cannot_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("genesis_data must not be blank")
        return v


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = False

    @field_validator("level")
    @classmethod
    def level_must_be_known(cls, v: str) -> str:
        name = v.upper()
        if not isinstance(logging.getLevelName(name), int):
            raise ValueError(f"Unknown log level: {v}")
        return name


class ApiConfig(BaseModel):
    host: str = "127.0.0.1"
    port: int = 3001
    auth_token: str = ""
    cors_origins: list[str] = Field(default_factory=list)

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"


class Config(BaseSettings):
    """Root configuration. Single source of truth."""

    config_dir: Path = Path("config")

    # Preset selection
    preset: Literal["standard", "instant", "hardened", "custom"] = "standard"

    # Component configs
    chain: ChainConfig = Field(default_factory=ChainConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    model_config = {"env_prefix": "POWCHAIN_", "env_nested_delimiter": "__"}

    @classmethod
    def from_yaml(cls, path: Path) -> Config:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        raw = yaml.safe_load(path.read_text()) or {}
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file must contain a mapping: {path}")

        preset_name = raw.get("preset", "standard")
        preset_path = path.parent / "presets" / f"{preset_name}.yaml"
        if preset_path.exists():
            preset_data = yaml.safe_load(preset_path.read_text()) or {}
            raw = _deep_merge(preset_data, raw)

        raw.setdefault("config_dir", path.parent)
        try:
            return cls(**raw)
        except ValidationError as e:
            raise ConfigError(f"Invalid config in {path}: {e}") from e

    @classmethod
    def from_repo_defaults(cls, repo_root: Path | None = None) -> Config:
        root = repo_root or Path.cwd()
        return cls.from_yaml(root / "config" / "default.yaml")

    @classmethod
    def load(cls, repo_root: Path | None = None) -> Config:
        """user.yaml, then default.yaml, then built-in defaults (env still applies)."""

        root = repo_root or Path.cwd()
        user_path = root / "config" / "user.yaml"
        if user_path.exists():
            return cls.from_yaml(user_path)
        if (root / "config" / "default.yaml").exists():
            return cls.from_repo_defaults(root)
        return cls()
