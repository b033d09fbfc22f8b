from __future__ import annotations

from pathlib import Path

import pytest

from powchain.core.config import ChainConfig, Config, LoggingConfig
from powchain.core.exceptions import ConfigError


def test_repo_defaults_use_standard_preset(test_config: Config) -> None:
    assert test_config.preset == "standard"
    assert test_config.chain.difficulty == 2
    assert test_config.chain.genesis_data == "Genesis Block"
    assert test_config.chain.max_nonce is None
    assert test_config.api.port == 3001
    assert test_config.api.base_url == "http://127.0.0.1:3001"


def test_config_loads_from_yaml_and_preset_chain(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    cfg_dir = tmp_path / "config"
    presets = cfg_dir / "presets"
    presets.mkdir(parents=True)

    (cfg_dir / "default.yaml").write_text("preset: hardened\nchain:\n  genesis_data: Block zero\n")
    (presets / "hardened.yaml").write_text("chain:\n  difficulty: 4\n  max_nonce: 1000\n")

    cfg = Config.from_yaml(cfg_dir / "default.yaml")
    assert cfg.preset == "hardened"
    assert cfg.chain.difficulty == 4
    assert cfg.chain.max_nonce == 1000
    assert cfg.chain.genesis_data == "Block zero"
    assert cfg.config_dir == cfg_dir


def test_file_values_override_preset(tmp_path: Path) -> None:
    cfg_dir = tmp_path / "config"
    (cfg_dir / "presets").mkdir(parents=True)
    (cfg_dir / "default.yaml").write_text("preset: instant\nchain:\n  difficulty: 3\n")
    (cfg_dir / "presets" / "instant.yaml").write_text("chain:\n  difficulty: 0\n")

    assert Config.from_yaml(cfg_dir / "default.yaml").chain.difficulty == 3


def test_config_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("POWCHAIN_CHAIN__DIFFICULTY", "3")
    monkeypatch.setenv("POWCHAIN_API__AUTH_TOKEN", "secret")
    cfg = Config()  # BaseSettings reads env
    assert cfg.chain.difficulty == 3
    assert cfg.api.auth_token == "secret"


def test_config_from_yaml_raises_if_missing(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        Config.from_yaml(tmp_path / "missing.yaml")


def test_invalid_values_become_config_errors(tmp_path: Path) -> None:
    path = tmp_path / "default.yaml"
    path.write_text("chain:\n  difficulty: 65\n")
    with pytest.raises(ConfigError):
        Config.from_yaml(path)

    path.write_text("- not\n- a mapping\n")
    with pytest.raises(ConfigError):
        Config.from_yaml(path)


def test_load_prefers_user_yaml(tmp_path: Path) -> None:
    cfg_dir = tmp_path / "config"
    cfg_dir.mkdir()
    (cfg_dir / "default.yaml").write_text("chain:\n  difficulty: 1\n")
    (cfg_dir / "user.yaml").write_text("chain:\n  difficulty: 0\n")

    assert Config.load(tmp_path).chain.difficulty == 0


def test_load_without_config_dir_uses_builtin_defaults(tmp_path: Path) -> None:
    cfg = Config.load(tmp_path)
    assert cfg.chain.difficulty == 2
    assert cfg.preset == "standard"


def test_section_validators() -> None:
    with pytest.raises(ValueError):
        ChainConfig(difficulty=-1)
    with pytest.raises(ValueError):
        ChainConfig(max_nonce=0)
    with pytest.raises(ValueError):
        ChainConfig(genesis_data="  ")
    with pytest.raises(ValueError):
        LoggingConfig(level="LOUD")
    assert LoggingConfig(level="debug").level == "DEBUG"
