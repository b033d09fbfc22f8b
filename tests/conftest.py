from __future__ import annotations

import itertools
import shutil
import sys
from pathlib import Path

import pytest

# pytest may run without installing the project; ensure repo root is importable.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from powchain.core.chain import Chain  # noqa: E402
from powchain.core.config import Config  # noqa: E402
from powchain.core.metrics import MetricsRegistry  # noqa: E402


@pytest.fixture()
def temp_dir(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture()
def test_config(temp_dir: Path) -> Config:
    """Config fixture loaded from a copy of the repo's config directory."""

    cfg_src = REPO_ROOT / "config" / "default.yaml"
    cfg_dst_dir = temp_dir / "config"
    cfg_dst_dir.mkdir(parents=True, exist_ok=True)

    # copy default + presets
    shutil.copy2(cfg_src, cfg_dst_dir / "default.yaml")
    shutil.copytree(REPO_ROOT / "config" / "presets", cfg_dst_dir / "presets")

    return Config.from_yaml(cfg_dst_dir / "default.yaml")


@pytest.fixture()
def clock():
    """Deterministic millisecond clock: 1_700_000_000_000, +1000 per call."""

    ticks = itertools.count(1_700_000_000_000, 1000)
    return lambda: next(ticks)


@pytest.fixture()
def chain(clock) -> Chain:
    """Genesis plus two mined blocks at the reference difficulty."""

    c = Chain(2, clock=clock, metrics=MetricsRegistry())
    c.append("Alice pays Bob 10")
    c.append([{"sender": "A", "message": "hi"}, {"sender": "B", "message": "hello"}])
    return c
