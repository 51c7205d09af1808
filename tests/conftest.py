from __future__ import annotations

import logging
import sys
from pathlib import Path
from textwrap import dedent

import pytest


ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = ROOT / "src"
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from telemetry_pie.configuration import PanelConfig
from telemetry_pie.telemetry.replay import ReplayContext

from tests.helpers import TraceRecorder


def write_pyproject(directory: Path, contents: str) -> Path:
    """Persist a ``pyproject.toml`` under ``directory`` and return its path."""

    payload = dedent(contents).lstrip()
    target = directory / "pyproject.toml"
    target.write_text(payload, encoding="utf8")
    return target


@pytest.fixture
def trace() -> TraceRecorder:
    return TraceRecorder()


@pytest.fixture
def turbo_config() -> PanelConfig:
    return PanelConfig(path="/load.data", color_map="turbo")


@pytest.fixture
def replay_context() -> ReplayContext:
    return ReplayContext(initial_state={"path": "/load.data"})


@pytest.fixture
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from an empty directory without a config override."""

    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("TELEMETRY_PIE_CONFIG", raising=False)
    return tmp_path


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo handlers and propagation changes made by ``setup_logging``."""

    logger = logging.getLogger("telemetry_pie")
    handlers = list(logger.handlers)
    level, propagate = logger.level, logger.propagate
    yield
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)
    logger.propagate = propagate
