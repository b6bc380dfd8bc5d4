"""Shared test fixtures for storefront.

Provides a controllable clock for cache expiry, isolated config
directories, output-state management and a CLI runner. These fixtures are
discovered by pytest automatically.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from storefront.models import GlobalConfig, RequestConfig
from storefront.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The manager holds Rich consoles bound to the streams that existed when
    it was created; CliRunner swaps those streams out, so a stale manager
    would write to closed files in the next test.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def advance_ms(self, ms: float) -> None:
        self.now += ms / 1000.0


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_config() -> GlobalConfig:
    """Config pointing at a fake storefront with retries disabled."""
    return GlobalConfig(
        base_url="https://shop.example.com",
        request=RequestConfig(timeout=5, max_retries=0),
    )


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the XDG directories at tmp_path and clear STOREFRONT_* env vars.

    Also changes the working directory to tmp_path so no project-local
    ``storefront.json`` leaks in.
    """
    monkeypatch.setattr("storefront.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    for var in ["STOREFRONT_BASE_URL", "STOREFRONT_LOCALE", "STOREFRONT_CSRF_TOKEN"]:
        monkeypatch.delenv(var, raising=False)

    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def verbose_output() -> OutputManager:
    """PLAIN, colourless manager with debug output enabled."""
    output = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    from typer.testing import CliRunner

    return CliRunner()
