"""Shared test fixtures and factories."""

import logging
from pathlib import Path

import pytest

from injector.chain import WEEK, LocalChain, LocalGauge, LocalToken
from injector.clock import FakeClock
from injector.gauge_injector import GaugeInjector

START = 1_700_000_000

INJECTOR_ADDRESS = "0x" + "11" * 20
OWNER = "0x" + "aa" * 20
KEEPER = "0x" + "bb" * 20
TOKEN = "0x" + "cc" * 20
STRANGER = "0x" + "dd" * 20


def make_address(n: int) -> str:
    """Deterministic non-null address for index n."""
    return f"0x{n:040x}"


# =============================================================================
# Identity Fixtures
# =============================================================================


@pytest.fixture
def owner() -> str:
    return OWNER


@pytest.fixture
def keeper() -> str:
    return KEEPER


@pytest.fixture
def stranger() -> str:
    return STRANGER


# =============================================================================
# Chain Fixtures
# =============================================================================


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(START)


@pytest.fixture
def chain(clock: FakeClock) -> LocalChain:
    chain = LocalChain(clock)
    chain.add_token(TOKEN, "INJ")
    return chain


@pytest.fixture
def token(chain: LocalChain) -> LocalToken:
    return chain.token(TOKEN)


@pytest.fixture
def gauges(chain: LocalChain) -> list[LocalGauge]:
    """Three gauges that accept the inject token from the injector."""
    result = []
    for i in range(1, 4):
        gauge = chain.add_gauge(make_address(i))
        gauge.set_reward_distributor(TOKEN, INJECTOR_ADDRESS)
        result.append(gauge)
    return result


# =============================================================================
# Injector Fixtures
# =============================================================================


@pytest.fixture
def injector(
    chain: LocalChain, clock: FakeClock, gauges: list[LocalGauge]
) -> GaugeInjector:
    return GaugeInjector(
        address=INJECTOR_ADDRESS,
        owner=OWNER,
        keeper_address=KEEPER,
        min_wait_period_seconds=WEEK,
        inject_token=TOKEN,
        chain=chain,
        clock=clock,
    )


@pytest.fixture
def fund(token: LocalToken):
    """Mint inject token to the injector."""

    def _fund(amount: int) -> None:
        token.mint(INJECTOR_ADDRESS, amount)

    return _fund


# =============================================================================
# CLI Test Helpers
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Typer CLI test runner with colors disabled."""
    from typer.testing import CliRunner

    return CliRunner(env={"NO_COLOR": "1", "COLUMNS": "200"})


@pytest.fixture
def config_toml_content(tmp_path: Path) -> str:
    """Valid TOML config content."""
    return f"""
[injector]
address = "{INJECTOR_ADDRESS}"
owner = "{OWNER}"
keeper_address = "{KEEPER}"
inject_token = "{TOKEN}"
state_path = "{tmp_path / "state.json"}"

[keeper]
poll_interval = 5
"""


@pytest.fixture
def config_file(tmp_path: Path, config_toml_content: str) -> Path:
    """Create a temporary config file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text(config_toml_content)
    return config_path


@pytest.fixture(autouse=True)
def _restore_root_logger():
    """CLI commands reconfigure logging; undo it after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
