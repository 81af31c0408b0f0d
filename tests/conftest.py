"""Root pytest configuration.

    tests/
    ├── unit/         in-memory SQLite, mocked ports, TestClient
    ├── integration/  PostgreSQL in a Testcontainers container
    └── shared/       record builders and database fixtures

Integration tests are collected but skipped unless ``--run-integration``
(or ``RUN_INTEGRATION=1``) is given; ``--run-all`` / ``RUN_ALL_TESTS=1``
lifts every skip.
"""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

from tally_config import clear_settings_cache

CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"

for _env_name in (".env.dev", ".env"):
    if (CONFIG_DIR / _env_name).exists():
        load_dotenv(CONFIG_DIR / _env_name)
        break

# Settings require a password; unit tests never connect with it
os.environ.setdefault("POSTGRES_PASSWORD", "test-password")

_TRUTHY = ("1", "true", "yes")


def _enabled(config, option: str, env_var: str) -> bool:
    return bool(config.getoption(option)) or (
        os.environ.get(env_var, "").lower() in _TRUTHY
    )


def pytest_addoption(parser):
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run tests marked with @pytest.mark.integration",
    )
    parser.addoption(
        "--run-all",
        action="store_true",
        default=False,
        help="Run every test, ignoring skip markers",
    )


def pytest_collection_modifyitems(config, items):
    if _enabled(config, "--run-all", "RUN_ALL_TESTS"):
        return
    if _enabled(config, "--run-integration", "RUN_INTEGRATION"):
        return

    skip = pytest.mark.skip(reason="needs PostgreSQL: pass --run-integration")
    for item in items:
        if item.get_closest_marker("integration") is not None:
            item.add_marker(skip)


@pytest.fixture(scope="session", autouse=True)
def fresh_settings():
    """Drop any settings cached before the session (e.g. at import time)."""
    clear_settings_cache()
    yield
    clear_settings_cache()
