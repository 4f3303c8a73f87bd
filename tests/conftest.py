import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


def pytest_sessionstart(session):
    """Select the config environment before any test module imports the domain.

    The domain reads `PROTEAN_ENV` when `mustore.domain` is first imported, which
    happens while conftest and test modules are collected.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env


@pytest.fixture(scope="session")
def _mustore_domain():
    """Initialize the mustore domain once per session."""
    from mustore.domain import mustore

    mustore.init()
    return mustore


@pytest.fixture(scope="session", autouse=True)
def setup_db(_mustore_domain):
    from mustore.utils.db import drop_db, setup_db

    setup_db(_mustore_domain)

    yield

    drop_db(_mustore_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_mustore_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _mustore_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    for _, broker in current_domain.brokers.items():
        broker._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


@pytest.fixture
def mustore(_mustore_domain):
    return _mustore_domain
