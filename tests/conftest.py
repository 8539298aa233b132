# conftest.py
from __future__ import annotations

from pathlib import Path

import pytest

from tests.helpers import SchemaTree, write_json
from ucp_schema.core.log import bind_context, configure_from_env, enable_stdout_logging, get_logger, log_context

FIXTURES = Path(__file__).parent / "fixtures"


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast, in-process tests")
    config.addinivalue_line("markers", "bundle: $ref bundling")
    config.addinivalue_line("markers", "resolve: annotation resolution")
    config.addinivalue_line("markers", "compose: capability graph composition")
    config.addinivalue_line("markers", "lint: schema linting")
    config.addinivalue_line("markers", "integration: multi-stage flows over fixture files")


def pytest_addoption(parser):
    parser.addoption(
        "--log-json",
        action="store_true",
        default=False,
        help="Emit ucp_schema logs in JSON format during tests",
    )


@pytest.fixture(scope="session", autouse=True)
def _configure_library_logging(request):
    configure_from_env()
    if request.config.getoption("--log-json"):
        enable_stdout_logging(level="DEBUG", json_output=True)
    bind_context(role="pytest")


@pytest.fixture(autouse=True)
def _test_log_context(request):
    log = get_logger("test")
    with log_context(test=request.node.name):
        log.debug("pytest.test.start", event="pytest.test.start")
        yield


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def schema_tree(tmp_path) -> SchemaTree:
    """Scratch directory with a write(rel_path, obj) helper."""
    return SchemaTree(tmp_path)


@pytest.fixture
def write(tmp_path):
    def _write(rel: str, obj) -> Path:
        return write_json(tmp_path / rel, obj)

    return _write
