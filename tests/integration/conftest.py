"""Integration tests need a reachable PostgreSQL configured through DB_* variables."""
from pathlib import Path

import pytest

from shared.database.config import load_database_config


def pytest_collection_modifyitems(config, items):
    if load_database_config() is not None:
        return
    skip = pytest.mark.skip(reason="DB_HOST/DB_PORT/DB_NAME/DB_USER/DB_PASSWORD not set")
    here = Path(__file__).parent
    for item in items:
        if here not in Path(str(item.fspath)).parents:
            continue
        item.add_marker(pytest.mark.integration)
        item.add_marker(skip)
