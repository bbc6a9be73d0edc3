"""Shared test fixtures and configuration."""

import os
from pathlib import Path
import sys

import orjson
import pytest


REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from tests.fixtures.search_data import CLASSES_1_JS, EXTRA_RECORDS, FUNCTIONS_2_JS


TEST_ENV = {
    "SEARCH_INDEX_DIR": "html/search",
    "PARTITION_PATTERN": "*.js",
    "MAX_RESULTS": "20",
    "SUGGESTION_LIMIT": "5",
    "LOG_LEVEL": "warning",
    "LOG_JSON": "true",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset configuration environment variables before each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


@pytest.fixture
def search_dir(tmp_path: Path) -> Path:
    """A Doxygen-style search/ directory with two partitions and the front-end scripts."""
    directory = tmp_path / "search"
    directory.mkdir()
    (directory / "functions_2.js").write_text(FUNCTIONS_2_JS, encoding="utf-8")
    (directory / "classes_1.js").write_text(CLASSES_1_JS, encoding="utf-8")
    (directory / "search.js").write_text("function SearchBox() {}\n", encoding="utf-8")
    (directory / "searchdata.js").write_text("var indexSectionsWithContent = {};\n", encoding="utf-8")
    return directory


@pytest.fixture
def functions_partition_path(search_dir: Path) -> Path:
    return search_dir / "functions_2.js"


@pytest.fixture
def json_partition_path(tmp_path: Path) -> Path:
    path = tmp_path / "extra_0.json"
    path.write_bytes(orjson.dumps(EXTRA_RECORDS))
    return path
