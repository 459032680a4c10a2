"""Root test configuration: shared paths and session-level cleanup of runtime artifacts"""

import shutil
from pathlib import Path

import pytest


_PROJECT_ROOT = Path(__file__).parent.parent
EXAMPLE_DIR = _PROJECT_ROOT / "example"

_CLEANUP_DIRS = [".notesite", "public"]


@pytest.fixture(scope="session", autouse=True)
def cleanup_artifacts():
    """Remove index databases and build output created during the test session."""
    yield
    for name in _CLEANUP_DIRS:
        p = _PROJECT_ROOT / name
        if p.exists():
            shutil.rmtree(p)


@pytest.fixture(name="example_site")
def example_site_fixture(tmp_path):
    """A writable copy of the example site (hugo.toml + content/)."""
    site_dir = tmp_path / "site"
    shutil.copytree(EXAMPLE_DIR, site_dir)
    return site_dir
