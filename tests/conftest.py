import sys
from pathlib import Path

import pytest

# Keep the repository free of Python bytecode and __pycache__ artifacts during tests.
sys.dont_write_bytecode = True

TESTS_ROOT = Path(__file__).resolve().parent
REPO_ROOT = TESTS_ROOT.parent
SRC_ROOT = REPO_ROOT / "src"

# Make src/ importable as 'droplet'
if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))


from droplet.core.runtime.drops import clear_member_cache
from droplet.core.runtime.registries import isolated_registries


@pytest.fixture(autouse=True)
def _isolate_runtime_registries():
    """Undo operator, filter, naming and syntax changes made by a test.

    The tables are process-wide; tests that register operators or swap the
    naming convention hold REGISTRY_LOCK for their duration.
    """
    with isolated_registries():
        yield
    clear_member_cache()


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Empty project directory for configuration tests."""
    root = tmp_path / "project"
    root.mkdir()
    return root
