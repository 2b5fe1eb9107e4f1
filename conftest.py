import sys
from pathlib import Path

import pytest

# Ensure 'src' directory is on sys.path for tests
PROJECT_ROOT = Path(__file__).resolve().parent
SRC_DIR = PROJECT_ROOT / 'src'
if SRC_DIR.exists() and str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

SAMPLE_INI = "[Section1]\nKey1=Value1\nKey2=Value2\n\n[Section2]\nKeyA=1\n"


@pytest.fixture
def sample_ini(tmp_path: Path) -> Path:
    """Two-section file used by most document tests."""
    path = tmp_path / "settings.ini"
    path.write_bytes(SAMPLE_INI.encode())
    return path


@pytest.fixture
def empty_ini(tmp_path: Path) -> Path:
    path = tmp_path / "empty.ini"
    path.write_bytes(b"")
    return path
