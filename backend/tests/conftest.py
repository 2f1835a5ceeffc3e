import os
import sys
import tempfile
from pathlib import Path

import pytest

# Keep tests deterministic and local-only.
os.environ["FILESHARE_SKIP_DOTENV"] = "1"
os.environ["FILESHARE_STORAGE_DIR"] = tempfile.mkdtemp(prefix="fileshare-test-")
os.environ["FILESHARE_CONFLICT_POLICY"] = "reject"
os.environ.pop("FILESHARE_ALLOWED_EXTENSIONS", None)
os.environ.pop("FILESHARE_MAX_UPLOAD_BYTES", None)

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from fileshare.api import dependencies  # noqa: E402
from fileshare.core.config import get_settings  # noqa: E402


def _clear_caches() -> None:
    get_settings.cache_clear()
    dependencies.get_storage.cache_clear()


@pytest.fixture
def storage_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "uploads"
    monkeypatch.setenv("FILESHARE_STORAGE_DIR", str(path))
    _clear_caches()
    yield path
    _clear_caches()


@pytest.fixture
def configure(monkeypatch: pytest.MonkeyPatch):
    """Set FILESHARE_* variables for one test, e.g. ``configure(conflict_policy="overwrite")``."""

    def _configure(**values: str) -> None:
        for key, value in values.items():
            monkeypatch.setenv(f"FILESHARE_{key.upper()}", value)
        _clear_caches()

    yield _configure
    _clear_caches()


@pytest.fixture
def client(storage_dir: Path):
    from fileshare.main import app
    from tests.http_client import SyncASGIClient

    return SyncASGIClient(app)
