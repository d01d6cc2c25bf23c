"""Shared fixtures for hifz tests."""

from datetime import datetime, timezone

import pytest

from hifz.config.app_config import clear_config_cache
from hifz.core.loo7_service import Loo7Service
from hifz.core.models import NewLoo7, NewStudent
from hifz.db.blob_store import BlobStore
from hifz.db.memory_store import MemoryStore
from hifz.db.sqlite_store import SQLiteStore

OWNER = "sheikh-1"
OTHER_OWNER = "sheikh-2"

# 2024-03-10 is a Sunday
FIXED_NOW = datetime(2024, 3, 10, 9, 30, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Run every test in an empty directory with a fresh config cache."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("HIFZ_STORAGE_BACKEND", raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture(params=["memory", "sqlite", "blobs"])
def store(request, tmp_path):
    """Each record store backend, freshly created."""
    if request.param == "memory":
        return MemoryStore()
    if request.param == "sqlite":
        return SQLiteStore(tmp_path / "db" / "test.db")
    return BlobStore.in_directory(tmp_path / "blobs")


@pytest.fixture
def memory_store():
    """In-memory store for service tests."""
    return MemoryStore()


@pytest.fixture
def service(memory_store):
    """Service over an in-memory store with a fixed clock."""
    return Loo7Service(memory_store, clock=lambda: FIXED_NOW)


def make_new_loo7(student_id: str, **overrides) -> NewLoo7:
    """Al-Fatiha 1-7, type new, on Sunday 2024-03-10 unless overridden."""
    fields = {
        "student_id": student_id,
        "type": "new",
        "recitation_date": "2024-03-10",
        "surah_number": 1,
        "surah_name": "الفاتحة",
        "start_aya_number": 1,
        "end_aya_number": 7,
    }
    fields.update(overrides)
    return NewLoo7(**fields)


def make_new_student(name: str = "Ahmad", **overrides) -> NewStudent:
    """Student input with just a name unless overridden."""
    return NewStudent(name=name, **overrides)
