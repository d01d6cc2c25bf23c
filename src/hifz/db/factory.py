"""Build the configured record store."""

from __future__ import annotations

import structlog

from hifz.config.app_config import StorageConfig
from hifz.db.blob_store import BlobStore
from hifz.db.memory_store import MemoryStore
from hifz.db.sqlite_store import SQLiteStore
from hifz.db.store import RecordStore

logger = structlog.get_logger(__name__)


def create_store(config: StorageConfig) -> RecordStore:
    """Instantiate the backend named by ``config.backend``.

    Raises:
        ValueError: If the backend name is unknown
    """
    if config.backend == "memory":
        store: RecordStore = MemoryStore()
    elif config.backend == "sqlite":
        store = SQLiteStore(config.sqlite_path)
    elif config.backend == "blobs":
        store = BlobStore.in_directory(config.blobs_dir)
    else:
        raise ValueError(f"Unknown storage backend: {config.backend}")

    logger.info("store.created", backend=config.backend)
    return store
