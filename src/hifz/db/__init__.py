"""Record store module.

Provides:
- RecordStore interface shared by all backends
- MemoryStore, SQLiteStore and BlobStore backends
- create_store: build the backend named in the config
"""

from hifz.db.blob_store import BlobStore, DirectoryBlobNamespace
from hifz.db.database import init_db
from hifz.db.factory import create_store
from hifz.db.memory_store import MemoryStore
from hifz.db.sqlite_store import SQLiteStore
from hifz.db.store import RecordStore

__all__ = [
    "BlobStore",
    "DirectoryBlobNamespace",
    "MemoryStore",
    "RecordStore",
    "SQLiteStore",
    "create_store",
    "init_db",
]
