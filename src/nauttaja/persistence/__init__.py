"""Persistence for Nauttaja save records.

- Data models for save records and the store document
- JSON encoding/decoding validated against a schema
- Backends: an atomic file backend and an in-memory one for tests
- SaveStore exposing a transactional read-modify-write operation
"""

from .models import ExternalConfig, SaveRecord, StoreDocument, sorted_newest_first, timestamp_now
from .codec import decode_document, encode_document
from .backend import FileBackend, InMemoryBackend, StoreBackend
from .store import SaveStore

__all__ = [
    "ExternalConfig",
    "SaveRecord",
    "StoreDocument",
    "sorted_newest_first",
    "timestamp_now",
    "decode_document",
    "encode_document",
    "FileBackend",
    "InMemoryBackend",
    "StoreBackend",
    "SaveStore",
]
