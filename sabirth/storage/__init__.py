"""
Storage Module - Persistence capability and typed record access.

The ledger itself is an external collaborator. This module defines the
capability the engine needs (get / put / extend_lifetime) and ships two
stores behind it:
- InMemoryStore: for tests and ephemeral runs
- JsonFileStore: single JSON document on disk
"""

from .store import KeyValueStore, InMemoryStore
from .file_store import JsonFileStore
from .accessor import SessionStore, session_key, sense_result_key

__all__ = [
    "KeyValueStore",
    "InMemoryStore",
    "JsonFileStore",
    "SessionStore",
    "session_key",
    "sense_result_key",
]
