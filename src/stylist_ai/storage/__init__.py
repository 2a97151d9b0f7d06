"""
Storage adapters for stylist-ai.

Provides session, analysis and object storage interfaces with in-memory
and HTTP implementations.
"""

from stylist_ai.storage.base import AnalysisStore, ObjectStorage, SessionStore
from stylist_ai.storage.http import HttpObjectStorage, decode_data_url
from stylist_ai.storage.memory import MemoryAnalysisStore, MemorySessionStore

__all__ = [
    "AnalysisStore",
    "HttpObjectStorage",
    "MemoryAnalysisStore",
    "MemorySessionStore",
    "ObjectStorage",
    "SessionStore",
    "decode_data_url",
]
