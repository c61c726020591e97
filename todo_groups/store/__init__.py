from .base import Document, DocumentStore, Subscription, WriteOp, join_path  # noqa
from .memory_store import MemoryStore  # noqa

__all__ = [
    "Document",
    "DocumentStore",
    "MemoryStore",
    "Subscription",
    "WriteOp",
    "join_path",
]
