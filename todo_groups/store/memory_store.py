"""
In-memory document store.
Backs DEV_MODE and the unit tests; behaves like Firestore for the operations
the app uses (atomic batches, create-if-absent, live queries).
"""
import copy
import itertools
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence

from ..utils.errors import DocumentExistsError, NotFoundError
from ..utils.validators import Helpers
from .base import (
    CREATE, DELETE, SET, UPDATE,
    Document, DocumentStore, Filter, Subscription, WriteOp, matches_filters,
)

logger = logging.getLogger(__name__)


def _parent(path: str) -> str:
    return path.rsplit('/', 1)[0]


class MemoryStore(DocumentStore):
    """Dict-backed store guarded by a lock"""

    def __init__(self):
        self._docs: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.RLock()
        self._listeners: Dict[int, tuple] = {}
        self._listener_ids = itertools.count(1)

    def new_id(self, collection: str) -> str:
        return Helpers.generate_id()

    async def get(self, path: str) -> Optional[Document]:
        with self._lock:
            data = self._docs.get(path)
            return Document(path, copy.deepcopy(data)) if data is not None else None

    async def query(self, collection: str, filters: Sequence[Filter] = (),
                    order_by: Optional[str] = None, descending: bool = False) -> List[Document]:
        return self._select(collection, filters, order_by, descending)

    def _select(self, collection, filters, order_by=None, descending=False) -> List[Document]:
        with self._lock:
            docs = [
                Document(path, copy.deepcopy(data))
                for path, data in self._docs.items()
                if _parent(path) == collection and matches_filters(data, filters)
            ]
        if order_by:
            docs.sort(key=lambda d: (d.data.get(order_by) is None, d.data.get(order_by)),
                      reverse=descending)
        return docs

    def subscribe(self, collection: str, filters: Sequence[Filter],
                  callback: Callable[[List[Document]], None]) -> Subscription:
        listener_id = next(self._listener_ids)
        with self._lock:
            self._listeners[listener_id] = (collection, list(filters), callback)

        def _unsubscribe():
            with self._lock:
                self._listeners.pop(listener_id, None)

        callback(self._select(collection, filters))
        return Subscription(_unsubscribe)

    async def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> None:
        with self._lock:
            if merge and path in self._docs:
                self._docs[path].update(copy.deepcopy(data))
            else:
                self._docs[path] = copy.deepcopy(data)
        self._notify({_parent(path)})

    async def update(self, path: str, data: Dict[str, Any]) -> None:
        await self.batch_write([WriteOp.update(path, data)])

    async def delete(self, path: str) -> None:
        with self._lock:
            self._docs.pop(path, None)
        self._notify({_parent(path)})

    async def batch_write(self, ops: Sequence[WriteOp]) -> None:
        with self._lock:
            # Check every precondition before touching anything
            for op in ops:
                if op.kind == CREATE and op.path in self._docs:
                    raise DocumentExistsError(f"Document already exists: {op.path}")
                if op.kind == UPDATE and op.path not in self._docs:
                    raise NotFoundError(f"Document {op.path}")
                if op.kind not in (CREATE, SET, UPDATE, DELETE):
                    raise ValueError(f"Unknown write kind: {op.kind}")

            for op in ops:
                if op.kind in (CREATE, SET):
                    self._docs[op.path] = copy.deepcopy(op.data)
                elif op.kind == UPDATE:
                    self._docs[op.path].update(copy.deepcopy(op.data))
                else:
                    self._docs.pop(op.path, None)
        logger.debug(f"Committed batch of {len(ops)} writes")
        self._notify({_parent(op.path) for op in ops})

    def _notify(self, collections) -> None:
        with self._lock:
            listeners = [entry for entry in self._listeners.values() if entry[0] in collections]
        for collection, filters, callback in listeners:
            callback(self._select(collection, filters))
