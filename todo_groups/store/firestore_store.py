"""
Firestore-backed document store.

Reads and writes go through the async client; live queries use the sync
client's ``on_snapshot`` watch, which delivers updates on a background
thread. gRPC async channels are tied to the event loop that opened them, so
one async client is kept per running loop.
"""
import asyncio
import logging
import os
import weakref
from typing import Any, Callable, Dict, List, Optional, Sequence

import firebase_admin
from firebase_admin import firestore
from google.api_core import exceptions as google_exceptions
from google.cloud.firestore import AsyncClient
from google.cloud.firestore_v1.base_query import FieldFilter

from ..utils.errors import DocumentExistsError, NotFoundError, StoreUnavailable
from .base import (
    CREATE, DELETE, SET, UPDATE,
    Document, DocumentStore, Filter, Subscription, WriteOp,
)

logger = logging.getLogger(__name__)


def _default_async_client_factory(app=None) -> Callable[[], AsyncClient]:
    def factory():
        firebase_app = app or firebase_admin.get_app()
        if os.getenv("FIRESTORE_EMULATOR_HOST"):
            return AsyncClient(project=firebase_app.project_id)
        return AsyncClient(
            project=firebase_app.project_id,
            credentials=firebase_app.credential.get_credential(),
        )
    return factory


def _translate(error: Exception, what: str) -> Exception:
    if isinstance(error, google_exceptions.AlreadyExists):
        return DocumentExistsError(f"{what}: document already exists")
    if isinstance(error, google_exceptions.NotFound):
        return NotFoundError(f"Document for {what}")
    return StoreUnavailable(f"{what} failed: {error}")


class FirestoreStore(DocumentStore):
    """DocumentStore over Cloud Firestore"""

    def __init__(self, client=None, async_client_factory: Callable[[], AsyncClient] = None):
        self._client = client
        self._async_client_factory = async_client_factory or _default_async_client_factory()
        self._async_clients = weakref.WeakKeyDictionary()

    @classmethod
    def from_firebase_app(cls, app=None) -> 'FirestoreStore':
        return cls(client=firestore.client(app), async_client_factory=_default_async_client_factory(app))

    def _db(self) -> AsyncClient:
        loop = asyncio.get_running_loop()
        db = self._async_clients.get(loop)
        if db is None:
            db = self._async_client_factory()
            self._async_clients[loop] = db
        return db

    def _build_query(self, collection_ref, filters: Sequence[Filter], order_by=None, descending=False):
        query = collection_ref
        for field_path, op, value in filters:
            query = query.where(filter=FieldFilter(field_path, op, value))
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        return query

    def new_id(self, collection: str) -> str:
        if self._client is not None:
            return self._client.collection(collection).document().id
        return self._db().collection(collection).document().id

    async def get(self, path: str) -> Optional[Document]:
        try:
            snapshot = await self._db().document(path).get()
        except google_exceptions.GoogleAPIError as e:
            raise _translate(e, f"get {path}") from e
        if not snapshot.exists:
            return None
        return Document(path, snapshot.to_dict() or {})

    async def query(self, collection: str, filters: Sequence[Filter] = (),
                    order_by: Optional[str] = None, descending: bool = False) -> List[Document]:
        query = self._build_query(self._db().collection(collection), filters, order_by, descending)
        try:
            snapshots = await query.get()
        except google_exceptions.GoogleAPIError as e:
            raise _translate(e, f"query {collection}") from e
        return [Document(f"{collection}/{s.id}", s.to_dict() or {}) for s in snapshots]

    def subscribe(self, collection: str, filters: Sequence[Filter],
                  callback: Callable[[List[Document]], None]) -> Subscription:
        if self._client is None:
            raise StoreUnavailable("Live queries need the Firestore client")
        query = self._build_query(self._client.collection(collection), filters)

        def on_snapshot(snapshots, changes, read_time):
            callback([Document(f"{collection}/{s.id}", s.to_dict() or {}) for s in snapshots])

        watch = query.on_snapshot(on_snapshot)
        return Subscription(watch.unsubscribe)

    async def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> None:
        try:
            await self._db().document(path).set(data, merge=merge)
        except google_exceptions.GoogleAPIError as e:
            raise _translate(e, f"set {path}") from e

    async def update(self, path: str, data: Dict[str, Any]) -> None:
        try:
            await self._db().document(path).update(data)
        except google_exceptions.GoogleAPIError as e:
            raise _translate(e, f"update {path}") from e

    async def delete(self, path: str) -> None:
        try:
            await self._db().document(path).delete()
        except google_exceptions.GoogleAPIError as e:
            raise _translate(e, f"delete {path}") from e

    async def batch_write(self, ops: Sequence[WriteOp]) -> None:
        db = self._db()
        batch = db.batch()
        for op in ops:
            ref = db.document(op.path)
            if op.kind == CREATE:
                batch.create(ref, op.data)
            elif op.kind == SET:
                batch.set(ref, op.data)
            elif op.kind == UPDATE:
                batch.update(ref, op.data)
            elif op.kind == DELETE:
                batch.delete(ref)
            else:
                raise ValueError(f"Unknown write kind: {op.kind}")
        try:
            await batch.commit()
        except google_exceptions.GoogleAPIError as e:
            raise _translate(e, f"batch of {len(ops)} writes") from e
        logger.debug(f"Committed batch of {len(ops)} writes")
