"""
Document store interface.

Paths are slash separated, e.g. ``groups/{group_id}/tasks/{template_id}``.
A collection path has an odd number of segments, a document path an even
number. Only equality filters are supported, which is all the app queries.
"""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

Filter = Tuple[str, str, Any]

CREATE = 'create'
SET = 'set'
UPDATE = 'update'
DELETE = 'delete'


@dataclass(frozen=True)
class Document:
    """A stored document: its path, id and data"""
    path: str
    data: Dict[str, Any]

    @property
    def id(self) -> str:
        return self.path.rsplit('/', 1)[-1]


@dataclass(frozen=True)
class WriteOp:
    """One write inside an atomic batch"""
    kind: str
    path: str
    data: Optional[Dict[str, Any]] = None

    @classmethod
    def create(cls, path: str, data: Dict[str, Any]) -> 'WriteOp':
        return cls(CREATE, path, dict(data))

    @classmethod
    def set(cls, path: str, data: Dict[str, Any]) -> 'WriteOp':
        return cls(SET, path, dict(data))

    @classmethod
    def update(cls, path: str, data: Dict[str, Any]) -> 'WriteOp':
        return cls(UPDATE, path, dict(data))

    @classmethod
    def delete(cls, path: str) -> 'WriteOp':
        return cls(DELETE, path)


@dataclass
class Subscription:
    """Handle for a live query; ``stop()`` detaches the listener"""
    _unsubscribe: Callable[[], None]
    active: bool = field(default=True)

    def stop(self) -> None:
        if self.active:
            self.active = False
            self._unsubscribe()


def join_path(*segments: str) -> str:
    return '/'.join(s.strip('/') for s in segments)


def matches_filters(data: Dict[str, Any], filters: Iterable[Filter]) -> bool:
    for field_path, op, value in filters:
        if op != '==':
            raise ValueError(f"Unsupported filter operator: {op}")
        if data.get(field_path) != value:
            return False
    return True


class DocumentStore:
    """Async CRUD + query + subscribe + atomic batch over documents"""

    def new_id(self, collection: str) -> str:
        raise NotImplementedError

    async def get(self, path: str) -> Optional[Document]:
        raise NotImplementedError

    async def query(self, collection: str, filters: Sequence[Filter] = (),
                    order_by: Optional[str] = None, descending: bool = False) -> List[Document]:
        raise NotImplementedError

    def subscribe(self, collection: str, filters: Sequence[Filter],
                  callback: Callable[[List[Document]], None]) -> Subscription:
        raise NotImplementedError

    async def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> None:
        raise NotImplementedError

    async def update(self, path: str, data: Dict[str, Any]) -> None:
        raise NotImplementedError

    async def delete(self, path: str) -> None:
        raise NotImplementedError

    async def batch_write(self, ops: Sequence[WriteOp]) -> None:
        raise NotImplementedError

    async def create(self, path: str, data: Dict[str, Any]) -> None:
        """Write a document only if it does not exist yet"""
        await self.batch_write([WriteOp.create(path, data)])
