import logging
from typing import Callable, List, Optional, Sequence

from ..store import DocumentStore, Subscription, WriteOp, join_path
from ..utils.errors import NotFoundError
from .entities import TaskInstance, TaskStatus
from .group_model import INSTANCES

logger = logging.getLogger(__name__)


class InstanceModel:
    """Task instance data model (flat ``taskInstances`` collection)"""

    def __init__(self, store: DocumentStore):
        self.store = store
        self.collection = INSTANCES

    def _path(self, instance_id: str) -> str:
        return join_path(self.collection, instance_id)

    @staticmethod
    def _day_filters(user_id: str, group_id: str, date_key: str):
        return [('user_id', '==', user_id), ('group_id', '==', group_id), ('date', '==', date_key)]

    async def list_for_day(self, user_id: str, group_id: str, date_key: str) -> List[TaskInstance]:
        """A user's instances in a group for one day, ordered by start time"""
        docs = await self.store.query(
            self.collection, self._day_filters(user_id, group_id, date_key), order_by='start_time'
        )
        return [TaskInstance.from_dict(d.id, d.data) for d in docs]

    async def has_instances_for_day(self, user_id: str, group_id: str, date_key: str) -> bool:
        docs = await self.store.query(self.collection, self._day_filters(user_id, group_id, date_key))
        return bool(docs)

    def watch_day(self, user_id: str, group_id: str, date_key: str,
                  callback: Callable[[List[TaskInstance]], None]) -> Subscription:
        """Live version of ``list_for_day``"""
        def on_update(docs):
            instances = [TaskInstance.from_dict(d.id, d.data) for d in docs]
            callback(sorted(instances, key=lambda i: i.start_time))

        return self.store.subscribe(
            self.collection, self._day_filters(user_id, group_id, date_key), on_update
        )

    def watch_pending(self, user_id: str, date_key: str,
                      callback: Callable[[List[TaskInstance]], None]) -> Subscription:
        """Live query of a user's pending instances across groups for one day"""
        filters = [
            ('user_id', '==', user_id),
            ('date', '==', date_key),
            ('status', '==', TaskStatus.PENDING.value),
        ]
        return self.store.subscribe(
            self.collection,
            filters,
            lambda docs: callback([TaskInstance.from_dict(d.id, d.data) for d in docs]),
        )

    async def create_instances(self, instances: Sequence[TaskInstance]) -> None:
        """Create all instances in one atomic batch; fails if any already exists"""
        await self.store.batch_write(
            [WriteOp.create(self._path(i.id), i.to_dict()) for i in instances]
        )

    async def create_instance(self, instance: TaskInstance) -> None:
        await self.store.create(self._path(instance.id), instance.to_dict())

    async def get_instance(self, instance_id: str) -> Optional[TaskInstance]:
        doc = await self.store.get(self._path(instance_id))
        return TaskInstance.from_dict(doc.id, doc.data) if doc else None

    async def get_owned_instance(self, instance_id: str, user_id: str) -> TaskInstance:
        instance = await self.get_instance(instance_id)
        if instance is None or instance.user_id != user_id:
            raise NotFoundError('Task instance')
        return instance

    async def set_status(self, instance_id: str, user_id: str, status: TaskStatus) -> TaskInstance:
        """Change only the status field of the user's instance"""
        instance = await self.get_owned_instance(instance_id, user_id)
        return await self._write_status(instance, status)

    async def toggle_status(self, instance_id: str, user_id: str) -> TaskInstance:
        """Flip pending <-> completed"""
        instance = await self.get_owned_instance(instance_id, user_id)
        return await self._write_status(instance, instance.status.toggled())

    async def _write_status(self, instance: TaskInstance, status: TaskStatus) -> TaskInstance:
        await self.store.update(self._path(instance.id), {'status': status.value})
        logger.debug(f"Instance {instance.id} is now {status.value}")
        return instance.with_status(status)
