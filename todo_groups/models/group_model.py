import logging
from typing import Dict, List, Optional

from ..services.validation_service import ValidationService
from ..store import DocumentStore, WriteOp, join_path
from ..utils.errors import NotFoundError, ValidationError
from ..utils.validators import Helpers
from .entities import Group

logger = logging.getLogger(__name__)

GROUPS = 'groups'
TEMPLATES = 'tasks'
INSTANCES = 'taskInstances'


class GroupModel:
    """Group data model for Firestore operations"""

    def __init__(self, store: DocumentStore):
        self.store = store
        self.collection = GROUPS

    def _path(self, group_id: str) -> str:
        return join_path(self.collection, group_id)

    async def create_group(self, owner_id: str, name: str, icon: str = 'default') -> Group:
        """Create a new group owned by ``owner_id``"""
        name_result = ValidationService.validate_group_name(name)
        if not name_result['valid']:
            raise ValidationError(name_result['error'])

        group = Group(
            id=self.store.new_id(self.collection),
            name=name_result['value'],
            owner_id=owner_id,
            icon=icon or 'default',
            created_at=Helpers.get_current_timestamp(),
        )
        await self.store.set(self._path(group.id), group.to_dict())
        logger.info(f"Created group {group.id} for {owner_id}")
        return group

    async def get_group(self, group_id: str) -> Optional[Group]:
        doc = await self.store.get(self._path(group_id))
        return Group.from_dict(doc.id, doc.data) if doc else None

    async def get_owned_group(self, group_id: str, owner_id: str) -> Group:
        """Get a group, treating groups of other users as missing"""
        group = await self.get_group(group_id)
        if group is None or group.owner_id != owner_id:
            raise NotFoundError('Group')
        return group

    async def list_owned_groups(self, owner_id: str) -> List[Group]:
        """Groups owned by the user, newest first"""
        docs = await self.store.query(
            self.collection,
            [('owner_id', '==', owner_id)],
            order_by='created_at',
            descending=True,
        )
        return [Group.from_dict(d.id, d.data) for d in docs]

    async def delete_group(self, group_id: str, owner_id: str) -> Dict[str, int]:
        """Delete a group with its templates and the owner's instances in one batch"""
        await self.get_owned_group(group_id, owner_id)

        templates = await self.store.query(join_path(self.collection, group_id, TEMPLATES))
        instances = await self.store.query(
            INSTANCES,
            [('user_id', '==', owner_id), ('group_id', '==', group_id)],
        )

        ops = [WriteOp.delete(d.path) for d in templates]
        ops += [WriteOp.delete(d.path) for d in instances]
        ops.append(WriteOp.delete(self._path(group_id)))
        await self.store.batch_write(ops)

        logger.info(
            f"Deleted group {group_id} with {len(templates)} templates and {len(instances)} instances"
        )
        return {'templates': len(templates), 'instances': len(instances)}
