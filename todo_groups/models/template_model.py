import logging
from typing import Any, Dict, List, Optional

from ..services.validation_service import ValidationService
from ..store import DocumentStore, join_path
from ..utils.errors import NotFoundError, ValidationError
from ..utils.validators import Helpers
from .entities import TaskTemplate, recurrence_from_dict
from .group_model import GROUPS, TEMPLATES

logger = logging.getLogger(__name__)


class TemplateModel:
    """Task template data model; templates live under their group"""

    def __init__(self, store: DocumentStore):
        self.store = store

    def collection(self, group_id: str) -> str:
        return join_path(GROUPS, group_id, TEMPLATES)

    async def create_template(self, group_id: str, template_data: Dict[str, Any]) -> TaskTemplate:
        """Validate and store a new template"""
        result = ValidationService.validate_template_data(template_data)
        if not result['valid']:
            raise ValidationError('; '.join(result['errors']))

        data = result['data']
        collection = self.collection(group_id)
        template = TaskTemplate(
            id=self.store.new_id(collection),
            title=data['title'],
            start_time=data['start_time'],
            end_time=data['end_time'],
            recurrence=recurrence_from_dict(data['recurrence']),
            group_id=group_id,
            created_at=Helpers.get_current_timestamp(),
        )
        await self.store.set(join_path(collection, template.id), template.to_dict())
        logger.info(f"Created template {template.id} in group {group_id}")
        return template

    async def get_template(self, group_id: str, template_id: str) -> Optional[TaskTemplate]:
        doc = await self.store.get(join_path(self.collection(group_id), template_id))
        return TaskTemplate.from_dict(doc.id, doc.data) if doc else None

    async def list_templates(self, group_id: str) -> List[TaskTemplate]:
        """All templates of a group ordered by start time"""
        docs = await self.store.query(self.collection(group_id), order_by='start_time')
        return [TaskTemplate.from_dict(d.id, d.data) for d in docs]

    async def delete_template(self, group_id: str, template_id: str) -> None:
        """Delete a template; instances already created from it are kept"""
        if not await self.get_template(group_id, template_id):
            raise NotFoundError('Task template')
        await self.store.delete(join_path(self.collection(group_id), template_id))
        logger.info(f"Deleted template {template_id} from group {group_id}")
