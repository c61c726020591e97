"""
Turns task templates into per-day task instances.

Instance ids are derived from (user, group, template, day) and written with
create-if-absent semantics, so two callers racing past the existence check
cannot both write the same instance. When the batch collides, each instance
is retried on its own and the ones already present are skipped.
"""
import logging
from typing import List, Optional

from ..models.entities import TaskInstance, TaskTemplate
from ..models.instance_model import InstanceModel
from ..models.template_model import TemplateModel
from ..store import DocumentStore
from ..utils.dates import DayLike, local_day_key
from ..utils.errors import DocumentExistsError
from .recurrence_service import RecurrenceMatcher

logger = logging.getLogger(__name__)


class InstanceMaterializer:
    """Creates the task instances a day needs, at most once per template"""

    def __init__(self, store: DocumentStore):
        self.instance_model = InstanceModel(store)
        self.template_model = TemplateModel(store)

    async def ensure_instances(self, user_id: str, group_id: str, target_day: DayLike) -> List[TaskInstance]:
        """Materialize every matching template of the group for ``target_day``.

        If the user already has any instance in this group for the day, nothing
        is read or written: the check covers the whole day, not each template.
        A template added after the day was materialized is picked up only by
        ``materialize_template``.

        Store errors propagate to the caller. Returns the created instances.
        """
        date_key = local_day_key(target_day)

        if await self.instance_model.has_instances_for_day(user_id, group_id, date_key):
            logger.debug(f"Instances already exist for {user_id}/{group_id} on {date_key}")
            return []

        templates = await self.template_model.list_templates(group_id)
        matching = RecurrenceMatcher.matching(templates, target_day)
        if not matching:
            return []

        instances = [TaskInstance.from_template(t, user_id, group_id, date_key) for t in matching]
        try:
            await self.instance_model.create_instances(instances)
        except DocumentExistsError:
            logger.warning(
                f"Concurrent materialization for {user_id}/{group_id} on {date_key}; writing instances one by one"
            )
            instances = await self._create_missing(instances)

        logger.info(f"Created {len(instances)} instances for {user_id}/{group_id} on {date_key}")
        return instances

    async def _create_missing(self, instances: List[TaskInstance]) -> List[TaskInstance]:
        created = []
        for instance in instances:
            try:
                await self.instance_model.create_instance(instance)
            except DocumentExistsError:
                logger.debug(f"Instance {instance.id} already exists")
                continue
            created.append(instance)
        return created

    async def materialize_template(self, user_id: str, template: TaskTemplate,
                                   today: DayLike) -> Optional[TaskInstance]:
        """Create today's instance of a freshly created template.

        Ignores whether other instances exist for today, so a template added
        mid-day still shows up. Returns None when the template does not apply
        today or its instance is already there.
        """
        if not RecurrenceMatcher.matches(template, today):
            return None

        instance = TaskInstance.from_template(template, user_id, template.group_id, local_day_key(today))
        try:
            await self.instance_model.create_instance(instance)
        except DocumentExistsError:
            logger.info(f"Instance {instance.id} already exists")
            return None

        logger.info(f"Created instance {instance.id} for new template {template.id}")
        return instance
