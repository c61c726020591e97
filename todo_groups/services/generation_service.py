"""
Daily eager generation.

``DailyGenerationGate`` takes the user's watermark as an explicit
``GenerationState`` and returns the next one; ``GenerationService`` reads and
persists it around the gate.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

from ..models.entities import EPOCH_DAY_KEY
from ..models.group_model import GroupModel
from ..models.user_model import UserModel
from ..store import DocumentStore
from ..utils.dates import Clock, DayLike, local_day_key
from .materializer_service import InstanceMaterializer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationState:
    last_generated_date: str = EPOCH_DAY_KEY


@dataclass
class GenerationResult:
    state: GenerationState
    ran: bool = False
    created: int = 0
    failures: Dict[str, Exception] = field(default_factory=dict)

    def to_dict(self):
        return {
            'ran': self.ran,
            'created': self.created,
            'last_generated_date': self.state.last_generated_date,
            'failed_groups': sorted(self.failures),
        }


class DailyGenerationGate:
    """Runs the eager generation pass at most once per calendar day"""

    def __init__(self, materializer: InstanceMaterializer, clock: Optional[Clock] = None):
        self.materializer = materializer
        self.clock = clock or Clock()

    def is_due(self, state: GenerationState, today: DayLike) -> bool:
        # Day keys order as strings
        return local_day_key(today) > state.last_generated_date

    async def run_if_needed(self, user_id: str, owned_group_ids: Iterable[str],
                            state: GenerationState,
                            tz_offset_minutes: Optional[int] = None,
                            today: Optional[DayLike] = None) -> GenerationResult:
        """Materialize today for every owned group if today is past the watermark.

        Groups are processed concurrently. A failing group is logged and the
        others still complete, but the watermark only advances when every group
        succeeded, so the next load retries the day.

        ``today`` is read from the clock once when not given, and the same day
        is used for the due check, the instances and the new watermark.
        """
        if today is None:
            today = self.clock.today(tz_offset_minutes)
        if not self.is_due(state, today):
            return GenerationResult(state=state)

        today_key = local_day_key(today)
        group_ids = list(owned_group_ids)

        outcomes = await asyncio.gather(
            *(self.materializer.ensure_instances(user_id, group_id, today) for group_id in group_ids),
            return_exceptions=True,
        )

        created = 0
        failures = {}
        for group_id, outcome in zip(group_ids, outcomes):
            if isinstance(outcome, Exception):
                logger.error(f"Generating {today_key} for group {group_id} failed: {outcome}")
                failures[group_id] = outcome
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                created += len(outcome)

        if failures:
            logger.warning(
                f"Keeping watermark {state.last_generated_date} for {user_id}: "
                f"{len(failures)} of {len(group_ids)} groups failed"
            )
            return GenerationResult(state=state, ran=True, created=created, failures=failures)

        logger.info(f"Generated {created} instances for {user_id} across {len(group_ids)} groups")
        return GenerationResult(state=GenerationState(today_key), ran=True, created=created)


class GenerationService:
    """Loads the watermark, runs the gate and persists the next watermark"""

    def __init__(self, store: DocumentStore, clock: Optional[Clock] = None, epoch: str = EPOCH_DAY_KEY):
        self.user_model = UserModel(store, epoch=epoch)
        self.group_model = GroupModel(store)
        self.gate = DailyGenerationGate(InstanceMaterializer(store), clock)

    async def generate_for_user(self, user_id: str, email: str = '',
                                tz_offset_minutes: Optional[int] = None) -> GenerationResult:
        user = await self.user_model.ensure_user(user_id, email)
        state = GenerationState(user.last_generated_date)
        today = self.gate.clock.today(tz_offset_minutes)
        if not self.gate.is_due(state, today):
            return GenerationResult(state=state)

        groups = await self.group_model.list_owned_groups(user_id)
        result = await self.gate.run_if_needed(user_id, [g.id for g in groups], state, today=today)

        if result.state != state:
            await self.user_model.set_last_generated_date(user_id, result.state.last_generated_date)
        return result
