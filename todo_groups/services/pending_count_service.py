"""
Pending task counts per group for today's badges.

Counts are rebuilt from the full result set on every update of the live
query rather than adjusted incrementally.
"""
import logging
import threading
import time
from collections import Counter
from typing import Callable, Dict, List, Optional, Tuple

from ..models.entities import TaskInstance
from ..models.instance_model import InstanceModel
from ..store import DocumentStore, Subscription

logger = logging.getLogger(__name__)


class PendingCountAggregator:
    """Live mapping of group_id -> number of pending instances for one day"""

    def __init__(self, store: DocumentStore,
                 on_change: Optional[Callable[[Dict[str, int]], None]] = None):
        self.instance_model = InstanceModel(store)
        self.on_change = on_change
        self._counts: Dict[str, int] = {}
        self._subscription: Optional[Subscription] = None
        self.loaded = False

    @property
    def counts(self) -> Dict[str, int]:
        return dict(self._counts)

    def start(self, user_id: str, today_key: str) -> None:
        if self._subscription is not None:
            raise RuntimeError("Aggregator already started")
        self._subscription = self.instance_model.watch_pending(user_id, today_key, self._recount)

    def _recount(self, instances: List[TaskInstance]) -> None:
        self._counts = dict(Counter(i.group_id for i in instances))
        self.loaded = True
        if self.on_change:
            self.on_change(self.counts)

    def stop(self) -> None:
        if self._subscription is not None:
            self._subscription.stop()
            self._subscription = None


class PendingCountRegistry:
    """Live aggregators keyed by (user, day).

    Aggregators not asked for within ``idle_timeout`` seconds are stopped
    and dropped on the next lookup, so listeners of users who went away or
    of days that are over do not stay open.
    """

    DEFAULT_IDLE_TIMEOUT = 15 * 60

    def __init__(self, store: DocumentStore, idle_timeout: float = DEFAULT_IDLE_TIMEOUT,
                 timer: Callable[[], float] = time.monotonic):
        self.store = store
        self.idle_timeout = idle_timeout
        self._timer = timer
        self._aggregators: Dict[Tuple[str, str], Tuple[PendingCountAggregator, float]] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._aggregators)

    def aggregator_for(self, user_id: str, today_key: str) -> PendingCountAggregator:
        key = (user_id, today_key)
        with self._lock:
            now = self._timer()
            self._evict_idle(now, keep=key)
            entry = self._aggregators.get(key)
            if entry is None:
                aggregator = PendingCountAggregator(self.store)
                aggregator.start(user_id, today_key)
            else:
                aggregator = entry[0]
            self._aggregators[key] = (aggregator, now)
        return aggregator

    def _evict_idle(self, now: float, keep: Tuple[str, str]) -> None:
        idle = [
            key for key, (_, last_used) in self._aggregators.items()
            if key != keep and now - last_used > self.idle_timeout
        ]
        for key in idle:
            aggregator, _ = self._aggregators.pop(key)
            aggregator.stop()
        if idle:
            logger.debug(f"Stopped {len(idle)} idle pending-count listeners")

    def stop_all(self) -> None:
        with self._lock:
            for aggregator, _ in self._aggregators.values():
                aggregator.stop()
            self._aggregators.clear()
