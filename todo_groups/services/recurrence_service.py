from typing import Iterable, List

from ..models.entities import (
    DailyRecurrence, OnceRecurrence, TaskTemplate, WeeklyRecurrence,
)
from ..utils.dates import DayLike, local_day_key, local_weekday


class RecurrenceMatcher:
    """Decides whether a template applies to a calendar day"""

    @staticmethod
    def matches(template: TaskTemplate, target_day: DayLike) -> bool:
        """True when the template's recurrence covers ``target_day``.

        Never raises: a missing or unrecognised recurrence is simply no match.
        """
        recurrence = getattr(template, 'recurrence', None)

        if isinstance(recurrence, DailyRecurrence):
            return True

        if isinstance(recurrence, OnceRecurrence):
            return recurrence.start_date == local_day_key(target_day)

        if isinstance(recurrence, WeeklyRecurrence):
            if not recurrence.days_of_week:
                return False
            return local_weekday(target_day) in recurrence.days_of_week

        return False

    @staticmethod
    def matching(templates: Iterable[TaskTemplate], target_day: DayLike) -> List[TaskTemplate]:
        return [t for t in templates if RecurrenceMatcher.matches(t, target_day)]
