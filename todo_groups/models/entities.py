"""
Entities stored in Firestore and the conversions to and from documents.

Recurrence is a closed set of variants. ``recurrence_from_dict`` returns
``None`` for anything it does not recognise; a template without a
recurrence never matches any day.
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Union

EPOCH_DAY_KEY = '1970-01-01'


class TaskStatus(str, Enum):
    PENDING = 'pending'
    COMPLETED = 'completed'

    def toggled(self) -> 'TaskStatus':
        return TaskStatus.COMPLETED if self is TaskStatus.PENDING else TaskStatus.PENDING


@dataclass(frozen=True)
class DailyRecurrence:
    type = 'daily'

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type}


@dataclass(frozen=True)
class WeeklyRecurrence:
    days_of_week: FrozenSet[int] = frozenset()
    type = 'weekly'

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type, 'days_of_week': sorted(self.days_of_week)}


@dataclass(frozen=True)
class OnceRecurrence:
    start_date: str = ''
    type = 'once'

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type, 'start_date': self.start_date}


Recurrence = Union[DailyRecurrence, WeeklyRecurrence, OnceRecurrence]


def recurrence_from_dict(raw: Any) -> Optional[Recurrence]:
    if not isinstance(raw, dict):
        return None
    kind = raw.get('type')
    if kind == 'daily':
        return DailyRecurrence()
    if kind == 'weekly':
        days = raw.get('days_of_week') or []
        if not isinstance(days, (list, tuple, set, frozenset)):
            return WeeklyRecurrence()
        return WeeklyRecurrence(frozenset(
            d for d in days if isinstance(d, int) and not isinstance(d, bool)
        ))
    if kind == 'once':
        start_date = raw.get('start_date')
        return OnceRecurrence(start_date) if isinstance(start_date, str) else None
    return None


@dataclass
class Group:
    id: str
    name: str
    owner_id: str
    icon: str = 'default'
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'owner_id': self.owner_id,
            'icon': self.icon,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, group_id: str, data: Dict[str, Any]) -> 'Group':
        return cls(
            id=group_id,
            name=data.get('name', ''),
            owner_id=data.get('owner_id', ''),
            icon=data.get('icon') or 'default',
            created_at=data.get('created_at'),
        )


@dataclass
class TaskTemplate:
    id: str
    title: str
    start_time: str
    end_time: str
    recurrence: Optional[Recurrence]
    group_id: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'recurrence': self.recurrence.to_dict() if self.recurrence else None,
            'group_id': self.group_id,
            'created_at': self.created_at,
        }

    @classmethod
    def from_dict(cls, template_id: str, data: Dict[str, Any]) -> 'TaskTemplate':
        return cls(
            id=template_id,
            title=data.get('title', ''),
            start_time=data.get('start_time', ''),
            end_time=data.get('end_time', ''),
            recurrence=recurrence_from_dict(data.get('recurrence')),
            group_id=data.get('group_id', ''),
            created_at=data.get('created_at'),
        )


@dataclass
class TaskInstance:
    id: str
    title: str
    start_time: str
    end_time: str
    date: str
    user_id: str
    group_id: str
    template_id: str
    status: TaskStatus = TaskStatus.PENDING

    @staticmethod
    def make_id(user_id: str, group_id: str, template_id: str, date: str) -> str:
        """One instance per (user, group, template, day) gets one id"""
        return f"{user_id}_{group_id}_{template_id}_{date}"

    @classmethod
    def from_template(cls, template: TaskTemplate, user_id: str, group_id: str, date: str) -> 'TaskInstance':
        """Copy the template's fields into a new pending instance"""
        return cls(
            id=cls.make_id(user_id, group_id, template.id, date),
            title=template.title,
            start_time=template.start_time,
            end_time=template.end_time,
            date=date,
            user_id=user_id,
            group_id=group_id,
            template_id=template.id,
        )

    def with_status(self, status: TaskStatus) -> 'TaskInstance':
        return replace(self, status=status)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'start_time': self.start_time,
            'end_time': self.end_time,
            'date': self.date,
            'status': self.status.value,
            'user_id': self.user_id,
            'group_id': self.group_id,
            'template_id': self.template_id,
        }

    @classmethod
    def from_dict(cls, instance_id: str, data: Dict[str, Any]) -> 'TaskInstance':
        try:
            status = TaskStatus(data.get('status', TaskStatus.PENDING.value))
        except ValueError:
            status = TaskStatus.PENDING
        return cls(
            id=instance_id,
            title=data.get('title', ''),
            start_time=data.get('start_time', ''),
            end_time=data.get('end_time', ''),
            date=data.get('date', ''),
            user_id=data.get('user_id', ''),
            group_id=data.get('group_id', ''),
            template_id=data.get('template_id', ''),
            status=status,
        )


@dataclass
class UserRecord:
    id: str
    email: str = ''
    last_generated_date: str = field(default=EPOCH_DAY_KEY)

    def to_dict(self) -> Dict[str, Any]:
        return {'email': self.email, 'last_generated_date': self.last_generated_date}

    @classmethod
    def from_dict(cls, user_id: str, data: Dict[str, Any], epoch: str = EPOCH_DAY_KEY) -> 'UserRecord':
        return cls(
            id=user_id,
            email=data.get('email', ''),
            last_generated_date=data.get('last_generated_date') or epoch,
        )
