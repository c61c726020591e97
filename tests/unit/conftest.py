"""Shared pytest configuration for unit tests."""
import asyncio
from datetime import date, datetime, timezone

import pytest

from todo_groups.app import create_app
from todo_groups.models.group_model import GroupModel
from todo_groups.models.template_model import TemplateModel
from todo_groups.store import MemoryStore
from todo_groups.utils.dates import Clock


class FixedClock(Clock):
    """Clock pinned to one local calendar day"""

    def __init__(self, day: date):
        self.day = day

    def now(self) -> datetime:
        return datetime(self.day.year, self.day.month, self.day.day, 12, 0, tzinfo=timezone.utc)

    def today(self, tz_offset_minutes=None) -> date:
        return self.day


@pytest.fixture
def run():
    """Drive a coroutine to completion"""
    return asyncio.run


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def clock():
    return FixedClock(date(2024, 6, 1))


@pytest.fixture
def make_group(store, run):
    def _make(owner_id="user1", name="Home"):
        return run(GroupModel(store).create_group(owner_id, name))
    return _make


@pytest.fixture
def make_template(store, run):
    def _make(group_id, title="Standup", start_time="09:00", end_time="09:30", recurrence=None):
        return run(TemplateModel(store).create_template(group_id, {
            "title": title,
            "start_time": start_time,
            "end_time": end_time,
            "recurrence": recurrence or {"type": "daily"},
        }))
    return _make


@pytest.fixture
def app(store, clock):
    app = create_app(store=store, clock=clock, dev_mode=True)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    def _headers(user_id="user1", email="user1@example.com"):
        return {"X-User-Id": user_id, "X-User-Email": email}
    return _headers
