import logging
from typing import Optional

from ..store import DocumentStore, join_path
from .entities import EPOCH_DAY_KEY, UserRecord

logger = logging.getLogger(__name__)


class UserModel:
    """User record holding the daily generation watermark"""

    def __init__(self, store: DocumentStore, epoch: str = EPOCH_DAY_KEY):
        self.store = store
        self.collection = 'users'
        self.epoch = epoch

    def _path(self, user_id: str) -> str:
        return join_path(self.collection, user_id)

    async def get_user(self, user_id: str) -> Optional[UserRecord]:
        """Get user by user_id"""
        doc = await self.store.get(self._path(user_id))
        if doc is None:
            return None
        return UserRecord.from_dict(user_id, doc.data, epoch=self.epoch)

    async def ensure_user(self, user_id: str, email: str = '') -> UserRecord:
        """Get the user record, creating it with the epoch watermark on first use"""
        user = await self.get_user(user_id)
        if user is not None:
            return user

        user = UserRecord(id=user_id, email=email or '', last_generated_date=self.epoch)
        await self.store.set(self._path(user_id), user.to_dict(), merge=True)
        logger.info(f"Initialized user record for {user_id}")
        return user

    async def set_last_generated_date(self, user_id: str, day_key: str) -> None:
        await self.store.update(self._path(user_id), {'last_generated_date': day_key})
