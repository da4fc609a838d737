"""Best-effort deletion of backing objects after metadata is gone."""

import asyncio
import logging
from typing import Iterable, List, Set

from ....config.constants import STORAGE_DELETE_BATCH
from ....core.exceptions import StarshipError
from ...storage.entities.protocols import ObjectStorage

logger = logging.getLogger(__name__)


class StorageCleanup:
    """Schedules bulk storage deletions without making callers wait.

    Failures are logged and never roll back the metadata deletion.
    """

    def __init__(self, storage: ObjectStorage, batch_size: int = STORAGE_DELETE_BATCH):
        self.storage = storage
        self.batch_size = batch_size
        self._tasks: Set[asyncio.Task] = set()

    def schedule(self, keys: Iterable[str]) -> None:
        keys = [key for key in keys if key]
        for start in range(0, len(keys), self.batch_size):
            task = asyncio.create_task(self._delete(keys[start:start + self.batch_size]))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _delete(self, batch: List[str]) -> None:
        try:
            await self.storage.delete_objects(batch)
        except StarshipError as e:
            logger.error(f"Failed to delete {len(batch)} storage objects: {e.message}")

    async def wait(self) -> None:
        """Wait for every scheduled deletion; used on shutdown."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))
