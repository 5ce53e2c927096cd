"""Progress persistence on top of the key-value store.

Durability is best effort: a corrupt record loads as "absent" and write
failures are logged and dropped. The in-memory state stays authoritative and
the next successful save overwrites whatever is on disk.
"""

import structlog
from pydantic import ValidationError

from cyber_sensei.models.progress import ProgressState
from cyber_sensei.storage.kv_store import JsonFileStore

logger = structlog.get_logger()

DEFAULT_PROGRESS_KEY = "cyber_sensei_progress"


class ProgressRepository:
    def __init__(self, store: JsonFileStore, key: str = DEFAULT_PROGRESS_KEY):
        self.store = store
        self.key = key

    def load(self) -> ProgressState | None:
        """Load the persisted state, or None if absent or unreadable."""
        try:
            data = self.store.get(self.key)
        except (OSError, ValueError, RecursionError) as e:
            # ValueError covers bad JSON, bad UTF-8 and oversized integers.
            logger.warning("progress_load_failed", key=self.key, error=str(e))
            return None
        if data is None:
            return None
        try:
            return ProgressState.model_validate(data)
        except ValidationError as e:
            logger.warning(
                "progress_load_invalid",
                key=self.key,
                error_count=e.error_count(),
            )
            return None

    def save(self, state: ProgressState) -> None:
        try:
            self.store.set(self.key, state.to_storage())
        except OSError as e:
            logger.warning("progress_save_failed", key=self.key, error=str(e))

    def clear(self) -> None:
        try:
            self.store.delete(self.key)
        except OSError as e:
            logger.warning("progress_clear_failed", key=self.key, error=str(e))
