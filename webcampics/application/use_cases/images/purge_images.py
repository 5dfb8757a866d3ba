"""
Purge Images Use Case
=====================

Deletes stored files older than the retention period and writes one audit
line per run.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from webcampics.core.logging_config import CLEANUP_AUDIT_LOGGER
from webcampics.domain.exceptions import ValidationFailed
from webcampics.infrastructure.storage.image_store import ImageStore
from webcampics.utils.datetime_utils import now

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger(CLEANUP_AUDIT_LOGGER)


@dataclass(frozen=True)
class PurgeReport:
    started_at: datetime
    finished_at: datetime
    retention_days: int
    cutoff: datetime
    deleted: int


class PurgeImagesUseCase:
    """
    Use case for the scheduled retention purge.

    Args:
        image_store: On-disk frame storage
        retention_days: Callable returning the configured retention period
    """

    def __init__(self, image_store: ImageStore, retention_days: Callable[[], int]):
        self._store = image_store
        self._retention_days = retention_days

    def execute(self, retention_days: Optional[int] = None) -> PurgeReport:
        """
        Remove every stored file older than the retention period.

        Args:
            retention_days: Overrides the configured period when given

        Returns:
            PurgeReport with the cutoff and number of files deleted

        Raises:
            ValidationFailed: If the retention period is negative
        """
        days = self._retention_days() if retention_days is None else retention_days
        if days < 0:
            raise ValidationFailed("Retention days must not be negative")

        started_at = now()
        cutoff = started_at - timedelta(days=days)
        logger.info(f"Purging images older than {cutoff:%Y-%m-%d %H:%M:%S} ({days} days)")

        deleted = self._store.purge_older_than(days)

        audit_logger.info(f"Cleanup: {deleted} files deleted (retention: {days} days)")
        return PurgeReport(
            started_at=started_at,
            finished_at=now(),
            retention_days=days,
            cutoff=cutoff,
            deleted=deleted,
        )
