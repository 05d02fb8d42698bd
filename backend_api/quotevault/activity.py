from __future__ import annotations

import logging
from typing import Optional

from .disclosure.progress import PlayProgress
from .models import ActivityRecord

logger = logging.getLogger(__name__)


# PUBLIC_INTERFACE
class DatabaseActivityLog:
    """ActivityLog that appends an ActivityRecord per genuine solve."""

    def __init__(self, user=None):
        # Anonymous players are logged without a user.
        self.user = user if getattr(user, "is_authenticated", False) else None

    def record_solve(self, progress: PlayProgress, time_taken: int) -> None:
        self.record(progress.question_id, progress.attempts, progress.hints_used, time_taken)

    def record(self, question_id: int, attempts: int, hints_used: int, time_taken: Optional[int]) -> ActivityRecord:
        record = ActivityRecord.objects.create(
            user=self.user,
            question_id=question_id,
            attempts=max(attempts, 0),
            hints_used=max(hints_used, 0),
            time_taken=max(time_taken or 0, 0),
        )
        logger.info("Recorded solve of question %s (record %s)", question_id, record.pk)
        return record
