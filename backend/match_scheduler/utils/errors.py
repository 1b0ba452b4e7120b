"""
Scheduler exception hierarchy.

Routes translate these into HTTP responses; services never swallow them.
"""

from typing import List, Optional


class ScheduleError(Exception):
    """Base exception for scheduler errors"""

    pass


class ConfigurationError(ScheduleError):
    """Tournament configuration is invalid (bounds, durations, pauses)"""

    pass


class CapacityError(ScheduleError):
    """Pre-flight check failed: team count out of bounds or not enough open slots"""

    pass


class ConflictError(ScheduleError):
    """Manual edit rejected: paused cell, unknown cell or double-booked team"""

    pass


class PersistenceError(ScheduleError):
    """Writing the match set failed; stored state may differ from what is displayed"""

    def __init__(
        self,
        message: str,
        applied_match_ids: Optional[List[int]] = None,
        failed_match_ids: Optional[List[int]] = None,
    ):
        super().__init__(message)
        self.applied_match_ids = applied_match_ids or []
        self.failed_match_ids = failed_match_ids or []

    def to_dict(self):
        return {
            "message": str(self),
            "applied_match_ids": self.applied_match_ids,
            "failed_match_ids": self.failed_match_ids,
        }
