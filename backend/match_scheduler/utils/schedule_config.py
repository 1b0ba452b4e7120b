"""
TournamentConfig: the scheduler's read-only view of a tournament row.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List

from match_scheduler.utils.clock import format_hhmm, time_to_minutes
from match_scheduler.utils.errors import ConfigurationError
from match_scheduler.utils.fields import MAX_POOLS, field_labels, pool_labels
from match_scheduler.utils.pauses import PauseWindow, parse_pause_windows

if TYPE_CHECKING:
    from match_scheduler.models.tournament import Tournament

FORMAT_FLAT = "flat"
FORMAT_POOLED = "pooled"
VALID_FORMATS = (FORMAT_FLAT, FORMAT_POOLED)


@dataclass(frozen=True)
class TournamentConfig:
    start_minute: int
    end_minute: int
    match_duration: int
    rotation_duration: int = 0
    num_fields: int = 1
    min_teams: int = 2
    max_teams: int = 24
    format: str = FORMAT_FLAT
    pool_count: int = 1
    field_names: List[str] = field(default_factory=list)
    pool_names: List[str] = field(default_factory=list)
    pauses: List[PauseWindow] = field(default_factory=list)

    @property
    def slot_minutes(self) -> int:
        return self.match_duration + self.rotation_duration

    @property
    def pooled(self) -> bool:
        return self.format == FORMAT_POOLED

    def validate(self) -> "TournamentConfig":
        """Raise ConfigurationError on invalid bounds; returns self for chaining."""
        if self.end_minute <= self.start_minute:
            raise ConfigurationError(
                f"End time {format_hhmm(self.end_minute)} must be after start time {format_hhmm(self.start_minute)}"
            )
        if self.match_duration < 1:
            raise ConfigurationError(f"Match duration must be at least 1 minute, got {self.match_duration}")
        if self.rotation_duration < 0:
            raise ConfigurationError(f"Rotation duration cannot be negative, got {self.rotation_duration}")
        if self.slot_minutes < 1:
            raise ConfigurationError(f"Slot duration must be at least 1 minute, got {self.slot_minutes}")
        if self.num_fields < 1:
            raise ConfigurationError(f"At least 1 field is required, got {self.num_fields}")
        if self.min_teams > self.max_teams:
            raise ConfigurationError(f"min_teams ({self.min_teams}) cannot exceed max_teams ({self.max_teams})")
        if self.format not in VALID_FORMATS:
            raise ConfigurationError(f"Unknown format '{self.format}', expected one of {', '.join(VALID_FORMATS)}")
        if not 1 <= self.pool_count <= MAX_POOLS:
            raise ConfigurationError(f"Pool count must be between 1 and {MAX_POOLS}, got {self.pool_count}")
        for pause in self.pauses:
            if pause.end_minute <= pause.start_minute:
                raise ConfigurationError(f"Pause {pause.describe()} must end after it starts")
        return self

    @classmethod
    def from_tournament(cls, tournament: "Tournament") -> "TournamentConfig":
        """Build and validate the config from a stored tournament."""
        try:
            start = time_to_minutes(tournament.start_time)
            end = time_to_minutes(tournament.end_time)
        except ValueError as e:
            raise ConfigurationError(str(e))

        num_fields = tournament.num_fields if tournament.num_fields is not None else 1
        pool_count = tournament.pool_count if tournament.pool_count is not None else 1
        config = cls(
            start_minute=start,
            end_minute=end,
            match_duration=tournament.match_duration_min,
            rotation_duration=tournament.rotation_duration_min or 0,
            num_fields=num_fields,
            min_teams=tournament.min_teams if tournament.min_teams is not None else 2,
            max_teams=tournament.max_teams if tournament.max_teams is not None else 24,
            format=tournament.format or FORMAT_FLAT,
            pool_count=pool_count,
            field_names=field_labels(tournament.field_names, max(num_fields, 0)),
            pool_names=pool_labels(tournament.pool_names, max(pool_count, 0)),
            pauses=parse_pause_windows(tournament.pauses, tournament.field_pauses),
        )
        return config.validate()
