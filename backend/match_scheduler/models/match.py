from datetime import datetime, time
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Index
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from match_scheduler.models.team import Team
    from match_scheduler.models.tournament import Tournament


class Match(SQLModel, table=True):
    # No unique constraint on (start_time, field_index): manual edits save each
    # moved row separately, so a swap passes through a shared cell.
    __table_args__ = (Index("ix_match_tournament_start", "tournament_id", "start_time"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    tournament_id: int = Field(foreign_key="tournament.id")
    start_time: time
    field_index: int  # 1-based
    home_team_id: int = Field(foreign_key="team.id")
    away_team_id: int = Field(foreign_key="team.id")
    pool_index: Optional[int] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    tournament: "Tournament" = Relationship(back_populates="matches")
    home_team: Optional["Team"] = Relationship(sa_relationship_kwargs={"foreign_keys": "Match.home_team_id"})
    away_team: Optional["Team"] = Relationship(sa_relationship_kwargs={"foreign_keys": "Match.away_team_id"})
