from datetime import date, datetime, time
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from sqlalchemy import JSON
from sqlmodel import Column, Field, Relationship, SQLModel

if TYPE_CHECKING:
    from match_scheduler.models.match import Match
    from match_scheduler.models.team import Team


class Tournament(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    tournament_date: Optional[date] = None

    min_teams: int = Field(default=2)
    max_teams: int = Field(default=24)

    start_time: time = Field(default=time(9, 0))
    end_time: time = Field(default=time(18, 0))
    match_duration_min: int = Field(default=12)
    rotation_duration_min: int = Field(default=3)

    num_fields: int = Field(default=1)
    field_names: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))

    format: str = Field(default="flat")  # "flat" | "pooled"
    pool_count: int = Field(default=1)  # 1..8
    pool_names: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))

    # [{"type": "global"|"except", "from": "HH:MM", "to": "HH:MM", "except_fields": [..]}]
    pauses: Optional[List[Dict[str, Any]]] = Field(default=None, sa_column=Column(JSON))
    # {"<field_index>": [{"from": "HH:MM", "to": "HH:MM"}]}
    field_pauses: Optional[Dict[str, List[Dict[str, Any]]]] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow, sa_column_kwargs={"onupdate": datetime.utcnow})

    # Relationships
    teams: List["Team"] = Relationship(back_populates="tournament")
    matches: List["Match"] = Relationship(back_populates="tournament")
