from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from sqlmodel import Session, select

from match_scheduler.database import get_session
from match_scheduler.models.tournament import Tournament
from match_scheduler.utils.errors import ConfigurationError
from match_scheduler.utils.fields import MAX_POOLS, parse_names
from match_scheduler.utils.pauses import parse_pause_windows

router = APIRouter()

# Settings a client may clear by sending null; everything else falls back to the stored value
NULLABLE_SETTINGS = {"tournament_date", "field_names", "pool_names"}


class PauseIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = "global"  # "global" | "except"
    from_: str = Field(alias="from")
    to: str
    except_fields: List[int] = []


class FieldPauseIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    to: str


class TournamentSettings(BaseModel):
    """Fields shared by create and update; all optional on update."""

    tournament_date: Optional[date] = None
    min_teams: Optional[int] = Field(default=None, ge=2)
    max_teams: Optional[int] = Field(default=None, ge=2)
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    match_duration_min: Optional[int] = Field(default=None, ge=1)
    rotation_duration_min: Optional[int] = Field(default=None, ge=0)
    num_fields: Optional[int] = Field(default=None, ge=1)
    field_names: Optional[List[str]] = None
    format: Optional[str] = None
    pool_count: Optional[int] = Field(default=None, ge=1, le=MAX_POOLS)
    pool_names: Optional[List[str]] = None
    pauses: Optional[List[PauseIn]] = None
    field_pauses: Optional[Dict[str, List[FieldPauseIn]]] = None

    @field_validator("format")
    @classmethod
    def validate_format(cls, v):
        if v is not None and v not in ("flat", "pooled"):
            raise ValueError("format must be 'flat' or 'pooled'")
        return v

    @model_validator(mode="after")
    def validate_bounds(self):
        if self.min_teams is not None and self.max_teams is not None and self.min_teams > self.max_teams:
            raise ValueError("min_teams cannot exceed max_teams")
        if self.start_time is not None and self.end_time is not None and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self

    def storage_dict(self, exclude_unset: bool) -> Dict[str, Any]:
        data = self.model_dump(exclude_unset=exclude_unset, exclude={"pauses", "field_pauses"})
        if "pauses" in self.model_fields_set or not exclude_unset:
            data["pauses"] = [p.model_dump(by_alias=True) for p in self.pauses or []]
        if "field_pauses" in self.model_fields_set or not exclude_unset:
            data["field_pauses"] = {
                k: [p.model_dump(by_alias=True) for p in v] for k, v in (self.field_pauses or {}).items()
            }
        return {k: v for k, v in data.items() if v is not None or k in NULLABLE_SETTINGS}


class TournamentCreate(TournamentSettings):
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()


class TournamentUpdate(TournamentSettings):
    name: Optional[str] = None


class TournamentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    tournament_date: Optional[date] = None
    min_teams: int
    max_teams: int
    start_time: time
    end_time: time
    match_duration_min: int
    rotation_duration_min: int
    num_fields: int
    field_names: Optional[List[str]] = None
    format: str
    pool_count: int
    pool_names: Optional[List[str]] = None
    pauses: Optional[List[Dict[str, Any]]] = None
    field_pauses: Optional[Dict[str, List[Dict[str, Any]]]] = None
    created_at: datetime
    updated_at: datetime

    @field_validator("field_names", "pool_names", mode="before")
    @classmethod
    def normalize_names(cls, v):
        """Legacy rows may store names as 'A,B' instead of a list."""
        if v is None:
            return None
        return parse_names(v)


def _validate_stored_settings(tournament: Tournament) -> None:
    """Cross-field checks that need the merged (stored + incoming) values."""
    if tournament.min_teams > tournament.max_teams:
        raise HTTPException(status_code=400, detail="min_teams cannot exceed max_teams")
    if tournament.end_time <= tournament.start_time:
        raise HTTPException(status_code=400, detail="end_time must be after start_time")
    try:
        parse_pause_windows(tournament.pauses, tournament.field_pauses)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/tournaments", response_model=List[TournamentResponse])
def list_tournaments(session: Session = Depends(get_session)):
    """List all tournaments"""
    return session.exec(select(Tournament).order_by(Tournament.id)).all()


@router.post("/tournaments", response_model=TournamentResponse, status_code=201)
def create_tournament(data: TournamentCreate, session: Session = Depends(get_session)):
    """Create a tournament configuration"""
    tournament = Tournament(**data.storage_dict(exclude_unset=False))
    _validate_stored_settings(tournament)
    session.add(tournament)
    session.commit()
    session.refresh(tournament)
    return tournament


@router.get("/tournaments/{tournament_id}", response_model=TournamentResponse)
def get_tournament(tournament_id: int, session: Session = Depends(get_session)):
    """Get a tournament by ID"""
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")
    return tournament


@router.put("/tournaments/{tournament_id}", response_model=TournamentResponse)
def update_tournament(tournament_id: int, data: TournamentUpdate, session: Session = Depends(get_session)):
    """Update a tournament configuration (existing matches are kept until the next generation)"""
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")

    for field, value in data.storage_dict(exclude_unset=True).items():
        setattr(tournament, field, value)
    _validate_stored_settings(tournament)

    tournament.updated_at = datetime.utcnow()
    session.add(tournament)
    session.commit()
    session.refresh(tournament)
    return tournament
