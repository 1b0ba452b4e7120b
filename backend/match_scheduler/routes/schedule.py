"""
Schedule API Routes
Generation, read-only views (matches, grid, estimate) and manual edit saves.
"""

import logging
from datetime import datetime, time
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, field_validator
from sqlmodel import Session

from match_scheduler.database import get_session
from match_scheduler.models.tournament import Tournament
from match_scheduler.services.match_store import load_matches, load_roster
from match_scheduler.services.schedule_orchestrator import (
    apply_manual_edits,
    build_estimate,
    build_schedule_grid,
    generate_schedule,
)
from match_scheduler.utils.clock import format_hhmm, time_to_minutes
from match_scheduler.utils.errors import CapacityError, ConfigurationError, ConflictError, PersistenceError
from match_scheduler.utils.fields import field_label_for_index

logger = logging.getLogger(__name__)

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class CellRef(BaseModel):
    start_time: str  # "HH:MM"
    field_index: int

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v):
        time_to_minutes(v)
        return v

    @property
    def key(self):
        return (time_to_minutes(self.start_time), self.field_index)


class EditGesture(BaseModel):
    source: CellRef
    target: CellRef


class ScheduleEditRequest(BaseModel):
    gestures: List[EditGesture]


class MatchUpdateResponse(BaseModel):
    match_id: int
    start_time: str
    field_index: int


class ScheduleEditResponse(BaseModel):
    saved: int
    updates: List[MatchUpdateResponse]


class MatchResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tournament_id: int
    start_time: time
    field_index: int
    field_name: Optional[str] = None
    home_team_id: int
    away_team_id: int
    home_team_name: Optional[str] = None
    away_team_name: Optional[str] = None
    pool_index: Optional[int] = None
    created_at: datetime


# ============================================================================
# Helper Functions
# ============================================================================


def _get_tournament_or_404(session: Session, tournament_id: int) -> Tournament:
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail=f"Tournament {tournament_id} not found")
    return tournament


# ============================================================================
# Endpoints
# ============================================================================


@router.post("/tournaments/{tournament_id}/schedule/generate")
def generate_tournament_schedule(tournament_id: int, session: Session = Depends(get_session)) -> Dict[str, Any]:
    """
    Generate a fresh schedule, replacing every stored match of the tournament.

    - 400: configuration invalid
    - 409: team count out of bounds or not enough open slots (schedule untouched)
    - 500: the replace failed and was rolled back
    """
    tournament = _get_tournament_or_404(session, tournament_id)
    try:
        result = generate_schedule(session, tournament)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except CapacityError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PersistenceError as e:
        logger.error(f"Tournament {tournament_id}: schedule generation not saved: {e}")
        raise HTTPException(status_code=500, detail=e.to_dict())
    return result.to_dict()


@router.get("/tournaments/{tournament_id}/schedule/matches", response_model=List[MatchResponse])
def get_schedule_matches(tournament_id: int, session: Session = Depends(get_session)):
    """Stored matches ordered by start time, then field"""
    tournament = _get_tournament_or_404(session, tournament_id)
    names = {t.id: t.name for t in load_roster(session, tournament_id)}

    response = []
    for match in load_matches(session, tournament_id):
        item = MatchResponse.model_validate(match)
        item.field_name = field_label_for_index(tournament.field_names, match.field_index)
        item.home_team_name = names.get(match.home_team_id)
        item.away_team_name = names.get(match.away_team_id)
        response.append(item)
    return response


@router.get("/tournaments/{tournament_id}/schedule/grid")
def get_schedule_grid(tournament_id: int, session: Session = Depends(get_session)) -> Dict[str, Any]:
    """Timeline x fields view with paused cells marked"""
    tournament = _get_tournament_or_404(session, tournament_id)
    try:
        return build_schedule_grid(session, tournament)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/tournaments/{tournament_id}/schedule/estimate")
def get_schedule_estimate(tournament_id: int, session: Session = Depends(get_session)) -> Dict[str, Any]:
    """Required matches vs. playable slots and the theoretical end time"""
    tournament = _get_tournament_or_404(session, tournament_id)
    try:
        return build_estimate(session, tournament)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/tournaments/{tournament_id}/schedule/edits", response_model=ScheduleEditResponse)
def save_schedule_edits(
    tournament_id: int,
    data: ScheduleEditRequest,
    session: Session = Depends(get_session),
):
    """
    Apply a batch of swap/move gestures and save only the rows whose cell changed.

    The batch is all-or-nothing at validation time: one rejected gesture (409)
    means nothing is written. A write failure (500) reports which rows were
    saved and which were not.
    """
    tournament = _get_tournament_or_404(session, tournament_id)
    gestures = [(g.source.key, g.target.key) for g in data.gestures]

    try:
        updates = apply_manual_edits(session, tournament, gestures)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PersistenceError as e:
        logger.error(f"Tournament {tournament_id}: manual edit save incomplete: {e}")
        raise HTTPException(status_code=500, detail=e.to_dict())

    return ScheduleEditResponse(
        saved=len(updates),
        updates=[
            MatchUpdateResponse(match_id=u.match_id, start_time=format_hhmm(u.start_minute), field_index=u.field_index)
            for u in updates
        ],
    )
