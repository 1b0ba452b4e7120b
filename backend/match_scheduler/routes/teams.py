"""
Team Management API Routes
Roster CRUD within a tournament and random pool auto-assignment.
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from match_scheduler.database import get_session
from match_scheduler.models.team import Team
from match_scheduler.models.tournament import Tournament
from match_scheduler.services.match_store import load_roster
from match_scheduler.utils.fields import MAX_POOLS
from match_scheduler.utils.pool_assignment import PoolCandidate, auto_assign_pools

router = APIRouter()


# ============================================================================
# Request/Response Models
# ============================================================================


class TeamCreateRequest(BaseModel):
    name: str
    pool_index: Optional[int] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v or not v.strip():
            raise ValueError("name is required")
        return v.strip()

    @field_validator("pool_index")
    @classmethod
    def validate_pool_index(cls, v):
        if v is not None and not 1 <= v <= MAX_POOLS:
            raise ValueError(f"pool_index must be between 1 and {MAX_POOLS}")
        return v


class TeamUpdateRequest(BaseModel):
    name: Optional[str] = None
    pool_index: Optional[int] = None
    pool_manual: Optional[bool] = None

    @field_validator("pool_index")
    @classmethod
    def validate_pool_index(cls, v):
        if v is not None and not 1 <= v <= MAX_POOLS:
            raise ValueError(f"pool_index must be between 1 and {MAX_POOLS}")
        return v


class TeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tournament_id: int
    name: str
    pool_index: Optional[int] = None
    pool_manual: bool
    created_at: datetime


class PoolAssignmentResponse(BaseModel):
    pool_count: int
    assigned: int
    teams: List[TeamResponse]


def _get_tournament_or_404(session: Session, tournament_id: int) -> Tournament:
    tournament = session.get(Tournament, tournament_id)
    if not tournament:
        raise HTTPException(status_code=404, detail="Tournament not found")
    return tournament


def _commit_team(session: Session, team: Team) -> Team:
    session.add(team)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise HTTPException(status_code=409, detail=f"Team '{team.name}' already exists in this tournament")
    session.refresh(team)
    return team


# ============================================================================
# Team CRUD Endpoints
# ============================================================================


@router.get("/tournaments/{tournament_id}/teams", response_model=List[TeamResponse])
def get_teams(tournament_id: int, session: Session = Depends(get_session)):
    """Get all teams for a tournament in registration order"""
    _get_tournament_or_404(session, tournament_id)
    return load_roster(session, tournament_id)


@router.post("/tournaments/{tournament_id}/teams", response_model=TeamResponse, status_code=201)
def create_team(tournament_id: int, data: TeamCreateRequest, session: Session = Depends(get_session)):
    """
    Register a team.

    A team created with an explicit pool_index is flagged manual and is left
    alone by pool auto-assignment.
    """
    _get_tournament_or_404(session, tournament_id)
    team = Team(
        tournament_id=tournament_id,
        name=data.name,
        pool_index=data.pool_index,
        pool_manual=data.pool_index is not None,
    )
    return _commit_team(session, team)


@router.patch("/teams/{team_id}", response_model=TeamResponse)
def update_team(team_id: int, data: TeamUpdateRequest, session: Session = Depends(get_session)):
    """Rename a team or move it to another pool (marks it manual unless told otherwise)"""
    team = session.get(Team, team_id)
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")

    updates = data.model_dump(exclude_unset=True)
    if "name" in updates:
        name = (updates["name"] or "").strip()
        if not name:
            raise HTTPException(status_code=400, detail="name is required")
        team.name = name
    if "pool_index" in updates:
        team.pool_index = updates["pool_index"]
        team.pool_manual = True
    if "pool_manual" in updates:
        team.pool_manual = bool(updates["pool_manual"])

    return _commit_team(session, team)


@router.post("/tournaments/{tournament_id}/teams/auto-assign-pools", response_model=PoolAssignmentResponse)
def auto_assign_team_pools(
    tournament_id: int,
    seed: Optional[int] = Query(default=None, description="Seed for a reproducible distribution"),
    session: Session = Depends(get_session),
):
    """Randomly spread every non-manual team across the tournament's pools"""
    tournament = _get_tournament_or_404(session, tournament_id)
    teams = load_roster(session, tournament_id)

    try:
        assignment = auto_assign_pools(
            [PoolCandidate(team_id=t.id, pool_index=t.pool_index, manual=t.pool_manual) for t in teams],
            pool_count=tournament.pool_count,
            seed=seed,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    for team in teams:
        if team.id in assignment:
            team.pool_index = assignment[team.id]
            session.add(team)
    session.commit()

    return PoolAssignmentResponse(
        pool_count=tournament.pool_count,
        assigned=len(assignment),
        teams=[TeamResponse.model_validate(t) for t in load_roster(session, tournament_id)],
    )
