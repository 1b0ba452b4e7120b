"""
Persistence boundary for a tournament's match set.

- replace_matches: delete + bulk insert in ONE transaction. Readers see either
  the old or the new schedule, never a mix.
- apply_position_updates: manual-edit save. Each moved row is committed on
  its own; a failure reports which rows made it and which did not.

Failures are raised as PersistenceError and never retried here.
"""

import logging
from typing import List, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from match_scheduler.models.match import Match
from match_scheduler.models.team import Team
from match_scheduler.utils.auto_assign import PlannedMatch
from match_scheduler.utils.errors import PersistenceError
from match_scheduler.utils.manual_assignment import MatchPositionUpdate

logger = logging.getLogger(__name__)


def load_roster(session: Session, tournament_id: int) -> List[Team]:
    """Teams in registration order (created_at, then id)."""
    return list(
        session.exec(
            select(Team).where(Team.tournament_id == tournament_id).order_by(Team.created_at, Team.id)
        ).all()
    )


def load_matches(session: Session, tournament_id: int) -> List[Match]:
    """Persisted matches ordered by start time, then field."""
    return list(
        session.exec(
            select(Match)
            .where(Match.tournament_id == tournament_id)
            .order_by(Match.start_time, Match.field_index, Match.id)
        ).all()
    )


def replace_matches(session: Session, tournament_id: int, planned: Sequence[PlannedMatch]) -> int:
    """
    Atomically swap the tournament's matches for the planned ones.

    Returns the number of rows inserted.
    """
    try:
        existing = session.exec(select(Match).where(Match.tournament_id == tournament_id)).all()
        deleted = len(existing)
        for match in existing:
            session.delete(match)
        session.flush()

        session.add_all(
            [
                Match(
                    tournament_id=tournament_id,
                    start_time=p.start_time,
                    field_index=p.field_index,
                    home_team_id=p.team_a,
                    away_team_id=p.team_b,
                    pool_index=p.pool_index,
                )
                for p in planned
            ]
        )
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        logger.error(f"Replacing matches for tournament {tournament_id} failed: {e}")
        raise PersistenceError(f"Saving the generated schedule failed: {e}") from e

    logger.info(f"Tournament {tournament_id}: replaced {deleted} matches with {len(planned)}")
    return len(planned)


def apply_position_updates(
    session: Session, tournament_id: int, updates: Sequence[MatchPositionUpdate]
) -> List[int]:
    """
    Persist moved matches one row at a time.

    Returns the ids of updated matches. Raises PersistenceError listing
    applied and failed ids if any row could not be written.
    """
    applied: List[int] = []
    failed: List[int] = []

    for update in updates:
        match = session.get(Match, update.match_id)
        if match is None or match.tournament_id != tournament_id:
            logger.warning(f"Match {update.match_id} not found in tournament {tournament_id}; skipped")
            failed.append(update.match_id)
            continue
        try:
            match.start_time = update.start_time
            match.field_index = update.field_index
            session.add(match)
            session.commit()
            applied.append(update.match_id)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Updating match {update.match_id} failed: {e}")
            failed.append(update.match_id)

    if failed:
        raise PersistenceError(
            f"{len(failed)} of {len(updates)} match updates failed; {len(applied)} were saved",
            applied_match_ids=applied,
            failed_match_ids=failed,
        )
    return applied
