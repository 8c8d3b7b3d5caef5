from typing import List, Sequence, Tuple

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload, selectinload

from liao import db
from liao.errors import NotFoundError, StoreError
from liao.models import Score, Team
from liao.services.scoring.rules import GameName, PointDelta


def _store_failure(action: str, exc: SQLAlchemyError) -> StoreError:
    db.session.rollback()
    message = str(getattr(exc, 'orig', None) or exc)
    current_app.logger.error(f"[store-error] {action}: {message}")
    return StoreError(message)


def fetch_teams() -> List[Team]:
    try:
        return Team.query.order_by(Team.id.asc()).all()
    except SQLAlchemyError as exc:
        raise _store_failure('fetch teams', exc)


def fetch_teams_with_scores() -> List[Tuple[Team, List[int]]]:
    """Every team in id order with the deltas of all its scoring events."""
    try:
        teams = Team.query.options(selectinload(Team.scores)).order_by(Team.id.asc()).all()
    except SQLAlchemyError as exc:
        raise _store_failure('fetch teams with scores', exc)
    return [(team, [s.score for s in team.scores]) for team in teams]


def insert_scoring_events(game_name: GameName, deltas: Sequence[PointDelta]) -> List[Score]:
    """Persist one submission's events in a single commit."""
    game_name = GameName(game_name)
    rows = [Score(game_name=game_name.value, team_id=d.team_id, score=d.delta) for d in deltas]
    try:
        db.session.add_all(rows)
        db.session.commit()
    except SQLAlchemyError as exc:
        raise _store_failure(f'insert {game_name.value} events', exc)
    current_app.logger.info(f"[store] inserted {len(rows)} {game_name.value} event(s)")
    return rows


def fetch_history() -> List[Score]:
    """All scoring events with their team, newest first."""
    try:
        return (
            Score.query.options(joinedload(Score.team))
            .order_by(Score.created_at.desc(), Score.id.desc())
            .all()
        )
    except SQLAlchemyError as exc:
        raise _store_failure('fetch history', exc)


def delete_scoring_event(score_id: int) -> None:
    try:
        row = db.session.get(Score, score_id)
        if row is None:
            raise NotFoundError(f'Scoring event {score_id} not found')
        db.session.delete(row)
        db.session.commit()
    except SQLAlchemyError as exc:
        raise _store_failure(f'delete event {score_id}', exc)
    current_app.logger.info(f"[store] deleted event {score_id}")

