from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required
from typing import Any, Dict, Optional

from liao.errors import NotFoundError, StoreError, ValidationError
from liao.services import store
from liao.services.scoring import GameName, evaluate, leaderboard_from_grouped


scores = Blueprint('scores', __name__)


@scores.before_request
@login_required
def require_session():
    pass


def _game(name: str) -> Optional[GameName]:
    for game in GameName:
        if game.value.lower() == name.lower():
            return game
    return None


def _body() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('request body must be a JSON object')
    return data


def _entries_from(data: Dict[str, Any]) -> Dict[int, Any]:
    """JSON object keys are strings; the rules key entries by integer team id."""
    raw = data.get('entries')
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValidationError('entries must be an object keyed by team id')
    entries = {}
    for key, value in raw.items():
        try:
            entries[int(key)] = value
        except (TypeError, ValueError):
            raise ValidationError(f'Invalid team id: {key}')
    return entries


def _leaderboard_payload():
    return [entry.to_dict() for entry in leaderboard_from_grouped(store.fetch_teams_with_scores())]


def _evaluate(game: GameName, data: Dict[str, Any]):
    teams = store.fetch_teams()
    deltas = evaluate(game, teams, _entries_from(data))
    names = {t.id: t.name for t in teams}
    return deltas, names


@scores.route('/teams', methods=['GET'])
def list_teams():
    try:
        return jsonify([t.to_dict() for t in store.fetch_teams()])
    except StoreError as exc:
        return jsonify({'error': str(exc)}), 500


@scores.route('/leaderboard', methods=['GET'])
def get_leaderboard():
    try:
        return jsonify(_leaderboard_payload())
    except StoreError as exc:
        return jsonify({'error': str(exc)}), 500


@scores.route('/history', methods=['GET'])
def get_history():
    try:
        return jsonify([row.to_dict() for row in store.fetch_history()])
    except StoreError as exc:
        return jsonify({'error': str(exc)}), 500


@scores.route('/history/<int:score_id>', methods=['DELETE'])
def delete_history(score_id):
    try:
        store.delete_scoring_event(score_id)
        return jsonify({'deleted': score_id, 'leaderboard': _leaderboard_payload()})
    except NotFoundError as exc:
        return jsonify({'error': str(exc)}), 404
    except StoreError as exc:
        return jsonify({'error': str(exc)}), 500


@scores.route('/games', methods=['GET'])
def list_games():
    return jsonify([{'name': g.value, 'label': g.label} for g in GameName])


@scores.route('/games/<string:game_name>/preview', methods=['POST'])
def preview_game(game_name):
    game = _game(game_name)
    if game is None:
        return jsonify({'error': f'Unknown game: {game_name}'}), 404
    try:
        deltas, names = _evaluate(game, _body())
    except ValidationError as exc:
        return jsonify({'error': str(exc)}), 400
    except StoreError as exc:
        return jsonify({'error': str(exc)}), 500
    return jsonify({
        'game_name': game.value,
        'game_label': game.label,
        'deltas': [{'team_id': d.team_id, 'team_name': names[d.team_id], 'score': d.delta} for d in deltas],
    })


@scores.route('/games/<string:game_name>/submit', methods=['POST'])
def submit_game(game_name):
    game = _game(game_name)
    if game is None:
        return jsonify({'error': f'Unknown game: {game_name}'}), 404
    try:
        deltas, _ = _evaluate(game, _body())
    except ValidationError as exc:
        current_app.logger.info(f"[submit-rejected] game={game.value} reason={exc}")
        return jsonify({'error': str(exc)}), 400
    except StoreError as exc:
        return jsonify({'error': str(exc)}), 500

    try:
        rows = store.insert_scoring_events(game, deltas)
    except StoreError as exc:
        return jsonify({'error': str(exc)}), 500
    events = [row.to_dict() for row in rows]
    current_app.logger.info(f"[submit] game={game.value} events={len(rows)}")

    # rows are committed from here on
    try:
        leaderboard = _leaderboard_payload()
    except StoreError as exc:
        current_app.logger.warning(f"[submit] game={game.value} saved, leaderboard refresh failed: {exc}")
        return jsonify({'events': events, 'leaderboard': None, 'leaderboard_error': str(exc)}), 201
    return jsonify({'events': events, 'leaderboard': leaderboard}), 201
