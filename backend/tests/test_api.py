from liao.errors import StoreError
from liao.models import Score
from liao.services import store


def team_ids(client):
    return [t['id'] for t in client.get('/api/teams').get_json()]


def test_api_requires_login(client, teams):
    res = client.get('/api/leaderboard')
    assert res.status_code == 401
    assert res.get_json()['success'] is False


def test_leaderboard_starts_at_zero(auth_client):
    board = auth_client.get('/api/leaderboard').get_json()
    assert [row['name'] for row in board] == ['Alpha', 'Bravo', 'Charlie', 'Delta']
    assert all(row['total_score'] == 0 for row in board)
    assert [row['rank'] for row in board] == [1, 2, 3, 4]


def test_list_games(auth_client):
    games = auth_client.get('/api/games').get_json()
    assert [g['name'] for g in games] == ['Molkky', 'KusoGe', 'Darts', 'Bowling']


def test_preview_does_not_persist(auth_client):
    a, b, _, _ = team_ids(auth_client)
    res = auth_client.post('/api/games/molkky/preview', json={'entries': {str(a): '10', str(b): '4'}})
    assert res.status_code == 200
    data = res.get_json()
    assert data['game_name'] == 'Molkky'
    assert data['deltas'] == [
        {'team_id': a, 'team_name': 'Alpha', 'score': 3600},
        {'team_id': b, 'team_name': 'Bravo', 'score': -3600},
    ]
    assert Score.query.count() == 0


def test_submit_kusoge_updates_leaderboard_and_history(auth_client):
    a, b, c, d = team_ids(auth_client)
    entries = {str(a): '50', str(b): '30', str(c): '10', str(d): '0'}
    res = auth_client.post('/api/games/KusoGe/submit', json={'entries': entries})
    assert res.status_code == 201
    data = res.get_json()
    assert {e['team_id']: e['score'] for e in data['events']} == {a: 7000, b: 0, c: -7000, d: 0}
    assert data['leaderboard'][0] == {'rank': 1, 'team_id': a, 'name': 'Alpha', 'total_score': 7000}
    assert data['leaderboard'][-1]['team_id'] == c

    history = auth_client.get('/api/history').get_json()
    assert len(history) == 4
    assert all(h['game_name'] == 'KusoGe' and h['game_label'] == 'くそげ' for h in history)


def test_submit_bowling(auth_client):
    a, b, _, _ = team_ids(auth_client)
    entries = {
        str(a): {'score': '120', 'bonus': '2', 'handicap': False},
        str(b): {'score': '100', 'bonus': '1', 'handicap': True},
    }
    res = auth_client.post('/api/games/bowling/submit', json={'entries': entries})
    assert res.status_code == 201
    totals = {row['team_id']: row['total_score'] for row in res.get_json()['leaderboard']}
    assert totals[a] == -3000
    assert totals[b] == 3000


def test_validation_error_leaves_store_untouched(auth_client):
    a, b, _, _ = team_ids(auth_client)
    res = auth_client.post('/api/games/kusoge/submit', json={'entries': {str(a): '5', str(b): '3'}})
    assert res.status_code == 400
    assert 'three' in res.get_json()['error']
    assert Score.query.count() == 0


def test_darts_requires_all_teams(auth_client):
    a, b, c, _ = team_ids(auth_client)
    res = auth_client.post('/api/games/darts/submit', json={'entries': {str(a): '50', str(b): '60', str(c): '80'}})
    assert res.status_code == 400
    assert Score.query.count() == 0


def test_invalid_team_key(auth_client):
    res = auth_client.post('/api/games/molkky/submit', json={'entries': {'first': '10', 'second': '4'}})
    assert res.status_code == 400


def test_unknown_game(auth_client):
    res = auth_client.post('/api/games/chess/submit', json={'entries': {}})
    assert res.status_code == 404


def test_delete_history_row_recomputes_leaderboard(auth_client):
    a, b, _, _ = team_ids(auth_client)
    auth_client.post('/api/games/molkky/submit', json={'entries': {str(a): '10', str(b): '4'}})
    events = auth_client.post('/api/games/molkky/submit', json={'entries': {str(a): '2', str(b): '9'}}).get_json()['events']

    for event in events:
        res = auth_client.delete(f"/api/history/{event['id']}")
        assert res.status_code == 200

    board = {row['team_id']: row['total_score'] for row in auth_client.get('/api/leaderboard').get_json()}
    assert board[a] == 3600
    assert board[b] == -3600
    assert len(auth_client.get('/api/history').get_json()) == 2


def test_delete_unknown_history_row(auth_client):
    res = auth_client.delete('/api/history/999')
    assert res.status_code == 404


def test_non_object_body_is_a_json_400(auth_client):
    res = auth_client.post('/api/games/kusoge/submit', json=[1, 2, 3])
    assert res.status_code == 400
    assert res.get_json() == {'error': 'request body must be a JSON object'}
    res = auth_client.post('/api/games/molkky/preview', json='10-4')
    assert res.status_code == 400


def test_fractional_score_is_a_400_naming_the_team(auth_client):
    a, b, c, d = team_ids(auth_client)
    entries = {str(a): '50', str(b): '30.5', str(c): '10', str(d): '0'}
    res = auth_client.post('/api/games/kusoge/submit', json={'entries': entries})
    assert res.status_code == 400
    assert 'Bravo' in res.get_json()['error']
    assert Score.query.count() == 0


def test_failed_insert_returns_500_and_skips_refresh(auth_client, monkeypatch):
    a, b, _, _ = team_ids(auth_client)
    refreshed = []

    def failing_insert(game_name, deltas):
        raise StoreError('insert rejected')

    monkeypatch.setattr(store, 'insert_scoring_events', failing_insert)
    monkeypatch.setattr(store, 'fetch_teams_with_scores', lambda: refreshed.append(True) or [])
    res = auth_client.post('/api/games/molkky/submit', json={'entries': {str(a): '10', str(b): '4'}})
    assert res.status_code == 500
    assert res.get_json() == {'error': 'insert rejected'}
    assert refreshed == []
    assert Score.query.count() == 0


def test_failed_refresh_still_reports_saved_events(auth_client, monkeypatch):
    a, b, _, _ = team_ids(auth_client)

    def failing_refresh():
        raise StoreError('read timed out')

    monkeypatch.setattr(store, 'fetch_teams_with_scores', failing_refresh)
    res = auth_client.post('/api/games/molkky/submit', json={'entries': {str(a): '10', str(b): '4'}})
    assert res.status_code == 201
    data = res.get_json()
    assert {e['team_id']: e['score'] for e in data['events']} == {a: 3600, b: -3600}
    assert data['leaderboard'] is None
    assert data['leaderboard_error'] == 'read timed out'
    assert Score.query.count() == 2
