from dataclasses import dataclass
from typing import Any, Iterable, List, Sequence, Tuple

from liao.errors import UnknownTeamError


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    team: Any
    total_score: int

    def to_dict(self):
        return {
            'rank': self.rank,
            'team_id': self.team.id,
            'name': self.team.name,
            'total_score': self.total_score,
        }


def build_leaderboard(teams: Sequence[Any], events: Iterable[Tuple[int, int]]) -> List[LeaderboardEntry]:
    """Sum every (team_id, delta) event per team and rank by total, highest first.

    Teams without events sit at 0. Equal totals keep the order of ``teams``.
    Raises UnknownTeamError for an event whose team is not in ``teams``.
    """
    totals = {team.id: 0 for team in teams}
    for team_id, delta in events:
        if team_id not in totals:
            raise UnknownTeamError(f'Scoring event for unknown team {team_id}')
        totals[team_id] += delta
    ordered = sorted(teams, key=lambda t: -totals[t.id])
    return [
        LeaderboardEntry(rank=i, team=team, total_score=totals[team.id])
        for i, team in enumerate(ordered, start=1)
    ]


def leaderboard_from_grouped(rows: Iterable[Tuple[Any, Sequence[int]]]) -> List[LeaderboardEntry]:
    """Leaderboard from ``(team, [delta, ...])`` rows as the store returns them."""
    rows = list(rows)
    teams = [team for team, _ in rows]
    events = [(team.id, delta) for team, deltas in rows for delta in deltas]
    return build_leaderboard(teams, events)
