"""Per-game scoring rules.

Each rule takes the ordered teams of the event and a mapping of team id to
the raw entry typed into the form, and returns the point deltas (liaos) to
persist. Every rule is zero-sum: the deltas of one submission add up to 0.

Blank or unparseable entries mean "this team did not play" and never count
as a score of zero. Ties are broken by the order of ``teams``; callers pass
teams in ascending id order, so the lower id keeps the better rank.
"""
import enum
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from liao.errors import ValidationError


class GameName(str, enum.Enum):
    MOLKKY = 'Molkky'
    KUSOGE = 'KusoGe'
    DARTS = 'Darts'
    BOWLING = 'Bowling'

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    GameName.MOLKKY: 'モルック',
    GameName.KUSOGE: 'くそげ',
    GameName.DARTS: 'ダーツ',
    GameName.BOWLING: 'ボーリング',
}

MOLKKY_BASE = 3000
KUSOGE_BASE = 3000
LIAOS_PER_POINT = 100
BOWLING_BONUS_MULTIPLIER = 10
BOWLING_HANDICAP = 60
DARTS_SECOND_BASE = -1000
DARTS_SECOND_PER_POINT = 5
DARTS_THIRD_BASE = -2000
DARTS_THIRD_PER_POINT = 10


@dataclass(frozen=True)
class Participating:
    value: int


class Absent:
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return 'ABSENT'


ABSENT = Absent()

Entry = Union[Participating, Absent]


@dataclass(frozen=True)
class PointDelta:
    team_id: int
    delta: int


@dataclass(frozen=True)
class BowlingEntry:
    score: Any = None
    bonus: Any = None
    handicap: bool = False


def parse_number(raw: Any) -> Entry:
    """Parse one form field into ``Participating(value)`` or ``ABSENT``.

    Blank or non-numeric input is ``ABSENT``. A number that is not whole
    raises ValidationError instead of dropping the team.
    """
    if raw is None or isinstance(raw, bool):
        return ABSENT
    if isinstance(raw, int):
        return Participating(raw)
    if isinstance(raw, float):
        return _whole(raw, raw)
    if not isinstance(raw, str):
        return ABSENT
    text = raw.strip()
    if not text:
        return ABSENT
    try:
        return Participating(int(text))
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        return ABSENT
    return _whole(value, raw)


def _whole(value: float, raw: Any) -> Entry:
    if not math.isfinite(value):
        return ABSENT
    if not value.is_integer():
        raise ValidationError(f'{raw!r} is not a whole number.')
    return Participating(int(value))


def _team_ids(teams: Sequence[Any]) -> List[int]:
    return [t if isinstance(t, int) else t.id for t in teams]


def _labels(teams: Sequence[Any]) -> Dict[int, str]:
    labels = {}
    for t in teams:
        if isinstance(t, int):
            labels[t] = f'Team {t}'
        else:
            labels[t.id] = getattr(t, 'name', None) or f'Team {t.id}'
    return labels


def _parse_for(labels: Mapping[int, str], team_id: int, raw: Any, field: str = 'score') -> Entry:
    try:
        return parse_number(raw)
    except ValidationError as exc:
        raise ValidationError(f'{labels[team_id]}: {field} {exc}')


def _check_known(team_ids: Sequence[int], entries: Mapping[int, Any]) -> None:
    unknown = sorted(set(entries) - set(team_ids))
    if unknown:
        raise ValidationError(f'Unknown team id(s): {", ".join(str(i) for i in unknown)}')


def _participants(teams: Sequence[Any], entries: Mapping[int, Any]) -> List[tuple]:
    """(team_id, value) for every team whose entry parses, in team order."""
    labels = _labels(teams)
    result = []
    for team_id in _team_ids(teams):
        parsed = _parse_for(labels, team_id, entries.get(team_id))
        if isinstance(parsed, Participating):
            result.append((team_id, parsed.value))
    return result


def _rank(participants: List[tuple], descending: bool) -> List[tuple]:
    # sorted() is stable, so equal values keep team order
    return sorted(participants, key=lambda p: -p[1] if descending else p[1])


def _emit(participants: List[tuple], awards: Dict[int, int]) -> List[PointDelta]:
    return [PointDelta(team_id, awards.get(team_id, 0)) for team_id, _ in participants]


def score_molkky(teams: Sequence[Any], entries: Mapping[int, Any]) -> List[PointDelta]:
    """Head-to-head: the winner takes 3000 + 100 per point of margin."""
    team_ids = _team_ids(teams)
    _check_known(team_ids, entries)
    participants = _participants(teams, entries)
    if len(participants) != 2:
        raise ValidationError('Enter a score for exactly two teams.')
    (a_id, a), (b_id, b) = participants
    if a == b:
        return [PointDelta(a_id, 0), PointDelta(b_id, 0)]
    amount = MOLKKY_BASE + abs(a - b) * LIAOS_PER_POINT
    winner, loser = (a_id, b_id) if a > b else (b_id, a_id)
    return _emit(participants, {winner: amount, loser: -amount})


def score_kusoge(teams: Sequence[Any], entries: Mapping[int, Any]) -> List[PointDelta]:
    """First place takes from exactly third place; everyone else plays for 0."""
    team_ids = _team_ids(teams)
    _check_known(team_ids, entries)
    participants = _participants(teams, entries)
    if len(participants) < 3:
        raise ValidationError('Enter scores for at least three teams.')
    ranked = _rank(participants, descending=True)
    first, third = ranked[0], ranked[2]
    amount = KUSOGE_BASE + (first[1] - third[1]) * LIAOS_PER_POINT
    return _emit(participants, {first[0]: amount, third[0]: -amount})


def _flag(raw: Any) -> bool:
    # checkbox values may arrive as strings from a form post
    if isinstance(raw, str):
        return raw.strip().lower() in ('1', 'true', 'on', 'yes')
    return bool(raw)


def _bowling_entry(raw: Any) -> BowlingEntry:
    if raw is None:
        return BowlingEntry()
    if isinstance(raw, BowlingEntry):
        return raw
    if isinstance(raw, Mapping):
        return BowlingEntry(
            score=raw.get('score'),
            bonus=raw.get('bonus'),
            handicap=_flag(raw.get('handicap', False)),
        )
    raise ValidationError('Bowling entries need a score, a bonus and a handicap flag.')


def bowling_effective_score(score: int, bonus: int, handicap: bool) -> int:
    return score + bonus * BOWLING_BONUS_MULTIPLIER + (BOWLING_HANDICAP if handicap else 0)


def score_bowling(teams: Sequence[Any], entries: Mapping[int, Any]) -> List[PointDelta]:
    """Top effective score takes 100 per point of margin from the bottom one."""
    team_ids = _team_ids(teams)
    _check_known(team_ids, entries)
    labels = _labels(teams)
    participants = []
    for team_id in team_ids:
        entry = _bowling_entry(entries.get(team_id))
        score = _parse_for(labels, team_id, entry.score, 'score')
        bonus = _parse_for(labels, team_id, entry.bonus, 'bonus')
        if isinstance(score, Participating) and isinstance(bonus, Participating):
            participants.append(
                (team_id, bowling_effective_score(score.value, bonus.value, entry.handicap))
            )
    if len(participants) < 2:
        raise ValidationError('Enter a score and a bonus for at least two teams.')
    ranked = _rank(participants, descending=True)
    first, last = ranked[0], ranked[-1]
    amount = (first[1] - last[1]) * LIAOS_PER_POINT
    return _emit(participants, {first[0]: amount, last[0]: -amount})


def score_darts(teams: Sequence[Any], entries: Mapping[int, Any]) -> List[PointDelta]:
    """Lowest score wins. Second and third pay the winner; fourth and below sit out.

    Every listed team must have a score, there is no partial submission.
    """
    team_ids = _team_ids(teams)
    _check_known(team_ids, entries)
    participants = _participants(teams, entries)
    if len(participants) != len(team_ids):
        raise ValidationError('Enter a darts score for every team.')
    if len(participants) < 2:
        raise ValidationError('Darts needs at least two teams.')
    ranked = _rank(participants, descending=False)
    first, second = ranked[0], ranked[1]
    third: Optional[tuple] = ranked[2] if len(ranked) >= 3 else None

    awards = {
        second[0]: DARTS_SECOND_BASE - (second[1] - first[1]) * DARTS_SECOND_PER_POINT,
    }
    if third is not None:
        awards[third[0]] = DARTS_THIRD_BASE - (third[1] - first[1]) * DARTS_THIRD_PER_POINT
    awards[first[0]] = -sum(awards.values())
    return [PointDelta(team_id, awards[team_id]) for team_id, _ in participants if team_id in awards]


RULES: Dict[GameName, Callable[[Sequence[Any], Mapping[int, Any]], List[PointDelta]]] = {
    GameName.MOLKKY: score_molkky,
    GameName.KUSOGE: score_kusoge,
    GameName.BOWLING: score_bowling,
    GameName.DARTS: score_darts,
}


def evaluate(game: Union[GameName, str], teams: Sequence[Any], entries: Mapping[int, Any]) -> List[PointDelta]:
    """Score one submission of ``game``. Raises ValidationError when it cannot be scored."""
    try:
        game = GameName(game)
    except ValueError:
        raise ValidationError(f'Unknown game: {game}')
    return RULES[game](teams, entries)
