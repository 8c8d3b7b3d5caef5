"""Scoring domain: per-game rules and leaderboard aggregation.

Pure functions only; nothing in this package touches the database, so HTTP
routes and CLI commands can preview a result before persisting it.
"""
from .rules import (  # noqa: F401
    ABSENT,
    Absent,
    BowlingEntry,
    GameName,
    Participating,
    PointDelta,
    evaluate,
    parse_number,
)
from .leaderboard import LeaderboardEntry, build_leaderboard, leaderboard_from_grouped  # noqa: F401
