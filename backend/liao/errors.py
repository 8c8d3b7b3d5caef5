"""Error taxonomy shared by the scoring engine, the store and the routes."""


class LiaoError(Exception):
    """Base class for errors reported to callers."""


class ValidationError(LiaoError):
    """Raised when a game submission cannot be scored.

    Always raised before anything is persisted.
    """


class StoreError(LiaoError):
    """The database rejected a read or write. The message is kept verbatim."""


class NotFoundError(StoreError):
    pass


class UnknownTeamError(LiaoError):
    """A scoring event refers to a team that is not on the leaderboard."""
