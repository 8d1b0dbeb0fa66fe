"""Application error taxonomy.

- NotFoundError: lookup missed (member, leaderboard for an empty period).
- AlreadyExistsError: uniqueness constraint lost to a concurrent writer.
- InvalidError: malformed caller input (period, identity). Never retried.
- FatalError: unrecoverable condition inside the core (e.g. retries exhausted).

Store/driver failures are not wrapped; they propagate as SQLAlchemy errors.
"""


class StatsError(Exception):
    """Base class for application errors."""

    code = "STATS_ERROR"

    def __init__(self, message: str, *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class NotFoundError(StatsError):
    code = "NOT_FOUND"


class AlreadyExistsError(StatsError):
    code = "ALREADY_EXISTS"


class InvalidError(StatsError):
    code = "INVALID_INPUT"


class FatalError(StatsError):
    code = "FATAL"


class InvalidSignatureError(StatsError):
    """Inbound webhook failed request signature verification."""

    code = "INVALID_SIGNATURE"
