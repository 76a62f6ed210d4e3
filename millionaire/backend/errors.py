"""Error taxonomy for the game engine."""

from __future__ import annotations


class GameError(Exception):
    status_code = 400

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class ContentShapeError(GameError):
    """Question set is malformed or has the wrong size."""

    status_code = 422


class SetupError(GameError):
    """Player count, names or topic are not acceptable for a new session."""

    status_code = 400


class OutOfRangeError(GameError):
    status_code = 500


class InvalidStateError(GameError):
    """Call is not legal in the current turn or session state."""

    status_code = 409


class PrematureAdvanceError(InvalidStateError):
    pass


class LifelinePendingError(InvalidStateError):
    pass


class InvalidChoiceError(InvalidStateError):
    pass


class AlreadyUsedError(GameError):
    status_code = 409


class ProviderError(GameError):
    """Content or advice provider failed or is not configured."""

    status_code = 503
