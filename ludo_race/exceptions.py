class LudoError(Exception):
    """Base exception for race-board engine errors."""

    pass


class GeometryError(LudoError, AssertionError):
    """Raised when a board coordinate or token placement is structurally impossible."""

    pass


class SnapshotError(LudoError, ValueError):
    """Raised when a saved game cannot be restored."""

    pass


class ActionPayloadError(LudoError, ValueError):
    """Raised when a relayed action payload is malformed or does not fit the game."""

    pass
