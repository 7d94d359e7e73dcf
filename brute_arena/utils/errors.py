class BruteArenaError(Exception):
    """Base exception for brute_arena."""


class ConfigurationError(BruteArenaError):
    """Raised when a snapshot, modifier set or game data table is invalid.

    This is always a caller or data bug; it is never retried.
    """


class ExhaustedOptionsError(BruteArenaError):
    """Raised when a mandatory level-up finds no eligible upgrade at all."""
