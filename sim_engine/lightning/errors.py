"""Exceptions raised by the Chain Lightning math engine."""


class ChainLightningError(Exception):
    """Base class for every engine error."""


class ConfigError(ChainLightningError, ValueError):
    """Invalid configuration: bad tables, non-positive bounds, impossible caps."""


class NonConvergenceError(ChainLightningError):
    """The seed curator hit its scan ceiling before filling the catalog."""

    def __init__(self, message: str, accepted: int = 0, scanned: int = 0, records=None):
        super().__init__(message)
        self.accepted = accepted
        self.scanned = scanned
        self.records = list(records or [])


class CatalogMismatchError(ChainLightningError):
    """Replaying a stored seed did not reproduce its recorded win."""

    def __init__(self, seed: int, expected: int, actual: int):
        super().__init__(f"Seed {seed}: catalog win={expected}, replay win={actual}")
        self.seed = seed
        self.expected = expected
        self.actual = actual
