"""Exceptions raised by the randomizer."""


class RandomizerError(Exception):
    """Base class for randomization failures. Always fatal for the run."""

    pass


class ConfigurationError(RandomizerError):
    """Raised when a run cannot start (no records, unknown mode, bad settings)."""

    pass


class StarvationError(RandomizerError):
    """Raised when a record cannot get four distinct effects."""

    pass


class CatalogInvariantError(RandomizerError):
    """Raised when a catalog lookup or pick finds nothing to return."""

    pass
