"""
Custom exceptions shared by all layers.

NOTE: the engine itself never raises for bad moves. Invalid moves are no-ops and "no legal moves" is a draw.
"""


class BlitzError(Exception):
    """Top-level exception of the application"""


class RemoteAgentError(BlitzError):
    """The remote language model could not be reached, or answered with something unusable."""


class RepositoryError(BlitzError):
    """Persistence layer could not find / store the requested record."""


class InvalidRequestError(BlitzError, ValueError):
    """Request data that cannot be interpreted (raised from pydantic validators, so must also be a ValueError)."""
