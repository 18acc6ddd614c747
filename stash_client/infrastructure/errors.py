"""Exceptions raised by the Stash client itself.

Transport and decoding failures are not wrapped: callers see the
``requests`` exceptions unchanged.
"""


class StashClientError(Exception):
    """Base class for errors raised by the client."""
    pass


class ConfigurationError(StashClientError, ValueError):
    """Raised when the client cannot work out which server to talk to."""
    pass
