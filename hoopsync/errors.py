"""
Exception hierarchy for the HoopSync live stat-keeper client.

Validation errors are raised before any network call is made; transport
errors describe a failed exchange with the remote store.
"""


class ValidationError(Exception):
    """Input rejected locally; nothing was sent to the remote store."""
    pass


class ClockInputError(ValidationError):
    """Malformed period or clock value."""
    pass


class LineupValidationError(ValidationError):
    """Starter list or on-floor set that breaks the lineup rules."""
    pass


class RosterValidationError(ValidationError):
    """Roster entries that cannot form a valid team roster."""
    pass


class ProtocolError(ValidationError):
    """Remote store response that does not match the expected shape."""
    pass


class RemoteStoreError(Exception):
    """Timeout, load failure or not-ok envelope from the remote store."""
    pass


class UnauthorizedError(RemoteStoreError):
    """The remote store rejected the access token."""

    def __init__(self, message: str = "Unauthorized (check token)"):
        super().__init__(message)
