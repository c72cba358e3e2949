"""
Exception types raised across the discovery pipeline.

Only transport-level failures escape to callers of ``scan()``; extraction
problems are expressed as tagged results and commit problems as per-item
outcomes.
"""


class SubscanError(Exception):
    """Base class for subscan errors."""


class MailboxError(SubscanError):
    """The mailbox provider could not be searched or a payload could not be fetched."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class MailboxAuthError(MailboxError):
    """The access credential was rejected (expired or revoked)."""


class RecordStoreError(SubscanError):
    """A subscription record store operation failed."""


class NotEntitledError(SubscanError):
    """The account is not entitled to run an inbox scan."""
