# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Error taxonomy.

MalformedPayload is fatal to the whole webhook request. Everything deriving
from EventError is scoped to a single alert: it is recorded against that
alert's outcome and its siblings are still processed.
"""

from typing import Optional


class BridgeError(Exception):
    """Base class for every error raised by the synchronizer."""

    @property
    def kind(self) -> str:
        return type(self).__name__


class MalformedPayload(BridgeError):
    """The webhook body could not be decoded into an alert batch."""


class EventError(BridgeError):
    def __init__(self, detail: str, index: Optional[int] = None, identity: Optional[str] = None):
        super().__init__(detail)
        self.detail = detail
        self.index = index
        self.identity = identity


class InvalidAlertRecord(EventError):
    """One alert record in the batch has the wrong structure."""


class UnknownAlertStatus(EventError):
    """The alert status is neither 'firing' nor 'resolved'."""


class MissingIdentityLabel(EventError):
    """The configured identity label is absent or empty."""


class RemoteSyncFailure(EventError):
    """The decided transition was not confirmed applied by CachetHQ."""

    def __init__(self, identity: str, action: str, detail: str,
                 retryable: bool = False, status_code: Optional[int] = None):
        super().__init__(f"{action} failed for '{identity}': {detail}", identity=identity)
        self.action = action
        self.detail = detail
        self.retryable = retryable
        self.status_code = status_code
