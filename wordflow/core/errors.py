"""
Errors - Exception taxonomy shared by services and routers

=== WHO HANDLES WHAT ===
- ConfigurationError, ConcurrencyError: raised by SyncEngine before any work,
  surfaced to the caller
- ValidationError, EntryNotFoundError: raised by the vocabulary/progress
  services, surfaced to the caller
- RemoteStoreError: raised by one remote call; SyncEngine logs it and skips the
  entry, so it never escapes a sync run
"""


class WordFlowError(Exception):
    """Base class for all application errors"""


class ConfigurationError(WordFlowError):
    """Sync invoked while remote credentials are missing"""

    def __init__(self, message: str = "Sync not configured"):
        super().__init__(message)


class ConcurrencyError(WordFlowError):
    """A sync was started while another one is in flight"""

    def __init__(self, message: str = "Sync already in progress"):
        super().__init__(message)


class ValidationError(WordFlowError):
    """Input rejected by a domain rule (duplicate word, empty word, ...)"""


class EntryNotFoundError(WordFlowError):
    """Unknown vocabulary entry or review session id"""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} not found: {identifier}")


class RemoteStoreError(WordFlowError):
    """A single remote call failed (transport, HTTP status or bad body)"""

    def __init__(self, message: str, status_code: int = None):
        self.status_code = status_code
        super().__init__(message)
