"""Exception hierarchy for the ledger bot.

All custom exceptions inherit from LedgerBotError to enable
selective catching at different levels.

Hierarchy:
    LedgerBotError (base)
    ├── ConfigError - Configuration issues (missing env vars, bad factory path)
    ├── ValidationError - Input validation failures (empty phone, missing field)
    ├── InvalidStateError - Operation not allowed in current connection state
    ├── TransportError - Messaging transport failures
    ├── TranscriptionError - Speech-to-text communication errors
    └── PersistenceError - Storage read/write failures
        └── CredentialStoreError - Credential load/save/purge failures
"""


class LedgerBotError(Exception):
    """
    Base exception for all ledger bot errors.

    Catching this will catch all custom exceptions from this module.
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigError(LedgerBotError):
    """
    Configuration error.

    Raised when required configuration is missing or invalid.
    Examples: missing API key, transport factory path that cannot be imported.

    CLI Exit Code: 2
    """

    pass


class ValidationError(LedgerBotError):
    """
    Input validation error.

    Raised when input data fails validation rules.
    Examples: phone number without digits, missing required request fields.
    """

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class InvalidStateError(LedgerBotError):
    """Raised when an operation is invalid for the current connection state."""

    pass


class TransportError(LedgerBotError):
    """
    Messaging transport error.

    Raised when the transport cannot be constructed or a call to it fails
    and the caller has no local recovery option.
    """

    def __init__(self, message: str, original_error: Exception | None = None):
        self.original_error = original_error
        super().__init__(message)


class TranscriptionError(LedgerBotError):
    """
    Speech-to-text communication error.

    Attributes:
        provider: Name of the provider that failed
        original_error: Original exception if wrapping
    """

    def __init__(
        self, message: str, provider: str = "unknown", original_error: Exception | None = None
    ):
        self.provider = provider
        self.original_error = original_error
        full_message = f"[{provider}] {message}"
        super().__init__(full_message)


class PersistenceError(LedgerBotError):
    """
    Storage read/write error.

    Raised when persistence operations fail.
    Examples: file not found, permission denied, disk full.

    CLI Exit Code: 5

    Attributes:
        path: Path that caused the error
        operation: Operation that failed (read, write, delete)
    """

    def __init__(self, message: str, path: str | None = None, operation: str | None = None):
        self.path = path
        self.operation = operation
        super().__init__(message)


class CredentialStoreError(PersistenceError):
    """
    Credential persistence error.

    Credentials rotate rarely but must never be lost, so a failed
    write is surfaced instead of being silently dropped.
    """

    pass
