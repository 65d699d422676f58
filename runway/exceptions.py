# Runway Exceptions
# Error taxonomy shared by configuration, state, targets and codegen


class RunwayError(Exception):
    """Base exception for all Runway errors."""


class ConfigError(RunwayError):
    """Invalid or contradictory target, input or codegen configuration.

    Always fatal and raised before any asset I/O happens.
    """

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []

    def __str__(self) -> str:
        message = super().__str__()
        if not self.errors:
            return message
        return message + "\n" + "\n".join(f"  - {e}" for e in self.errors)


class CorruptStateError(RunwayError):
    """Persisted state could not be parsed."""

    def __init__(self, path, reason: str):
        super().__init__(f"State file {path} is unreadable: {reason}")
        self.path = path
        self.reason = reason


class CodegenError(RunwayError):
    """A codegen output could not be built or written."""


class AdapterError(RunwayError):
    """A target adapter failed to sync one asset."""

    fatal = False


class AuthError(AdapterError):
    """Invalid credential or insufficient permission.

    No later request with the same credential can succeed, so the pass aborts.
    """

    fatal = True


class TransientNetworkError(AdapterError):
    """Timeouts, connection failures and server errors that may succeed on retry."""


class RateLimitError(TransientNetworkError):
    """The service rejected the request with HTTP 429."""

    def __init__(self, message: str, retry_after: float | None = None):
        super().__init__(message)
        self.retry_after = retry_after


class UnsupportedAssetError(AdapterError):
    """The target cannot accept this kind of file."""


class RobloxApiError(AdapterError):
    """The asset service returned an error or an unexpected response."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code
