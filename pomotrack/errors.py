class PomotrackError(Exception):
    """Base class for errors raised by pomotrack."""


class InvalidTransition(PomotrackError):
    """A timer intent that is not allowed in the current phase."""


class ValidationError(PomotrackError, ValueError):
    """User input rejected before any mutation happened."""


class RemoteSyncFailure(PomotrackError):
    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause
