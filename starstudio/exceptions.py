"""Named error conditions for STAR Studio.

Every recoverable failure the recording screen or the review flow can hit
derives from StudioError, so callers can show one retryable notification
for the whole family while still telling the conditions apart.
"""


class StudioError(Exception):
    """Base exception for all STAR Studio errors."""

    def __init__(self, detail: str = "An unexpected error occurred", code: str = "STUDIO_ERROR"):
        self.detail = detail
        self.code = code
        super().__init__(detail)


class InvalidStateError(StudioError):
    """Raised when an operation is not valid in the current session state."""

    def __init__(self, operation: str, state: str):
        self.operation = operation
        self.state = state
        super().__init__(
            detail=f"Cannot {operation}() while session is {state}",
            code="INVALID_STATE",
        )


class PermissionDeniedError(StudioError):
    """Raised when camera/microphone access is refused."""

    def __init__(self, detail: str = "Camera/microphone access was denied"):
        super().__init__(detail=detail, code="PERMISSION_DENIED")


class DeviceError(StudioError):
    """Raised when acquisition or capture fails for reasons other than permission."""

    def __init__(self, detail: str = "Capture device failed"):
        super().__init__(detail=detail, code="DEVICE_ERROR")


class PersistenceError(StudioError):
    """Raised when the hosted database rejects or fails a request."""

    def __init__(self, detail: str = "Database request failed", status: int = None):
        self.status = status
        super().__init__(detail=detail, code="PERSISTENCE_ERROR")


class SubmissionFailedError(StudioError):
    """Raised when the Attempt write fails at submission time."""

    def __init__(self, detail: str = "Failed to submit recording"):
        super().__init__(detail=detail, code="SUBMISSION_FAILED")


class FeedbackGenerationError(StudioError):
    """Raised when the LLM call fails or its answer cannot be parsed."""

    def __init__(self, detail: str = "Failed to generate feedback"):
        super().__init__(detail=detail, code="FEEDBACK_FAILED")


class ConfigurationError(StudioError):
    """Raised when a required setting is missing or invalid."""

    def __init__(self, detail: str):
        super().__init__(detail=detail, code="CONFIGURATION_ERROR")
