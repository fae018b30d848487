"""Error taxonomy for the intake pipeline.

Every error carries the HTTP status and machine-readable code the response
mapper sends back; handlers live in ``drive_sync.responses``.
"""


class DriveSyncError(Exception):
    status_code = 500
    code = "internal-error"

    def __init__(self, message: str, *, code: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        if status_code is not None:
            self.status_code = status_code


class AuthError(DriveSyncError):
    status_code = 401
    code = "invalid-token"


class ValidationError(DriveSyncError):
    """Malformed client input. ``reason`` is the internal classification."""

    status_code = 400
    _CODES = {
        "invalid-base64": "invalid-payload",
        "missing-param": "missing-param",
        "invalid-request": "invalid-request",
    }

    def __init__(self, reason: str, message: str):
        super().__init__(message, code=self._CODES.get(reason, "invalid-request"))
        self.reason = reason


class ResourceError(DriveSyncError):
    """Local environment failure (temp file, disk). Never retried."""

    _CODES = {
        "temp-allocation-failed": "temp-error",
        "write-failed": "write-error",
    }

    def __init__(self, reason: str, message: str):
        super().__init__(message, code=self._CODES.get(reason, "internal-error"), status_code=500)
        self.reason = reason


class RegistrationError(DriveSyncError):
    """Asset store rejected the file; status and detail are passed through."""

    code = "upload-error"
    reason = "registration-failed"
