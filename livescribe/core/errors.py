"""Custom exceptions for livescribe.

Exception hierarchy:
    LiveScribeError
    ├── DeviceError       Microphone unavailable or permission denied
    ├── TransportError    Connect/send/close failure on the streaming channel
    ├── ProtocolError     Malformed inbound message (logged and skipped)
    ├── UploadError       Non-2xx response from file transcription
    └── ExportError       Unknown format, render failure or download failure

Nothing in the core retries automatically; callers restart the whole
operation (new session, re-upload, new download request).
"""


class LiveScribeError(Exception):
    """Base exception for all livescribe errors."""

    def __init__(self, message: str, details: str | None = None) -> None:
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class DeviceError(LiveScribeError):
    """Audio input device is unavailable or access was denied."""


class TransportError(LiveScribeError):
    """The streaming connection could not be opened, written or kept open."""


class ProtocolError(LiveScribeError):
    """An inbound message could not be parsed into a transcript event."""

    def __init__(self, reason: str, raw: str | bytes | None = None) -> None:
        self.raw = raw
        preview = None
        if raw is not None:
            preview = repr(raw[:80])
        super().__init__(message=f"Malformed message ({reason})", details=preview)


class UploadError(LiveScribeError):
    """File transcription request failed."""

    def __init__(self, status_code: int | None, reason: str) -> None:
        self.status_code = status_code
        message = "File transcription failed"
        if status_code is not None:
            message = f"{message} (HTTP {status_code})"
        super().__init__(message=message, details=reason)


class ExportError(LiveScribeError):
    """An export could not be rendered or downloaded."""

    def __init__(self, format_name: str, reason: str, status_code: int | None = None) -> None:
        self.format_name = format_name
        self.status_code = status_code
        super().__init__(message=f"Export error ({format_name})", details=reason)
