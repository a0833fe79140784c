"""HTTP API client for file transcription and server-side downloads."""

from .client import TranscriptionAPI, download_filename, error_message

__all__ = ["TranscriptionAPI", "download_filename", "error_message"]
