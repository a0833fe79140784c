"""Async HTTP client for the file-transcription and download endpoints."""

import logging
from pathlib import Path
from typing import Any, Literal

import httpx

from livescribe.config import UPLOAD_ENDPOINT, Settings, get_settings
from livescribe.core.errors import ExportError, UploadError
from livescribe.core.models import FileTranscription
from livescribe.export import parse_format

logger = logging.getLogger(__name__)

DownloadKind = Literal["transcription", "file-result"]


def error_message(response: httpx.Response) -> str:
    """Best human-readable reason from an error response."""
    reason = f"HTTP {response.status_code} {response.reason_phrase}".strip()
    if "application/json" in response.headers.get("content-type", ""):
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            msg = body.get("error") or body.get("message") or body.get("detail")
            if msg:
                return f"{reason}: {msg}"
        if body is not None:
            return f"{reason}: {body}"
    return response.text.strip() or reason


def download_filename(session_id: str, fmt: str) -> str:
    return f"transcription_{session_id}.{fmt}"


class TranscriptionAPI:
    """
    Async HTTP client with connection pooling.

    Usage:
        api = TranscriptionAPI()
        result = await api.transcribe_file("meeting.wav", "English")
        data = await api.download(result.file_id, "srt", kind="file-result")
        await api.close()
    """

    def __init__(self, settings: Settings | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.settings = settings or get_settings()
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    async def _get_http(self) -> httpx.AsyncClient:
        """Lazy-init HTTP client with connection pooling."""
        if self._http is None:
            self._http = httpx.AsyncClient(
                base_url=self.settings.api_url,
                headers=self.settings.auth_headers(),
                timeout=self.settings.http_timeout,
                transport=self._transport,
            )
        return self._http

    async def transcribe_file(self, path: str | Path, language: str | None = None) -> FileTranscription:
        """
        Upload an audio/video file and wait for its transcription.

        Raises:
            UploadError: Non-2xx response or the request failed; the file is
                untouched and can be uploaded again
        """
        path = Path(path)
        language = language or self.settings.language
        if not path.is_file():
            raise UploadError(None, f"No such file: {path}")

        http = await self._get_http()
        logger.info(f"Uploading {path.name} ({path.stat().st_size} bytes, lang={language})")
        try:
            with path.open("rb") as fh:
                response = await http.post(
                    UPLOAD_ENDPOINT,
                    files={"file": (path.name, fh)},
                    data={"language": language},
                )
        except httpx.HTTPError as e:
            raise UploadError(None, str(e)) from e

        if response.is_error:
            raise UploadError(response.status_code, error_message(response))

        data = self._json(response)
        if data is None:
            raise UploadError(response.status_code, "Response is not a JSON object")

        try:
            result = FileTranscription.from_response(data)
        except ValueError as e:
            raise UploadError(response.status_code, f"Unexpected response: {e}") from e
        logger.info(f"File transcribed: {len(result.text)} chars (file_id={result.file_id})")
        return result

    async def download(self, session_id: str, fmt: str, kind: DownloadKind = "transcription") -> bytes:
        """
        Fetch a server-side export of a session or file result.

        Raises:
            ExportError: Unknown format, request failure or non-2xx response
        """
        fmt = parse_format(fmt).value
        http = await self._get_http()
        try:
            response = await http.get(
                f"/download-{kind}/{session_id}",
                params={"format": fmt},
                headers={"Accept": "*/*"},
            )
        except httpx.HTTPError as e:
            raise ExportError(fmt, str(e)) from e

        if response.is_error:
            raise ExportError(fmt, error_message(response), status_code=response.status_code)
        return response.content

    async def save_download(
        self,
        session_id: str,
        fmt: str,
        directory: str | Path = ".",
        kind: DownloadKind = "transcription",
    ) -> Path:
        """Download an export and write it as transcription_<id>.<format>."""
        data = await self.download(session_id, fmt, kind=kind)
        target = Path(directory) / download_filename(session_id, parse_format(fmt).value)
        target.write_bytes(data)
        logger.info(f"Saved {target} ({len(data)} bytes)")
        return target

    @staticmethod
    def _json(response: httpx.Response) -> dict[str, Any] | None:
        try:
            data = response.json()
        except ValueError:
            return None
        return data if isinstance(data, dict) else None

    async def close(self):
        """Close HTTP client."""
        if self._http:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
