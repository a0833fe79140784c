"""Export renderer base class, artifact type and renderer registry.

Every renderer is a pure function of the transcript text: identical
input produces byte-identical output. Renderers never embed generation
timestamps; container formats are written with fixed metadata.
"""

from __future__ import annotations

import io
import zipfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

from livescribe.core.errors import ExportError

# Earliest timestamp a zip entry can carry
ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


class ExportFormat(str, Enum):
    TXT = "txt"
    SRT = "srt"
    DOCX = "docx"
    PDF = "pdf"

    @property
    def media_type(self) -> str:
        return _MEDIA_TYPES[self]


_MEDIA_TYPES = {
    ExportFormat.TXT: "text/plain; charset=utf-8",
    ExportFormat.SRT: "application/x-subrip",
    ExportFormat.DOCX: "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ExportFormat.PDF: "application/pdf",
}


@dataclass(frozen=True)
class ExportArtifact:
    """Rendered export; regenerated on demand, never mutated."""

    format: ExportFormat
    data: bytes

    @property
    def media_type(self) -> str:
        return self.format.media_type

    def filename(self, stem: str = "transcript") -> str:
        return f"{stem}.{self.format.value}"

    def __len__(self) -> int:
        return len(self.data)


class Renderer(ABC):
    """Abstract base for export renderers."""

    format: ExportFormat

    @abstractmethod
    def render(self, transcript: str) -> bytes:
        """Render a transcript into the target format."""


def transcript_lines(transcript: str) -> list[str]:
    """Segments of a transcript: the lines of its trimmed text."""
    text = transcript.strip()
    if not text:
        return []
    return text.splitlines()


def normalize_zip(data: bytes) -> bytes:
    """Rewrite a zip archive with fixed entry timestamps, keeping entry order."""
    out = io.BytesIO()
    with zipfile.ZipFile(io.BytesIO(data)) as src, zipfile.ZipFile(out, "w") as dst:
        for info in src.infolist():
            fixed = zipfile.ZipInfo(info.filename, date_time=ZIP_EPOCH)
            fixed.compress_type = info.compress_type
            fixed.external_attr = info.external_attr
            dst.writestr(fixed, src.read(info.filename))
    return out.getvalue()


_RENDERERS: dict[ExportFormat, type[Renderer]] = {}


def register_renderer(fmt: ExportFormat, cls: type[Renderer]) -> None:
    _RENDERERS[fmt] = cls


def parse_format(name: str | ExportFormat) -> ExportFormat:
    """Resolve a format name ("txt", ".SRT", ExportFormat.PDF)."""
    if isinstance(name, ExportFormat):
        return name
    try:
        return ExportFormat(str(name).strip().lower().lstrip("."))
    except ValueError:
        available = ", ".join(f.value for f in ExportFormat)
        raise ExportError(str(name), f"Unknown format. Available: {available}") from None


def get_renderer(name: str | ExportFormat, **options) -> Renderer:
    """Get a renderer instance by format name."""
    _ensure_registered()
    fmt = parse_format(name)
    return _RENDERERS[fmt](**options)


def render(transcript: str, fmt: str | ExportFormat, **options) -> ExportArtifact:
    """
    Render a transcript into an export artifact.

    Args:
        transcript: Assembled transcript text
        fmt: txt, srt, docx or pdf
        **options: Renderer-specific options (e.g. timings for srt)

    Raises:
        ExportError: Unknown format or the renderer failed
    """
    renderer = get_renderer(fmt, **options)
    try:
        data = renderer.render(transcript)
    except (ValueError, OSError) as e:
        raise ExportError(renderer.format.value, str(e)) from e
    return ExportArtifact(format=renderer.format, data=data)


def _ensure_registered() -> None:
    if _RENDERERS:
        return
    from livescribe.export.docx import DocxRenderer
    from livescribe.export.pdf import PdfRenderer
    from livescribe.export.srt import SrtRenderer
    from livescribe.export.text import TextRenderer

    register_renderer(ExportFormat.TXT, TextRenderer)
    register_renderer(ExportFormat.SRT, SrtRenderer)
    register_renderer(ExportFormat.DOCX, DocxRenderer)
    register_renderer(ExportFormat.PDF, PdfRenderer)
