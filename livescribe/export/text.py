"""Plain text export."""

from livescribe.export.base import ExportFormat, Renderer


class TextRenderer(Renderer):
    """UTF-8 bytes of the trimmed transcript."""

    format = ExportFormat.TXT

    def render(self, transcript: str) -> bytes:
        return transcript.strip().encode("utf-8")
