"""
PDF export

Lays the transcript out top to bottom in small Helvetica on A4 pages:
each line is wrapped to the printable width, lines advance by a fixed
8pt pitch from a 10pt top margin, and a new page starts once the cursor
passes the bottom margin.

The canvas is created with reportlab's invariant mode so the document
id and creation date are fixed and output is reproducible.
"""

import io

from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from livescribe.export.base import ExportFormat, Renderer, transcript_lines

FONT_NAME = "Helvetica"
FONT_SIZE = 7
LINE_HEIGHT = 8
MARGIN = 10


class PdfRenderer(Renderer):
    format = ExportFormat.PDF

    def __init__(self, pagesize: tuple[float, float] = A4):
        self.pagesize = pagesize

    def layout(self, transcript: str) -> list[list[str]]:
        """Split a transcript into pages of wrapped lines."""
        width, height = self.pagesize
        max_width = width - 2 * MARGIN

        pages: list[list[str]] = [[]]
        y = MARGIN
        for line in transcript_lines(transcript):
            for piece in simpleSplit(line, FONT_NAME, FONT_SIZE, max_width) or [""]:
                if y > height - MARGIN:
                    pages.append([])
                    y = MARGIN
                pages[-1].append(piece)
                y += LINE_HEIGHT
        return pages

    def render(self, transcript: str) -> bytes:
        _, height = self.pagesize
        buffer = io.BytesIO()

        pdf = canvas.Canvas(buffer, pagesize=self.pagesize, invariant=1)
        pdf.setTitle("Transcript")
        pdf.setAuthor("livescribe")

        for index, page in enumerate(self.layout(transcript)):
            if index:
                pdf.showPage()
            # Font state resets on every page
            pdf.setFont(FONT_NAME, FONT_SIZE)
            y = MARGIN
            for piece in page:
                pdf.drawString(MARGIN, height - y, piece)
                y += LINE_HEIGHT

        pdf.save()
        return buffer.getvalue()
