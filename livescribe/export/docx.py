"""Word (.docx) export: one paragraph per transcript line."""

import io
import re
from datetime import datetime

from docx import Document

from livescribe.export.base import ExportFormat, Renderer, normalize_zip, transcript_lines

# Fixed core properties so repeated exports are byte-identical
DOCUMENT_TIMESTAMP = datetime(2000, 1, 1)
DOCUMENT_TITLE = "Transcript"
DOCUMENT_AUTHOR = "livescribe"

# Control characters that XML 1.0 cannot carry
_XML_INVALID = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")


class DocxRenderer(Renderer):
    format = ExportFormat.DOCX

    def render(self, transcript: str) -> bytes:
        document = Document()
        for line in transcript_lines(transcript):
            document.add_paragraph(_XML_INVALID.sub("", line))

        props = document.core_properties
        props.title = DOCUMENT_TITLE
        props.author = DOCUMENT_AUTHOR
        props.last_modified_by = DOCUMENT_AUTHOR
        props.created = DOCUMENT_TIMESTAMP
        props.modified = DOCUMENT_TIMESTAMP
        props.revision = 1

        buffer = io.BytesIO()
        document.save(buffer)
        return normalize_zip(buffer.getvalue())
