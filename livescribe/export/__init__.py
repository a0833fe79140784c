"""
Transcript export

Renders an assembled transcript into txt, srt, docx or pdf. Exports are
regenerated from the transcript on each request.

Usage:
    from livescribe.export import render

    artifact = render(transcript, "srt")
    Path(artifact.filename()).write_bytes(artifact.data)
"""

from .base import (
    ExportArtifact,
    ExportFormat,
    Renderer,
    get_renderer,
    parse_format,
    register_renderer,
    render,
    transcript_lines,
)
from .bundle import BUNDLE_FILENAME, render_bundle
from .srt import CUE_DURATION_MS, format_srt_time

__all__ = [
    "BUNDLE_FILENAME",
    "CUE_DURATION_MS",
    "ExportArtifact",
    "ExportFormat",
    "Renderer",
    "format_srt_time",
    "get_renderer",
    "parse_format",
    "register_renderer",
    "render",
    "render_bundle",
    "transcript_lines",
]
