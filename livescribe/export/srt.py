"""SubRip (.srt) subtitle export.

Live sessions carry no per-segment audio timing, so each non-empty
transcript line gets a fixed 4-second slot: cue 1 spans 0s-4s, cue 2
spans 4s-8s and so on. When real segment timings are supplied (one
(start, end) pair in seconds per cue) they are used instead.
"""

from collections.abc import Sequence

from livescribe.export.base import ExportFormat, Renderer, transcript_lines

CUE_DURATION_MS = 4000


def format_srt_time(ms: int) -> str:
    """Convert milliseconds to SRT timestamp format: HH:MM:SS,mmm"""
    ms = max(0, int(ms))
    hours, rest = divmod(ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d},{millis:03d}"


def cue_span(index: int) -> tuple[int, int]:
    """Fixed-cadence (start_ms, end_ms) of the 1-based cue index."""
    start = (index - 1) * CUE_DURATION_MS
    return start, start + CUE_DURATION_MS


class SrtRenderer(Renderer):
    """Format transcript lines as SubRip cues."""

    format = ExportFormat.SRT

    def __init__(self, timings: Sequence[tuple[float, float]] | None = None):
        """
        Args:
            timings: Optional (start_s, end_s) per cue; ignored unless there
                is exactly one pair per non-empty line
        """
        self.timings = list(timings) if timings else None

    def _spans(self, count: int) -> list[tuple[int, int]]:
        if self.timings and len(self.timings) == count:
            return [(round(start * 1000), round(end * 1000)) for start, end in self.timings]
        return [cue_span(i) for i in range(1, count + 1)]

    def format_cues(self, transcript: str) -> str:
        cues = [line.strip() for line in transcript_lines(transcript) if line.strip()]
        lines: list[str] = []

        for i, (text, (start, end)) in enumerate(zip(cues, self._spans(len(cues))), start=1):
            lines.append(str(i))
            lines.append(f"{format_srt_time(start)} --> {format_srt_time(end)}")
            lines.append(text)
            lines.append("")

        return "\n".join(lines)

    def render(self, transcript: str) -> bytes:
        return self.format_cues(transcript).encode("utf-8")
