"""Session bundle: transcript text plus recorded audio in one zip."""

import io
import zipfile

from livescribe.core.errors import ExportError
from livescribe.export.base import ZIP_EPOCH

BUNDLE_FILENAME = "speech_session.zip"
TRANSCRIPT_ENTRY = "transcript.txt"
AUDIO_ENTRY = "recording.wav"


def render_bundle(transcript: str, audio: bytes | None, audio_name: str = AUDIO_ENTRY) -> bytes:
    """
    Zip a transcript and its recording.

    Raises:
        ExportError: Transcript is empty or no audio was recorded
    """
    text = transcript.strip()
    if not text or not audio:
        raise ExportError("zip", "Need both transcript and audio")

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for name, data in ((TRANSCRIPT_ENTRY, text.encode("utf-8")), (audio_name, audio)):
            info = zipfile.ZipInfo(name, date_time=ZIP_EPOCH)
            info.compress_type = zipfile.ZIP_DEFLATED
            archive.writestr(info, data)
    return buffer.getvalue()
