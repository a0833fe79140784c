"""
livescribe command line

Commands:
    live      Stream the microphone until Ctrl+C (or --duration)
    file      Upload an audio/video file for transcription
    export    Render a local transcript file as txt, srt, docx or pdf
    download  Fetch a server-side export of a session
"""

import argparse
import asyncio
import dataclasses
import logging
import signal
import sys
from pathlib import Path

from livescribe import __version__
from livescribe.api import TranscriptionAPI
from livescribe.audio import list_input_devices
from livescribe.client import TranscriptState
from livescribe.config import DEFAULT_LANGUAGES, Settings, get_settings
from livescribe.core.errors import LiveScribeError
from livescribe.core.models import SessionState
from livescribe.export import ExportArtifact, ExportFormat, render
from livescribe.session import LiveSession
from livescribe.store import SessionStore
from livescribe.utils import set_log_level, setup_logging

logger = logging.getLogger(__name__)

FORMATS = [f.value for f in ExportFormat]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="livescribe", description=f"Live transcription client v{__version__}"
    )
    parser.add_argument("--api-url", help="HTTP API base URL (default: LIVESCRIBE_API_URL)")
    parser.add_argument("--ws-url", help="WebSocket base URL (default: LIVESCRIBE_WS_URL)")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    live = sub.add_parser("live", help="Transcribe the microphone live")
    live.add_argument("--language", help=f"Spoken language (e.g. {', '.join(DEFAULT_LANGUAGES[:3])})")
    live.add_argument("--device", type=int, help="Microphone device index")
    live.add_argument("--list-devices", action="store_true", help="List available audio devices")
    live.add_argument("--duration", type=float, help="Stop after this many seconds")
    live.add_argument("--format", choices=FORMATS, default="txt", help="Export format for --output")
    live.add_argument("--output", "-o", type=Path, help="Write the transcript export here")
    live.add_argument("--bundle", type=Path, help="Write transcript + recording zip here")

    upload = sub.add_parser("file", help="Transcribe an audio/video file")
    upload.add_argument("path", type=Path, help="File to upload")
    upload.add_argument("--language", help="Spoken language")
    upload.add_argument("--format", choices=FORMATS, default="txt", help="Export format for --output")
    upload.add_argument("--output", "-o", type=Path, help="Write the transcript export here")

    export = sub.add_parser("export", help="Render a transcript text file")
    export.add_argument("transcript", type=Path, help="UTF-8 transcript file")
    export.add_argument("--format", choices=FORMATS, required=True, help="Target format")
    export.add_argument("--output", "-o", type=Path, help="Output path (default: <name>.<format>)")

    download = sub.add_parser("download", help="Download a server-side export")
    download.add_argument("session_id", help="Session or file id")
    download.add_argument("--format", choices=FORMATS, default="txt", help="Export format")
    download.add_argument(
        "--kind",
        choices=["transcription", "file-result"],
        default="transcription",
        help="Live session transcription or uploaded file result",
    )
    download.add_argument("--dir", type=Path, default=Path("."), help="Directory to save into")

    return parser


def _settings(args: argparse.Namespace) -> Settings:
    settings = get_settings()
    overrides = {}
    if args.api_url:
        overrides["api_url"] = args.api_url
    if args.ws_url:
        overrides["ws_url"] = args.ws_url
    return dataclasses.replace(settings, **overrides) if overrides else settings


def _save(artifact: ExportArtifact, output: Path) -> None:
    output.write_bytes(artifact.data)
    print(f"Saved {output} ({len(artifact)} bytes)")


def print_devices() -> None:
    print("Input devices:")
    for index, name, rate in list_input_devices():
        print(f"  [{index}] {name} ({rate} Hz)")


async def run_live(args: argparse.Namespace, settings: Settings) -> int:
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, stop_event.set)
    except (NotImplementedError, RuntimeError):
        # Windows event loops lack signal handlers; Ctrl+C raises instead
        pass

    printed = 0

    def on_update(state: TranscriptState):
        nonlocal printed
        # Print each newly settled segment once
        for segment in state.segments[printed:]:
            print(segment, flush=True)
        printed = len(state.segments)

    store = SessionStore(settings.history_limit)
    async with LiveSession(settings, store=store, device_index=args.device) as live:
        live.on_update = on_update
        await live.start(args.language)
        print(f"Listening ({live.language}). Press Ctrl+C to stop.")

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=args.duration)
        except TimeoutError:
            pass

        print("Stopping...")
        state = await live.stop()
        transcript = live.transcript

        if state is SessionState.FAILED:
            print(f"Session failed: {live.client.failure}", file=sys.stderr)
        print(f"\nSession {live.session_id} ({state.value})")
        print(transcript or "(no speech)")

        if args.output:
            _save(live.export(args.format), args.output)
        if args.bundle:
            args.bundle.write_bytes(live.bundle())
            print(f"Saved {args.bundle}")

    return 0 if state is SessionState.COMPLETED else 1


async def run_file(args: argparse.Namespace, settings: Settings) -> int:
    async with TranscriptionAPI(settings) as api:
        result = await api.transcribe_file(args.path, args.language)

    print(result.text)
    if result.summary:
        print(f"\nSummary: {result.summary}")
    if result.sentiment:
        print(f"Sentiment: {result.sentiment.label.value} ({result.sentiment.score:.2f})")
    if result.file_id:
        print(f"File id: {result.file_id}")

    if args.output:
        _save(render(result.text, args.format), args.output)
    return 0


def run_export(args: argparse.Namespace) -> int:
    transcript = args.transcript.read_text(encoding="utf-8")
    output = args.output or args.transcript.with_suffix(f".{args.format}")
    _save(render(transcript, args.format), output)
    return 0


async def run_download(args: argparse.Namespace, settings: Settings) -> int:
    async with TranscriptionAPI(settings) as api:
        target = await api.save_download(args.session_id, args.format, args.dir, kind=args.kind)
    print(f"Saved {target}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    setup_logging("livescribe")
    if args.debug:
        set_log_level("DEBUG")

    settings = _settings(args)

    try:
        if args.command == "live":
            if args.list_devices:
                print_devices()
                return 0
            return asyncio.run(run_live(args, settings))
        if args.command == "file":
            return asyncio.run(run_file(args, settings))
        if args.command == "export":
            return run_export(args)
        if args.command == "download":
            return asyncio.run(run_download(args, settings))
    except LiveScribeError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted")
        return 130

    return 2


if __name__ == "__main__":
    sys.exit(main())
