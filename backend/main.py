"""
JudgeGPT - live multi-judge debate in the terminal.

Streams a debate between AI judges about a project, printing each
message as soon as it is complete. The judges' final consensus score is
shown at the end and saved as the project's final report. With --voice,
every message is also spoken aloud in the judge's own voice.

Press Ctrl-C to stop the debate; audio stops and nothing is saved.
"""

import argparse
import asyncio
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.logging import RichHandler

from core.display import MessageRenderer, console, print_consensus
from modules.debates.gateway import get_gateway_client
from modules.debates.models import LiveDebateEvent, LiveDebateEventType, LiveDebateRequest
from modules.debates.service import LiveDebateService, build_report_store, run_live_debate
from modules.voice.player import SubprocessAudioPlayer
from modules.voice.profiles import VoiceProfileResolver
from modules.voice.sequencer import VoiceSequencer
from modules.voice.tts_client import get_tts_client
from shared.config import Settings, get_settings

logger = logging.getLogger(__name__)


def load_request(path: Path) -> LiveDebateRequest:
    """Load a debate request from a JSON file.

    Args:
        path: File holding `{"evaluations": [...], "project": {...}}`

    Returns:
        The validated request

    Raises:
        ValueError: If the file is not valid JSON or not a valid request
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"{path} is not valid JSON: {e}") from e
    try:
        return LiveDebateRequest.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"{path} is not a valid debate request:\n{e}") from e


def build_service(settings: Settings, save: bool) -> LiveDebateService:
    """Build the live debate service, with persistence when requested."""
    return LiveDebateService(
        gateway=get_gateway_client(),
        reports=build_report_store(settings) if save else None,
        max_frame_retries=settings.max_frame_retries,
        max_pending_frame_bytes=settings.max_pending_frame_bytes,
    )


def build_sequencer(settings: Settings, resolver: VoiceProfileResolver) -> VoiceSequencer:
    """Build the voice sequencer from settings."""
    return VoiceSequencer(
        synthesizer=get_tts_client(),
        player=SubprocessAudioPlayer(settings.audio_player_command),
        resolver=resolver,
        pause_seconds=settings.voice_pause_seconds,
    )


async def run(request: LiveDebateRequest, voice: bool, save: bool) -> int:
    """Run one live debate to completion.

    Returns:
        Process exit code
    """
    settings = get_settings()
    resolver = VoiceProfileResolver(default_voice_id=settings.default_voice_id)
    renderer = MessageRenderer(resolver)
    service = build_service(settings, save)
    session = service.create_session(request)
    sequencer: Optional[VoiceSequencer] = build_sequencer(settings, resolver) if voice else None

    def on_messages(messages) -> None:
        renderer.render(messages)
        if sequencer is not None:
            sequencer.update(messages)

    loop = asyncio.get_running_loop()
    stopping: list[asyncio.Task] = []

    def interrupt() -> None:
        session.abort()
        if sequencer is not None:
            stopping.append(loop.create_task(sequencer.stop()))

    try:
        loop.add_signal_handler(signal.SIGINT, interrupt)
    except NotImplementedError:
        # Signal handlers are unavailable on this platform; Ctrl-C raises instead
        pass

    console.print(f"[bold]Project:[/bold] {request.project.name}")
    console.print(f"[dim]Evaluations: {len(request.evaluations)}[/dim]\n")

    try:
        last_event: Optional[LiveDebateEvent] = await run_live_debate(
            service, session, on_messages, on_consensus=print_consensus,
        )
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except NotImplementedError:
            pass

    if stopping:
        await asyncio.gather(*stopping)
    if sequencer is not None:
        if session.aborted:
            await sequencer.stop()
        else:
            await sequencer.drain()

    console.print()
    if last_event is None:
        console.print("[red]Error:[/red] The debate produced no events")
        return 1
    if last_event.type == LiveDebateEventType.DEBATE_FAILED:
        console.print(f"[red]Error:[/red] {last_event.error}")
        return 1
    if session.aborted:
        console.print("[yellow]Debate stopped[/yellow]")
        return 130

    console.print(f"[dim]{len(session.messages)} message(s)[/dim]")
    if not session.consensus_emitted:
        console.print("[yellow]The judges did not reach a consensus[/yellow]")
    console.print("\n[bold green]Done![/bold green]")
    return 0


def configure_logging(level: str) -> None:
    """Send log records through rich, above the debate output."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Stream a live judge debate about a project"
    )
    parser.add_argument(
        "--request", "-r",
        type=Path,
        required=True,
        help="Path to a JSON file with the evaluations and the project",
    )
    parser.add_argument(
        "--voice",
        action="store_true",
        help="Speak each message aloud",
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Do not save the final report",
    )
    args = parser.parse_args()

    configure_logging(get_settings().log_level)

    if not args.request.exists():
        console.print(f"[red]Error:[/red] Request file not found: {args.request}")
        sys.exit(1)

    try:
        debate_request = load_request(args.request)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)

    sys.exit(asyncio.run(run(debate_request, voice=args.voice, save=not args.no_save)))
