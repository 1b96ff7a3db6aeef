"""
Interactive shell for the MP3 player.

The shell runs on one asyncio loop: prompt input and the media event pump
are cooperative tasks on the same thread, so commands and backend events
are never handled concurrently.
"""

import asyncio
from pathlib import Path
from typing import List, Optional

from loguru import logger
from prompt_toolkit import PromptSession
from prompt_toolkit.patch_stdout import patch_stdout
from rich.console import Console

from mp3_player import router
from mp3_player.commands.playlist import handle_add_command
from mp3_player.completers import PlayerCompleter
from mp3_player.context import AppContext
from mp3_player.core import config
from mp3_player.core.output import setup_from_config
from mp3_player.domain.playback.media import SilentMediaPlayer
from mp3_player.domain.playback.events import EventChannel
from mp3_player.domain.playback.state import PlaybackStatus
from mp3_player.utils.formatting import format_duration, format_time
from mp3_player.utils.parsers import parse_command

# How often backend events are dispatched while waiting for input (seconds)
EVENT_PUMP_INTERVAL = 0.2


def status_line(ctx: AppContext) -> str:
    """One-line summary of playback for the bottom toolbar."""
    state = ctx.controller.state
    track = ctx.controller.current_track()
    icons = {
        PlaybackStatus.IDLE: "■",
        PlaybackStatus.LOADING: "…",
        PlaybackStatus.PLAYING: "▶",
        PlaybackStatus.PAUSED: "⏸",
        PlaybackStatus.ERROR: "✗",
    }
    icon = icons[state.status]

    if track is None:
        return f"{icon} No track loaded | {len(ctx.store)} tracks"

    position = f"{format_time(state.position)} / {format_duration(state.duration)}"
    text = f"{icon} {track.title} {position} | vol {round(state.volume * 100)}%"
    if state.status is PlaybackStatus.ERROR and state.error:
        text += f" | {state.error}"
    return text


async def _pump_events(ctx: AppContext) -> None:
    while True:
        ctx.controller.dispatch_events()
        await asyncio.sleep(EVENT_PUMP_INTERVAL)


async def run_shell(ctx: AppContext) -> None:
    """Prompt for commands until the user quits."""
    session: PromptSession = PromptSession(completer=PlayerCompleter())
    pump = asyncio.create_task(_pump_events(ctx))

    try:
        with patch_stdout():
            while True:
                try:
                    user_input = await session.prompt_async(
                        "mp3> ",
                        bottom_toolbar=lambda: status_line(ctx),
                        refresh_interval=0.5,
                    )
                except KeyboardInterrupt:
                    continue
                except EOFError:
                    break

                command, args = parse_command(user_input)
                ctx, should_continue = router.handle_command(ctx, command, args)
                if not should_continue:
                    break
    finally:
        pump.cancel()


def interactive_mode(
    config_path: Optional[Path] = None,
    log_level: Optional[str] = None,
    use_mpv: bool = True,
    initial_files: Optional[List[str]] = None,
) -> None:
    """Load config, set up logging, build the context and run the shell."""
    current_config = config.load_config(config_path)
    if log_level:
        current_config.logging.level = log_level.upper()
    setup_from_config(current_config.logging)

    console = Console()
    media = None if use_mpv else SilentMediaPlayer(EventChannel())

    ctx = AppContext.create(current_config, media=media, console=console)
    try:
        console.print("[bold green]MP3 Player[/bold green]")
        if len(ctx.store):
            console.print(
                f"Restored {len(ctx.store)} tracks. "
                "[dim]Saved tracks need their files added again before they can play.[/dim]"
            )
        console.print("Type 'help' for available commands, or 'quit' to exit.")
        console.print()

        if initial_files:
            handle_add_command(ctx, initial_files)

        asyncio.run(run_shell(ctx))
    except Exception:
        logger.exception("Shell terminated by an unexpected error")
        raise
    finally:
        ctx.shutdown()
        console.print("Goodbye!")
