"""
Command routing for the MP3 player shell.

Routes user commands to appropriate handler functions.
"""

from typing import Callable, Dict, List, Tuple

from loguru import logger

from mp3_player.commands import playback, playlist
from mp3_player.context import AppContext

Handler = Callable[[AppContext, List[str]], Tuple[AppContext, bool]]


def print_help() -> None:
    """Display help information for available commands."""
    help_text = """
MP3 Player

Playback:
  play                Start or resume playback
  pause               Pause playback
  toggle              Toggle play/pause
  next                Next track (wraps around)
  prev                Previous track (wraps around)
  seek <s|m:ss>       Jump to a position in the current track
  volume [level]      Show or set volume (0.0-1.0, 0-100 or N%)
  mute                Toggle mute
  status              Show current track and player status

Playlist:
  add <file|dir> ...  Import audio files (mp3, wav, ogg, aac, flac, m4a, webm; max 50MB)
  list                Show the playlist
  select <n|id>       Make track n (or id) current
  remove <n|id>       Remove track n (or id)
  shuffle             Shuffle the playlist, keeping the current track
  clear               Remove every track

  help                Show this help
  quit                Exit
"""
    print(help_text.strip())


COMMANDS: Dict[str, Handler] = {
    "play": playback.handle_play_command,
    "pause": playback.handle_pause_command,
    "toggle": playback.handle_toggle_command,
    "next": playback.handle_next_command,
    "skip": playback.handle_next_command,
    "prev": playback.handle_previous_command,
    "previous": playback.handle_previous_command,
    "seek": playback.handle_seek_command,
    "volume": playback.handle_volume_command,
    "vol": playback.handle_volume_command,
    "mute": playback.handle_mute_command,
    "status": playback.handle_status_command,
    "add": playlist.handle_add_command,
    "list": playlist.handle_list_command,
    "ls": playlist.handle_list_command,
    "select": playlist.handle_select_command,
    "remove": playlist.handle_remove_command,
    "rm": playlist.handle_remove_command,
    "shuffle": playlist.handle_shuffle_command,
    "clear": playlist.handle_clear_command,
}


def handle_command(ctx: AppContext, command: str, args: List[str]) -> Tuple[AppContext, bool]:
    """
    Handle a single command.

    Args:
        ctx: Application context
        command: Command name (lowercase)
        args: Command arguments

    Returns:
        (updated_context, should_continue)
    """
    if not command:
        return ctx, True

    if command in ("quit", "exit"):
        return ctx, False

    if command == "help":
        print_help()
        return ctx, True

    handler = COMMANDS.get(command)
    if handler is None:
        print(f"Unknown command: '{command}'. Type 'help' for available commands.")
        return ctx, True

    logger.debug(f"Command: {command} {args}")
    return handler(ctx, args)
