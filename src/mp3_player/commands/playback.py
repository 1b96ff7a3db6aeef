"""
Playback command handlers.

Handles: play, pause, toggle, next, prev, seek, volume, mute, status
"""

from typing import List, Tuple

from mp3_player.context import AppContext
from mp3_player.core.output import log
from mp3_player.domain.playback.state import PlaybackStatus
from mp3_player.utils.formatting import format_duration, format_time
from mp3_player.utils.parsers import parse_time, parse_volume


def _report_state(ctx: AppContext) -> None:
    state = ctx.controller.state
    if state.status is PlaybackStatus.ERROR:
        log(f"❌ {state.error}", level="error")


def handle_play_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    ctx.controller.play()
    ctx.controller.dispatch_events()
    _report_state(ctx)
    return ctx, True


def handle_pause_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    ctx.controller.pause()
    _report_state(ctx)
    return ctx, True


def handle_toggle_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    ctx.controller.toggle_play_pause()
    ctx.controller.dispatch_events()
    _report_state(ctx)
    return ctx, True


def handle_next_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    if not ctx.controller.next():
        log("Playlist is empty", level="warning")
        return ctx, True
    ctx.controller.dispatch_events()
    _report_now_playing(ctx)
    return ctx, True


def handle_previous_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    if not ctx.controller.previous():
        log("Playlist is empty", level="warning")
        return ctx, True
    ctx.controller.dispatch_events()
    _report_now_playing(ctx)
    return ctx, True


def handle_seek_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Seek to an absolute position: 'seek 90' or 'seek 1:30'."""
    if not args:
        log("Usage: seek <seconds|m:ss>", level="warning")
        return ctx, True

    seconds = parse_time(args[0])
    if seconds is None:
        log(f"Invalid position: {args[0]}", level="warning")
        return ctx, True

    position = ctx.controller.seek(seconds)
    log(f"⏩ {format_time(position)}")
    return ctx, True


def handle_volume_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Show or set volume: 'volume', 'volume 0.5', 'volume 80'."""
    if not args:
        log(f"🔊 Volume: {round(ctx.controller.state.volume * 100)}%")
        return ctx, True

    level = parse_volume(args[0])
    if level is None:
        log(f"Invalid volume: {args[0]}", level="warning")
        return ctx, True

    applied = ctx.controller.set_volume(level)
    log(f"🔊 Volume: {round(applied * 100)}%")
    return ctx, True


def handle_mute_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Toggle mute; unmuting restores the last audible volume."""
    applied = ctx.controller.toggle_mute()
    if applied == 0.0:
        log("🔇 Muted")
    else:
        log(f"🔊 Volume: {round(applied * 100)}%")
    return ctx, True


def _report_now_playing(ctx: AppContext) -> None:
    track = ctx.controller.current_track()
    if track is None:
        return
    _report_state(ctx)
    if ctx.controller.state.status is not PlaybackStatus.ERROR:
        log(f"♪ {track.title} [{format_duration(track.duration)}]")


def handle_status_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Show current track and player status."""
    ctx.controller.dispatch_events()
    state = ctx.controller.state
    track = ctx.controller.current_track()

    lines = [f"Status:   {state.status.value}"]
    if track is not None:
        lines.append(f"Track:    {track.title} ({track.id})")
        lines.append(
            f"Position: {format_time(state.position)} / {format_duration(state.duration)}"
        )
    lines.append(f"Volume:   {round(state.volume * 100)}%")
    lines.append(f"Repeat:   {ctx.controller.repeat_mode}")
    if state.error:
        lines.append(f"Error:    {state.error}")

    for line in lines:
        log(line)
    return ctx, True
