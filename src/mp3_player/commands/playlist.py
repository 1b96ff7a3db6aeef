"""
Playlist command handlers.

Handles: add, remove, select, clear, shuffle, list
"""

from pathlib import Path
from typing import List, Optional, Tuple

from rich.table import Table

from mp3_player.context import AppContext
from mp3_player.core.output import log
from mp3_player.domain.library.models import FileDescriptor, IngestResult
from mp3_player.utils.formatting import format_duration, format_file_size


def resolve_track_ref(ctx: AppContext, ref: str) -> Optional[str]:
    """
    Resolve a user reference to a track id.

    IMPORTANT: Positions are shown to users 1-indexed, so '1' means index 0.

    Args:
        ctx: Application context
        ref: 1-based playlist position or a track id

    Returns:
        Track id, or None if nothing matches
    """
    tracks = ctx.store.tracks
    if ref.isdigit():
        position = int(ref)
        if 1 <= position <= len(tracks):
            return tracks[position - 1].id
        return None
    return ref if ctx.store.get(ref) is not None else None


def _collect_descriptors(paths: List[str]) -> Tuple[List[FileDescriptor], List[str]]:
    """Expand paths (directories are scanned, non-recursively) into descriptors."""
    descriptors: List[FileDescriptor] = []
    missing: List[str] = []
    for raw in paths:
        path = Path(raw).expanduser()
        if path.is_dir():
            files = sorted(p for p in path.iterdir() if p.is_file())
        elif path.is_file():
            files = [path]
        else:
            missing.append(raw)
            continue
        for file in files:
            try:
                descriptors.append(FileDescriptor.from_path(file))
            except OSError:
                missing.append(str(file))
    return descriptors, missing


def report_ingest_results(results: List[IngestResult]) -> None:
    for result in results:
        if result.ok:
            log(f"✅ Added: {result.track.title} ({format_file_size(result.track.size_bytes)})")
        else:
            log(f"⚠️  Skipped {result.name}: {result.error.reason}", level="warning")


def handle_add_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Import audio files: 'add <file|dir> [...]'."""
    if not args:
        log("Usage: add <file|directory> [...]", level="warning")
        return ctx, True

    descriptors, missing = _collect_descriptors(args)
    for raw in missing:
        log(f"⚠️  Not found: {raw}", level="warning")

    if descriptors:
        results = ctx.controller.add_files(descriptors)
        report_ingest_results(results)
        accepted = sum(1 for r in results if r.ok)
        log(f"Added {accepted} of {len(results)} files ({len(ctx.store)} in playlist)")
    return ctx, True


def handle_remove_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Remove a track: 'remove <position|id>'."""
    if not args:
        log("Usage: remove <position|id>", level="warning")
        return ctx, True

    track_id = resolve_track_ref(ctx, args[0])
    if track_id is None:
        log(f"No track matches '{args[0]}'", level="warning")
        return ctx, True

    title = ctx.store.get(track_id).title
    ctx.controller.remove_track(track_id)
    ctx.controller.dispatch_events()
    log(f"🗑  Removed: {title}")
    return ctx, True


def handle_select_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Make a track current: 'select <position|id>'."""
    if not args:
        log("Usage: select <position|id>", level="warning")
        return ctx, True

    track_id = resolve_track_ref(ctx, args[0])
    if track_id is None or not ctx.controller.select_track(track_id):
        log(f"No track matches '{args[0]}'", level="warning")
        return ctx, True

    ctx.controller.dispatch_events()
    state = ctx.controller.state
    if state.error:
        log(f"❌ {state.error}", level="error")
    else:
        log(f"♪ {ctx.store.get(track_id).title}")
    return ctx, True


def handle_clear_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    count = ctx.controller.clear()
    log(f"Cleared {count} tracks")
    return ctx, True


def handle_shuffle_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    ctx.controller.shuffle()
    log("🔀 Playlist shuffled")
    return ctx, True


def handle_list_command(ctx: AppContext, args: List[str]) -> Tuple[AppContext, bool]:
    """Show the playlist with the current track marked."""
    snapshot = ctx.controller.playlist()
    if not snapshot.tracks:
        log("No tracks in playlist")
        return ctx, True

    if ctx.console is None:
        for i, summary in enumerate(snapshot.summaries()):
            marker = "▶" if i == snapshot.current_index else " "
            log(f"{marker} {i + 1:>3}. {summary.title} [{format_duration(summary.duration)}]")
        return ctx, True

    table = Table(title=f"Playlist ({len(snapshot)} tracks)")
    table.add_column("", width=1)
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Duration", justify="right")
    table.add_column("ID", style="dim")
    for i, summary in enumerate(snapshot.summaries()):
        marker = "▶" if i == snapshot.current_index else ""
        title = summary.title if summary.playable else f"[dim]{summary.title} (re-import)[/dim]"
        table.add_row(marker, str(i + 1), title, format_duration(summary.duration), summary.id)
    ctx.console.print(table)
    return ctx, True
