"""
prompt_toolkit completers for the MP3 player shell
"""

from typing import Iterable

from prompt_toolkit.completion import Completer, Completion, PathCompleter
from prompt_toolkit.document import Document


class PlayerCompleter(Completer):
    """
    Completes command names, and file paths after 'add'.
    """

    # Format: 'command': ('icon', 'description')
    COMMANDS = {
        # Playback commands
        'play': ('▶', 'Start or resume playback'),
        'pause': ('⏸', 'Pause playback'),
        'toggle': ('⏯', 'Toggle play/pause'),
        'next': ('⏭', 'Next track'),
        'prev': ('⏮', 'Previous track'),
        'seek': ('⏩', 'Jump to a position'),
        'volume': ('🔊', 'Show or set volume'),
        'mute': ('🔇', 'Toggle mute'),
        'status': ('ℹ', 'Show player status'),

        # Playlist commands
        'add': ('➕', 'Import audio files'),
        'list': ('📋', 'Show the playlist'),
        'select': ('🎯', 'Make a track current'),
        'remove': ('➖', 'Remove a track'),
        'shuffle': ('🔀', 'Shuffle the playlist'),
        'clear': ('🗑', 'Remove every track'),

        # System commands
        'help': ('❓', 'Show help'),
        'quit': ('👋', 'Exit'),
    }

    def __init__(self):
        self._paths = PathCompleter(expanduser=True)

    def get_completions(self, document: Document, complete_event) -> Iterable[Completion]:
        text = document.text_before_cursor

        if text.lower().startswith("add "):
            path_text = text[4:].lstrip()
            yield from self._paths.get_completions(Document(path_text), complete_event)
            return

        if " " in text:
            return

        word = text.lower()
        for command, (icon, description) in sorted(self.COMMANDS.items()):
            if command.startswith(word):
                yield Completion(
                    command,
                    start_position=-len(text),
                    display=command,
                    display_meta=f"{icon}\t{description}",
                )
