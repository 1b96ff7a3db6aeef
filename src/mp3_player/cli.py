"""
MP3 Player - command-line entry point
"""

import argparse
import sys
from pathlib import Path

from mp3_player.core.config import create_default_config


def main() -> None:
    """Main entry point for the mp3-player command."""
    parser = argparse.ArgumentParser(
        description="MP3 Player - local playlist player",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "files",
        nargs="*",
        help="Audio files or directories to add on startup",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Path to config.toml (default: project, current directory, then ~/.config/mp3-player)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Override the configured log level",
    )
    parser.add_argument(
        "--no-mpv",
        action="store_true",
        help="Run without audio output (silent backend)",
    )
    parser.add_argument(
        "--print-default-config",
        action="store_true",
        help="Print the default config.toml and exit",
    )

    args = parser.parse_args()

    if args.print_default_config:
        print(create_default_config())
        sys.exit(0)

    from mp3_player.main import interactive_mode

    try:
        interactive_mode(
            config_path=args.config,
            log_level=args.log_level,
            use_mpv=not args.no_mpv,
            initial_files=args.files,
        )
    except KeyboardInterrupt:
        print("\nGoodbye!")
    sys.exit(0)


if __name__ == "__main__":
    main()
