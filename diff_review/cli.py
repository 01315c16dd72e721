"""
CLI entry point — review an AI rewrite of a file hunk by hunk in the console.
"""

import argparse
import logging
import os
import sys

from .checkpoint import clear_checkpoint, load_session, save_session
from .cli_display import (
    format_display_lines, format_hunk, format_notice, format_status,
    setup_logger,
)
from .config import Config
from .editing.document import Document
from .editing.errors import ErrorKind
from .editing.hunks import DiffHunk, HunkStatus
from .editing.line_diff import convert_line_endings
from .editing.manager import DiffSessionManager
from .editing.metrics import log_review_metric
from .editing.session import DiffSession
from .tui import run_review_tui

logger = logging.getLogger(__name__)

_HELP = ("[n]ext [p]rev [a]ccept [r]eject [A]ccept all [R]eject all "
         "[s]tatus [v]iew [f]inalize [q]uit [x] discard")

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_SAVED = 2


def _read_text(path: str) -> str:
    # newline="" keeps CRLF so line endings survive the round trip
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def _safe_write(file_path: str, content: str) -> None:
    """Write content to file atomically via temp file + rename."""
    abs_path = os.path.abspath(file_path)
    tmp_path = abs_path + ".diffreview_tmp"
    try:
        with open(tmp_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.replace(tmp_path, abs_path)
    except OSError:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def _review_loop(manager: DiffSessionManager, color: bool,
                 prompt=input) -> str:
    """Interactive review. Returns "finalized", "quit" or "discard"."""
    # A resumed review keeps the hunk it was saved on
    if manager.session is not None and manager.session.current_hunk_index == -1:
        manager.navigate("next")
    while True:
        session = manager.session
        if session is None:
            return "finalized"

        current = session.current_hunk
        if current is not None:
            print(format_hunk(current, session.current_hunk_index,
                              len(session.hunks), color))
        print(format_status(session.status_summary(), color))

        try:
            choice = prompt(f"  {_HELP}\n  > ").strip()
        except (EOFError, KeyboardInterrupt):
            return "quit"

        if choice in ("n", "p"):
            result = manager.navigate("next" if choice == "n" else "prev")
            if result.error is ErrorKind.EMPTY_SELECTION:
                print(format_notice("  No pending hunks left.", color))
        elif choice in ("a", "r"):
            if current is None:
                print(format_notice("  No hunk focused; use n or p.", color))
                continue
            decide = manager.accept if choice == "a" else manager.reject
            decide(current.id)
        elif choice == "A":
            manager.accept_all()
        elif choice == "R":
            manager.reject_all()
        elif choice == "s":
            continue
        elif choice == "v":
            result = manager.display_lines()
            if result.success:
                print(format_display_lines(result.value, color))
        elif choice == "f":
            if manager.finalize().success:
                return "finalized"
        elif choice == "q":
            return "quit"
        elif choice == "x":
            return "discard"
        else:
            print("  Invalid choice.")


def _matches_checkpoint(saved: DiffSession | None, path: str, original: str,
                       modified: str, config: Config) -> bool:
    """True if *saved* was built from these exact inputs."""
    if saved is None or not saved.is_active:
        return False
    if saved.file_id != path or saved.original_content != original:
        return False
    if config.NORMALIZE_LINE_ENDINGS:
        modified = convert_line_endings(modified, saved.line_ending)
    return saved.modified_content == modified


def _record(hunks: list[DiffHunk], path: str, outcome: str, bulk: bool,
            config: Config) -> None:
    log_review_metric({
        "file": path,
        "hunks": len(hunks),
        "accepted": sum(1 for h in hunks if h.status is HunkStatus.ACCEPTED),
        "rejected": sum(1 for h in hunks if h.status is HunkStatus.REJECTED),
        "outcome": outcome,
        "bulk": bulk,
    }, metrics_dir=config.METRICS_DIR)


def main(argv: list[str] | None = None, prompt=input) -> int:
    parser = argparse.ArgumentParser(
        description="Review an AI rewrite of a file hunk by hunk")
    parser.add_argument("original", help="File being edited")
    parser.add_argument("modified", help="File holding the full rewritten content")
    parser.add_argument("--summary", default=None,
                        help="Description of the rewrite shown in history")
    parser.add_argument("-o", "--output", default=None,
                        help="Where to write the result (default: ORIGINAL)")
    bulk_group = parser.add_mutually_exclusive_group()
    bulk_group.add_argument("--accept-all", action="store_true",
                            help="Accept every hunk without prompting")
    bulk_group.add_argument("--reject-all", action="store_true",
                            help="Reject every hunk without prompting")
    parser.add_argument("--resume", action="store_true",
                        help="Resume a review saved with 'q'")
    parser.add_argument("--config", default=None,
                        help="Path to a .diffreview.yaml file")
    parser.add_argument("--tui", action="store_true",
                        help="Review in the full-screen Textual viewer")
    parser.add_argument("--no-color", action="store_true",
                        help="Disable ANSI colors")
    parser.add_argument("--no-log", action="store_true",
                        help="Do not write a log file")
    args = parser.parse_args(argv)

    config = Config.load(args.config)
    if not args.no_log:
        setup_logger(config.LOG_DIR)
    color = not args.no_color and sys.stdout.isatty()

    try:
        original = _read_text(args.original)
        modified = _read_text(args.modified)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Cannot read input: {exc}", file=sys.stderr)
        return EXIT_FAILED

    document = Document(args.original, original,
                        history_limit=config.UNDO_HISTORY_LIMIT)
    manager = DiffSessionManager(
        document, config,
        notify=lambda kind, message: print(f"  ! {message}", file=sys.stderr),
    )
    checkpoint_path = config.CHECKPOINT_FILE

    try:
        if args.resume:
            saved = load_session(checkpoint_path)
            if _matches_checkpoint(saved, args.original, original, modified,
                                   config):
                document.diff_session = saved
                print(format_notice("Resumed saved review.", color))
            else:
                print(format_notice("No matching saved review; starting fresh.",
                                    color))

        if document.diff_session is None:
            result = manager.request_session(modified, args.summary).result()
            if not result.success:
                return EXIT_FAILED

        session = document.diff_session
        hunks = list(session.hunks)
        if session.summary:
            print(format_notice(f"Summary: {session.summary}", color))

        bulk = args.accept_all or args.reject_all
        if args.accept_all:
            manager.accept_all()
        elif args.reject_all:
            manager.reject_all()
        else:
            if args.tui:
                outcome = run_review_tui(manager)
            else:
                outcome = _review_loop(manager, color, prompt)
            if outcome == "quit":
                save_session(checkpoint_path, session)
                print(format_notice(f"Review saved to {checkpoint_path}.", color))
                _record(hunks, args.original, "saved", False, config)
                return EXIT_SAVED
            if outcome == "discard":
                manager.close_session()
                clear_checkpoint(checkpoint_path)
                _record(hunks, args.original, "discarded", False, config)
                return EXIT_FAILED

        if manager.session is not None and not manager.finalize().success:
            return EXIT_FAILED

        output = args.output or args.original
        try:
            _safe_write(output, document.content)
        except OSError as exc:
            print(f"Cannot write {output}: {exc}", file=sys.stderr)
            return EXIT_FAILED

        logger.info("[DiffReview] Wrote %s", output)
        clear_checkpoint(checkpoint_path)
        _record(hunks, args.original, "finalized", bulk, config)
        print(format_notice(f"Wrote {output}.", color))
        return EXIT_OK
    finally:
        manager.shutdown()


if __name__ == "__main__":
    sys.exit(main())
