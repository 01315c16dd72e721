"""
Interactive hunk review — Textual TUI over a DiffSessionManager.
"""

from __future__ import annotations

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.widgets import Footer, Static

from .editing.errors import ErrorKind
from .editing.manager import DiffSessionManager, OperationResult
from .editing.preview import ADDED, REMOVED, DisplayLine


def format_rich_lines(lines: list[DisplayLine]) -> str:
    """Convert display lines to Rich markup for Textual display."""
    markup_lines: list[str] = []
    for line in lines:
        # Escape Rich markup characters in the line content
        escaped = line.content.replace("[", "\\[")
        marker = ">" if line.is_current_hunk else " "
        if line.kind == ADDED:
            text = f"[green]{marker}+{escaped}[/green]"
        elif line.kind == REMOVED:
            text = f"[red]{marker}-{escaped}[/red]"
        else:
            text = f"{marker} {escaped}"
        if line.is_current_hunk:
            text = f"[bold]{text}[/bold]"
        markup_lines.append(text)
    return "\n".join(markup_lines)


class ReviewApp(App):
    """Hunk-by-hunk review of one document's active diff session.

    ``outcome`` is ``"finalized"``, ``"quit"`` or ``"discard"`` once the
    app exits.
    """

    CSS = """
    Screen {
        background: $surface;
    }
    #title-bar {
        dock: top;
        height: 3;
        background: #1a1a2e;
        color: #e94560;
        text-align: center;
        padding: 1;
        text-style: bold;
    }
    #diff-scroll {
        height: 1fr;
        margin: 1 2;
        border: round #444;
        padding: 0 1;
    }
    #status {
        dock: bottom;
        height: 1;
        text-align: center;
        color: #888;
    }
    """

    BINDINGS = [
        Binding("n", "navigate('next')", "Next"),
        Binding("p", "navigate('prev')", "Prev"),
        Binding("a", "accept", "Accept"),
        Binding("r", "reject", "Reject"),
        Binding("A,shift+a", "accept_all", "Accept all"),
        Binding("R,shift+r", "reject_all", "Reject all"),
        Binding("f", "finalize", "Finalize"),
        Binding("q", "quit_review", "Save & quit"),
        Binding("x", "discard", "Discard"),
    ]

    def __init__(self, manager: DiffSessionManager) -> None:
        super().__init__()
        self.manager = manager
        self.outcome = "quit"

    def compose(self) -> ComposeResult:
        session = self.manager.session
        name = session.file_id if session is not None else ""
        yield Static(f" ━━  Diff Review — {name}  ━━ ", id="title-bar")
        with VerticalScroll(id="diff-scroll"):
            yield Static("", id="diff-body")
        yield Static("", id="status")
        yield Footer()

    def on_mount(self) -> None:
        session = self.manager.session
        if session is not None and session.current_hunk_index == -1:
            self.manager.navigate("next")
        self._refresh()

    def _refresh(self) -> None:
        lines = self.manager.display_lines()
        if lines.success:
            self.query_one("#diff-body", Static).update(
                format_rich_lines(lines.value))
        summary = self.manager.get_status_summary()
        if summary.success:
            s = summary.value
            self.query_one("#status", Static).update(
                f"{s.pending} pending | {s.accepted} accepted | "
                f"{s.rejected} rejected"
            )

    def _report(self, result: OperationResult) -> None:
        if result.success:
            return
        if result.error is ErrorKind.EMPTY_SELECTION:
            self.notify("No pending hunks left.")
        else:
            self.notify(result.message, severity="warning")

    def _after(self, result: OperationResult) -> None:
        self._report(result)
        if self.manager.session is None:
            # auto-finalize closed the review
            self.outcome = "finalized"
            self.exit()
            return
        self._refresh()

    def action_navigate(self, direction: str) -> None:
        self._after(self.manager.navigate(direction))

    def _decide_current(self, accept: bool) -> None:
        session = self.manager.session
        current = session.current_hunk if session is not None else None
        if current is None:
            self.notify("No hunk focused; use n or p.")
            return
        decide = self.manager.accept if accept else self.manager.reject
        self._after(decide(current.id))

    def action_accept(self) -> None:
        self._decide_current(True)

    def action_reject(self) -> None:
        self._decide_current(False)

    def action_accept_all(self) -> None:
        self._after(self.manager.accept_all())

    def action_reject_all(self) -> None:
        self._after(self.manager.reject_all())

    def action_finalize(self) -> None:
        result = self.manager.finalize()
        if result.success:
            self.outcome = "finalized"
            self.exit()
            return
        self._report(result)

    def action_quit_review(self) -> None:
        self.outcome = "quit"
        self.exit()

    def action_discard(self) -> None:
        self.outcome = "discard"
        self.exit()


def run_review_tui(manager: DiffSessionManager) -> str:
    """Launch the review app; returns its outcome."""
    app = ReviewApp(manager)
    app.run()
    return app.outcome
