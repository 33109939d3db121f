"""Terminal renderer for the record screen."""

import logging
from typing import Optional

from rich.align import Align
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from .context import UiContext
from .display_surface import DisplaySurface
from .keyboard_input import KeyboardInputHandler

logger = logging.getLogger(__name__)

HELP_TEXT = "SPACE = hold/release record button, p = play recording, q = quit"


class TerminalScreen:
    """Renders a DisplaySurface with rich and maps keys onto its controls.

    Terminals do not report key releases, so SPACE toggles the record
    button between held and released.
    """

    def __init__(self, context: UiContext, surface: DisplaySurface, console: Optional[Console] = None):
        self.context = context
        self.surface = surface
        self.console = console or Console()
        self.live: Optional[Live] = None
        self.input_handler = KeyboardInputHandler(self.handle_key)

        surface.text.subscribe(self._on_change)
        surface.status.subscribe(self._on_change)
        surface.timer.elapsed.subscribe(self._on_change)
        surface.controller.state.subscribe(self._on_change)

    def render(self) -> Panel:
        title = Text("Say Something", style="bold yellow")
        transcript = Text(self.surface.text.value, style="white")

        if self.surface.press_state.pressed:
            button = Text(f"RECORDING  {self.surface.timer.elapsed.value:.1f}s", style="bold red")
        else:
            button = Text("Record Button", style="bold cyan")

        lines = [Align.center(title), Text(""), transcript, Text(""),
                 Text("Play Recording", style="cyan"), button]
        if self.surface.status.value:
            lines.append(Text(self.surface.status.value, style="bold red"))
        lines.append(Text(HELP_TEXT, style="dim white italic"))
        return Panel(Group(*lines), border_style="bright_blue")

    def handle_key(self, key: str) -> bool:
        """Input-thread callback: forward the key to the UI context.

        Returns:
            False when the key quits the application
        """
        if key == " ":
            self.context.post(self._toggle_press)
        elif key == "p":
            self.context.post(self.surface.play_pressed)
        elif key in ("q", "\x03"):
            self.context.post(self.context.stop)
            return False
        return True

    def _toggle_press(self) -> None:
        self.surface.press_changed(not self.surface.press_state.pressed)
        self._refresh()

    def _on_change(self, value) -> None:
        self._refresh()

    def _refresh(self) -> None:
        if self.live is not None:
            self.live.update(self.render(), refresh=True)

    def run(self) -> None:
        """Show the screen and drive the UI context until quit."""
        self.input_handler.start()
        try:
            with Live(self.render(), console=self.console, auto_refresh=False) as live:
                self.live = live
                self.context.run_forever()
        finally:
            self.live = None
            self.input_handler.stop()
