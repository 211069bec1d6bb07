"""Rich console implementation of the notification and display ports.

Used by the local demo; a chat platform adapter replaces it in production.
"""

from typing import Any, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from werewolf_party.ports import RoomDisplay


class ConsoleNotifier:
    """Prints announcements and status displays to a rich Console."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    async def announce(
        self,
        channel_id: str,
        text: str,
        elements: Optional[list[str]] = None,
    ) -> None:
        self.console.print(Text.assemble((f"#{channel_id} ", "dim"), text))
        if elements:
            self.console.print(Text.assemble((f"#{channel_id} ", "dim"), ("  buttons: " + ", ".join(elements), "italic")))

    async def resolve(self, ref: str) -> Optional[Any]:
        return ref

    async def update(self, handle: Any, display: RoomDisplay) -> None:
        if display.deleted:
            self.console.print(Panel("This room has been deleted.", title=f"Room ID: {display.room_id}"))
            return

        table = Table(show_header=False, box=None)
        table.add_row("Owner", f"<@{display.owner_id}>")
        table.add_row("Status", display.status.value)
        table.add_row("Max players", "unlimited" if display.max_players == 0 else str(display.max_players))
        table.add_row("Vote targets", "public" if display.show_vote_targets else "hidden")
        table.add_row("Roles", display.composition)
        table.add_row("Members", "\n".join(f"<@{m}>" for m in display.members) or "none")
        self.console.print(Panel(table, title=f"Room ID: {display.room_id}", subtitle=str(handle)))
