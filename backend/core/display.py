"""Rich terminal rendering for live debates."""

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from modules.debates.models import ConsensusEvent, DebateMessage
from modules.voice.profiles import VoiceProfileResolver

console = Console()

# Border colors by judge type
JUDGE_COLORS = {
    "technical": "cyan",
    "business": "green",
    "product": "magenta",
    "risk": "red",
    "innovation": "yellow",
}
DEFAULT_COLOR = "blue"


class MessageRenderer:
    """Prints each debate message once, as the list grows.

    Message updates replace the whole list; the renderer remembers how
    many messages it already printed and only prints the new tail.
    """

    def __init__(self, resolver: Optional[VoiceProfileResolver] = None):
        self._resolver = resolver or VoiceProfileResolver()
        self.rendered = 0

    def render(self, messages: list[DebateMessage]) -> None:
        for message in messages[self.rendered:]:
            console.print(self.message_panel(message))
        self.rendered = max(self.rendered, len(messages))

    def message_panel(self, message: DebateMessage) -> Panel:
        """Build the panel for one message."""
        judge = self._resolver.judge_for(message)
        if judge is not None:
            title = f"[bold]{judge.name}[/bold] [dim]({judge.role})[/dim]"
            color = JUDGE_COLORS.get(judge.type, DEFAULT_COLOR)
        else:
            title = f"[bold]{message.speaker}[/bold]"
            color = DEFAULT_COLOR
        if message.type:
            title += f" [dim]· {message.type}[/dim]"

        return Panel(
            Text(message.message, overflow="fold"),
            title=title,
            title_align="left",
            border_style=color,
        )


def print_consensus(consensus: ConsensusEvent) -> None:
    """Print the consensus score prominently."""
    console.print()
    console.print(
        Panel(
            Text(consensus.message, overflow="fold"),
            title=f"[bold green]Consensus reached: {consensus.score:g}/10[/bold green]",
            border_style="green",
        )
    )
