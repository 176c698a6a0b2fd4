"""Console rendering for the CLI.

Hides how timeline entries, banners and quota alerts map onto Rich output.
"""

import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from ..messages import (
    AssistantMessage,
    BannerMessage,
    FeedbackPromptMessage,
    Message,
    SystemMessage,
    UserMessage,
    banner_content,
    system_text,
)
from ..quota import AlertLevel, QuotaAlert
from ..sessions import BackendReply, OptionsFragment, TextFragment

_BORDER_STYLES = {
    "info": "cyan",
    "success": "green",
    "danger": "red",
    "warning": "yellow",
}


def configure_logging(level: str = "WARNING", console: Console | None = None) -> None:
    """Route library logging through Rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def render_message(console: Console, message: Message) -> None:
    """Print one resolved timeline entry."""
    if isinstance(message, UserMessage):
        return

    if isinstance(message, AssistantMessage):
        if message.is_loading:
            return
        if message.text:
            console.print(f"[bold green]Assistant:[/bold green] {message.text}")
        if message.options:
            for index, option in enumerate(message.options, start=1):
                console.print(f"  [cyan]{index}.[/cyan] {option.label}")
        if message.command:
            args = " ".join(message.command.args)
            console.print(f"[dim]> {message.command.type} {args}[/dim]")
        return

    if isinstance(message, SystemMessage):
        console.print(f"[dim italic]{system_text(message)}[/dim italic]")
        return

    if isinstance(message, BannerMessage):
        content = banner_content(message)
        console.print(Panel(
            content.body or content.title,
            title=content.title if content.body else None,
            border_style=_BORDER_STYLES.get(content.variant, "white"),
        ))
        return

    if isinstance(message, FeedbackPromptMessage):
        console.print("[dim]Was this helpful? Type + or -[/dim]")


def render_alert(console: Console, alert: QuotaAlert | None) -> None:
    if alert is None:
        return
    style = "red" if alert.level == AlertLevel.DANGER else "yellow"
    console.print(Panel(alert.body or alert.title, title=alert.title if alert.body else None, border_style=style))
    if alert.action_label:
        console.print(f"[dim]Type /new to {alert.action_label.lower()}[/dim]")


def render_welcome(console: Console, reply: BackendReply | None) -> None:
    """Print the greeting received while the session was initialized."""
    if reply is None:
        return
    for fragment in reply.fragments:
        if isinstance(fragment, TextFragment | OptionsFragment) and fragment.text:
            console.print(f"[bold green]Assistant:[/bold green] {fragment.text}")
        if isinstance(fragment, OptionsFragment):
            for option in fragment.options:
                console.print(f"  [cyan]-[/cyan] {option.text}")
