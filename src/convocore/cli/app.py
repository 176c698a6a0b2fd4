"""Main CLI application using Typer."""
import asyncio

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from ..config import load_config
from ..feedback import Thumb
from ..messages import AssistantMessage, FeedbackPromptMessage, Message, MessageOption, Usage
from ..quota import quota_alert
from ..sessions import ModelSessionManager, SessionDescriptor, TalkSession, create_session
from ..widget import AssistantWidget
from .output import configure_logging, render_alert, render_message, render_welcome

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="convocore",
    help="Conversational assistant core with a terminal front end",
    no_args_is_help=True,
    add_completion=True,
)

# Console for rich output
console = Console()


def _last_options(messages: tuple[Message, ...]) -> tuple[MessageOption, ...]:
    for message in reversed(messages):
        if isinstance(message, AssistantMessage) and message.options:
            return message.options
    return ()


def _last_prompt(messages: tuple[Message, ...]) -> FeedbackPromptMessage | None:
    for message in reversed(messages):
        if isinstance(message, FeedbackPromptMessage):
            return message
    return None


@app.command()
def chat(
    url: str | None = typer.Option(
        None,
        "--url",
        "-u",
        help="Talk endpoint (default: CONVOCORE_TALK_URL)"
    ),
    log_level: str = typer.Option(
        "WARNING",
        "--log-level",
        "-l",
        help="Logging level"
    )
):
    """Interactive chat with a talk endpoint."""
    configure_logging(log_level, console)
    config = load_config()
    talk_url = url or config.talk_url
    if not talk_url:
        console.print("[red]Error: no talk endpoint configured (use --url or CONVOCORE_TALK_URL)[/red]")
        raise typer.Exit(code=1)

    async def _chat():
        session = create_session("talk", talk_url=talk_url, timeout=config.http_timeout)
        sessions = ModelSessionManager()
        sessions.set_descriptors([
            SessionDescriptor(model_id="talk", session=session, title="Virtual Assistant")
        ])
        widget = AssistantWidget(sessions, config=config)

        printed: set[str] = set()

        def on_messages(messages: tuple[Message, ...]) -> None:
            for message in messages:
                if message.id in printed:
                    continue
                if isinstance(message, AssistantMessage) and message.is_loading:
                    continue
                printed.add(message.id)
                render_message(console, message)

        widget.store.subscribe(on_messages)
        widget.quota.subscribe(lambda alert: render_alert(console, alert))

        try:
            await widget.mount()
            with console.status("[dim]Connecting...[/dim]"):
                await widget.open()
            if not session.is_initialized():
                console.print("[red]Error: could not start a session[/red]")
                raise typer.Exit(code=1)

            console.print("[bold cyan]Convocore Interactive Chat[/bold cyan]")
            console.print("[dim]Type 'exit', 'quit', or 'q' to leave; '/new' starts a new chat[/dim]\n")
            if isinstance(session, TalkSession):
                render_welcome(console, session.welcome)

            while True:
                try:
                    user_input = console.input("[bold yellow]You:[/bold yellow] ").strip()

                    if not user_input:
                        continue

                    if user_input.lower() in ('exit', 'quit', 'q'):
                        console.print("[dim]Goodbye![/dim]")
                        break

                    if user_input == "/new":
                        await widget.new_conversation()
                        printed.clear()
                        console.print("[dim]New conversation started[/dim]")
                        continue

                    messages = widget.messages
                    prompt = _last_prompt(messages)
                    if prompt is not None and user_input in ("+", "-"):
                        thumb = Thumb.UP if user_input == "+" else Thumb.DOWN
                        await widget.select_thumb(prompt, thumb)
                        continue

                    options = _last_options(messages)
                    if user_input.isdigit() and 1 <= int(user_input) <= len(options):
                        await widget.select_option(options[int(user_input) - 1])
                        continue

                    if not await widget.send(user_input):
                        if widget.conversation_locked:
                            console.print("[yellow]This conversation is locked. Type /new to continue.[/yellow]")

                except KeyboardInterrupt:
                    console.print("\n[dim]Goodbye![/dim]")
                    break
                except EOFError:
                    console.print("\n[dim]Goodbye![/dim]")
                    break
                except Exception as e:
                    # Already shown in the timeline
                    console.print(f"[dim]{e}[/dim]")

        finally:
            await widget.unmount()
            await session.close()

    asyncio.run(_chat())


@app.command()
def quota(
    used: int = typer.Argument(..., help="Messages used in the conversation"),
    limit: int = typer.Argument(..., help="Message limit of the conversation"),
    margin: int | None = typer.Option(
        None,
        "--margin",
        "-m",
        help="Warning margin (default: CONVOCORE_QUOTA_WARNING_MARGIN)"
    )
):
    """Show the quota alert for a pair of usage counters."""
    config = load_config()
    warning_margin = margin if margin is not None else config.quota_warning_margin
    alert = quota_alert(Usage(used=used, limit=limit), warning_margin)

    table = Table(title="Quota")
    table.add_column("Used", style="cyan")
    table.add_column("Limit", style="cyan")
    table.add_column("Margin", style="dim")
    table.add_column("Alert", style="bold")
    table.add_row(str(used), str(limit), str(warning_margin), alert.level.value if alert else "none")
    console.print(table)
    render_alert(console, alert)


@app.command(name="config")
def config_command():
    """Show the effective configuration."""
    settings = load_config()

    table = Table(title="Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for name, value in settings.model_dump().items():
        table.add_row(name, str(value))
    console.print(table)


if __name__ == "__main__":
    app()
