import asyncio
import sys
from typing import Callable, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from .config import AgentSettings, load_settings
from .errors import InferenceError
from .loop import GREETING, ChatAgent
from .provider import OllamaProvider
from .tools import ToolRegistry, build_default_tools

app = typer.Typer(help="ollama-agent: chat with a local model that can read and list your files")
console = Console()


def setup_logging(level: str) -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def _create_chat_agent(
    settings: AgentSettings,
    get_user_message: Callable[[], Optional[str]],
    greeting: Optional[str] = GREETING,
) -> ChatAgent:
    provider = OllamaProvider(
        base_url=settings.base_url,
        model=settings.model,
        timeout_s=settings.timeout_s,
    )
    tools = build_default_tools(
        workspace=settings.workspace,
        restrict_to_workspace=settings.restrict_to_workspace,
    )
    return ChatAgent(
        provider=provider,
        tools=tools,
        get_user_message=get_user_message,
        console=console,
        greeting=greeting,
    )


def console_reader() -> Optional[str]:
    """Read one line from the terminal; ``None`` on end of input."""
    try:
        return console.input("[bold blue]You[/bold blue]: ")
    except EOFError:
        return None


def single_message_reader(message: str) -> Callable[[], Optional[str]]:
    pending = [message]

    def _read() -> Optional[str]:
        return pending.pop() if pending else None

    return _read


@app.command()
def chat(
    message: Optional[str] = typer.Option(None, "--message", "-m", help="Send one message and exit after the reply"),
    model: Optional[str] = typer.Option(None, "--model", help="Model identifier"),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Ollama server URL"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """
    Chat with the model; it may read and list files in the working directory.
    """
    settings = load_settings(model=model, base_url=base_url)
    setup_logging("DEBUG" if verbose else settings.log_level)

    if message is not None:
        agent = _create_chat_agent(settings, single_message_reader(message), greeting=None)
    else:
        agent = _create_chat_agent(settings, console_reader)

    try:
        asyncio.run(agent.run())
    except InferenceError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}", highlight=False)
        raise typer.Exit(code=1)
    except KeyboardInterrupt:
        console.print("\nExiting.")


@app.command()
def info():
    """
    Display current configuration and registered tools.
    """
    settings = load_settings()
    tools: ToolRegistry = build_default_tools(settings.workspace, settings.restrict_to_workspace)
    timeout = f"{settings.timeout_s}s" if settings.timeout_s is not None else "none"

    info_panel = Panel(
        f"""
        [bold]Ollama URL:[/bold] {settings.base_url}
        [bold]Model:[/bold] {settings.model}
        [bold]Timeout:[/bold] {timeout}
        [bold]Workspace:[/bold] {settings.workspace}
        [bold]Restrict to workspace:[/bold] {settings.restrict_to_workspace}
        [bold]Tools:[/bold] {", ".join(tools.names)}
        """,
        title="ollama-agent Configuration",
        expand=False,
    )
    console.print(info_panel)


if __name__ == "__main__":
    app()
