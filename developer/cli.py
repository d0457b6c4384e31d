"""CLI and REPL for the developer tools."""

import json
import sys
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel

from developer.config import Config
from developer.errors import ToolError
from developer.results import ToolResult
from developer.server import Developer, format_result
from developer.utils.logging import configure_logging

app = typer.Typer(help="Developer tools: text editing, shell and workflow tracking")
console = Console()
err_console = Console(stderr=True)


def parse_arguments(args_json: Optional[str], pairs: Optional[list[str]]) -> dict[str, Any]:
    """Build tool arguments from a JSON object and ``key=value`` pairs.

    Values of pairs are parsed as JSON when possible (``step_number=2``,
    ``next_step_needed=true``) and kept as strings otherwise.

    Args:
        args_json: JSON object string
        pairs: ``key=value`` strings, applied after the JSON object

    Returns:
        Arguments dictionary
    """
    arguments: dict[str, Any] = {}

    if args_json:
        try:
            loaded = json.loads(args_json)
        except json.JSONDecodeError as e:
            raise typer.BadParameter(f"--args is not valid JSON: {e}") from e
        if not isinstance(loaded, dict):
            raise typer.BadParameter("--args must be a JSON object")
        arguments.update(loaded)

    for pair in pairs or []:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected key=value, got: {pair}")
        try:
            arguments[key] = json.loads(value)
        except json.JSONDecodeError:
            arguments[key] = value

    return arguments


def print_result(result: ToolResult) -> None:
    """Print the user-facing blocks of a result."""
    text = format_result(result)
    if result.is_error:
        console.print(Panel(text, title="Error", border_style="red"))
    else:
        console.print(text, markup=False, highlight=False)


class REPL:
    """Line-oriented tool call loop sharing one Developer instance."""

    def __init__(self, developer: Developer):
        """Initialize REPL.

        Args:
            developer: Tool dispatcher whose state persists across lines
        """
        self.developer = developer
        self.running = True

    def start(self) -> None:
        """Start the REPL."""
        info = self.developer.server_info()
        console.print(Panel.fit(
            f"[bold cyan]{info['name']}[/bold cyan] {info['version']}\n"
            f"Workspace: {self.developer.root}\n"
            "\n"
            "Enter <tool> <json arguments>, /help for commands or /quit to exit",
            border_style="cyan"
        ))

        while self.running:
            try:
                line = console.input("[bold cyan]developer>[/bold cyan] ").strip()
            except KeyboardInterrupt:
                console.print("\n[dim]Use /quit to exit[/dim]")
                continue
            except EOFError:
                break

            if line:
                self.handle_input(line)

        console.print("\n[cyan]Goodbye![/cyan]")

    def handle_input(self, line: str) -> None:
        """Handle one input line.

        Args:
            line: Slash command or ``tool {json}``
        """
        if line.startswith("/"):
            self.handle_command(line)
            return

        name, _, raw_args = line.partition(" ")
        try:
            arguments = json.loads(raw_args) if raw_args.strip() else {}
        except json.JSONDecodeError as e:
            console.print(f"[red]Invalid JSON arguments: {e}[/red]")
            return
        if not isinstance(arguments, dict):
            console.print("[red]Arguments must be a JSON object[/red]")
            return

        try:
            result = self.developer.call_tool(name, arguments)
        except ToolError as e:
            console.print(f"[red]{e.message}[/red]")
            return
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted[/yellow]")
            return

        print_result(result)

    def handle_command(self, command: str) -> None:
        """Handle slash command.

        Args:
            command: Command string (starting with /)
        """
        cmd = command.split(maxsplit=1)[0].lower()

        if cmd == "/help":
            self.show_help()
        elif cmd in ("/quit", "/exit"):
            self.running = False
        elif cmd == "/tools":
            for tool in self.developer.list_tools():
                console.print(f"  - {tool['name']}")
        elif cmd == "/history":
            history = self.developer.read_resource("shell://history")
            console.print(history or "[dim]No commands run yet[/dim]")
        elif cmd == "/status":
            status = self.developer.workflow.get_status()
            if status is None:
                console.print("[dim]No workflow steps recorded[/dim]")
            else:
                console.print(status.model_dump_json(indent=2))
        elif cmd == "/config":
            show_config(self.developer.config)
        else:
            console.print(f"[red]Unknown command: {cmd}[/red]")
            console.print("[dim]Type /help for available commands[/dim]")

    def show_help(self) -> None:
        """Show help message."""
        help_text = """
**Tool calls:**

```
shell {"command": "ls -la"}
text_editor {"command": "view", "path": "/abs/path/file.py"}
workflow {"step_description": "Plan", "step_number": 1, "total_steps": 3, "next_step_needed": true}
```

**Commands:**

- `/tools` - List available tools
- `/history` - Show shell commands run this session
- `/status` - Show the current workflow status
- `/config` - Show current configuration
- `/help` - Show this help message
- `/quit` - Exit
        """
        console.print(Markdown(help_text))


def show_config(config: Config) -> None:
    """Print configuration in a panel."""
    console.print(Panel(
        "\n".join(f"{k}: {v}" for k, v in config.to_dict().items()),
        title="Configuration",
        border_style="blue"
    ))


def load_developer() -> Developer:
    """Load configuration and build the dispatcher, exiting on bad config."""
    config = Config.load()

    errors = config.validate()
    if errors:
        err_console.print("[red]Configuration errors:[/red]")
        for error in errors:
            err_console.print(f"  - {error}")
        sys.exit(1)

    configure_logging(config.log_level)
    return Developer(config)


@app.command()
def call(
    tool: str = typer.Argument(..., help="Tool name: text_editor, shell or workflow"),
    args: Optional[str] = typer.Option(None, "--args", "-a", help="Arguments as a JSON object"),
    arg: Optional[list[str]] = typer.Option(None, "--arg", help="Argument as key=value"),
) -> None:
    """Run a single tool call."""
    arguments = parse_arguments(args, arg)
    developer = load_developer()

    try:
        result = developer.call_tool(tool, arguments)
    except ToolError as e:
        err_console.print(f"[red]Error: {e.message}[/red]")
        raise typer.Exit(1)

    print_result(result)
    if result.is_error:
        raise typer.Exit(1)


@app.command()
def tools() -> None:
    """Print the tool schemas as JSON."""
    developer = load_developer()
    console.print_json(developer.tools_schema_json())


@app.command("config")
def config_command() -> None:
    """Show the effective configuration."""
    config = Config.load()
    show_config(config)

    errors = config.validate()
    for error in errors:
        console.print(f"[red]  - {error}[/red]")
    if errors:
        raise typer.Exit(1)


@app.command()
def repl() -> None:
    """Start an interactive tool call session."""
    developer = load_developer()
    REPL(developer).start()


if __name__ == "__main__":
    app()
