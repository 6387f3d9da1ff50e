"""
Terminal front end for the config wizard.

RichPrompter renders questions with rich and reads answers from the console; Ctrl-C or
end-of-input cancels the run. ``mcp-sugar-config`` runs the whole wizard against the
configured RPC endpoint and writes the config file.

Usage:
    mcp-sugar-config
    mcp-sugar-config --rpc-url https://api.mainnet-beta.solana.com --config candy/config.json
"""
import asyncio
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape

from mcp_sugar_config import config
from mcp_sugar_config.errors import AssemblerError, NetworkError, StorageError, WizardCancelledError
from mcp_sugar_config.persistence import FileStorage, PersistResult
from mcp_sugar_config.prompts import PromptKind, PromptOptions
from mcp_sugar_config.solana_utils import SolanaAccountResolver
from mcp_sugar_config.wizard import create_config
from mcp.server.fastmcp.utilities.logging import get_logger

logger = get_logger(__name__)

EXIT_CANCELLED = 130

app = typer.Typer(
    name="mcp-sugar-config",
    help="Interactively create a Candy Machine config file.",
    add_completion=False,
)


class RichPrompter:
    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def _hint(self, options: PromptOptions) -> str:
        if options.kind == PromptKind.confirm:
            default = f", default {options.default}" if options.default else ""
            return f"[dim](y/n{default})[/dim] "
        if options.kind == PromptKind.single_choice and options.default is not None:
            return f"[dim](default: {escape(options.items[int(options.default)])})[/dim] "
        if options.kind == PromptKind.multi_choice:
            return "[dim](comma separated, empty for none)[/dim] " if options.allow_empty else "[dim](comma separated)[/dim] "
        if options.default:
            return f"[dim](default: {escape(options.default)})[/dim] "
        return ""

    async def ask(self, message: str, options: PromptOptions) -> str:
        self.console.print(f"[bold cyan]?[/bold cyan] [bold]{escape(message)}[/bold]")
        if options.is_choice:
            for index, item in enumerate(options.items):
                self.console.print(f"  [cyan]{index}[/cyan]. {escape(item)}")
        try:
            return self.console.input(f"{self._hint(options)}[green]>[/green] ")
        except (EOFError, KeyboardInterrupt):
            raise WizardCancelledError("Config creation cancelled by the operator.")

    def println(self, text: str = "") -> None:
        # Printed verbatim, a logged config must match the file byte for byte
        self.console.out(text, highlight=False)

    def show_error(self, text: str) -> None:
        self.console.print(f"[red]✗ {escape(text)}[/red]")


async def run_wizard(prompter: RichPrompter, rpc_url: str, config_path: str) -> PersistResult:
    async with SolanaAccountResolver(rpc_endpoint=rpc_url) as resolver:
        return await create_config(prompter, FileStorage(), resolver, config_path)


@app.command()
def create(
    rpc_url: Annotated[
        Optional[str],
        typer.Option("--rpc-url", "-u", help="Solana RPC endpoint used to check token accounts."),
    ] = None,
    config_path: Annotated[
        Optional[str],
        typer.Option("--config", "-c", help="Path of the config file to create."),
    ] = None,
) -> None:
    """Walk through the Candy Machine options and save config.json."""
    console = Console()
    prompter = RichPrompter(console)
    try:
        asyncio.run(run_wizard(prompter, rpc_url or config.RPC_ENDPOINT, config_path or config.CONFIG_FILEPATH))
    except WizardCancelledError as e:
        logger.info(f"Wizard cancelled: {e}")
        console.print(f"\n[yellow]{escape(str(e))}[/yellow]")
        raise typer.Exit(code=EXIT_CANCELLED)
    except KeyboardInterrupt:
        logger.info("Wizard interrupted")
        console.print("\n[yellow]Config creation cancelled by the operator.[/yellow]")
        raise typer.Exit(code=EXIT_CANCELLED)
    except (NetworkError, StorageError, AssemblerError) as e:
        logger.error(f"Wizard aborted: {e}")
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
