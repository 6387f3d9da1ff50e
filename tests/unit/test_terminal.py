from io import StringIO
from unittest.mock import MagicMock, patch

from rich.console import Console
from typer.testing import CliRunner

from mcp_sugar_config import terminal
from mcp_sugar_config.errors import AssemblerError
from mcp_sugar_config.schemas import ConfigDocument, serialize_document
from mcp_sugar_config.terminal import EXIT_CANCELLED, RichPrompter, app


def test_println_writes_config_verbatim(document_values):
    values = dict(document_values)
    values["symbol"] = ":100:"
    values["hidden_settings"] = {"name": "Mystery #", "uri": "https://arweave.net/" + "a" * 80}
    content = serialize_document(ConfigDocument.model_validate(values))
    buffer = StringIO()

    RichPrompter(Console(file=buffer, width=40)).println(content)

    assert buffer.getvalue() == content + "\n"


def test_println_keeps_square_brackets():
    buffer = StringIO()
    RichPrompter(Console(file=buffer, width=40)).println("[bold]not markup[/bold]")
    assert buffer.getvalue() == "[bold]not markup[/bold]\n"


def test_cli_interrupt_exits_as_cancelled(tmp_path):
    with patch.object(terminal, "run_wizard", MagicMock(side_effect=KeyboardInterrupt)):
        result = CliRunner().invoke(app, ["--config", str(tmp_path / "config.json")])
    assert result.exit_code == EXIT_CANCELLED


def test_cli_assembler_error_exits_with_error(tmp_path):
    with patch.object(terminal, "run_wizard", MagicMock(side_effect=AssemblerError("Config fields not assigned: whitelist"))):
        result = CliRunner().invoke(app, ["--config", str(tmp_path / "config.json")])
    assert result.exit_code == 1
    assert "whitelist" in result.output
