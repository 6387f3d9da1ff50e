"""
Sugar Config Server - MCP Server Implementation

This module exposes the Candy Machine config wizard over the Model Context Protocol. An MCP
client cannot answer questions one at a time, so ``create_config`` takes the operator's
answers up front as a list and replays them through the same question flow the terminal
uses. Rejected answers consume the next answer, exactly as a re-asked question would.

Tools:
- create_config: run the wizard with scripted answers, then save or print the config
- get_config: return the stored config after validating it

Error Handling:
- Tools never raise through the protocol; failures are logged and returned as messages
- Running out of answers cancels the run, nothing is written
- RPC and storage failures abort the run, nothing is written

License: MIT-0
"""

import time
from typing import List, Optional

from pydantic import Field, ValidationError

from mcp.server.fastmcp import Context, FastMCP
from mcp.server.fastmcp.utilities.logging import get_logger

from mcp_sugar_config import config
from mcp_sugar_config import wizard
from mcp_sugar_config.errors import (
    AnswersExhaustedError,
    NetworkError,
    StorageError,
    WizardCancelledError,
)
from mcp_sugar_config.persistence import FileStorage, PersistResult
from mcp_sugar_config.prompts import ScriptedPrompter
from mcp_sugar_config.schemas import load_document, serialize_document
from mcp_sugar_config.solana_utils import SolanaAccountResolver

logger = get_logger(__name__)

MAX_ANSWERS = 200
MAX_ANSWER_LENGTH = 1000

# --- Server Setup ---
mcp = FastMCP(name="Sugar Config Server")


def validate_answers(answers: List[str]) -> None:
    """
    Validate the scripted answers before starting a run.

    Raises:
        ValueError: If the list is too long or an answer is not a short string
    """
    if not isinstance(answers, list):
        raise ValueError("Answers must be a list of strings")
    if len(answers) > MAX_ANSWERS:
        raise ValueError(f"Too many answers (max {MAX_ANSWERS})")
    for answer in answers:
        if not isinstance(answer, str):
            raise ValueError("Every answer must be a string")
        if len(answer) > MAX_ANSWER_LENGTH:
            raise ValueError(f"Answer is too long (max {MAX_ANSWER_LENGTH} characters)")


def _format_transcript(prompter: ScriptedPrompter) -> str:
    return "\n".join(prompter.transcript)


@mcp.tool()
async def create_config(
    context: Context,
    answers: List[str] = Field(
        ...,
        description=(
            "Answers to the wizard questions, in the order they are asked. Use an empty string to "
            "accept a default or skip an optional question, indices for choices (e.g. '0,2' for features)."
        ),
    ),
    config_path: Optional[str] = Field(None, description="Where to save the config (defaults to CONFIG_FILEPATH)."),
    rpc_url: Optional[str] = Field(None, description="Solana RPC endpoint used to check token accounts."),
) -> str:
    """Creates a Candy Machine config file by replaying answers through the config wizard."""
    start_time = time.time()
    path = config_path or config.CONFIG_FILEPATH
    prompter = ScriptedPrompter([])
    try:
        validate_answers(answers)
        prompter = ScriptedPrompter(answers)

        async with SolanaAccountResolver(rpc_endpoint=rpc_url or config.RPC_ENDPOINT) as resolver:
            result = await wizard.create_config(prompter, FileStorage(), resolver, path)

        duration = time.time() - start_time
        logger.info(f"Config wizard finished: result={result.value}, path={path}, duration={duration:.3f}s")

        summary = {
            PersistResult.written: f"Config saved to {path}.",
            PersistResult.overwritten: f"Config overwritten at {path}.",
            PersistResult.printed: f"{path} was kept, the new config was printed instead.",
        }[result]
        if prompter.remaining:
            summary += f" {prompter.remaining} unused answer(s) were ignored."
        return f"{summary}\n\n{_format_transcript(prompter)}"

    except ValueError as e:
        logger.error(f"Invalid answers provided to create_config: {e}")
        return f"Error: {e}"
    except AnswersExhaustedError as e:
        logger.warning(f"Config wizard ran out of answers: {e}")
        return f"Error: not enough answers, nothing was saved. {e}\n\n{_format_transcript(prompter)}"
    except WizardCancelledError as e:
        logger.info(f"Config wizard cancelled: {e}")
        return f"Config creation cancelled, nothing was saved.\n\n{_format_transcript(prompter)}"
    except NetworkError as e:
        logger.error(f"Config wizard aborted by RPC failure after {time.time() - start_time:.3f}s: {e}")
        return f"Error: could not check accounts on-chain, nothing was saved. {e}"
    except StorageError as e:
        logger.error(f"Config wizard could not save {path}: {e}")
        return f"Error: could not save the config file. {e}"
    except Exception as e:
        logger.exception(f"Unexpected error running the config wizard: {e}")
        return "An unexpected server error occurred while creating the config."


@mcp.tool()
async def get_config(
    context: Context,
    config_path: Optional[str] = Field(None, description="Config file to read (defaults to CONFIG_FILEPATH)."),
) -> str:
    """Returns the stored Candy Machine config after validating it."""
    path = config_path or config.CONFIG_FILEPATH
    try:
        storage = FileStorage()
        if not storage.exists(path):
            logger.warning(f"Config file not found: {path}")
            return f"Config file {path} not found."
        document = load_document(storage.read(path))
        return serialize_document(document)
    except ValidationError as e:
        logger.error(f"Invalid config in {path}: {e}")
        return f"Error: {path} is not a valid config - {e}"
    except StorageError as e:
        logger.error(f"Could not read config {path}: {e}")
        return f"Error: {e}"
    except Exception as e:
        logger.exception(f"Unexpected error reading config {path}: {e}")
        return "An unexpected error occurred while reading the config."


# --- Main Execution ---
if __name__ == "__main__":
    logger.info("Starting Sugar Config MCP Server...")
    try:
        mcp.run(transport="stdio")
    except KeyboardInterrupt:
        logger.info("Server shutdown requested by user")
    except Exception as e:
        logger.exception(f"Server error: {e}")
