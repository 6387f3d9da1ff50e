"""
Persistence Gateway

Hands the finished ConfigDocument to storage or to the operator's console. When the
target file already exists the operator chooses between overwriting it and only printing
the new config; otherwise the file is written. Printing and writing use the same
serialized text, so both outputs are byte-identical for the same answers.

FileStorage writes through a temporary file in the target directory and renames it into
place, so a failed write never leaves a partial config behind.
"""
import os
import tempfile
from enum import Enum
from pathlib import Path
from typing import Protocol

from mcp_sugar_config.errors import StorageError
from mcp_sugar_config.prompts import Prompter, choice_options
from mcp_sugar_config.schemas import ConfigDocument, serialize_document
from mcp_sugar_config.validators import ask_validated
from mcp.server.fastmcp.utilities.logging import get_logger

logger = get_logger(__name__)


class PersistChoice(str, Enum):
    overwrite = "overwrite"
    print_only = "print_only"

    @property
    def label(self) -> str:
        return "Overwrite the file" if self is PersistChoice.overwrite else "Log to console"


class PersistResult(str, Enum):
    written = "written"
    overwritten = "overwritten"
    printed = "printed"


class Storage(Protocol):
    def exists(self, path: str) -> bool:
        ...

    def write(self, path: str, content: str, override: bool = False) -> None:
        ...


class FileStorage:
    """Local filesystem storage with all-or-nothing writes."""

    def exists(self, path: str) -> bool:
        return Path(path).exists()

    def write(self, path: str, content: str, override: bool = False) -> None:
        target = Path(path)
        if target.exists() and not override:
            raise StorageError(f"File {target} already exists.")
        temp_name = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w",
                encoding="utf-8",
                dir=target.parent,
                prefix=f".{target.name}.",
                suffix=".tmp",
                delete=False,
            ) as temp_file:
                temp_name = temp_file.name
                temp_file.write(content)
                temp_file.flush()
                os.fsync(temp_file.fileno())
            os.replace(temp_name, target)
            logger.info(f"Successfully saved config to {target}")
        except OSError as e:
            logger.error(f"Error saving config to {target}: {e}")
            if temp_name and os.path.exists(temp_name):
                os.unlink(temp_name)
            raise StorageError(f"Could not write {target}: {e}")

    def read(self, path: str) -> str:
        try:
            return Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Could not read {path}: {e}")


class PersistenceGateway:
    def __init__(self, storage: Storage, prompter: Prompter, path: str):
        self.storage = storage
        self.prompter = prompter
        self.path = path

    async def persist(self, document: ConfigDocument) -> PersistResult:
        """Write the document, or print it when the operator keeps an existing file."""
        choice = PersistChoice.overwrite
        exists = self.storage.exists(self.path)
        if exists:
            choices = list(PersistChoice)
            index = await ask_validated(
                self.prompter,
                f'The file "{self.path}" already exists. Do you want to overwrite it with the new config '
                "or log the new config to the console?",
                choice_options([item.label for item in choices], default=0),
            )
            choice = choices[index]

        content = serialize_document(document)

        if choice is PersistChoice.print_only:
            logger.info(f"Printing config instead of overwriting {self.path}")
            self.prompter.println("Logging config to console:\n")
            self.prompter.println(content)
            return PersistResult.printed

        self.prompter.println(f'Saving config to file: "{self.path}"\n')
        self.storage.write(self.path, content, override=exists)
        self.prompter.println("Successfully generated the config file.")
        return PersistResult.overwritten if exists else PersistResult.written
