from typing import Any, Dict, List

from pydantic import ValidationError

from mcp_sugar_config.errors import AssemblerError, IncompleteConfigError
from mcp_sugar_config.schemas import FIELD_NAMES, ConfigDocument
from mcp.server.fastmcp.utilities.logging import get_logger

logger = get_logger(__name__)


class ConfigAssembler:
    """
    Write-once accumulator for a single wizard run.

    Every ConfigDocument field must be assigned exactly once, optional features through
    ``set_absent`` when they were not selected. ``build`` refuses to emit a document until
    all fields are assigned, and the assembler cannot be written to afterwards.
    """

    def __init__(self):
        self._values: Dict[str, Any] = {}
        self._built = False

    def set(self, field: str, value: Any) -> None:
        if self._built:
            raise AssemblerError(f"Cannot set '{field}': the document was already built.")
        if field not in FIELD_NAMES:
            raise AssemblerError(f"Unknown config field '{field}'.")
        if field in self._values:
            raise AssemblerError(f"Config field '{field}' was already set.")
        self._values[field] = value
        logger.debug(f"Config field '{field}' assigned")

    def set_absent(self, field: str) -> None:
        self.set(field, None)

    def is_set(self, field: str) -> bool:
        return field in self._values

    def get(self, field: str) -> Any:
        try:
            return self._values[field]
        except KeyError:
            raise AssemblerError(f"Config field '{field}' has not been set yet.")

    @property
    def missing_fields(self) -> List[str]:
        return [field for field in FIELD_NAMES if field not in self._values]

    def build(self) -> ConfigDocument:
        """Validate and emit the finished document."""
        if self._built:
            raise AssemblerError("The document was already built.")
        missing = self.missing_fields
        if missing:
            raise IncompleteConfigError(f"Config fields not assigned: {', '.join(missing)}")
        try:
            document = ConfigDocument.model_validate(self._values)
        except ValidationError as e:
            logger.error(f"Assembled config failed validation: {e}")
            raise AssemblerError(f"Assembled config is invalid: {e}")
        self._built = True
        return document
