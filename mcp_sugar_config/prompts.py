"""
Input Primitives

Atomic prompt kinds (text, confirm, single choice, multi choice) sharing one contract:
``await ask(prompter, message, options)`` suspends until the prompt collaborator answers
and returns the answer interpreted for its kind. Interpretation errors (an unknown choice,
an empty answer with no default) raise InputValidationError; no primitive performs
semantic validation, that is the job of ``mcp_sugar_config.validators``.

The prompt collaborator only renders the question and returns the raw text typed by the
operator. ScriptedPrompter replays prepared answers (tests and the MCP surface); the
terminal implementation lives in ``mcp_sugar_config.terminal``.
"""
import re
from enum import Enum
from typing import Any, FrozenSet, Iterable, List, Optional, Protocol, Tuple

from pydantic import BaseModel, ConfigDict

from mcp_sugar_config.errors import AnswersExhaustedError, InputValidationError

TRUE_ANSWERS = frozenset({"y", "yes", "true", "1"})
FALSE_ANSWERS = frozenset({"n", "no", "false", "0"})
_INDEX_PATTERN = re.compile(r"^[0-9]+$")


class PromptKind(str, Enum):
    text = "text"
    confirm = "confirm"
    single_choice = "single_choice"
    multi_choice = "multi_choice"


class PromptOptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: PromptKind = PromptKind.text
    default: Optional[str] = None
    allow_empty: bool = False
    items: Tuple[str, ...] = ()
    allow_multiple: bool = False

    @property
    def is_choice(self) -> bool:
        return self.kind in (PromptKind.single_choice, PromptKind.multi_choice)


def text_options(default: Optional[str] = None, allow_empty: bool = False) -> PromptOptions:
    return PromptOptions(kind=PromptKind.text, default=default, allow_empty=allow_empty)


def confirm_options(default: Optional[bool] = None) -> PromptOptions:
    return PromptOptions(
        kind=PromptKind.confirm,
        default=None if default is None else ("yes" if default else "no"),
    )


def choice_options(items: Iterable[str], default: Optional[int] = None) -> PromptOptions:
    return PromptOptions(
        kind=PromptKind.single_choice,
        items=tuple(items),
        default=None if default is None else str(default),
    )


def multi_choice_options(items: Iterable[str], allow_empty: bool = True) -> PromptOptions:
    return PromptOptions(
        kind=PromptKind.multi_choice,
        items=tuple(items),
        allow_empty=allow_empty,
        allow_multiple=True,
    )


class Prompter(Protocol):
    """The prompt collaborator owned by the surrounding shell."""

    async def ask(self, message: str, options: PromptOptions) -> str:
        ...

    def println(self, text: str = "") -> None:
        ...

    def show_error(self, text: str) -> None:
        ...


# --- Interpretation ---

def parse_text(raw: str, options: PromptOptions) -> str:
    value = raw.strip()
    if value:
        return value
    if options.default is not None:
        return options.default
    if options.allow_empty:
        return ""
    raise InputValidationError("An answer is required.")


def parse_confirm(raw: str, options: PromptOptions) -> bool:
    value = raw.strip().lower() or (options.default or "")
    if value in TRUE_ANSWERS:
        return True
    if value in FALSE_ANSWERS:
        return False
    raise InputValidationError("Please answer yes or no.")


def _choice_index(token: str, items: Tuple[str, ...]) -> int:
    if _INDEX_PATTERN.match(token):
        index = int(token)
        if index < len(items):
            return index
        raise InputValidationError(f"Choice {index} is out of range (0-{len(items) - 1}).")
    lowered = token.lower()
    for index, item in enumerate(items):
        if item.lower() == lowered:
            return index
    raise InputValidationError(f"'{token}' is not one of the available choices.")


def parse_single_choice(raw: str, options: PromptOptions) -> int:
    value = raw.strip() or (options.default or "")
    if not value:
        raise InputValidationError("Please pick one of the choices.")
    return _choice_index(value, options.items)


def parse_multi_choice(raw: str, options: PromptOptions) -> FrozenSet[int]:
    tokens = [token.strip() for token in raw.split(",") if token.strip()]
    if not tokens:
        if options.allow_empty:
            return frozenset()
        raise InputValidationError("Please pick at least one of the choices.")
    selected = frozenset(_choice_index(token, options.items) for token in tokens)
    if len(selected) > 1 and not options.allow_multiple:
        raise InputValidationError("Only one choice is allowed.")
    return selected


_PARSERS = {
    PromptKind.text: parse_text,
    PromptKind.confirm: parse_confirm,
    PromptKind.single_choice: parse_single_choice,
    PromptKind.multi_choice: parse_multi_choice,
}


def interpret(raw: str, options: PromptOptions) -> Any:
    """Interpret a raw answer according to the prompt kind."""
    return _PARSERS[options.kind](raw, options)


async def ask(prompter: Prompter, message: str, options: PromptOptions) -> Any:
    """Ask once and interpret the answer. Raises InputValidationError on a malformed answer."""
    raw = await prompter.ask(message, options)
    return interpret(raw, options)


class ScriptedPrompter:
    """
    Replays a fixed list of raw answers, one per question asked.

    Everything shown to the operator is recorded in ``transcript`` and rejection reasons in
    ``errors``. Running out of answers cancels the wizard.
    """

    def __init__(self, answers: Iterable[str]):
        self._answers = list(answers)
        self._position = 0
        self.questions: List[str] = []
        self.transcript: List[str] = []
        self.errors: List[str] = []

    @property
    def remaining(self) -> int:
        return len(self._answers) - self._position

    async def ask(self, message: str, options: PromptOptions) -> str:
        self.questions.append(message)
        self.transcript.append(f"? {message}")
        if self._position >= len(self._answers):
            raise AnswersExhaustedError(f"No answer provided for: {message}")
        answer = self._answers[self._position]
        self._position += 1
        self.transcript.append(f"> {answer}")
        return answer

    def println(self, text: str = "") -> None:
        self.transcript.append(text)

    def show_error(self, text: str) -> None:
        self.errors.append(text)
        self.transcript.append(f"! {text}")
