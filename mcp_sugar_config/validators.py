"""
Answer Validation Engine

``ask_validated`` wraps a single input primitive with a validator and owns the retry loop:

- the validator receives the interpreted answer and returns the accepted value
  (returning None accepts the answer as is, returning False rejects it);
- raising InputValidationError shows the reason and asks the same question again, nothing
  else changes;
- any other exception (NetworkError, ValidatorTimeoutError, ...) propagates and aborts the
  wizard;
- validators may be coroutines (on-chain lookups); they are bounded by VALIDATION_TIMEOUT.

The rest of the module is the validator catalog used by the question flow, including the
date normalization policy for free-text dates.
"""
import asyncio
import inspect
import math
import re
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional, Protocol, Union

from mcp_sugar_config.config import (
    MAX_CREATORS,
    MAX_FREEZE_DAYS,
    MAX_NAME_LENGTH,
    MAX_SELLER_FEE_BASIS_POINTS,
    MAX_SYMBOL_LENGTH,
    MAX_URI_LENGTH,
    SECONDS_PER_DAY,
    TOTAL_CREATOR_SHARE,
    VALIDATION_TIMEOUT,
)
from mcp_sugar_config.errors import InputValidationError, ValidatorTimeoutError
from mcp_sugar_config.prompts import PromptKind, PromptOptions, Prompter, ask
from mcp_sugar_config.solana_utils import AccountInfo
from mcp_sugar_config.utils import check_uri, is_valid_pubkey
from mcp.server.fastmcp.utilities.logging import get_logger

logger = get_logger(__name__)

Validator = Callable[[Any], Union[Any, Awaitable[Any]]]

_INT_PATTERN = re.compile(r"^\d+$")

# Accepted layouts for free-text dates, tried in order before ISO 8601
DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)
CANONICAL_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class AccountResolver(Protocol):
    async def get_account(self, address: str) -> Optional[AccountInfo]:
        ...


async def ask_validated(
    prompter: Prompter,
    message: str,
    options: PromptOptions,
    validator: Optional[Validator] = None,
    timeout: float = VALIDATION_TIMEOUT,
) -> Any:
    """Ask until an answer is accepted and return the accepted value."""
    while True:
        try:
            answer = await ask(prompter, message, options)
            if validator is None:
                return answer
            if options.kind == PromptKind.text and options.allow_empty and answer == "":
                return answer

            result = validator(answer)
            if inspect.isawaitable(result):
                try:
                    result = await asyncio.wait_for(result, timeout)
                except asyncio.TimeoutError:
                    logger.error(f"Validation timed out after {timeout}s for question: {message}")
                    raise ValidatorTimeoutError(f"Validation did not finish within {timeout} seconds.")

            if result is False:
                raise InputValidationError("Invalid input.")
            return answer if result is None else result
        except InputValidationError as e:
            logger.warning(f"Answer rejected: {e}")
            prompter.show_error(str(e))


# --- Numbers ---

def parse_int(text: str) -> int:
    """Parse a non-negative integer."""
    value = text.strip()
    if not _INT_PATTERN.match(value):
        raise InputValidationError(f"Couldn't parse input of '{text}' to a number.")
    return int(value)


def parse_float(text: str) -> float:
    """Parse a finite float."""
    try:
        value = float(text.strip())
    except ValueError:
        raise InputValidationError(f"Couldn't parse input of '{text}' to a number.")
    if not math.isfinite(value):
        raise InputValidationError(f"Couldn't parse input of '{text}' to a number.")
    return value


def validate_price(text: str) -> float:
    price = parse_float(text)
    if price <= 0:
        raise InputValidationError("Price must be greater than 0.")
    return price


def validate_item_count(text: str) -> int:
    number = parse_int(text)
    if number <= 0:
        raise InputValidationError("The number of items must be greater than 0.")
    return number


def validate_seller_fee(text: str) -> int:
    fee = parse_int(text)
    if fee > MAX_SELLER_FEE_BASIS_POINTS:
        raise InputValidationError(f"Seller fee basis points must be {MAX_SELLER_FEE_BASIS_POINTS:,} or less.")
    return fee


def validate_creator_count(text: str) -> int:
    count = parse_int(text)
    if not 1 <= count <= MAX_CREATORS:
        raise InputValidationError(f"The number of creators must be between 1 and {MAX_CREATORS}.")
    return count


def validate_freeze_days(text: str) -> int:
    days = parse_int(text)
    if days > MAX_FREEZE_DAYS:
        raise InputValidationError(f"Freeze time cannot be greater than {MAX_FREEZE_DAYS} days.")
    return days


def days_to_seconds(days: int) -> int:
    return days * SECONDS_PER_DAY


def validate_discount_price(text: str) -> float:
    price = parse_float(text)
    if price <= 0:
        raise InputValidationError("Discount price must be greater than 0.")
    return price


def end_amount_validator(item_count: int) -> Validator:
    """Amount end setting: never more than the items in the candy machine."""

    def validate(text: str) -> int:
        amount = parse_int(text)
        if amount > item_count:
            raise InputValidationError(
                "Your end settings amount cannot be more than the number of items in your candy machine."
            )
        return amount

    return validate


class ShareTally:
    """
    Running total of royalty shares accepted so far in one creators step.

    A share is rejected when it pushes the total over 100, and the last creator's share is
    rejected unless it brings the total to exactly 100. Partial totals below 100 are fine.
    """

    def __init__(self):
        self.total = 0

    def check(self, text: str, is_last: bool) -> int:
        share = parse_int(text)
        new_total = self.total + share
        if new_total > TOTAL_CREATOR_SHARE:
            raise InputValidationError("Royalty share total has exceeded 100 percent.")
        if is_last and new_total != TOTAL_CREATOR_SHARE:
            raise InputValidationError("Royalty share for all creators must total 100 percent.")
        return share

    def validator(self, is_last: bool) -> Validator:
        return lambda text: self.check(text, is_last)

    def add(self, share: int) -> None:
        self.total += share


# --- Text ---

def validate_symbol(text: str) -> str:
    if len(text) > MAX_SYMBOL_LENGTH:
        raise InputValidationError(f"Symbol must be {MAX_SYMBOL_LENGTH} characters or less.")
    return text


def validate_hidden_name(text: str) -> str:
    if len(text) > MAX_NAME_LENGTH:
        raise InputValidationError(
            f"Your hidden settings name probably cannot be longer than {MAX_NAME_LENGTH} characters."
        )
    return text


def validate_uri(text: str) -> str:
    if len(text) > MAX_URI_LENGTH:
        raise InputValidationError(f"The URI cannot be longer than {MAX_URI_LENGTH} characters.")
    try:
        return check_uri(text)
    except ValueError as e:
        raise InputValidationError(str(e))


def validate_pubkey(text: str) -> str:
    if not is_valid_pubkey(text):
        raise InputValidationError(f"'{text}' is not a valid Solana address.")
    return text


# --- On-chain accounts ---

def spl_mint_validator(resolver: AccountResolver) -> Validator:
    """Address of an existing SPL token mint."""

    async def validate(text: str) -> str:
        address = validate_pubkey(text)
        account = await resolver.get_account(address)
        if account is None:
            raise InputValidationError(f"Mint account {address} was not found.")
        if not account.is_mint:
            raise InputValidationError(f"Account {address} is not an SPL token mint.")
        return address

    return validate


def spl_token_account_validator(resolver: AccountResolver) -> Validator:
    """Address of an existing SPL token account."""

    async def validate(text: str) -> str:
        address = validate_pubkey(text)
        account = await resolver.get_account(address)
        if account is None:
            raise InputValidationError(f"Token account {address} was not found.")
        if not account.is_token_account:
            raise InputValidationError(f"Account {address} is not an SPL token account.")
        return address

    return validate


# --- Dates ---

def normalize_date(text: str, now: Optional[datetime] = None) -> str:
    """
    Normalize a free-text date to ``YYYY-MM-DDTHH:MM:SSZ`` (UTC).

    Accepts ``now``, unix seconds, the layouts in DATE_FORMATS and ISO 8601. Times without
    an offset are taken as UTC. Anything else raises InputValidationError.
    """
    value = text.strip()
    if not value:
        raise InputValidationError("A date is required.")

    if value.lower() == "now":
        moment = now or datetime.now(timezone.utc)
    elif value.isdigit():
        try:
            moment = datetime.fromtimestamp(int(value), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            raise InputValidationError(f"Timestamp '{value}' is out of range.")
    else:
        moment = _parse_datetime(value)

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    try:
        moment = moment.astimezone(timezone.utc)
    except (OverflowError, ValueError):
        raise InputValidationError(f"Date '{value}' is out of range.")
    return moment.strftime(CANONICAL_DATE_FORMAT)


def _parse_datetime(value: str) -> datetime:
    for date_format in DATE_FORMATS:
        try:
            return datetime.strptime(value, date_format)
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise InputValidationError(
            f"Couldn't parse '{value}' as a date. Try YYYY-MM-DD HH:MM:SS [+/-]UTC-OFFSET."
        )
