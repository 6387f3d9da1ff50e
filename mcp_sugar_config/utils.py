from pydantic import AnyUrl, TypeAdapter, ValidationError
from solders.pubkey import Pubkey

_URL_ADAPTER = TypeAdapter(AnyUrl)


def is_valid_pubkey(value: str) -> bool:
    """Whether the string decodes to a 32-byte base58 public key."""
    try:
        Pubkey.from_string(value)
    except Exception:
        return False
    return True


def check_pubkey(value: str) -> str:
    """Pydantic-style check: returns the value or raises ValueError."""
    if not is_valid_pubkey(value):
        raise ValueError(f"'{value}' is not a valid public key.")
    return value


def check_uri(value: str) -> str:
    """Returns the value if it parses as an absolute URI, raises ValueError otherwise."""
    try:
        _URL_ADAPTER.validate_python(value)
    except ValidationError as e:
        raise ValueError(f"'{value}' is not a valid URI: {e.errors()[0]['msg']}")
    return value
