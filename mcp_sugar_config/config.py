import os
import logging
from typing import Optional
from dotenv import load_dotenv

# Import custom errors
from mcp_sugar_config.errors import ConfigurationError

"""
Configuration Management for the Sugar Config Wizard

This module handles configuration loading and validation for the Candy Machine config wizard.
It loads settings from environment variables with sensible defaults and validates them so
that a misconfigured environment fails fast instead of in the middle of a wizard run.

Configuration Sources (in order of precedence):
1. Environment variables
2. Default values defined in this module

Environment Variables:
    RPC_ENDPOINT: Solana RPC endpoint URL used for on-chain account checks
    CONFIG_FILEPATH: Path of the generated Candy Machine config file
    RPC_TIMEOUT: Timeout in seconds for a single RPC request
    VALIDATION_TIMEOUT: Upper bound in seconds for any asynchronous answer validation
"""

# Set up logger
logger = logging.getLogger(__name__)

# Load environment variables
load_dotenv()


def _get_env_str(key: str, default: str, required: bool = False) -> str:
    """Get environment variable as string with validation."""
    value = os.getenv(key, default)
    if required and not value:
        raise ConfigurationError(f"Required environment variable {key} is not set")
    return value


def _get_env_int(key: str, default: int, min_val: Optional[int] = None, max_val: Optional[int] = None) -> int:
    """Get environment variable as integer with validation."""
    try:
        value = int(os.getenv(key, str(default)))
    except ValueError:
        raise ConfigurationError(f"Environment variable {key} must be a valid integer")
    if min_val is not None and value < min_val:
        raise ConfigurationError(f"Environment variable {key} must be >= {min_val}")
    if max_val is not None and value > max_val:
        raise ConfigurationError(f"Environment variable {key} must be <= {max_val}")
    return value


def _get_env_float(key: str, default: float, min_val: Optional[float] = None, max_val: Optional[float] = None) -> float:
    """Get environment variable as float with validation."""
    try:
        value = float(os.getenv(key, str(default)))
    except ValueError:
        raise ConfigurationError(f"Environment variable {key} must be a valid float")
    if min_val is not None and value < min_val:
        raise ConfigurationError(f"Environment variable {key} must be >= {min_val}")
    if max_val is not None and value > max_val:
        raise ConfigurationError(f"Environment variable {key} must be <= {max_val}")
    return value


# --- Candy Machine Limits ---
MAX_CREATORS = 4
MAX_SYMBOL_LENGTH = 10
MAX_SELLER_FEE_BASIS_POINTS = 10_000
MAX_NAME_LENGTH = 25
MAX_URI_LENGTH = 200
MAX_FREEZE_DAYS = 31
SECONDS_PER_DAY = 86_400
TOTAL_CREATOR_SHARE = 100

CONFIG_DOCS_URL = "https://docs.metaplex.com/tools/sugar/configuration"

try:
    # --- Solana Configuration ---
    RPC_ENDPOINT = _get_env_str("RPC_ENDPOINT", "https://api.devnet.solana.com", required=True)
    RPC_TIMEOUT = _get_env_float("RPC_TIMEOUT", 10.0, min_val=0.1, max_val=300.0)

    # --- Wizard Configuration ---
    VALIDATION_TIMEOUT = _get_env_float("VALIDATION_TIMEOUT", 30.0, min_val=0.1, max_val=600.0)

    # --- Output ---
    CONFIG_FILEPATH = _get_env_str("CONFIG_FILEPATH", "config.json", required=True)

    logger.info("Configuration loaded successfully")

except ConfigurationError as e:
    logger.error(f"Configuration error: {e}")
    raise
except Exception as e:
    logger.error(f"Unexpected error loading configuration: {e}")
    raise ConfigurationError(f"Failed to load configuration: {e}")
