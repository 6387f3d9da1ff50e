"""
Shared fixtures for the sugar config tests: in-memory collaborators and answer scripts.
"""
from typing import Dict, List, Optional, Sequence, Tuple

import pytest
from dotenv import load_dotenv
from solders.keypair import Keypair
from spl.token.constants import TOKEN_PROGRAM_ID

from mcp_sugar_config.errors import StorageError
from mcp_sugar_config.solana_utils import MINT_ACCOUNT_SIZE, TOKEN_ACCOUNT_SIZE, AccountInfo


class FakeAccountResolver:
    """Answers account lookups from a dict, recording every address asked for."""

    def __init__(self, accounts: Optional[Dict[str, AccountInfo]] = None):
        self.accounts = accounts or {}
        self.calls: List[str] = []

    async def get_account(self, address: str) -> Optional[AccountInfo]:
        self.calls.append(address)
        return self.accounts.get(address)


class MemoryStorage:
    def __init__(self, files: Optional[Dict[str, str]] = None):
        self.files = dict(files or {})
        self.writes: List[Tuple[str, str, bool]] = []

    def exists(self, path: str) -> bool:
        return path in self.files

    def write(self, path: str, content: str, override: bool = False) -> None:
        if path in self.files and not override:
            raise StorageError(f"File {path} already exists.")
        self.writes.append((path, content, override))
        self.files[path] = content


@pytest.fixture(scope="session", autouse=True)
def load_test_env():
    load_dotenv()


@pytest.fixture
def new_address():
    """Factory for fresh, valid base58 addresses."""
    return lambda: str(Keypair().pubkey())


@pytest.fixture
def fake_resolver() -> FakeAccountResolver:
    return FakeAccountResolver()


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def mint_account() -> AccountInfo:
    return AccountInfo(owner=str(TOKEN_PROGRAM_ID), lamports=1_461_600, data_len=MINT_ACCOUNT_SIZE)


@pytest.fixture
def token_account() -> AccountInfo:
    return AccountInfo(owner=str(TOKEN_PROGRAM_ID), lamports=2_039_280, data_len=TOKEN_ACCOUNT_SIZE)


@pytest.fixture
def build_answers():
    """
    Builds the raw answer list for a whole wizard run.

    ``creators`` are (address, share) pairs; ``treasury`` and ``feature_answers`` are the
    answers for the treasury step and the selected feature sub-flows, in question order.
    """

    def build(
        treasury: Sequence[str],
        creators: Sequence[Tuple[str, str]],
        features: str = "",
        feature_answers: Sequence[str] = (),
        upload: Sequence[str] = ("",),
        price: str = "1.5",
        number: str = "100",
        symbol: str = "",
        seller_fee: str = "500",
        go_live: str = "",
        retain_authority: str = "y",
        is_mutable: str = "y",
    ) -> List[str]:
        answers = [price, number, symbol, seller_fee, go_live, str(len(creators))]
        for address, share in creators:
            answers += [address, share]
        answers.append(features)
        answers += list(treasury)
        answers += list(feature_answers)
        answers += list(upload)
        answers += [retain_authority, is_mutable]
        return answers

    return build


@pytest.fixture
def document_values(new_address) -> Dict[str, object]:
    """Field values of a minimal valid config, no optional features."""
    return {
        "price": 1.5,
        "number": 100,
        "symbol": "",
        "seller_fee_basis_points": 500,
        "go_live_date": None,
        "creators": ({"address": new_address(), "share": 60}, {"address": new_address(), "share": 40}),
        "treasury": {"kind": "sol", "address": new_address()},
        "gatekeeper": None,
        "whitelist": None,
        "end_settings": None,
        "hidden_settings": None,
        "freeze_time": None,
        "upload_method": {"kind": "bundlr"},
        "retain_authority": True,
        "is_mutable": True,
    }
