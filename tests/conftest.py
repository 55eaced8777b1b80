"""Shared fixtures for the Dynamoscan test suite."""
import asyncio
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import base58
import pytest

# Make the src/ layout importable without an install
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from dynamoscan.core.config import Settings  # noqa: E402
from dynamoscan.data.records import AccountInfo, TransactionRecord  # noqa: E402
from dynamoscan.exceptions import UpstreamFetchError  # noqa: E402

SIGNATURE = base58.b58encode(bytes(range(64))).decode()
OTHER_SIGNATURE = base58.b58encode(bytes(range(1, 65))).decode()
PROGRAM_ID = base58.b58encode(bytes(range(32))).decode()

SYSTEM_PROGRAM = "11111111111111111111111111111111"


def make_signature(seed: int) -> str:
    return base58.b58encode(bytes((seed + i) % 256 for i in range(64))).decode()


def make_record(
    logs: Optional[List[str]] = None,
    pre: Optional[List[int]] = None,
    post: Optional[List[int]] = None,
    account_keys: Optional[List[Any]] = None,
    err: Any = None,
    compute_units: Optional[int] = 5000,
    with_meta: bool = True,
    instructions: int = 1,
) -> TransactionRecord:
    """Build a getTransaction-shaped record."""
    raw: Dict[str, Any] = {
        "slot": 1,
        "transaction": {
            "signatures": [SIGNATURE],
            "message": {
                "accountKeys": list(account_keys) if account_keys is not None else ["A", "B"],
                "instructions": [{"programIdIndex": 0, "accounts": [], "data": ""}] * instructions,
            },
        },
    }
    if with_meta:
        raw["meta"] = {
            "err": err,
            "logMessages": list(logs or []),
            "computeUnitsConsumed": compute_units,
            "preBalances": list(pre if pre is not None else [1_000_000_000, 1_000_000_000]),
            "postBalances": list(post if post is not None else [1_000_000_000, 1_000_000_000]),
        }
    return TransactionRecord(raw)


class FakeDataSource:
    """In-memory ChainDataSource that counts every fetch."""

    def __init__(self, transactions=None, accounts=None, signatures=None, delay: float = 0.0):
        self.transactions: Dict[str, Any] = dict(transactions or {})
        self.accounts: Dict[str, Any] = dict(accounts or {})
        self.signatures: Dict[str, List[str]] = dict(signatures or {})
        self.delay = delay
        self.transaction_fetches: List[str] = []
        self.account_fetches: List[str] = []

    async def fetch_transaction(self, signature: str) -> TransactionRecord:
        self.transaction_fetches.append(signature)
        if self.delay:
            await asyncio.sleep(self.delay)
        value = self.transactions.get(signature)
        if isinstance(value, Exception):
            raise value
        if value is None:
            raise UpstreamFetchError(f"Transaction {signature} not found")
        return value

    async def fetch_account(self, public_key: str) -> AccountInfo:
        self.account_fetches.append(public_key)
        value = self.accounts.get(public_key)
        if isinstance(value, Exception):
            raise value
        if value is None:
            raise UpstreamFetchError(f"Account {public_key} not found")
        return value

    async def list_signatures_for_address(self, public_key: str, limit: int = 100) -> List[str]:
        return list(self.signatures.get(public_key, []))[:limit]


@pytest.fixture
def test_settings() -> Settings:
    return Settings(CACHE_MAX_ENTRIES=8, AUDIT_SIGNATURE_SAMPLE=100, AUDIT_FETCH_CONCURRENCY=4)


@pytest.fixture
def benign_record() -> TransactionRecord:
    return make_record(logs=[f"Program {SYSTEM_PROGRAM} invoke [1]", f"Program {SYSTEM_PROGRAM} success"])
