"""
Raw chain records as delivered by the data source.

``TransactionRecord`` wraps the JSON object returned by ``getTransaction``.
Its accessors never raise on malformed payloads: anything that cannot be
decoded degrades to empty evidence.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional


def _int_list(values: Any) -> List[int]:
    if not isinstance(values, list):
        return []
    try:
        return [int(v) for v in values]
    except (TypeError, ValueError):
        return []


@dataclass(frozen=True)
class TransactionRecord:
    """A fetched transaction, possibly missing its execution metadata."""

    raw: Mapping[str, Any] = field(default_factory=dict)

    @property
    def meta(self) -> Optional[Mapping[str, Any]]:
        meta = self.raw.get("meta")
        return meta if isinstance(meta, Mapping) else None

    @property
    def message(self) -> Mapping[str, Any]:
        tx = self.raw.get("transaction")
        if not isinstance(tx, Mapping):
            return {}
        message = tx.get("message")
        return message if isinstance(message, Mapping) else {}

    @property
    def signature(self) -> Optional[str]:
        tx = self.raw.get("transaction")
        if isinstance(tx, Mapping):
            signatures = tx.get("signatures")
            if isinstance(signatures, list) and signatures and isinstance(signatures[0], str):
                return signatures[0]
        return None

    @property
    def pre_balances(self) -> List[int]:
        return _int_list(self.meta.get("preBalances")) if self.meta else []

    @property
    def post_balances(self) -> List[int]:
        return _int_list(self.meta.get("postBalances")) if self.meta else []

    def account_keys(self) -> List[str]:
        """Account keys listed in the transaction message, in order.

        Accepts both the ``json`` encoding (plain strings) and the
        ``jsonParsed`` encoding (objects with a ``pubkey`` entry).
        """
        keys = self.message.get("accountKeys")
        if not isinstance(keys, list):
            return []
        result = []
        for key in keys:
            if isinstance(key, str):
                result.append(key)
            elif isinstance(key, Mapping) and isinstance(key.get("pubkey"), str):
                result.append(key["pubkey"])
            else:
                return []
        return result

    def balance_accounts(self) -> List[str]:
        """Account keys in the order the balance arrays use.

        Versioned transactions append lookup-table addresses, writable first,
        after the static message keys.
        """
        keys = self.account_keys()
        loaded = self.meta.get("loadedAddresses") if self.meta else None
        if isinstance(loaded, Mapping):
            for group in ("writable", "readonly"):
                extra = loaded.get(group)
                if isinstance(extra, list):
                    keys.extend(k for k in extra if isinstance(k, str))
        return keys

    @property
    def instruction_count(self) -> int:
        instructions = self.message.get("instructions")
        return len(instructions) if isinstance(instructions, list) else 0


@dataclass(frozen=True)
class AccountInfo:
    """On-chain account as needed by the contract audit path."""

    public_key: str
    executable: bool
    data: bytes = b""
    owner: Optional[str] = None
    lamports: int = 0

    @classmethod
    def from_rpc(cls, public_key: str, value: Dict[str, Any], data: bytes) -> "AccountInfo":
        return cls(
            public_key=public_key,
            executable=bool(value.get("executable", False)),
            data=data,
            owner=value.get("owner"),
            lamports=int(value.get("lamports") or 0),
        )
