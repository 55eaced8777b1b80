"""State-Change Differ: pre/post balance comparison per account."""

from typing import List, Optional, Sequence

from ..data.records import TransactionRecord
from ..utils.logger import get_logger
from .types import StateChange

logger = get_logger(__name__)

BALANCE_FIELD = "lamports"
SUSPICIOUS_INCREASE_RATIO = 10.0


def is_suspicious_balance_change(pre: int, post: int) -> bool:
    """A drained account, or one whose balance grew more than tenfold."""
    if post == 0 and pre > 0:
        return True
    if post > pre:
        return (post - pre) / max(pre, 1) > SUSPICIOUS_INCREASE_RATIO
    return False


def diff_balances(
    pre_balances: Sequence[int],
    post_balances: Sequence[int],
    accounts: Optional[Sequence[str]] = None,
) -> List[StateChange]:
    """Pair balances by index and report the accounts whose balance moved."""
    if len(pre_balances) != len(post_balances):
        logger.warning(
            "Balance arrays differ in length (%d pre, %d post); comparing common prefix",
            len(pre_balances), len(post_balances),
        )

    accounts = accounts or ()
    changes = []
    for idx, (pre, post) in enumerate(zip(pre_balances, post_balances)):
        if pre == post:
            continue
        changes.append(StateChange(
            account=accounts[idx] if idx < len(accounts) else f"account_{idx}",
            field=BALANCE_FIELD,
            before=str(pre),
            after=str(post),
            suspicious=is_suspicious_balance_change(pre, post),
        ))
    return changes


class StateChangeDiffer:
    """Extracts balance state changes from a transaction record."""

    def diff(self, record: TransactionRecord) -> List[StateChange]:
        return diff_balances(record.pre_balances, record.post_balances, record.balance_accounts())
