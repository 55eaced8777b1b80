"""Exploit Detector Registry.

Detection rules are pure predicates over a ``(TransactionRecord,
ExecutionTrace)`` pair, each tagged with the exploit category and severity it
reports. The registry evaluates every rule on every analysis, in registration
order, with no early exit. Rules never share state, so a registry is safe to
reuse across concurrent analyses.

All rules are heuristics over log text and balance arrays; a firing rule is a
signal worth a human look, not a proof of exploitation.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence

from ..data.records import TransactionRecord
from ..utils.logger import get_logger
from .types import ExecutionTrace, Exploit, ExploitType, Severity

logger = get_logger(__name__)

Predicate = Callable[[TransactionRecord, ExecutionTrace], bool]

# Constants
RULE_CONFIDENCE = 0.85
REENTRANCY_INVOKE_THRESHOLD = 3
FLASH_LOAN_LAMPORTS_THRESHOLD = 1_000_000_000_000  # 1000 SOL
RENT_EXEMPT_MINIMUM_LAMPORTS = 890_880
DOS_COMPUTE_UNITS_CEILING = 1_000_000
DOS_ACCOUNTS_CEILING = 50
DOS_FAILED_LOG_VOLUME = 100

# Log markers of programs whose invocation is routine.
KNOWN_SYSTEM_PROGRAMS = (
    "System",
    "Token",
    "11111111111111111111111111111111",
    "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA",
    "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb",
    "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL",
    "ComputeBudget111111111111111111111111111111",
    "MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr",
)

GENERIC_REMEDIATION = "Review code for security best practices"

REMEDIATIONS = {
    ExploitType.REENTRANCY:
        "Implement checks-effects-interactions pattern and use reentrancy guards",
    ExploitType.INTEGER_OVERFLOW:
        "Use checked arithmetic operations (checked_add, checked_mul, etc.)",
    ExploitType.INTEGER_UNDERFLOW:
        "Use checked arithmetic operations (checked_add, checked_mul, etc.)",
    ExploitType.AUTHORITY_BYPASS:
        "Validate authority signatures and implement proper access control",
    ExploitType.MISSING_SIGNER_CHECK:
        "Ensure critical accounts are marked as signers and validated",
    ExploitType.PDA_MISMATCH:
        "Verify PDA derivation matches expected seeds and program ID",
    ExploitType.FLASH_LOAN_ATTACK:
        "Implement time-weighted average pricing and multi-block validation",
    ExploitType.ACCOUNT_CONFUSION:
        "Implement strict account type checking and validation before operations",
    ExploitType.SIGNER_BYPASS:
        "Verify signer privileges and implement proper authorization checks",
    ExploitType.TYPE_CONFUSION:
        "Add discriminator fields and validate account types before deserialization",
    ExploitType.INSUFFICIENT_RENT_EXEMPTION:
        "Verify account has sufficient lamports for rent exemption before operations",
    ExploitType.ORACLE_MANIPULATION:
        "Validate oracle data freshness and use multiple oracle sources",
    ExploitType.DOS_ATTACK:
        "Implement rate limiting, account limits, and proper resource management",
    ExploitType.ARBITRARY_CPI:
        "Whitelist allowed programs for CPI and validate program IDs",
    ExploitType.BUMP_SEED_CANONICAL:
        "Use find_program_address and verify bump seed is canonical",
    ExploitType.ACCOUNT_DATA_MISMATCH:
        "Validate account data structure matches expected format before parsing",
    ExploitType.UNCHECKED_ACCOUNT_OWNERSHIP:
        "Verify account owner matches expected program ID before operations",
    ExploitType.TOKEN_ACCOUNT_VALIDATION:
        "Validate token account owner, mint, and associated token account derivation",
    ExploitType.MINT_AUTHORITY_BYPASS:
        "Verify mint/freeze authority before allowing privileged token operations",
    ExploitType.FREEZE_AUTHORITY_BYPASS:
        "Verify mint/freeze authority before allowing privileged token operations",
    ExploitType.DUPLICATE_ACCOUNT_MUTABLE:
        "Check for duplicate mutable accounts in instruction account list",
    ExploitType.ACCOUNT_REINITIALIZATION:
        "Check is_initialized flag before initialization and set flag after",
    ExploitType.CLOSED_ACCOUNT_REVIVAL:
        "Zero out account data on close and check discriminator on access",
}


def remediation_for(category: ExploitType) -> str:
    return REMEDIATIONS.get(category, GENERIC_REMEDIATION)


@dataclass(frozen=True)
class DetectionRule:
    """A named, tagged predicate over one transaction's evidence."""
    name: str
    category: ExploitType
    severity: Severity
    predicate: Predicate

    def evaluate(self, record: TransactionRecord, trace: ExecutionTrace) -> bool:
        return bool(self.predicate(record, trace))


def _any_log(trace: ExecutionTrace, test: Callable[[str], bool]) -> bool:
    return any(test(line) for line in trace.logs)


def _balance_pairs(record: TransactionRecord):
    return zip(record.pre_balances, record.post_balances)


# Detection predicates

def detect_reentrancy(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    """More than three program invocations logged in one transaction."""
    invocations = [line for line in trace.logs if "Program" in line and "invoke" in line]
    return len(invocations) > REENTRANCY_INVOKE_THRESHOLD


def detect_integer_overflow(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    return _any_log(trace, lambda line: "overflow" in line or "underflow" in line)


def detect_missing_signer(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    return _any_log(trace, lambda line: "missing" in line and "signer" in line)


def detect_pda_mismatch(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    return _any_log(trace, lambda line: "PDA" in line or "seeds" in line)


def detect_flash_loan(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    """A single-transaction balance swing above the flash-loan threshold."""
    return any(abs(post - pre) > FLASH_LOAN_LAMPORTS_THRESHOLD for pre, post in _balance_pairs(record))


def detect_account_confusion(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    return _any_log(
        trace,
        lambda line: "account" in line and ("mismatch" in line or "confusion" in line),
    )


def detect_signer_bypass(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    return _any_log(
        trace,
        lambda line: "unauthorized" in line or ("signer" in line and "required" in line),
    )


def detect_type_confusion(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    return _any_log(trace, lambda line: "discriminator" in line or "invalid account type" in line)


def detect_rent_exemption(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    """An account left funded but below the rent-exempt minimum of a small account."""
    return any(0 < balance < RENT_EXEMPT_MINIMUM_LAMPORTS for balance in record.post_balances)


def detect_oracle_manipulation(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    return _any_log(trace, lambda line: "oracle" in line or ("price" in line and "stale" in line))


def detect_dos_attack(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    if trace.resource_units_consumed > DOS_COMPUTE_UNITS_CEILING:
        return True
    if len(trace.accessed_accounts) > DOS_ACCOUNTS_CEILING:
        return True
    return trace.error is not None and len(trace.logs) > DOS_FAILED_LOG_VOLUME


def detect_arbitrary_cpi(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    """An invocation of a program outside the known system allow-list."""
    return _any_log(
        trace,
        lambda line: "invoke" in line and not any(p in line for p in KNOWN_SYSTEM_PROGRAMS),
    )


def detect_bump_seed(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    return _any_log(trace, lambda line: "bump" in line and "invalid" in line)


def detect_account_data_mismatch(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    return _any_log(trace, lambda line: "deserialization" in line or "data mismatch" in line)


def detect_unchecked_ownership(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    return _any_log(
        trace,
        lambda line: "owner" in line and ("invalid" in line or "mismatch" in line),
    )


def detect_token_validation(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    return _any_log(
        trace,
        lambda line: "token" in line and ("invalid" in line or "mint" in line),
    )


def detect_duplicate_mutable(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    keys = record.account_keys()
    return len(set(keys)) != len(keys)


def detect_account_reinitialization(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    return _any_log(
        trace,
        lambda line: "already initialized" in line or "reinitialization" in line,
    )


def detect_closed_account_revival(record: TransactionRecord, trace: ExecutionTrace) -> bool:
    """An emptied account refunded in a transaction that logged a close."""
    revived = any(pre == 0 and post > 0 for pre, post in _balance_pairs(record))
    return revived and _any_log(trace, lambda line: "closed" in line)


DEFAULT_RULES: Sequence[DetectionRule] = (
    DetectionRule("Reentrancy Attack", ExploitType.REENTRANCY, Severity.CRITICAL, detect_reentrancy),
    DetectionRule("Integer Overflow", ExploitType.INTEGER_OVERFLOW, Severity.HIGH, detect_integer_overflow),
    DetectionRule("Missing Signer Check", ExploitType.MISSING_SIGNER_CHECK, Severity.HIGH, detect_missing_signer),
    DetectionRule("PDA Mismatch", ExploitType.PDA_MISMATCH, Severity.MEDIUM, detect_pda_mismatch),
    DetectionRule("Flash Loan Attack", ExploitType.FLASH_LOAN_ATTACK, Severity.CRITICAL, detect_flash_loan),
    DetectionRule("Account Confusion", ExploitType.ACCOUNT_CONFUSION, Severity.CRITICAL, detect_account_confusion),
    DetectionRule("Signer Bypass", ExploitType.SIGNER_BYPASS, Severity.CRITICAL, detect_signer_bypass),
    DetectionRule("Type Confusion", ExploitType.TYPE_CONFUSION, Severity.HIGH, detect_type_confusion),
    DetectionRule(
        "Insufficient Rent Exemption", ExploitType.INSUFFICIENT_RENT_EXEMPTION, Severity.MEDIUM,
        detect_rent_exemption,
    ),
    DetectionRule(
        "Oracle Manipulation", ExploitType.ORACLE_MANIPULATION, Severity.CRITICAL, detect_oracle_manipulation,
    ),
    DetectionRule("DoS Attack", ExploitType.DOS_ATTACK, Severity.HIGH, detect_dos_attack),
    DetectionRule("Arbitrary CPI", ExploitType.ARBITRARY_CPI, Severity.CRITICAL, detect_arbitrary_cpi),
    DetectionRule("Non-canonical Bump Seed", ExploitType.BUMP_SEED_CANONICAL, Severity.MEDIUM, detect_bump_seed),
    DetectionRule(
        "Account Data Mismatch", ExploitType.ACCOUNT_DATA_MISMATCH, Severity.HIGH, detect_account_data_mismatch,
    ),
    DetectionRule(
        "Unchecked Account Ownership", ExploitType.UNCHECKED_ACCOUNT_OWNERSHIP, Severity.CRITICAL,
        detect_unchecked_ownership,
    ),
    DetectionRule(
        "Token Account Validation", ExploitType.TOKEN_ACCOUNT_VALIDATION, Severity.HIGH, detect_token_validation,
    ),
    DetectionRule(
        "Duplicate Mutable Accounts", ExploitType.DUPLICATE_ACCOUNT_MUTABLE, Severity.HIGH, detect_duplicate_mutable,
    ),
    DetectionRule(
        "Account Reinitialization", ExploitType.ACCOUNT_REINITIALIZATION, Severity.CRITICAL,
        detect_account_reinitialization,
    ),
    DetectionRule(
        "Closed Account Revival", ExploitType.CLOSED_ACCOUNT_REVIVAL, Severity.CRITICAL,
        detect_closed_account_revival,
    ),
)


class DetectorRegistry:
    """Ordered collection of detection rules, evaluated exhaustively."""

    def __init__(self, rules: Optional[Iterable[DetectionRule]] = None) -> None:
        self._rules: List[DetectionRule] = list(DEFAULT_RULES if rules is None else rules)

    @property
    def rules(self) -> Sequence[DetectionRule]:
        return tuple(self._rules)

    def register(self, rule: DetectionRule) -> None:
        """Append a rule; it runs after every rule registered before it."""
        self._rules.append(rule)

    def detect(self, record: TransactionRecord, trace: ExecutionTrace) -> List[Exploit]:
        logger.debug("Running %d exploit detection rules", len(self._rules))

        # Every rule runs; no short-circuit on the first hit.
        fired = [rule for rule in self._rules if rule.evaluate(record, trace)]

        exploits = [
            Exploit(
                category=rule.category,
                severity=rule.severity,
                confidence=RULE_CONFIDENCE,
                description=f"Detected: {rule.name}",
                location="transaction",
                remediation=remediation_for(rule.category),
            )
            for rule in fired
        ]
        logger.debug("Detected %d potential exploits", len(exploits))
        return exploits
