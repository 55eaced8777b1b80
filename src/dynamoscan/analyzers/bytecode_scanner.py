"""Bytecode Heuristic Scanner.

Each check is an exact, contiguous byte sub-sequence test over the raw
program data; patterns are ASCII literals treated as bytes. No instruction
decoding, control-flow or data-flow reconstruction takes place, so every
finding is a correlation between motifs that tend to appear together in
vulnerable programs, never a proof. The scanner accepts arbitrary bytes and
makes no assumption about their structure.
"""

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from ..utils.logger import get_logger
from .types import Severity, Vulnerability

logger = get_logger(__name__)

ByteLike = Union[bytes, bytearray, memoryview]

LARGE_PROGRAM_THRESHOLD = 100_000
NOP_SLED = bytes([0x90, 0x90, 0x90])


def contains(data: bytes, pattern: bytes) -> bool:
    """Sliding-window equality search for ``pattern`` inside ``data``."""
    return bool(pattern) and pattern in data


def contains_any(data: bytes, patterns: Iterable[bytes]) -> bool:
    return any(contains(data, p) for p in patterns)


def _missing_guard(triggers: Sequence[bytes], guards: Sequence[bytes]) -> Callable[[bytes], bool]:
    """Matcher firing when a trigger motif appears and no guard motif does."""
    def matcher(data: bytes) -> bool:
        return contains_any(data, triggers) and not contains_any(data, guards)
    return matcher


@dataclass(frozen=True)
class BytecodeCheck:
    kind: str
    severity: Severity
    description: str
    affected_instructions: Tuple[str, ...]
    confidence: float
    matcher: Callable[[bytes], bool]

    def finding(self) -> Vulnerability:
        return Vulnerability(
            kind=self.kind,
            severity=self.severity,
            description=self.description,
            affected_instructions=self.affected_instructions,
            confidence=self.confidence,
        )


DEFAULT_CHECKS: Sequence[BytecodeCheck] = (
    # Repeated 0x90 bytes resemble a NOP sled; in SBF this is only a byte motif.
    BytecodeCheck(
        "suspicious_nop_pattern", Severity.MEDIUM,
        "Suspicious NOP sled pattern detected",
        ("unknown",), 0.65,
        lambda data: contains(data, NOP_SLED),
    ),
    BytecodeCheck(
        "large_program_size", Severity.LOW,
        "Program size is unusually large, may indicate obfuscation",
        (), 0.50,
        lambda data: len(data) > LARGE_PROGRAM_THRESHOLD,
    ),
    # Transfer symbol present, no owner symbol anywhere.
    BytecodeCheck(
        "missing_owner_check", Severity.HIGH,
        "Potential missing owner validation detected",
        ("transfer",), 0.72,
        _missing_guard((b"transfer",), (b"owner",)),
    ),
    BytecodeCheck(
        "unchecked_arithmetic", Severity.HIGH,
        "Unchecked arithmetic operations detected, may lead to overflow",
        ("math_ops",), 0.68,
        _missing_guard((b"add", b"sub", b"mul", b"div"), (b"checked_",)),
    ),
    BytecodeCheck(
        "missing_discriminator", Severity.MEDIUM,
        "Account type discriminator not found, may lead to type confusion",
        ("deserialization",), 0.60,
        lambda data: not contains_any(data, (b"discriminator", b"account_type", b"tag")),
    ),
    BytecodeCheck(
        "unsafe_deserialization", Severity.HIGH,
        "Unsafe deserialization pattern detected",
        ("deserialize",), 0.70,
        _missing_guard((b"deserialize",), (b"try_", b"checked_", b"safe_")),
    ),
    BytecodeCheck(
        "missing_rent_check", Severity.MEDIUM,
        "Account creation without rent exemption verification",
        ("create_account",), 0.55,
        _missing_guard((b"create_account",), (b"rent", b"exemption", b"minimum_balance")),
    ),
    BytecodeCheck(
        "unchecked_cpi", Severity.CRITICAL,
        "Cross-program invocation without program ID validation",
        ("invoke",), 0.75,
        _missing_guard((b"invoke", b"invoke_signed"), (b"program_id", b"key", b"verify")),
    ),
    BytecodeCheck(
        "missing_signer_validation", Severity.CRITICAL,
        "Critical operations without signer validation",
        ("privileged_ops",), 0.78,
        _missing_guard((b"transfer", b"mint", b"burn", b"close"), (b"is_signer",)),
    ),
    BytecodeCheck(
        "unsafe_account_close", Severity.HIGH,
        "Account closure without proper cleanup or validation",
        ("close",), 0.65,
        _missing_guard((b"close",), (b"lamports", b"zero", b"clear")),
    ),
    BytecodeCheck(
        "bump_seed_not_canonical", Severity.MEDIUM,
        "PDA bump seed may not be canonical",
        ("create_pda",), 0.58,
        _missing_guard((b"create_program_address", b"find_program_address"), (b"canonical",)),
    ),
)

RECOMMENDATIONS = {
    "suspicious_nop_pattern": "Inspect the build pipeline for injected or padded code sections",
    "large_program_size": "Review program size and strip unused dependencies to ease auditing",
    "missing_owner_check": "Add owner validation checks before performing privileged operations",
    "unchecked_arithmetic": "Use checked arithmetic operations to prevent overflow vulnerabilities",
    "missing_discriminator": "Add discriminator fields and validate account types before deserialization",
    "unsafe_deserialization": "Use fallible deserialization (try_from_slice) and handle errors explicitly",
    "missing_rent_check": "Verify rent exemption (minimum_balance) when creating accounts",
    "unchecked_cpi": "Validate the target program ID before every cross-program invocation",
    "missing_signer_validation": "Ensure all critical accounts are marked as signers and validated",
    "unsafe_account_close": "Zero account data and drain lamports when closing accounts",
    "bump_seed_not_canonical": "Derive PDAs with find_program_address and store the canonical bump",
}


class BytecodeScanner:
    """Runs every byte-motif check against a program's executable data."""

    def __init__(self, checks: Optional[Iterable[BytecodeCheck]] = None) -> None:
        self.checks: Tuple[BytecodeCheck, ...] = tuple(DEFAULT_CHECKS if checks is None else checks)

    def scan(self, data: ByteLike) -> List[Vulnerability]:
        buffer = bytes(data)
        findings = [check.finding() for check in self.checks if check.matcher(buffer)]
        logger.debug("Bytecode scan of %d bytes produced %d findings", len(buffer), len(findings))
        return findings


def recommendations_for(vulnerabilities: Iterable[Vulnerability]) -> List[str]:
    """Advice for each finding kind, deduplicated in first-seen order."""
    recommendations: List[str] = []
    for vuln in vulnerabilities:
        advice = RECOMMENDATIONS.get(vuln.kind)
        if advice and advice not in recommendations:
            recommendations.append(advice)
    return recommendations
