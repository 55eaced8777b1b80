"""
Scoring Utilities

Severity-weighted, additive and saturating risk scores for transaction
exploits and contract vulnerabilities, plus bytecode code-quality metrics.
"""

from typing import Dict, Iterable, Mapping, Sequence

from .bytecode_scanner import DEFAULT_CHECKS, LARGE_PROGRAM_THRESHOLD
from .types import CodeQuality, Exploit, Severity, StateChange, Vulnerability

MIN_SCORE = 0.0
MAX_SCORE = 100.0
SUSPICIOUS_CHANGE_WEIGHT = 5.0

TRANSACTION_SEVERITY_WEIGHTS: Mapping[Severity, float] = {
    Severity.CRITICAL: 40.0,
    Severity.HIGH: 25.0,
    Severity.MEDIUM: 15.0,
    Severity.LOW: 5.0,
    Severity.INFO: 1.0,
}

CONTRACT_SEVERITY_WEIGHTS: Mapping[Severity, float] = {
    Severity.CRITICAL: 35.0,
    Severity.HIGH: 20.0,
    Severity.MEDIUM: 12.0,
    Severity.LOW: 5.0,
    Severity.INFO: 1.0,
}


def clamp_score(score: float, min_score: float = MIN_SCORE, max_score: float = MAX_SCORE) -> float:
    """Clamp a raw score into ``[min_score, max_score]``.

    Args:
        score: Raw score
        min_score: Lower bound
        max_score: Upper bound

    Returns:
        float: The clamped score
    """
    return max(min_score, min(max_score, score))


def transaction_risk_score(exploits: Iterable[Exploit], state_changes: Iterable[StateChange]) -> float:
    """Sum of weight x confidence over exploits, plus a flat weight per suspicious change."""
    score = sum(TRANSACTION_SEVERITY_WEIGHTS[e.severity] * e.confidence for e in exploits)
    score += SUSPICIOUS_CHANGE_WEIGHT * sum(1 for c in state_changes if c.suspicious)
    return clamp_score(score)


def contract_risk_score(vulnerabilities: Iterable[Vulnerability]) -> float:
    score = sum(CONTRACT_SEVERITY_WEIGHTS[v.severity] * v.confidence for v in vulnerabilities)
    return clamp_score(score)


def code_quality(data: bytes, vulnerabilities: Sequence[Vulnerability]) -> CodeQuality:
    """Coarse quality indicators derived from the scan, each in ``[0, 1]``."""
    metrics: Dict[str, float] = {
        "security": 1.0 - contract_risk_score(vulnerabilities) / MAX_SCORE,
        "finding_density": min(len(vulnerabilities) / len(DEFAULT_CHECKS), 1.0),
        "size_ratio": min(len(data) / LARGE_PROGRAM_THRESHOLD, 1.0),
    }
    score = (
        metrics["security"]
        + (1.0 - metrics["finding_density"])
        + (1.0 - metrics["size_ratio"])
    ) / 3
    return CodeQuality(score=round(score, 4), metrics={k: round(v, 4) for k, v in metrics.items()})
