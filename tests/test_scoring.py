"""
Tests for risk scoring and code-quality metrics.
"""
import pytest

from dynamoscan.analyzers.scoring import (
    CONTRACT_SEVERITY_WEIGHTS,
    TRANSACTION_SEVERITY_WEIGHTS,
    clamp_score,
    code_quality,
    contract_risk_score,
    transaction_risk_score,
)
from dynamoscan.analyzers.types import Exploit, ExploitType, Severity, StateChange, Vulnerability


def exploit(severity, confidence=0.85):
    return Exploit(
        category=ExploitType.UNKNOWN,
        severity=severity,
        confidence=confidence,
        description="Detected: test",
        location="transaction",
    )


def vulnerability(severity, confidence=0.5):
    return Vulnerability(kind="test", severity=severity, description="test", confidence=confidence)


def change(suspicious):
    return StateChange(account="A", before="1", after="2", suspicious=suspicious)


class TestClampScore:
    """Test cases for clamp_score."""

    @pytest.mark.parametrize("raw, expected", [(-5.0, 0.0), (0.0, 0.0), (42.5, 42.5), (100.0, 100.0), (250.0, 100.0)])
    def test_clamp(self, raw, expected):
        assert clamp_score(raw) == expected


class TestTransactionRiskScore:
    """Test cases for transaction_risk_score."""

    def test_no_findings(self):
        assert transaction_risk_score([], []) == 0.0

    def test_weighted_sum(self):
        score = transaction_risk_score([exploit(Severity.CRITICAL), exploit(Severity.LOW, 0.5)], [])
        assert score == pytest.approx(40 * 0.85 + 5 * 0.5)

    def test_suspicious_changes_add_flat_weight(self):
        score = transaction_risk_score([], [change(True), change(False), change(True)])
        assert score == pytest.approx(10.0)

    def test_saturates(self):
        assert transaction_risk_score([exploit(Severity.CRITICAL, 1.0)] * 10, []) == 100.0

    def test_monotonic(self):
        exploits = []
        previous = 0.0
        for severity in Severity:
            exploits.append(exploit(severity))
            score = transaction_risk_score(exploits, [])
            assert score >= previous
            previous = score

    def test_weights_ordered_by_severity(self):
        for weights in (TRANSACTION_SEVERITY_WEIGHTS, CONTRACT_SEVERITY_WEIGHTS):
            values = [weights[s] for s in Severity]
            assert values == sorted(values, reverse=True)


class TestContractRiskScore:
    """Test cases for contract_risk_score."""

    def test_weighted_sum(self):
        score = contract_risk_score([vulnerability(Severity.HIGH, 0.72), vulnerability(Severity.MEDIUM, 0.6)])
        assert score == pytest.approx(20 * 0.72 + 12 * 0.6)

    def test_saturates(self):
        assert contract_risk_score([vulnerability(Severity.CRITICAL, 1.0)] * 5) == 100.0


class TestCodeQuality:
    """Test cases for code_quality."""

    def test_clean_small_program(self):
        quality = code_quality(b"tag", [])
        assert quality.metrics["security"] == 1.0
        assert quality.metrics["finding_density"] == 0.0
        assert quality.score == pytest.approx(1.0, abs=1e-3)

    def test_findings_lower_the_score(self):
        clean = code_quality(b"tag", [])
        noisy = code_quality(b"tag", [vulnerability(Severity.CRITICAL, 0.9)] * 3)
        assert noisy.score < clean.score

    def test_bounded(self):
        quality = code_quality(b"\x00" * 500_000, [vulnerability(Severity.CRITICAL, 1.0)] * 20)
        assert 0.0 <= quality.score <= 1.0
        assert all(0.0 <= v <= 1.0 for v in quality.metrics.values())
