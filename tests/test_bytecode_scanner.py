"""
Tests for the bytecode heuristic scanner.
"""
import pytest

from dynamoscan.analyzers.bytecode_scanner import (
    DEFAULT_CHECKS,
    LARGE_PROGRAM_THRESHOLD,
    RECOMMENDATIONS,
    BytecodeScanner,
    contains,
    recommendations_for,
)
from dynamoscan.analyzers.types import Severity


def kinds(data):
    return [v.kind for v in BytecodeScanner().scan(data)]


class TestContains:
    """Test cases for the byte sub-sequence search."""

    @pytest.mark.parametrize("data, pattern, expected", [
        (b"xxtransferxx", b"transfer", True),
        (b"transfe", b"transfer", False),
        (b"trans fer", b"transfer", False),
        (b"", b"owner", False),
        (b"anything", b"", False),
    ])
    def test_contains(self, data, pattern, expected):
        assert contains(data, pattern) is expected


class TestBytecodeScanner:
    """Test cases for BytecodeScanner."""

    def test_missing_owner_check(self):
        findings = {v.kind: v for v in BytecodeScanner().scan(b"\x00transfer\x00")}
        owner = findings["missing_owner_check"]

        assert owner.severity == Severity.HIGH
        assert owner.confidence == 0.72
        assert owner.affected_instructions == ("transfer",)

    def test_owner_symbol_suppresses_owner_finding(self):
        assert "missing_owner_check" not in kinds(b"transfer owner")

    def test_guarded_program_is_clean(self):
        data = b"discriminator transfer owner is_signer checked_add"
        assert kinds(data) == []

    def test_empty_program_only_lacks_discriminator(self):
        assert kinds(b"") == ["missing_discriminator"]

    def test_arbitrary_bytes_are_tolerated(self):
        data = bytes(range(256)) * 4
        assert isinstance(BytecodeScanner().scan(data), list)
        assert isinstance(BytecodeScanner().scan(bytearray(data)), list)
        assert isinstance(BytecodeScanner().scan(memoryview(data)), list)

    def test_nop_sled(self):
        assert "suspicious_nop_pattern" in kinds(b"tag\x90\x90\x90")
        assert "suspicious_nop_pattern" not in kinds(b"tag\x90\x90")

    def test_large_program(self):
        assert "large_program_size" in kinds(b"tag" + b"\x00" * LARGE_PROGRAM_THRESHOLD)
        assert "large_program_size" not in kinds(b"\x00" * (LARGE_PROGRAM_THRESHOLD - 3) + b"tag")

    def test_unchecked_cpi(self):
        findings = {v.kind: v for v in BytecodeScanner().scan(b"tag invoke_signed")}
        assert findings["unchecked_cpi"].severity == Severity.CRITICAL
        assert "unchecked_cpi" not in kinds(b"tag invoke verify")

    def test_findings_follow_check_order(self):
        data = b"\x90\x90\x90 transfer deserialize create_account invoke close find_program_address"
        order = [c.kind for c in DEFAULT_CHECKS]
        found = kinds(data)
        assert found == sorted(found, key=order.index)

    def test_custom_checks(self):
        scanner = BytecodeScanner(checks=[DEFAULT_CHECKS[0]])
        assert [v.kind for v in scanner.scan(b"transfer")] == []

    def test_every_check_has_recommendation(self):
        assert {c.kind for c in DEFAULT_CHECKS} == set(RECOMMENDATIONS)


class TestRecommendations:
    """Test cases for recommendations_for."""

    def test_deduplicated_in_first_seen_order(self):
        findings = BytecodeScanner().scan(b"transfer")
        doubled = findings + findings

        recommendations = recommendations_for(doubled)
        assert recommendations == [RECOMMENDATIONS[v.kind] for v in findings]
        assert len(recommendations) == len(set(recommendations))

    def test_no_findings(self):
        assert recommendations_for([]) == []
