"""
Tests for the evidence normalizer.
"""
import pytest

from dynamoscan.analyzers.normalizer import NO_METADATA_ERROR, EvidenceNormalizer
from dynamoscan.data.records import TransactionRecord

from conftest import make_record


class TestEvidenceNormalizer:
    """Test cases for EvidenceNormalizer."""

    @pytest.fixture
    def normalizer(self):
        return EvidenceNormalizer()

    def test_successful_transaction(self, normalizer):
        record = make_record(logs=["Program X invoke [1]", "Program X success"], compute_units=4200)
        trace = normalizer.normalize(record)

        assert trace.success is True
        assert trace.error is None
        assert trace.resource_units_consumed == 4200
        assert trace.logs == ("Program X invoke [1]", "Program X success")
        assert trace.accessed_accounts == ("A", "B")

    def test_failed_transaction_keeps_error(self, normalizer):
        err = {"InstructionError": [0, {"Custom": 6001}]}
        trace = normalizer.normalize(make_record(err=err))

        assert trace.success is False
        assert trace.error == '{"InstructionError":[0,{"Custom":6001}]}'

    def test_missing_metadata(self, normalizer):
        trace = normalizer.normalize(make_record(with_meta=False))

        assert trace.success is False
        assert trace.error == NO_METADATA_ERROR
        assert trace.resource_units_consumed == 0
        assert trace.logs == ()

    def test_missing_compute_units_defaults_to_zero(self, normalizer):
        trace = normalizer.normalize(make_record(compute_units=None))
        assert trace.resource_units_consumed == 0

    def test_parsed_account_keys(self, normalizer):
        record = make_record(account_keys=[{"pubkey": "A", "signer": True}, {"pubkey": "B"}])
        assert normalizer.normalize(record).accessed_accounts == ("A", "B")

    @pytest.mark.parametrize("raw", [
        {},
        {"transaction": "not-a-dict"},
        {"transaction": {"message": {"accountKeys": "garbage"}}},
        {"transaction": {"message": {"accountKeys": [1, 2, 3]}}},
        {"transaction": ["base64payload", "base64"], "meta": None},
    ])
    def test_undecodable_transaction_degrades_to_empty(self, normalizer, raw):
        trace = normalizer.normalize(TransactionRecord(raw))
        assert trace.accessed_accounts == ()

    def test_trace_is_immutable(self, normalizer):
        trace = normalizer.normalize(make_record())
        with pytest.raises(Exception):
            trace.success = False
