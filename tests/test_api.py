"""
Tests for the HTTP API.
"""
import pytest
from fastapi.testclient import TestClient

from dynamoscan import __version__
from dynamoscan.api import create_application
from dynamoscan.core.analyzer import ChainAnalyzer
from dynamoscan.data.records import AccountInfo
from dynamoscan.exceptions import UpstreamFetchError

from conftest import PROGRAM_ID, SIGNATURE, FakeDataSource


@pytest.fixture
def source(benign_record):
    return FakeDataSource(
        transactions={SIGNATURE: benign_record},
        accounts={PROGRAM_ID: AccountInfo(public_key=PROGRAM_ID, executable=True, data=b"transfer")},
    )


@pytest.fixture
def client(source, test_settings):
    app = create_application(analyzer=ChainAnalyzer(source, config=test_settings), config=test_settings)
    with TestClient(app) as test_client:
        yield test_client


class TestHealth:
    """Test cases for the health endpoint."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["version"] == __version__
        assert body["uptimeSeconds"] >= 0


class TestAnalyzeEndpoint:
    """Test cases for POST /analyze/transaction."""

    def test_success_uses_camel_case(self, client):
        response = client.post("/analyze/transaction", json={"signature": SIGNATURE, "network": "devnet"})

        assert response.status_code == 200
        body = response.json()
        assert body["riskScore"] == 0.0
        assert body["exploits"] == []
        assert body["stateChanges"] == []
        assert body["executionTrace"]["success"] is True
        assert "resourceUnitsConsumed" in body["executionTrace"]
        assert "accessedAccounts" in body["executionTrace"]
        assert body["metadata"]["network"] == "devnet"
        assert "durationMs" in body["metadata"]
        assert "analyzerVersion" in body["metadata"]

    def test_invalid_signature_is_400(self, client, source):
        response = client.post("/analyze/transaction", json={"signature": "bogus!"})

        assert response.status_code == 400
        assert "error" in response.json()
        assert source.transaction_fetches == []

    def test_upstream_failure_is_502(self, client, source):
        source.transactions[SIGNATURE] = UpstreamFetchError("rpc down")

        response = client.post("/analyze/transaction", json={"signature": SIGNATURE})

        assert response.status_code == 502
        assert response.json() == {"error": "rpc down"}


class TestAuditEndpoint:
    """Test cases for POST /audit/contract."""

    def test_success(self, client):
        response = client.post("/audit/contract", json={"programId": PROGRAM_ID, "depth": "deep"})

        assert response.status_code == 200
        body = response.json()
        assert body["programId"] == PROGRAM_ID
        assert body["vulnerabilities"]
        assert {"kind", "severity", "description", "affectedInstructions", "confidence"} <= set(
            body["vulnerabilities"][0]
        )
        assert "score" in body["codeQuality"]
        assert body["recommendations"]
        assert body["metadata"]["depth"] == "deep"
        assert "instructionsAnalyzed" in body["metadata"]

    def test_not_executable_is_422(self, client, source):
        source.accounts[PROGRAM_ID] = AccountInfo(public_key=PROGRAM_ID, executable=False)

        response = client.post("/audit/contract", json={"programId": PROGRAM_ID})

        assert response.status_code == 422
        assert "not executable" in response.json()["error"]

    def test_invalid_program_id_is_400(self, client):
        response = client.post("/audit/contract", json={"programId": "0x1234"})
        assert response.status_code == 400
