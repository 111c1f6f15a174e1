"""
Unit tests for the reports API endpoints.

These tests drive the HTTP routes with a fake content store injected into
the application state, so no IPFS node is needed.
"""

import io
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from loguru import logger

from app.main import create_app
from app.reports.errors import (
    UpstreamMalformedError,
    UpstreamRejectedError,
    UpstreamUnavailableError,
)
from app.reports.factory import ReportServices
from app.reports.schemas import NO_REPORTS_MESSAGE, UPLOAD_SUCCESS_MESSAGE
from app.reports.services.report_index import ReportIndex
from reportvault_core.config import Settings
from tests.app.reports.fakes import FakeContentStore, build_multipart_body, content_type


class TestUploadReport:
    """Tests for POST /api/upload-report."""

    def test_upload_returns_cid(self, make_client):
        """Uploading a file should return the CID from the store."""
        client, _, _ = make_client(FakeContentStore(cids=["Qm123"]))
        files = {"file": ("a.pdf", io.BytesIO(b"%PDF-1.4"), "application/pdf")}

        response = client.post(
            "/api/upload-report", files=files, data={"targetWalletAddress": "Wallet1"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": UPLOAD_SUCCESS_MESSAGE,
            "cid": "Qm123",
            "file_name": "a.pdf",
        }

    def test_upload_then_list(self, make_client):
        """A successful upload should be listed for the owner."""
        client, _, _ = make_client(FakeContentStore(cids=["Qm123"]))
        files = {"file": ("a.pdf", io.BytesIO(b"%PDF-1.4"), "application/pdf")}
        client.post("/api/upload-report", files=files, data={"targetWalletAddress": "Wallet1"})

        response = client.get("/api/get-reports/Wallet1")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "reports": [{"cid": "Qm123", "file_name": "a.pdf"}],
            "message": None,
        }

    def test_file_before_owner(self, make_client):
        """The file part may come before the owner part."""
        client, store, _ = make_client(FakeContentStore(cids=["Qm9"]))
        body = build_multipart_body([
            ("file", b"data", "b.txt"),
            ("targetWalletAddress", b"Wallet1", None),
        ])

        response = client.post(
            "/api/upload-report", content=body, headers={"Content-Type": content_type()}
        )

        assert response.status_code == 200
        assert response.json()["cid"] == "Qm9"
        assert store.calls == [("b.txt", b"data")]

    def test_missing_file(self, make_client):
        """Without a file the upload fails with 400 and names the filename."""
        client, store, index = make_client(FakeContentStore())

        response = client.post(
            "/api/upload-report",
            content=build_multipart_body([("targetWalletAddress", b"Wallet1", None)]),
            headers={"Content-Type": content_type()},
        )

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "File name is missing.",
            "cid": None,
            "file_name": None,
        }
        assert store.calls == []
        assert index.lookup("Wallet1") == []

    def test_failure_log_names_owner_and_request(self, make_client):
        """The error handler's log line carries the owner and the request id."""
        client, _, _ = make_client(FakeContentStore())
        messages = []
        sink_id = logger.add(messages.append, format="{message}", level="DEBUG")
        try:
            client.post(
                "/api/upload-report",
                content=build_multipart_body([("targetWalletAddress", b"Wallet1", None)]),
                headers={"Content-Type": content_type()},
            )
        finally:
            logger.remove(sink_id)

        failed = [m for m in messages if "Upload failed" in m]
        rejected = [m for m in messages if "Rejected upload" in m]
        assert len(failed) == 1
        assert "owner='Wallet1'" in failed[0]
        request_prefix = rejected[0].split("]", 1)[0] + "]"
        assert request_prefix != "[-]"
        assert failed[0].startswith(request_prefix)

    def test_missing_file_and_owner(self, make_client):
        """With neither field the filename is still reported first."""
        client, _, _ = make_client(FakeContentStore())

        response = client.post(
            "/api/upload-report",
            content=build_multipart_body([("note", b"hello", None)]),
            headers={"Content-Type": content_type()},
        )

        assert response.status_code == 400
        assert response.json()["message"] == "File name is missing."

    def test_missing_owner(self, make_client):
        """Without an owner the upload fails with 400 even though the file is present."""
        client, store, _ = make_client(FakeContentStore())
        files = {"file": ("a.pdf", io.BytesIO(b"%PDF-1.4"), "application/pdf")}

        response = client.post("/api/upload-report", files=files)

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Target wallet address is required.",
            "cid": None,
            "file_name": "a.pdf",
        }
        assert store.calls == []

    def test_malformed_body(self, make_client):
        """Broken multipart framing fails with 400."""
        client, _, _ = make_client(FakeContentStore())

        response = client.post(
            "/api/upload-report",
            content=b"definitely not multipart",
            headers={"Content-Type": content_type()},
        )

        assert response.status_code == 400
        assert response.json()["success"] is False
        assert response.json()["message"].startswith("Error parsing field:")

    def test_wrong_content_type(self, make_client):
        """A JSON body is rejected with 400."""
        client, _, _ = make_client(FakeContentStore())

        response = client.post("/api/upload-report", json={"targetWalletAddress": "Wallet1"})

        assert response.status_code == 400


class TestUploadUpstreamFailures:
    """Tests for storage backend failures during upload."""

    @pytest.mark.parametrize(
        "error",
        [
            UpstreamRejectedError(500, "ipfs exploded", file_name="a.pdf"),
            UpstreamMalformedError("Failed to get CID from IPFS response.", file_name="a.pdf"),
            UpstreamUnavailableError("Failed to upload to IPFS: Connection refused", file_name="a.pdf"),
        ],
    )
    def test_upstream_failure_returns_500(self, make_client, error):
        """Any storage failure returns 500 and records nothing."""
        client, _, index = make_client(FakeContentStore(error=error))
        files = {"file": ("a.pdf", io.BytesIO(b"%PDF-1.4"), "application/pdf")}

        response = client.post(
            "/api/upload-report", files=files, data={"targetWalletAddress": "Wallet1"}
        )

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": error.message_safe,
            "cid": None,
            "file_name": "a.pdf",
        }
        assert index.lookup("Wallet1") == []

    def test_upstream_body_is_not_returned(self, make_client):
        """Upstream response bodies stay in the server logs."""
        error = UpstreamRejectedError(502, "secret upstream detail", file_name="a.pdf")
        client, _, _ = make_client(FakeContentStore(error=error))
        files = {"file": ("a.pdf", io.BytesIO(b"x"), "application/pdf")}

        response = client.post(
            "/api/upload-report", files=files, data={"targetWalletAddress": "Wallet1"}
        )

        assert "secret upstream detail" not in response.text


class TestGetReports:
    """Tests for GET /api/get-reports/{walletAddress}."""

    def test_unknown_wallet(self, make_client):
        """An unknown wallet returns success with an empty list and a message."""
        client, _, _ = make_client(FakeContentStore())

        response = client.get("/api/get-reports/nobody")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "reports": [],
            "message": NO_REPORTS_MESSAGE,
        }

    def test_lists_in_insertion_order(self, make_client):
        """Reports are listed in the order they were recorded."""
        client, _, index = make_client(FakeContentStore())
        index.record("Wallet1", "Qm1", "a.pdf")
        index.record("Wallet1", "Qm2", "b.pdf")

        response = client.get("/api/get-reports/Wallet1")

        assert [r["cid"] for r in response.json()["reports"]] == ["Qm1", "Qm2"]

    def test_wallet_used_verbatim(self, make_client):
        """The path segment is used as-is as the owner key."""
        client, _, index = make_client(FakeContentStore())
        index.record("0xAbC", "Qm1", "a.pdf")

        assert client.get("/api/get-reports/0xAbC").json()["reports"]
        assert client.get("/api/get-reports/0xabc").json()["reports"] == []


# --- Fixtures ---


@pytest.fixture
def make_client():
    """Build a TestClient whose app uses the given content store and a fresh index."""

    def _make(store):
        app = create_app(Settings())
        index = ReportIndex()
        app.state.report_services = ReportServices(
            http_client=MagicMock(),
            content_store=store,
            report_index=index,
        )
        return TestClient(app), store, index

    return _make
