"""Unit tests for the in-memory ReportIndex."""

from concurrent.futures import ThreadPoolExecutor

import pytest

from app.reports.protocols import ReportLedger
from app.reports.services.report_index import ReportIndex
from reportvault_core.domain.models import StoredArtifact


class TestRecord:
    """Tests for ReportIndex.record."""

    def test_returns_artifact(self, index):
        """Should return the artifact it stored."""
        artifact = index.record("Wallet1", "Qm123", "a.pdf")

        assert artifact == StoredArtifact(content_id="Qm123", filename="a.pdf")

    def test_preserves_insertion_order(self, index):
        """Artifacts should come back in the order they were recorded."""
        index.record("Wallet1", "Qm1", "a.pdf")
        index.record("Wallet1", "Qm2", "b.pdf")
        index.record("Wallet1", "Qm3", "c.pdf")

        assert [a.content_id for a in index.lookup("Wallet1")] == ["Qm1", "Qm2", "Qm3"]

    def test_allows_duplicates(self, index):
        """Identical uploads are recorded twice."""
        index.record("Wallet1", "Qm1", "a.pdf")
        index.record("Wallet1", "Qm1", "a.pdf")

        assert len(index.lookup("Wallet1")) == 2

    def test_owners_are_isolated(self, index):
        """Recording for one owner does not affect another."""
        index.record("Wallet1", "Qm1", "a.pdf")
        index.record("Wallet2", "Qm2", "b.pdf")

        assert [a.content_id for a in index.lookup("Wallet1")] == ["Qm1"]
        assert [a.content_id for a in index.lookup("Wallet2")] == ["Qm2"]
        assert sorted(index.owners()) == ["Wallet1", "Wallet2"]
        assert len(index) == 2


class TestLookup:
    """Tests for ReportIndex.lookup."""

    def test_unknown_owner_is_empty(self, index):
        """An owner never recorded yields an empty list."""
        assert index.lookup("nobody") == []
        assert len(index) == 0

    def test_returns_a_copy(self, index):
        """Mutating the returned list must not change the index."""
        index.record("Wallet1", "Qm1", "a.pdf")

        index.lookup("Wallet1").clear()

        assert len(index.lookup("Wallet1")) == 1

    def test_artifacts_are_immutable(self, index):
        """Stored artifacts cannot be modified."""
        artifact = index.record("Wallet1", "Qm1", "a.pdf")

        with pytest.raises(Exception):  # ValidationError for frozen model
            artifact.content_id = "changed"


class TestConcurrency:
    """Tests for concurrent access."""

    def test_no_lost_updates(self, index):
        """Concurrent records for one owner should all be kept exactly once."""
        def record(i: int):
            index.record("Wallet1", f"Qm{i}", f"{i}.pdf")

        with ThreadPoolExecutor(max_workers=16) as pool:
            list(pool.map(record, range(500)))

        cids = [a.content_id for a in index.lookup("Wallet1")]
        assert len(cids) == 500
        assert set(cids) == {f"Qm{i}" for i in range(500)}


def test_implements_protocol():
    """ReportIndex should satisfy the ReportLedger protocol."""
    assert isinstance(ReportIndex(), ReportLedger)


def test_protocol_requires_owner_count():
    """A ledger must be countable, since /health reports the number of owners."""

    class UncountableLedger:
        def record(self, owner, content_id, filename):
            return StoredArtifact(content_id=content_id, filename=filename)

        def lookup(self, owner):
            return []

    assert not isinstance(UncountableLedger(), ReportLedger)


# --- Fixtures ---


@pytest.fixture
def index():
    return ReportIndex()
