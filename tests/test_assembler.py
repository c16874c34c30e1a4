"""Tests for draftlog.history.assembler: ordering and result packaging."""

import logging
from datetime import datetime, timedelta, timezone

from draftlog.history.assembler import VersionAssembler
from draftlog.history.models import Change, FileVersion
from draftlog.vcs.models import Commit

T0 = datetime(2024, 3, 1, tzinfo=timezone.utc)


def _entry(seq: int, path: str, oid: str, ts: datetime) -> tuple[Change, FileVersion]:
    commit = Commit(id=f"commit{seq:034d}", timestamp=ts)
    version = FileVersion(
        commit_id=commit.id, object_id=oid, timestamp=ts, content=f"text {oid}"
    )
    return Change(seq, commit, path, oid), version


class TestFinalize:
    def test_sorts_out_of_order_additions(self):
        assembler = VersionAssembler()
        for seq, oid in [(2, "c"), (0, "a"), (1, "b")]:
            assembler.add(*_entry(seq, "doc.ulyz", oid, T0 + timedelta(minutes=seq)))
        result = assembler.finalize(total_commits=3)
        assert [v.object_id for v in result.files[0].versions] == ["a", "b", "c"]

    def test_equal_timestamps_fall_back_to_commit_order(self):
        assembler = VersionAssembler()
        assembler.add(*_entry(5, "doc.ulyz", "later", T0))
        assembler.add(*_entry(4, "doc.ulyz", "earlier", T0))
        versions = assembler.finalize(total_commits=6).files[0].versions
        assert [v.object_id for v in versions] == ["earlier", "later"]

    def test_paths_sorted_and_only_with_versions(self):
        assembler = VersionAssembler()
        assembler.add(*_entry(0, "z.ulyz", "1", T0))
        assembler.add(*_entry(0, "a.ulyz", "2", T0))
        assembler.skip("m.ulyz")
        result = assembler.finalize(total_commits=1)
        assert [f.path for f in result.files] == ["a.ulyz", "z.ulyz"]
        assert result.get("m.ulyz") is None

    def test_counts(self):
        assembler = VersionAssembler()
        assembler.add(*_entry(0, "a.ulyz", "1", T0))
        assembler.skip("a.ulyz")
        assembler.skip("b.ulyz")
        result = assembler.finalize(total_commits=10, processed_commits=4, cancelled=True)
        assert result.skipped_versions == 2
        assert result.total_commits == 10
        assert result.processed_commits == 4
        assert result.cancelled is True
        assert result.version_count == 1

    def test_processed_defaults_to_total(self):
        assert VersionAssembler().finalize(total_commits=7).processed_commits == 7

    def test_empty(self):
        result = VersionAssembler().finalize(total_commits=0)
        assert result.files == []
        assert result.cancelled is False

    def test_adjacent_duplicate_logged(self, caplog):
        assembler = VersionAssembler()
        assembler.add(*_entry(0, "a.ulyz", "same", T0))
        assembler.add(*_entry(1, "a.ulyz", "same", T0 + timedelta(minutes=1)))
        with caplog.at_level(logging.ERROR):
            result = assembler.finalize(total_commits=2)
        assert len(result.files[0].versions) == 2
        assert "share object" in caplog.text
