"""Shared test fixtures for draftlog."""

from __future__ import annotations

import io
import zipfile
from collections import Counter
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from git import Actor, Repo

from draftlog.config.models import DraftlogConfig
from draftlog.vcs.base import ObjectStore
from draftlog.vcs.models import BlobNotFoundError, Commit, TreeEntry

BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_document(xml: str, part: str = "Doc.ulysses/Content.xml") -> bytes:
    """Build a zipped document whose content part holds *xml*."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as archive:
        archive.writestr(part, xml)
        archive.writestr("Doc.ulysses/Info.plist", "<plist/>")
    return buf.getvalue()


def paragraph_doc(*paragraphs: str) -> bytes:
    return make_document("<sheet>" + "".join(f"<p>{p}</p>" for p in paragraphs) + "</sheet>")


class FakeObjectStore(ObjectStore):
    """In-memory object store.

    Revisions are given oldest first as ``{path: object_id}`` snapshots;
    ``blobs`` maps object ids to raw bytes. Calls are counted so tests can
    assert on how much work the engine did.
    """

    def __init__(
        self,
        revisions: list[dict[str, str]],
        blobs: dict[str, bytes],
        timestamps: list[datetime] | None = None,
    ) -> None:
        self.blobs = blobs
        self._trees: dict[str, dict[str, str]] = {}
        commits = []
        for i, tree in enumerate(revisions):
            commit_id = f"c{i + 1:039d}"
            ts = timestamps[i] if timestamps else BASE_TIME + timedelta(hours=i)
            commits.append(
                Commit(id=commit_id, timestamp=ts, author="Ada", message=f"rev {i + 1}")
            )
            self._trees[commit_id] = dict(tree)
        self._commits = list(reversed(commits))
        self.reads: Counter[str] = Counter()
        self.resolves = 0
        self.failing_reads: set[tuple[str, str]] = set()

    @property
    def commits(self) -> list[Commit]:
        """Newest first, like a repository log."""
        return list(self._commits)

    async def list_commits(self, max_count: int | None = None) -> list[Commit]:
        return self.commits[:max_count] if max_count else self.commits

    async def list_tree(self, commit_id: str, path: str = "") -> list[TreeEntry]:
        prefix = f"{path}/" if path else ""
        seen: dict[str, TreeEntry] = {}
        for full, oid in self._trees[commit_id].items():
            if not full.startswith(prefix):
                continue
            head, _, rest = full[len(prefix):].partition("/")
            child = prefix + head
            if rest:
                seen.setdefault(child, TreeEntry(path=child, name=head, type="tree", sha="t"))
            else:
                seen[child] = TreeEntry(path=child, name=head, type="blob", sha=oid)
        return list(seen.values())

    async def resolve_blob(self, commit_id: str, path: str) -> str | None:
        self.resolves += 1
        return self._trees[commit_id].get(path)

    async def read_blob(self, commit_id: str, path: str) -> tuple[str, bytes]:
        self.reads[path] += 1
        if (commit_id, path) in self.failing_reads:
            raise OSError(f"simulated read failure for {path}")
        oid = self._trees[commit_id].get(path)
        if oid is None:
            raise BlobNotFoundError(commit_id, path)
        return oid, self.blobs[oid]


def commit_files(
    repo: Repo,
    files: dict[str, bytes | None],
    message: str,
    when: datetime,
    author: str = "Ada Lovelace",
) -> str:
    """Write (or delete, for ``None``) files and commit them at *when*."""
    root = Path(repo.working_tree_dir)
    added, removed = [], []
    for rel, data in files.items():
        target = root / rel
        if data is None:
            removed.append(rel)
            continue
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        added.append(rel)
    if added:
        repo.index.add(added)
    if removed:
        repo.index.remove(removed, working_tree=True)
    actor = Actor(author, "ada@example.com")
    stamp = f"{int(when.timestamp())} +0000"
    commit = repo.index.commit(
        message, author=actor, committer=actor, author_date=stamp, commit_date=stamp
    )
    return commit.hexsha


@pytest.fixture
def sample_config():
    return DraftlogConfig()


@pytest.fixture
def two_version_store():
    """C1 adds a.ulyz, C2 leaves it unchanged, C3 modifies it."""
    blobs = {"oid-x": paragraph_doc("first draft"), "oid-y": paragraph_doc("second draft")}
    return FakeObjectStore(
        [{"a.ulyz": "oid-x"}, {"a.ulyz": "oid-x"}, {"a.ulyz": "oid-y"}],
        blobs,
    )


@pytest.fixture
def multi_doc_store():
    """Three documents over six commits, with a revert and a deletion."""
    blobs = {
        "a1": paragraph_doc("alpha one"),
        "a2": paragraph_doc("alpha two"),
        "b1": paragraph_doc("beta one"),
        "b2": paragraph_doc("beta two"),
        "n1": paragraph_doc("notes"),
    }
    revisions = [
        {"docs/a.ulyz": "a1"},
        {"docs/a.ulyz": "a1", "b.ulyz": "b1"},
        {"docs/a.ulyz": "a2", "b.ulyz": "b1", "notes/n.ulyz": "n1"},
        {"docs/a.ulyz": "a1", "b.ulyz": "b2", "notes/n.ulyz": "n1"},
        {"docs/a.ulyz": "a1", "notes/n.ulyz": "n1"},
        {"docs/a.ulyz": "a1", "b.ulyz": "b2", "notes/n.ulyz": "n1", "Archive/old.ulyz": "a2"},
    ]
    return FakeObjectStore(revisions, blobs)


@pytest.fixture
def git_repo(tmp_path):
    """A real repository with two documents and an archived one."""
    repo = Repo.init(tmp_path / "repo")
    commit_files(
        repo,
        {"essay.ulyz": paragraph_doc("Opening"), "README.md": b"# notes\n"},
        "Add essay",
        BASE_TIME,
    )
    commit_files(
        repo,
        {"drafts/story.ulyz": paragraph_doc("Once")},
        "Start story",
        BASE_TIME + timedelta(days=1),
    )
    commit_files(
        repo,
        {"essay.ulyz": paragraph_doc("Opening", "Middle"), "Archive/old.ulyz": paragraph_doc("x")},
        "Extend essay",
        BASE_TIME + timedelta(days=2),
    )
    yield repo
    repo.close()


@pytest.fixture
def make_doc():
    """Factory for zipped documents: ``make_doc(xml, part=...)``."""
    return make_document


@pytest.fixture
def para_doc():
    """Factory for documents made of ``<p>`` paragraphs."""
    return paragraph_doc


@pytest.fixture
def fake_store():
    """The FakeObjectStore class, for tests that build their own history."""
    return FakeObjectStore


@pytest.fixture
def commit_to():
    """Helper committing files to a GitPython repo at a fixed time."""
    return commit_files
