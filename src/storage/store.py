"""
DocumentStore ties the index and the per-document logs together.

Writes are a two-step protocol, not a transaction:

    1. append the entry on the document branch (commit + push)
    2. if the document is new, add it to the index on the primary branch

A failure between the two leaves an entry that is reachable by walking
branches but missing from the index. ``reconcile`` walks every document
branch and puts such documents back.
"""

import logging

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List

from crypto.hash import derive_key
from storage import log, toc
from storage.git import GitWorkdir
from utils.config import Settings
from utils.dataModels import Document, Entry
from utils.errors import EgfsError, IndexStoreError, LogError, NotFoundError
from utils.naming import branch_for, is_document_branch

logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    added: List[str] = field(default_factory=list)
    # Names in the index whose branch does not exist anywhere.
    dangling: List[str] = field(default_factory=list)
    # Document-shaped branches with no readable name marker.
    unnamed: List[str] = field(default_factory=list)


class DocumentStore:
    def __init__(self, workdir: GitWorkdir, password: str | bytes, settings: Settings | None = None) -> None:
        self.workdir = workdir
        self.settings = settings or Settings()
        toc.check_primary_branch(self.settings.primary_branch)
        self.key = derive_key(password)

    @classmethod
    def open(cls, path, password: str | bytes, settings: Settings | None = None) -> "DocumentStore":
        settings = settings or Settings()
        workdir = GitWorkdir(
            path,
            remote=settings.remote,
            git=settings.git,
            author_name=settings.author_name,
            author_email=settings.author_email,
        )
        return cls(workdir, password, settings)

    @property
    def primary_branch(self) -> str:
        return self.settings.primary_branch

    def init(self) -> bool:
        """Create the repository and an empty index. Returns False if an index already exists."""
        with self.workdir.lock:
            self.workdir.init()
            if self.workdir.branch_exists(self.primary_branch):
                # Decrypting proves the password matches the existing index.
                self.load_index()
                return False
            toc.save_index({}, self.workdir, self.key, self.primary_branch)
            return True

    def load_index(self) -> Dict[str, bool]:
        with self.workdir.lock:
            return toc.load_index(self.workdir, self.key, self.primary_branch)

    def documents(self) -> List[str]:
        return sorted(name for name, present in self.load_index().items() if present)

    def write(self, name: str, content: bytes, timestamp: datetime | None = None) -> Entry:
        toc.validate_document_name(name, self.primary_branch)
        entry = Entry(timestamp=timestamp or datetime.now(timezone.utc), content=content)
        with self.workdir.lock:
            # Loading first fails fast on a wrong password, before anything is written.
            index = toc.load_index(self.workdir, self.key, self.primary_branch)
            log.append_entry(name, entry, self.workdir, self.key)
            if index.get(name):
                return entry
            try:
                toc.save_index(toc.mark_present(index, name), self.workdir, self.key, self.primary_branch)
            except EgfsError as err:
                raise IndexStoreError(
                    f"entry for {name!r} was committed but the index update failed; run reconcile"
                ) from err
        return entry

    def _require(self, name: str) -> None:
        if not self.load_index().get(name):
            raise NotFoundError(f"no such document: {name!r}")
        if not self.workdir.branch_exists(branch_for(name)):
            raise LogError(f"index lists {name!r} but its branch does not exist; run reconcile")

    def entries(self, name: str) -> List[Entry]:
        with self.workdir.lock:
            self._require(name)
            return log.read_entries(name, self.workdir, self.key)

    def read(self, name: str) -> Document:
        with self.workdir.lock:
            self._require(name)
            legacy = log.read_legacy(name, self.workdir, self.key)
            entries = log.read_entries(name, self.workdir, self.key)
            return Document(name=name, entries=entries, legacy=legacy)

    def read_with_mtime(self, name: str) -> tuple[Document, datetime | None]:
        """Document plus the time of the last commit on its branch."""
        with self.workdir.lock:
            doc = self.read(name)
            # read() leaves the document branch checked out.
            return doc, self.workdir.last_commit_time()

    def reconcile(self) -> ReconcileReport:
        """Rebuild index presence from the document branches."""
        report = ReconcileReport()
        with self.workdir.lock:
            index = toc.load_index(self.workdir, self.key, self.primary_branch)
            branches = set(self.workdir.list_branches())
            updated = dict(index)

            for branch in sorted(b for b in branches if is_document_branch(b)):
                self.workdir.switch(branch)
                name = log.read_name_marker(self.workdir, self.key)
                if name is None or branch_for(name) != branch:
                    logger.warning(f"Branch {branch[:12]} has no valid name marker, skipping")
                    report.unnamed.append(branch)
                    continue
                if not updated.get(name):
                    logger.warning(f"Document {name!r} missing from index, restoring")
                    updated = toc.mark_present(updated, name)
                    report.added.append(name)

            for name, present in sorted(index.items()):
                if present and branch_for(name) not in branches:
                    logger.warning(f"Index lists {name!r} but its branch does not exist")
                    report.dangling.append(name)

            if report.added:
                toc.save_index(updated, self.workdir, self.key, self.primary_branch)
        return report
