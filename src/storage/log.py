"""Per-document entry logs, one git branch per document."""

import logging

from typing import List

from crypto.codec import seal, unseal
from storage.git import GitWorkdir
from utils.dataModels import ENTRY_COMMIT_MESSAGE, LEGACY_FILENAME, NAME_MARKER_FILENAME, Entry
from utils.errors import BackendError, DecryptionError, FormatError, LogError
from utils.naming import branch_for, entry_id_for, parse_entry_id

logger = logging.getLogger(__name__)


def append_entry(name: str, entry: Entry, workdir: GitWorkdir, key: bytes) -> str:
    """Commit one entry to the document branch and return its entry id.

    The index is not touched; registering a new document there is the
    caller's second step.
    """
    branch = branch_for(name)
    entry_id = entry_id_for(entry.timestamp)
    sealed = seal(entry.content, key)
    try:
        workdir.switch(branch)
        if workdir.exists(entry_id):
            raise LogError(f"entry {entry_id} already exists in {name!r}")
        workdir.write_file(entry_id, sealed)
        if not workdir.exists(NAME_MARKER_FILENAME):
            workdir.write_file(NAME_MARKER_FILENAME, seal(name.encode("utf-8"), key))
        workdir.stage_all()
        workdir.commit(ENTRY_COMMIT_MESSAGE)
        workdir.push(branch)
    except BackendError as err:
        raise LogError(f"appending {entry_id} to {name!r} failed: {err}") from err
    logger.info(f"Appended entry {entry_id} to branch {branch[:12]}")
    return entry_id


def _tracked_files(name: str, workdir: GitWorkdir) -> List[str]:
    try:
        workdir.switch(branch_for(name))
        return workdir.list_tracked_files()
    except BackendError as err:
        raise LogError(f"cannot read branch of {name!r}: {err}") from err


def _unseal_file(workdir: GitWorkdir, filename: str, key: bytes, name: str) -> bytes:
    data = workdir.read_file(filename)
    if data is None:
        raise LogError(f"{filename} is tracked but missing from the working tree of {name!r}")
    try:
        return unseal(data, key)
    except DecryptionError as err:
        raise DecryptionError(f"{name!r} entry {filename}: {err}") from err
    except FormatError as err:
        raise FormatError(f"{name!r} entry {filename}: {err}") from err


def read_entries(name: str, workdir: GitWorkdir, key: bytes) -> List[Entry]:
    """All entries of a document, oldest first. Any undecryptable entry aborts the read."""
    entries = []
    for filename in _tracked_files(name, workdir):
        ts = parse_entry_id(filename)
        if ts is None:
            logger.debug(f"Skipping non-entry file {filename}")
            continue
        entries.append(Entry(timestamp=ts, content=_unseal_file(workdir, filename, key, name)))
    entries.sort(key=lambda e: e.timestamp)
    return entries


def read_legacy(name: str, workdir: GitWorkdir, key: bytes) -> bytes | None:
    """Content of a single-file document written before entry logs existed."""
    if LEGACY_FILENAME not in _tracked_files(name, workdir):
        return None
    return _unseal_file(workdir, LEGACY_FILENAME, key, name)


def read_name_marker(workdir: GitWorkdir, key: bytes) -> str | None:
    """Decrypted document name of the branch currently checked out."""
    data = workdir.read_file(NAME_MARKER_FILENAME)
    if data is None:
        return None
    try:
        return unseal(data, key).decode("utf-8")
    except UnicodeDecodeError as err:
        raise FormatError(f"name marker is not UTF-8: {err}") from err
