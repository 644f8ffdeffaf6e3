"""The table of contents: which documents exist, stored encrypted on the primary branch."""

import logging

from typing import Dict

from crypto.codec import seal, unseal
from storage.git import GitWorkdir
from utils.dataModels import DEFAULT_PRIMARY_BRANCH, INDEX_COMMIT_MESSAGE, INDEX_FILENAME, TableOfContents
from utils.errors import BackendError, IndexStoreError, InvalidNameError
from utils.naming import is_document_branch

logger = logging.getLogger(__name__)


def validate_document_name(name: str, primary_branch: str = DEFAULT_PRIMARY_BRANCH) -> None:
    if not name:
        raise InvalidNameError("document name must not be empty")
    if "\0" in name:
        raise InvalidNameError("document name must not contain NUL")
    try:
        name.encode("utf-8")
    except UnicodeEncodeError as err:
        raise InvalidNameError(f"document name is not valid UTF-8: {err}") from err
    if name == primary_branch:
        raise InvalidNameError(f"{name!r} is reserved for the index branch")


def load_index(workdir: GitWorkdir, key: bytes, primary_branch: str = DEFAULT_PRIMARY_BRANCH) -> Dict[str, bool]:
    """Read the index. A missing index object means no documents yet."""
    try:
        workdir.switch(primary_branch)
    except BackendError as err:
        raise IndexStoreError(f"cannot check out index branch {primary_branch}: {err}") from err
    data = workdir.read_file(INDEX_FILENAME)
    if data is None:
        return {}
    return TableOfContents.from_bytes(unseal(data, key)).documents


def save_index(mapping: Dict[str, bool], workdir: GitWorkdir, key: bytes, primary_branch: str = DEFAULT_PRIMARY_BRANCH) -> None:
    # No rollback: whatever step fails leaves the earlier steps applied.
    payload = seal(TableOfContents(documents=dict(mapping)).to_bytes(), key)
    try:
        workdir.switch(primary_branch)
        workdir.write_file(INDEX_FILENAME, payload)
        workdir.stage_all()
        workdir.commit(INDEX_COMMIT_MESSAGE)
        workdir.push(primary_branch)
    except BackendError as err:
        raise IndexStoreError(f"saving index on {primary_branch} failed: {err}") from err
    logger.info(f"Saved index with {len(mapping)} document(s)")


def mark_present(mapping: Dict[str, bool], name: str) -> Dict[str, bool]:
    updated = dict(mapping)
    updated[name] = True
    return updated


def check_primary_branch(primary_branch: str) -> None:
    if not primary_branch or is_document_branch(primary_branch):
        raise InvalidNameError(f"{primary_branch!r} cannot be used as the index branch")
