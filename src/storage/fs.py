"""
Read-only filesystem view over a DocumentStore.

Each document in the index appears as one flat file whose content is the
decrypted legacy content followed by every entry, oldest first. Files are
assembled completely in memory before they are handed out, so a decryption
failure never yields a partial file.
"""

import io

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List

from storage.store import DocumentStore

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class FileStat:
    name: str
    size: int
    mod_time: datetime
    is_dir: bool = False


class DocumentFile(io.RawIOBase):
    """A decrypted document exposed as a seekable, read-only byte stream."""

    def __init__(self, name: str, content: bytes, mod_time: datetime | None = None) -> None:
        super().__init__()
        self.name = name
        self.mod_time = mod_time or _EPOCH
        self._buf = io.BytesIO(content)
        self._size = len(content)

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def readinto(self, b) -> int:
        self._checkClosed()
        return self._buf.readinto(b)

    def read(self, size: int = -1) -> bytes:
        self._checkClosed()
        return self._buf.read(size)

    def readall(self) -> bytes:
        return self.read()

    def write(self, b) -> int:
        raise io.UnsupportedOperation("documents are read-only; append entries through the store")

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._checkClosed()
        return self._buf.seek(offset, whence)

    def tell(self) -> int:
        self._checkClosed()
        return self._buf.tell()

    def stat(self) -> FileStat:
        return FileStat(name=self.name, size=self._size, mod_time=self.mod_time)

    def readdir(self) -> List[FileStat]:
        """A document is a plain file; listing it yields its own stat."""
        return [self.stat()]

    def close(self) -> None:
        if not self.closed:
            self._buf.close()
        super().close()


class EncryptedFileSystem:
    def __init__(self, store: DocumentStore) -> None:
        self.store = store

    def open(self, name: str) -> DocumentFile:
        """Open a document by name; NotFoundError if the index does not list it."""
        doc, mod_time = self.store.read_with_mtime(name)
        return DocumentFile(name, doc.content(), mod_time)

    def list_all(self) -> List[DocumentFile]:
        with self.store.workdir.lock:
            return [self.open(name) for name in self.store.documents()]
