import json

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List

from utils.errors import FormatError

DEFAULT_PRIMARY_BRANCH = "master"

# Reserved filenames. The index lives in INDEX_FILENAME on the primary branch;
# the same name on a document branch is a legacy single-file document.
INDEX_FILENAME = "file"
LEGACY_FILENAME = "file"
NAME_MARKER_FILENAME = "name"

ENTRY_COMMIT_MESSAGE = "append entry"
INDEX_COMMIT_MESSAGE = "update index"

KEY_SIZE = 32
NONCE_SIZE = 12
TAG_SIZE = 16


@dataclass(frozen=True)
class Entry:
    timestamp: datetime
    content: bytes


@dataclass
class Document:
    name: str
    entries: List[Entry] = field(default_factory=list)
    legacy: bytes | None = None

    def content(self) -> bytes:
        """Legacy content first, then every entry in order."""
        parts = [self.legacy] if self.legacy is not None else []
        parts.extend(e.content for e in self.entries)
        return b"".join(parts)


@dataclass
class TableOfContents:
    documents: Dict[str, bool] = field(default_factory=dict)

    def to_bytes(self) -> bytes:
        return json.dumps(self.documents, ensure_ascii=False, separators=(",", ":"), sort_keys=True).encode("utf-8")

    @staticmethod
    def from_bytes(b: bytes) -> "TableOfContents":
        try:
            obj = json.loads(b.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as err:
            raise FormatError(f"index is not valid JSON: {err}") from err
        if not isinstance(obj, dict):
            raise FormatError("index must be a JSON object")
        documents: Dict[str, bool] = {}
        for name, present in obj.items():
            if not isinstance(present, bool):
                raise FormatError(f"index flag for {name!r} is not a boolean")
            documents[name] = present
        return TableOfContents(documents=documents)
