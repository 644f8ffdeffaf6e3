"""Branch and entry naming.

Document branches are the hex SHA-256 of the document name. Entry files are
named by a fixed-width big-endian encoding of their timestamp so that sorting
the filenames sorts the entries chronologically:

    seconds + 2**63 : u64   (biased so pre-epoch times sort first)
    nanoseconds     : u32
"""
import re
import struct

from datetime import datetime, timedelta, timezone

from crypto.hash import sha256_bytes

ENTRY_ID_FMT = ">QI"
ENTRY_ID_SIZE = struct.calcsize(ENTRY_ID_FMT)
ENTRY_ID_LEN = ENTRY_ID_SIZE * 2

_SECONDS_BIAS = 1 << 63
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ENTRY_ID_RE = re.compile(r"[0-9a-f]{%d}" % ENTRY_ID_LEN)
_BRANCH_RE = re.compile(r"[0-9a-f]{64}")


def branch_for(name: str) -> str:
    return sha256_bytes(name.encode("utf-8")).hex()


def is_document_branch(branch: str) -> bool:
    return _BRANCH_RE.fullmatch(branch) is not None


def _as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def entry_id_for(ts: datetime) -> str:
    delta = _as_utc(ts) - _EPOCH
    seconds = delta.days * 86400 + delta.seconds
    nanos = delta.microseconds * 1000
    return struct.pack(ENTRY_ID_FMT, seconds + _SECONDS_BIAS, nanos).hex()


def parse_entry_id(identifier: str) -> datetime | None:
    """Inverse of entry_id_for; None for anything that is not an entry id."""
    if _ENTRY_ID_RE.fullmatch(identifier) is None:
        return None
    biased, nanos = struct.unpack(ENTRY_ID_FMT, bytes.fromhex(identifier))
    # Only whole microseconds are ever written.
    if nanos >= 1_000_000_000 or nanos % 1000:
        return None
    try:
        return _EPOCH + timedelta(seconds=biased - _SECONDS_BIAS, microseconds=nanos // 1000)
    except OverflowError:
        return None
