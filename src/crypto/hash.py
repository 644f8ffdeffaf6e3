from cryptography.hazmat.backends import default_backend
from cryptography.hazmat.primitives import hashes


def sha256_bytes(data: bytes) -> bytes:
    digest = hashes.Hash(hashes.SHA256(), backend=default_backend())
    digest.update(data)
    return digest.finalize()


def derive_key(password: str | bytes) -> bytes:
    """Key = SHA-256(password) -> 32 bytes. Deterministic and unsalted."""
    if isinstance(password, str):
        password = password.encode("utf-8")
    return sha256_bytes(password)
