import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from utils.dataModels import NONCE_SIZE, TAG_SIZE
from utils.errors import DecryptionError, EncryptionError


def aead_encrypt(key: bytes, plaintext: bytes, aad: bytes | None = None) -> bytes:
    """AES-256-GCM. Returns nonce || ct || tag."""
    nonce = os.urandom(NONCE_SIZE)
    try:
        aesgcm = AESGCM(key)
        ct = aesgcm.encrypt(nonce, plaintext, aad)
    except (ValueError, TypeError, OverflowError) as err:
        raise EncryptionError(f"encryption failed: {err}") from err
    return nonce + ct


def aead_decrypt(key: bytes, data: bytes, aad: bytes | None = None) -> bytes:
    if len(data) < NONCE_SIZE + TAG_SIZE:
        raise DecryptionError("ciphertext too short")
    nonce, ct = data[:NONCE_SIZE], data[NONCE_SIZE:]
    try:
        aesgcm = AESGCM(key)
        return aesgcm.decrypt(nonce, ct, aad)
    except InvalidTag as err:
        raise DecryptionError("authentication failed (wrong password or corrupt data)") from err
    except (ValueError, TypeError) as err:
        raise DecryptionError(f"decryption failed: {err}") from err
