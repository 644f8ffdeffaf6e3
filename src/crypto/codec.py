"""Text encoding of ciphertext as it is stored in tracked files."""
import binascii

from crypto.aead import aead_decrypt, aead_encrypt
from utils.errors import FormatError


def to_hex(data: bytes) -> str:
    return data.hex()


def from_hex(text: str) -> bytes:
    try:
        return binascii.unhexlify(text.strip())
    except (binascii.Error, ValueError) as err:
        raise FormatError(f"malformed hex payload: {err}") from err


def seal(plaintext: bytes, key: bytes) -> str:
    return to_hex(aead_encrypt(key, plaintext))


def unseal(text: str, key: bytes) -> bytes:
    return aead_decrypt(key, from_hex(text))
