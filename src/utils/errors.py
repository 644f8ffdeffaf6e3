class EgfsError(Exception):
    """Base class for every failure raised by the store."""


class BackendError(EgfsError):
    """A git operation failed."""

    def __init__(self, message: str, cmd: list[str] | None = None, returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.cmd = cmd or []
        self.returncode = returncode
        self.stderr = stderr

    def __str__(self) -> str:
        msg = super().__str__()
        if self.stderr:
            return f"{msg}: {self.stderr.strip()}"
        return msg


class FormatError(EgfsError):
    """Malformed hex or structured payload."""


class DecryptionError(EgfsError):
    """Authentication failed: wrong password or corrupt ciphertext."""


class EncryptionError(EgfsError):
    pass


class NotFoundError(EgfsError):
    pass


class LogError(EgfsError):
    pass


class IndexStoreError(EgfsError):
    pass


class InvalidNameError(EgfsError, ValueError):
    pass
