"""
Read-only HTTP view of the encrypted document store.

Endpoints:
- GET /files         -> list of documents with size and modification time
- GET /files/{name}  -> decrypted document content

Usage:
    egfs serve <repo> --passphrase ...
"""
import logging

from email.utils import format_datetime

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel

from storage.fs import EncryptedFileSystem
from utils.errors import DecryptionError, EgfsError, FormatError, NotFoundError

logger = logging.getLogger(__name__)


class FileStatDTO(BaseModel):
    name: str
    size: int
    mod_time: str
    is_dir: bool = False


def create_app(fs: EncryptedFileSystem) -> FastAPI:
    app = FastAPI(
        title="egfs",
        description="Read-only view of an encrypted git document store",
    )

    @app.get("/files", response_model=list[FileStatDTO])
    def list_files():
        try:
            files = fs.list_all()
        except EgfsError as e:
            logger.error(f"Listing failed: {e}")
            raise HTTPException(status_code=500, detail="store unavailable")
        stats = []
        for f in files:
            st = f.stat()
            f.close()
            stats.append(FileStatDTO(name=st.name, size=st.size, mod_time=st.mod_time.isoformat(), is_dir=st.is_dir))
        return stats

    @app.get("/files/{name:path}")
    def get_file(name: str):
        try:
            f = fs.open(name)
        except NotFoundError:
            raise HTTPException(status_code=404, detail="file not found")
        except (DecryptionError, FormatError) as e:
            logger.error(f"Cannot decrypt {name!r}: {e}")
            raise HTTPException(status_code=500, detail="document cannot be decrypted")
        except EgfsError as e:
            logger.error(f"Reading {name!r} failed: {e}")
            raise HTTPException(status_code=500, detail="store unavailable")
        with f:
            st = f.stat()
            body = f.read()
        return Response(
            content=body,
            media_type="application/octet-stream",
            headers={"Last-Modified": format_datetime(st.mod_time, usegmt=True)},
        )

    return app


def serve(fs: EncryptedFileSystem, host: str, port: int) -> None:
    import uvicorn

    uvicorn.run(create_app(fs), host=host, port=port)
