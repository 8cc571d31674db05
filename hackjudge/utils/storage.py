import asyncio
import os
import uuid
from pathlib import Path

import aiofiles
from fastapi import UploadFile

from hackjudge.errors import FileTooLarge, StorageUnavailable

CHUNK_SIZE = 64 * 1024

upload_semaphore = asyncio.Semaphore(5)


async def read_upload(upload_file: UploadFile, max_file_size: int) -> bytes:
    """Read an upload in chunks, failing as soon as it exceeds max_file_size"""
    chunks = []
    file_size = 0
    while chunk := await upload_file.read(CHUNK_SIZE):
        file_size += len(chunk)
        if file_size > max_file_size:
            raise FileTooLarge(f"File must not exceed {max_file_size / (1024 * 1024):.0f}MB")
        chunks.append(chunk)
    return b"".join(chunks)


class LocalBlobStore:
    """Blob store on the local filesystem, keyed by relative directory"""

    def __init__(self, root: Path):
        self.root = Path(root)

    async def put(self, directory: str, filename: str, data: bytes) -> str:
        """
        Store data under root/directory and return the stored path

        The blob is written to a temporary file and moved into place, so a
        reader never sees a partial file.
        """
        async with upload_semaphore:
            extension = os.path.splitext(filename or "")[1].lower()
            target_dir = self.root / directory
            file_path = target_dir / f"{uuid.uuid4()}{extension}"
            temp_path = target_dir / f".upload_{uuid.uuid4().hex}"
            try:
                os.makedirs(target_dir, exist_ok=True)
                async with aiofiles.open(temp_path, "wb") as out_file:
                    await out_file.write(data)
                os.replace(temp_path, file_path)
            except OSError as e:
                if temp_path.exists():
                    temp_path.unlink()
                raise StorageUnavailable(f"Could not store file: {e}")
            return str(file_path)

    async def delete(self, path: str) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageUnavailable(f"Could not delete file: {e}")
