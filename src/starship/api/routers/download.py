"""Bundle download endpoint.

A download ticket is consumed on first use and its files are streamed as
a stored (uncompressed) zip archive assembled on the fly, so nothing is
buffered beyond one chunk.
"""

import logging
import zipfile
from typing import AsyncIterator, List

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse

from ...core.exceptions import StarshipError
from ...features.files.entities import FileObject
from ...features.storage.entities import ObjectStorage
from ..container import Services
from ..dependencies import get_services

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Files"])


class _ChunkWriter:
    """Unseekable sink that zipfile writes into; drained after each chunk."""

    def __init__(self):
        self._chunks: List[bytes] = []

    def write(self, data: bytes) -> int:
        self._chunks.append(bytes(data))
        return len(data)

    def flush(self) -> None:
        pass

    def drain(self) -> bytes:
        data = b"".join(self._chunks)
        self._chunks.clear()
        return data


def _archive_names(objects: List[FileObject]) -> List[str]:
    """File names made unique inside the archive."""
    seen = {}
    names = []
    for obj in objects:
        count = seen.get(obj.name, 0)
        seen[obj.name] = count + 1
        if count:
            stem, dot, ext = obj.name.rpartition(".")
            names.append(f"{stem} ({count}).{ext}" if dot and stem else f"{obj.name} ({count})")
        else:
            names.append(obj.name)
    return names


async def stream_zip(storage: ObjectStorage, objects: List[FileObject]) -> AsyncIterator[bytes]:
    writer = _ChunkWriter()
    with zipfile.ZipFile(writer, mode="w", compression=zipfile.ZIP_STORED) as archive:
        for obj, name in zip(objects, _archive_names(objects)):
            try:
                with archive.open(name, mode="w", force_zip64=True) as entry:
                    async for chunk in storage.iter_object(obj.key):
                        entry.write(chunk)
                        data = writer.drain()
                        if data:
                            yield data
            except StarshipError as e:
                # Headers are already sent; leave the entry truncated and move on
                logger.error(f"Skipping {obj.key} in bundle download: {e.message}")
            data = writer.drain()
            if data:
                yield data
    # Central directory
    yield writer.drain()


@router.get("/files/download/{ticket_id}")
async def download_bundle(ticket_id: str, services: Services = Depends(get_services)):
    redeemed = await services.file_objects.redeem_ticket(ticket_id)
    if redeemed is None or not redeemed[0]:
        return JSONResponse(
            status_code=404,
            content={"error": "Not found.", "reason": "This download link is invalid or was already used."},
        )
    objects, name = redeemed
    filename = f"{name}.zip" if name else "download.zip"
    logger.info(f"Streaming {len(objects)} files for ticket {ticket_id}")
    return StreamingResponse(
        stream_zip(services.storage, objects),
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
