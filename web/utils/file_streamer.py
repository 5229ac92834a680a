import asyncio
import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from aiohttp import web

from web.server.exceptions import AssetNotFound
from web.utils.byte_range import Unsatisfiable, parse_range_header

log = logging.getLogger(__name__)

# DASH / HLS files are not in every platform's mime table
mimetypes.add_type("application/dash+xml", ".mpd")
mimetypes.add_type("video/iso.segment", ".m4s")
mimetypes.add_type("application/vnd.apple.mpegurl", ".m3u8")
mimetypes.add_type("video/mp2t", ".ts")
mimetypes.add_type("application/javascript", ".js")

INDEX_FILE = "index.html"


@dataclass(frozen=True)
class FileProperties:
    path: Path
    size: int
    mtime: float
    mime_type: str

    @property
    def last_modified(self) -> int:
        # HTTP dates carry whole seconds
        return int(self.mtime)


class FileStreamer:
    """
    Serves files below ``root`` with single-range ``Range`` support.

    Holds no per-request state, so one instance is shared by every request
    of an application.
    """

    def __init__(self, root, chunk_size: int = 256 * 1024, write_timeout: float = 30.0):
        self.root = Path(root)
        self.chunk_size = chunk_size
        self.write_timeout = write_timeout

    # ---------------- PATH RESOLUTION ---------------- #

    def resolve(self, rel_path: str) -> FileProperties:
        if "\x00" in rel_path:
            raise AssetNotFound

        rel = PurePosixPath(rel_path.lstrip("/"))
        if rel.is_absolute() or ".." in rel.parts:
            raise AssetNotFound

        root = self.root.resolve()
        try:
            candidate = (root / rel).resolve()
            # symlinks pointing outside the store count as missing
            candidate.relative_to(root)
        except (OSError, ValueError):
            raise AssetNotFound

        if candidate.is_dir():
            candidate = candidate / INDEX_FILE

        try:
            stat = candidate.stat()
        except OSError:
            raise AssetNotFound
        if not candidate.is_file():
            raise AssetNotFound

        mime_type = mimetypes.guess_type(candidate.name)[0] or "application/octet-stream"
        return FileProperties(candidate, stat.st_size, stat.st_mtime, mime_type)

    async def get_file_properties(self, rel_path: str) -> FileProperties:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.resolve, rel_path)

    # ---------------- STREAMING ---------------- #

    async def yield_file(self, path: Path, offset: int, length: int):
        loop = asyncio.get_running_loop()
        with open(path, "rb") as f:
            f.seek(offset)
            remaining = length
            while remaining > 0:
                data = await loop.run_in_executor(
                    None, f.read, min(self.chunk_size, remaining)
                )
                if not data:
                    # file shrank underneath us
                    log.warning(f"Short read on {path}: {remaining} bytes missing")
                    return
                remaining -= len(data)
                yield data

    @staticmethod
    def not_modified(request: web.Request, props: FileProperties) -> bool:
        since = request.if_modified_since
        return since is not None and props.last_modified <= since.timestamp()

    @staticmethod
    def range_header(request: web.Request, props: FileProperties):
        """
        The Range header, or None when an If-Range precondition fails.

        No ETags are issued, so only a date equal to Last-Modified keeps the range.
        """
        range_header = request.headers.get("Range")
        if range_header and "If-Range" in request.headers:
            since = request.if_range
            if since is None or int(since.timestamp()) != props.last_modified:
                return None
        return range_header

    async def stream(self, request: web.Request, props: FileProperties) -> web.StreamResponse:
        """
        Write ``props`` to the client, honouring Range, If-Range and If-Modified-Since.
        """
        if self.not_modified(request, props):
            response = web.Response(status=304)
            response.last_modified = props.last_modified
            return response

        total = props.size
        byte_range = parse_range_header(self.range_header(request, props), total)

        if isinstance(byte_range, Unsatisfiable):
            return web.Response(
                status=416,
                headers={
                    "Content-Range": byte_range.content_range(),
                    "Accept-Ranges": "bytes",
                },
            )

        headers = {"Accept-Ranges": "bytes"}
        if byte_range is None:
            status, start, length = 200, 0, total
        else:
            status, start, length = 206, byte_range.start, byte_range.length
            headers["Content-Range"] = byte_range.content_range(total)

        response = web.StreamResponse(status=status, headers=headers)
        response.content_type = props.mime_type
        response.content_length = length
        response.last_modified = props.last_modified
        await response.prepare(request)

        if request.method == "HEAD" or length == 0:
            await response.write_eof()
            return response

        chunks = self.yield_file(props.path, start, length)
        try:
            async for chunk in chunks:
                await asyncio.wait_for(response.write(chunk), self.write_timeout)
        except asyncio.TimeoutError:
            log.warning(
                f"Write timed out after {self.write_timeout}s for {request.remote}, "
                f"dropping {props.path.name}"
            )
            response.force_close()
            return response
        except ConnectionResetError:
            # client went away mid-transfer
            log.debug(f"Client {request.remote} disconnected during {props.path.name}")
            response.force_close()
            return response
        finally:
            await chunks.aclose()

        await response.write_eof()
        return response

    async def serve(self, request: web.Request, rel_path: str) -> web.StreamResponse:
        props = await self.get_file_properties(rel_path)
        return await self.stream(request, props)
