import asyncio
import logging
import os
from dataclasses import asdict, dataclass
from typing import List

from aiohttp import web

from web.config import ServiceConfig
from web.server.exceptions import CatalogUnavailable

routes = web.RouteTableDef()

logger = logging.getLogger("catalog_routes")

MANIFEST_NAME = "stream.mpd"


@dataclass(frozen=True)
class CatalogEntry:
    id: str
    title: str
    stream_url: str


class VideoCatalog:
    """
    Lists the titles of an asset store.

    Every call re-reads the directory so the catalog always matches what is on
    disk. Ids are positions in the name-sorted listing and only mean something
    within a single response.
    """

    def __init__(self, videos_dir, streaming_url: str):
        self.videos_dir = videos_dir
        self.streaming_url = streaming_url

    def stream_url(self, title: str) -> str:
        return f"{self.streaming_url}/stream/{title}/{MANIFEST_NAME}"

    def scan(self) -> List[CatalogEntry]:
        abs_path = os.path.abspath(self.videos_dir)
        logger.debug(f"Scanning for videos in directory: {abs_path}")

        try:
            with os.scandir(self.videos_dir) as it:
                entries = sorted(it, key=lambda entry: entry.name)
                videos = [
                    CatalogEntry(
                        id=str(position),
                        title=entry.name,
                        stream_url=self.stream_url(entry.name),
                    )
                    for position, entry in enumerate(entries, start=1)
                    if entry.is_dir()
                ]
        except OSError as e:
            logger.error(f"Reading video directory '{abs_path}' failed: {e}")
            raise CatalogUnavailable

        logger.debug(f"Found {len(videos)} videos")
        return videos

    async def list_videos(self) -> List[CatalogEntry]:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.scan)


CATALOG = web.AppKey("catalog", VideoCatalog)


# ----------------------------------------------------------
# Catalog listing
# ----------------------------------------------------------
@routes.get("/videos", allow_head=True)
async def videos_handler(request: web.Request):
    try:
        videos = await request.app[CATALOG].list_videos()
    except CatalogUnavailable as e:
        raise web.HTTPInternalServerError(text=e.message)

    return web.json_response([asdict(video) for video in videos])


def setup_catalog_routes(app: web.Application, config: ServiceConfig):
    app[CATALOG] = VideoCatalog(config.videos_dir, config.streaming_url)
    app.add_routes(routes)
    logger.info(f"Using streaming service URL: {config.streaming_url}")
