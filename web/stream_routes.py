import logging

from aiohttp import web

from web.config import ServiceConfig
from web.server.exceptions import AssetNotFound
from web.utils.file_streamer import FileStreamer

routes = web.RouteTableDef()

logger = logging.getLogger("stream_routes")

STREAMER = web.AppKey("streamer", FileStreamer)

MOUNT_PREFIX = "/stream/"


# ----------------------------------------------------------
# Media streamer route (serves bytes with Range support)
# ----------------------------------------------------------
@routes.get(MOUNT_PREFIX + "{path:.+}", allow_head=True)
async def media_route_handler(request: web.Request):
    path = request.match_info["path"]
    logger.debug(f"Streaming request received for: {path}")

    try:
        return await request.app[STREAMER].serve(request, path)
    except AssetNotFound as e:
        logger.info(f"Not found: {path}")
        raise web.HTTPNotFound(text=e.message)


def setup_stream_routes(app: web.Application, config: ServiceConfig):
    app[STREAMER] = FileStreamer(
        config.videos_dir,
        chunk_size=config.chunk_size,
        write_timeout=config.write_timeout,
    )
    app.add_routes(routes)
    logger.info(f"Serving {MOUNT_PREFIX} from {app[STREAMER].root.resolve()}")
