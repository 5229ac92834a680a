import logging

from aiohttp import web

from web.config import ServiceConfig
from web.server.exceptions import AssetNotFound
from web.utils.file_streamer import FileStreamer

routes = web.RouteTableDef()

logger = logging.getLogger("frontend_routes")

STATIC = web.AppKey("static", FileStreamer)
CONFIG_SCRIPT = web.AppKey("config_script", str)


def render_config_script(catalog_url: str) -> str:
    return f"window.CATALOG_URL = '{catalog_url}';\n"


# ----------------------------------------------------------
# Runtime config for the browser client
# ----------------------------------------------------------
@routes.get("/config.js", allow_head=True)
async def config_script_handler(request: web.Request):
    return web.Response(
        body=request.app[CONFIG_SCRIPT].encode(),
        content_type="application/javascript",
    )


# ----------------------------------------------------------
# Static assets
# ----------------------------------------------------------
@routes.get("/{path:.*}", allow_head=True)
async def static_handler(request: web.Request):
    path = request.match_info["path"]
    try:
        return await request.app[STATIC].serve(request, path)
    except AssetNotFound as e:
        raise web.HTTPNotFound(text=e.message)


def setup_frontend_routes(app: web.Application, config: ServiceConfig):
    # rendered once; the catalog location does not change while running
    app[CONFIG_SCRIPT] = render_config_script(config.catalog_url)
    app[STATIC] = FileStreamer(
        config.static_dir,
        chunk_size=config.chunk_size,
        write_timeout=config.write_timeout,
    )
    app.add_routes(routes)
    logger.info(f"Frontend serving {app[STATIC].root.resolve()}, catalog at {config.catalog_url}")
