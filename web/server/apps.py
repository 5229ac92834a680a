import logging

from aiohttp import web

from web.catalog_routes import setup_catalog_routes
from web.config import ServiceConfig
from web.frontend_routes import setup_frontend_routes
from web.server.exceptions import ConfigError
from web.stream_routes import setup_stream_routes
from web.utils.cors import setup_cors

logger = logging.getLogger("server")


@web.middleware
async def error_middleware(request: web.Request, handler):
    """
    Keep every failure inside the request: the client gets a bare status,
    the details stay in the server log.
    """
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except ConnectionResetError:
        logger.debug(f"Client {request.remote} disconnected: {request.path}")
        raise
    except Exception:
        logger.exception(f"Error handling {request.method} {request.path}")
        raise web.HTTPInternalServerError(text="Internal Server Error")


def _base_app() -> web.Application:
    app = web.Application(middlewares=[error_middleware])
    setup_cors(app)
    return app


def create_streaming_app(config: ServiceConfig) -> web.Application:
    app = _base_app()
    setup_stream_routes(app, config)
    return app


def create_catalog_app(config: ServiceConfig) -> web.Application:
    app = _base_app()
    setup_catalog_routes(app, config)
    return app


def create_frontend_app(config: ServiceConfig) -> web.Application:
    app = _base_app()
    setup_frontend_routes(app, config)
    return app


FACTORIES = {
    "streaming": create_streaming_app,
    "catalog": create_catalog_app,
    "frontend": create_frontend_app,
}


def create_app(config: ServiceConfig) -> web.Application:
    try:
        factory = FACTORIES[config.service]
    except KeyError:
        raise ConfigError(f"Unknown service {config.service!r}")
    return factory(config)
