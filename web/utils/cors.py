from aiohttp import web

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Requested-With, Range",
    "Access-Control-Expose-Headers": "Content-Length, Content-Range, Accept-Ranges",
    "Access-Control-Max-Age": "3600",
}


@web.middleware
async def preflight_middleware(request: web.Request, handler):
    """
    Answer CORS preflight requests before routing reaches a handler.
    """
    if request.method == "OPTIONS":
        return web.Response(status=200)
    return await handler(request)


async def add_cors_headers(request: web.Request, response: web.StreamResponse):
    # runs for every response, including streamed and router-generated ones
    response.headers.update(CORS_HEADERS)


def setup_cors(app: web.Application):
    app.middlewares.append(preflight_middleware)
    app.on_response_prepare.append(add_cors_headers)
