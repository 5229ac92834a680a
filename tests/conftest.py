import pytest

from web.config import load_config
from web.server.apps import create_catalog_app, create_frontend_app, create_streaming_app

LOW_SIZE = 20 * 1024
HIGH_SIZE = 40 * 1024
SEGMENT = "chunk-stream0-00001.m4s"

MANIFEST = """<?xml version="1.0"?>
<MPD xmlns="urn:mpeg:dash:schema:mpd:2011" type="static">
  <Period><AdaptationSet mimeType="video/mp4"/></Period>
</MPD>
"""

INDEX_HTML = "<!DOCTYPE html><html><body>player</body></html>\n"
APP_JS = "console.log('player');\n"


def pattern(size, seed):
    """Deterministic bytes; different seeds give unrelated content."""
    return bytes((i * seed + seed // 2) % 251 for i in range(size))


@pytest.fixture
def low_segment():
    return pattern(LOW_SIZE, 7)


@pytest.fixture
def high_segment():
    return pattern(HIGH_SIZE, 13)


@pytest.fixture
def videos_dir(tmp_path, low_segment, high_segment):
    root = tmp_path / "videos_dash"
    for title, data in (("video1_low", low_segment), ("video1_high", high_segment)):
        title_dir = root / title
        title_dir.mkdir(parents=True)
        (title_dir / "stream.mpd").write_text(MANIFEST)
        (title_dir / SEGMENT).write_bytes(data)
    (root / "README.txt").write_text("not a title\n")
    return root


@pytest.fixture
def static_dir(tmp_path):
    root = tmp_path / "static"
    root.mkdir()
    (root / "index.html").write_text(INDEX_HTML)
    (root / "app.js").write_text(APP_JS)
    return root


@pytest.fixture
def make_config(videos_dir, static_dir):
    def _make(service, **env):
        environ = {"VIDEOS_DIR": str(videos_dir), "STATIC_DIR": str(static_dir)}
        environ.update(env)
        return load_config(service, environ)

    return _make


@pytest.fixture
async def streaming_client(aiohttp_client, make_config):
    return await aiohttp_client(create_streaming_app(make_config("streaming")))


@pytest.fixture
def catalog_app(make_config):
    return create_catalog_app(make_config("catalog"))


@pytest.fixture
async def catalog_client(aiohttp_client, catalog_app):
    return await aiohttp_client(catalog_app)


@pytest.fixture
async def frontend_client(aiohttp_client, make_config):
    return await aiohttp_client(create_frontend_app(make_config("frontend")))
