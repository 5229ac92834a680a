import logging
import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from web.server.exceptions import ConfigError

# ================= DEFAULTS ================= #

DEFAULT_PORTS = {
    "streaming": 8081,
    "catalog": 8080,
    "frontend": 8000,
}

DEFAULT_HOST = "0.0.0.0"
DEFAULT_STREAMING_URL = "http://localhost:8081"
DEFAULT_CATALOG_URL = "http://localhost:8080"
DEFAULT_VIDEOS_DIR = "./videos_dash"
DEFAULT_STATIC_DIR = "./static"

CHUNK_SIZE = 256 * 1024
WRITE_TIMEOUT = 30.0
KEEPALIVE_TIMEOUT = 75.0

# ============================================ #


@dataclass(frozen=True)
class ServiceConfig:
    service: str
    host: str = DEFAULT_HOST
    port: int = 8081
    streaming_url: str = DEFAULT_STREAMING_URL
    catalog_url: str = DEFAULT_CATALOG_URL
    videos_dir: str = DEFAULT_VIDEOS_DIR
    static_dir: str = DEFAULT_STATIC_DIR
    chunk_size: int = CHUNK_SIZE
    write_timeout: float = WRITE_TIMEOUT
    keepalive_timeout: float = KEEPALIVE_TIMEOUT
    log_level: str = "INFO"


def _get(environ: Mapping[str, str], key: str, default: str) -> str:
    # unset and empty are the same thing
    value = environ.get(key)
    return value if value else default


def _number(environ, key, default, cast):
    raw = environ.get(key)
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise ConfigError(f"{key} must be a number, got {raw!r}")
    if not math.isfinite(value) or value <= 0:
        raise ConfigError(f"{key} must be a positive finite number, got {raw!r}")
    return value


def _log_level(environ) -> str:
    level = _get(environ, "LOG_LEVEL", "INFO").upper()
    # getLevelName maps known names to their number, anything else to a string
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"Unknown LOG_LEVEL {level!r}")
    return level


def load_config(
    service: str, environ: Optional[Mapping[str, str]] = None
) -> ServiceConfig:
    """
    Build the configuration for one service from the environment.

    Called once at start-up; handlers receive the result explicitly.
    """
    if environ is None:
        environ = os.environ

    if service not in DEFAULT_PORTS:
        raise ConfigError(
            f"Unknown service {service!r}, expected one of {', '.join(DEFAULT_PORTS)}"
        )

    port = _number(environ, "PORT", DEFAULT_PORTS[service], int)
    if port > 65535:
        raise ConfigError(f"PORT out of range: {port}")

    return ServiceConfig(
        service=service,
        host=_get(environ, "HOST", DEFAULT_HOST),
        port=port,
        streaming_url=_get(environ, "STREAMING_URL", DEFAULT_STREAMING_URL),
        catalog_url=_get(environ, "CATALOG_URL", DEFAULT_CATALOG_URL),
        videos_dir=_get(environ, "VIDEOS_DIR", DEFAULT_VIDEOS_DIR),
        static_dir=_get(environ, "STATIC_DIR", DEFAULT_STATIC_DIR),
        chunk_size=_number(environ, "CHUNK_SIZE", CHUNK_SIZE, int),
        write_timeout=_number(environ, "WRITE_TIMEOUT", WRITE_TIMEOUT, float),
        keepalive_timeout=_number(environ, "KEEPALIVE_TIMEOUT", KEEPALIVE_TIMEOUT, float),
        log_level=_log_level(environ),
    )
