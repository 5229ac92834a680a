import argparse
import logging
import os
import sys

from aiohttp import web

from web import __version__
from web.config import DEFAULT_PORTS, load_config
from web.server.apps import create_app
from web.server.exceptions import ConfigError

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

logger = logging.getLogger("app")


def setup_logging(level="INFO"):
    logging.basicConfig(level=level, format=LOG_FORMAT)
    # one line per request is plenty at debug, too chatty otherwise
    if level != "DEBUG":
        logging.getLogger("aiohttp.access").setLevel(logging.WARNING)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="DASH demo services")
    parser.add_argument(
        "service",
        nargs="?",
        choices=sorted(DEFAULT_PORTS),
        default=os.environ.get("SERVICE") or None,
        help="which service to run (defaults to $SERVICE)",
    )
    args = parser.parse_args(argv)
    if args.service is None:
        parser.error("no service given and SERVICE is not set")
    return args


def main(argv=None):
    args = parse_args(argv)

    try:
        config = load_config(args.service)
    except ConfigError as e:
        setup_logging()
        logger.critical(f"Could not start server: {e.message}")
        return 1

    setup_logging(config.log_level)
    app = create_app(config)

    logger.info(f"{config.service.capitalize()} service v{__version__} starting on port {config.port}...")
    try:
        web.run_app(
            app,
            host=config.host,
            port=config.port,
            keepalive_timeout=config.keepalive_timeout,
            print=None,
        )
    except OSError as e:
        logger.critical(f"Could not start server: {e}")
        return 1
    return 0


def run_streaming():
    sys.exit(main(["streaming"]))


def run_catalog():
    sys.exit(main(["catalog"]))


def run_frontend():
    sys.exit(main(["frontend"]))


if __name__ == "__main__":
    sys.exit(main())
