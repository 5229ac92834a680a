"""
Adaptive-switch integrity check against a running streaming service.

Fetches the first half of the low quality stream and the second half of the
high quality stream with two range requests, then checks the byte count of
the reassembled data.

    python abr_check.py --base-url http://localhost:8081 \
        --low video1_low --low-size 20480 --high video1_high --high-size 40960
"""
import argparse
import asyncio
import logging
import sys

import aiohttp

from web.utils.http_client import simulate_switch

TIMEOUT = 60  # seconds

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--base-url", default="http://localhost:8081")
    parser.add_argument("--low", default="video1_low", help="low quality title path")
    parser.add_argument("--high", default="video1_high", help="high quality title path")
    parser.add_argument("--low-size", type=int, default=20 * 1024)
    parser.add_argument("--high-size", type=int, default=40 * 1024)
    parser.add_argument("--file", default="", help="file inside each title directory")
    return parser.parse_args(argv)


async def run(args) -> bool:
    timeout = aiohttp.ClientTimeout(total=TIMEOUT)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        result = await simulate_switch(
            session,
            args.base_url.rstrip("/"),
            args.low,
            args.high,
            args.low_size,
            args.high_size,
            file_name=args.file,
        )

    if not result.ok:
        logger.error(
            f"Data size mismatch! Expected {result.expected_size} bytes, "
            f"but downloaded {len(result.data)} bytes"
        )
        return False

    logger.info(f"Downloaded expected data size: {len(result.data)} bytes ({result.sha256})")
    return True


def main(argv=None):
    args = parse_args(argv)
    try:
        ok = asyncio.run(run(args))
    except aiohttp.ClientError as e:
        logger.error(f"Adaptive switch check failed: {e}")
        return 1
    return 0 if ok else 1


if __name__ == "__main__":
    sys.exit(main())
