import aiohttp
import asyncio
import hashlib
import logging
from dataclasses import dataclass

logger = logging.getLogger("http_client")

MAX_RETRIES = 5
BACKOFF = 2  # seconds


async def fetch(url, headers=None, chunk_size=1024*1024, session=None, retries=MAX_RETRIES):
    """
    Stream ``url`` in chunks, retrying the whole request on connection errors.
    """
    attempt = 0
    received = 0
    while attempt < retries:
        try:
            if session is None:
                async with aiohttp.ClientSession() as own_session:
                    async for chunk in _iter_body(own_session, url, headers, chunk_size):
                        received += len(chunk)
                        yield chunk
            else:
                async for chunk in _iter_body(session, url, headers, chunk_size):
                    received += len(chunk)
                    yield chunk
            return
        except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
            if received:
                # restarting would hand the caller duplicate bytes
                raise
            attempt += 1
            wait = BACKOFF * attempt
            logger.warning(f"HTTP fetch failed ({attempt}/{retries}), retry in {wait}s: {e}")
            await asyncio.sleep(wait)
    logger.error(f"Failed to fetch {url} after {retries} retries")
    raise aiohttp.ClientConnectionError(f"Failed to fetch {url} after {retries} retries")


async def _iter_body(session, url, headers, chunk_size):
    async with session.get(url, headers=headers) as resp:
        resp.raise_for_status()
        while True:
            chunk = await resp.content.read(chunk_size)
            if not chunk:
                break
            yield chunk


async def download_range(session, url, start, end, retries=MAX_RETRIES, backoff=BACKOFF):
    """
    Download bytes ``start``..``end`` (inclusive) of ``url``.

    Both 206 and 200 are accepted, like a browser would; any other status
    raises ``aiohttp.ClientResponseError``.
    """
    headers = {"Range": f"bytes={start}-{end}"}
    for attempt in range(1, retries + 1):
        try:
            async with session.get(url, headers=headers) as resp:
                if resp.status not in (200, 206):
                    resp.raise_for_status()
                    raise aiohttp.ClientResponseError(
                        resp.request_info,
                        resp.history,
                        status=resp.status,
                        message=f"Unexpected status {resp.status}",
                    )
                body = await resp.read()
                logger.info(f"Downloaded chunk from {url}: {headers['Range']} (size: {len(body)})")
                return body
        except (aiohttp.ClientConnectionError, asyncio.TimeoutError) as e:
            if attempt == retries:
                logger.error(f"Range request for {url} failed after {retries} attempts")
                raise
            wait = backoff * attempt
            logger.warning(f"Range request failed ({attempt}/{retries}), retry in {wait}s: {e}")
            await asyncio.sleep(wait)


@dataclass
class SwitchResult:
    data: bytes
    sha256: str
    expected_size: int

    @property
    def ok(self) -> bool:
        return len(self.data) == self.expected_size


async def simulate_switch(session, base_url, low_title, high_title, low_size, high_size,
                          file_name="", retries=MAX_RETRIES):
    """
    Play the first half of ``low_title`` and the second half of
    ``high_title``, the way a player switching quality mid-stream would.
    """
    low_half = low_size // 2
    high_half = high_size // 2

    def url(title):
        path = f"{title}/{file_name}" if file_name else title
        return f"{base_url}/stream/{path}"

    logger.info(f"Step 1: first half from LOW quality stream ({low_title})")
    first = await download_range(session, url(low_title), 0, low_half - 1, retries=retries)

    logger.info(f"Step 2: second half from HIGH quality stream ({high_title})")
    second = await download_range(session, url(high_title), high_half, high_size - 1, retries=retries)

    data = first + second
    checksum = hashlib.sha256(data).hexdigest()
    logger.info(f"Reassembled {len(data)} bytes, sha256 {checksum}")

    return SwitchResult(data, checksum, low_half + (high_size - high_half))
