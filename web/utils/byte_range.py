import re
from dataclasses import dataclass
from typing import Optional, Union

# single range only: "bytes=0-99", "bytes=100-", "bytes=-500"
RANGE_RE = re.compile(r"^bytes=(\d*)-(\d*)$")


@dataclass(frozen=True)
class ByteRange:
    start: int
    end: int  # inclusive

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    def content_range(self, total: int) -> str:
        return f"bytes {self.start}-{self.end}/{total}"


class Unsatisfiable:
    """Marker for a well-formed range that does not overlap the file."""

    def __init__(self, total: int):
        self.total = total

    def content_range(self) -> str:
        return f"bytes */{self.total}"

    def __repr__(self):
        return f"Unsatisfiable(total={self.total})"


def parse_range_header(
    header: Optional[str], total: int
) -> Union[ByteRange, Unsatisfiable, None]:
    """
    Resolve a ``Range`` header against a file of ``total`` bytes.

    Returns ``None`` when the whole file should be served (no header, or a
    header we cannot make sense of), an ``Unsatisfiable`` marker when the
    range starts past the end of the file, or the clamped ``ByteRange``.
    """
    if not header:
        return None

    match = RANGE_RE.match(header.strip())
    if not match:
        return None

    from_bytes, until_bytes = match.groups()

    if not from_bytes:
        if not until_bytes:
            return None
        # suffix range: last N bytes
        suffix = int(until_bytes)
        if suffix == 0 or total == 0:
            return Unsatisfiable(total)
        return ByteRange(max(total - suffix, 0), total - 1)

    start = int(from_bytes)
    if until_bytes:
        end = int(until_bytes)
        if end < start:
            return None
    else:
        end = total - 1

    if start >= total:
        return Unsatisfiable(total)

    return ByteRange(start, min(end, total - 1))
