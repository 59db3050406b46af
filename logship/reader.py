# logship/reader.py
import logging
from typing import Iterator

logger = logging.getLogger(__name__)


def iter_lines(path: str, offset: int) -> Iterator[tuple[str, int]]:
    """Yield ``(line, nbytes)`` for every complete line after ``offset``.

    ``nbytes`` is what the line takes on disk, terminator included. A last
    line without ``\\n`` is left for the next read.
    """
    with open(path, "rb") as f:
        f.seek(offset)
        for raw in f:
            if not raw.endswith(b"\n"):
                break
            text = raw[:-2] if raw.endswith(b"\r\n") else raw[:-1]
            yield text.decode("utf-8", errors="replace"), len(raw)


def read_new_lines(path: str, offset: int) -> tuple[list[str], int]:
    lines: list[str] = []
    consumed = 0
    try:
        for line, nbytes in iter_lines(path, offset):
            lines.append(line)
            consumed += nbytes
    except OSError as e:
        logger.warning("Could not read %s from offset %d: %s", path, offset, e)
        return [], 0
    return lines, consumed
