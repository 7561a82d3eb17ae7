"""NDJSON expression feature reader.

The vision collaborator runs as a separate process and writes one JSON
object per processed frame, e.g.::

    {"smile": 0.71, "mouthOpen": 0.12, "browsUp": 0.0, "browFurrow": 0.05,
     "look": {"x": -0.2, "y": 0.1}}

Bad lines are logged and skipped; field values are left raw for the
normalizer.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from dataclasses import dataclass, field
from typing import Any, AsyncIterator

log = logging.getLogger(__name__)


@dataclass(slots=True)
class FeatureFrame:
    features: dict[str, Any] = field(default_factory=dict)
    look: dict[str, Any] | None = None


def parse_line(line: bytes | str) -> FeatureFrame | None:
    """Decode one NDJSON line; None for blank or malformed lines."""
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    line = line.strip()
    if not line:
        return None
    try:
        obj = json.loads(line)
    except ValueError as e:
        log.warning("bad feature line: %s", e)
        return None
    if not isinstance(obj, dict):
        log.warning("feature line is not an object")
        return None

    look = obj.pop("look", None)
    features = obj.get("expr") if isinstance(obj.get("expr"), dict) else obj
    return FeatureFrame(
        features=features,
        look=look if isinstance(look, dict) else None,
    )


async def iter_frames(reader: asyncio.StreamReader) -> AsyncIterator[FeatureFrame]:
    """Yield frames until EOF."""
    while True:
        try:
            line = await reader.readline()
        except ValueError as e:
            # over the reader limit; the oversized line is dropped
            log.warning("feature line too long, skipped: %s", e)
            continue
        if not line:
            log.info("feature stream EOF")
            return
        frame = parse_line(line)
        if frame is not None:
            yield frame


async def open_stdin_reader() -> asyncio.StreamReader:
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    await loop.connect_read_pipe(
        lambda: asyncio.StreamReaderProtocol(reader),
        sys.stdin.buffer,
    )
    return reader
